# vulnscan_api/schemas/user.py
import re
from pydantic import AfterValidator, BaseModel, Field
from typing import Annotated, List, Literal, Optional
from datetime import datetime
from .common import PaginationInfo

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

Role = Literal["administrator", "user"]
AccountStatus = Literal["active", "inactive"]


def _check_email(value: str) -> str:
    if not EMAIL_RE.match(value):
        raise ValueError("Invalid email address")
    return value.lower()


Email = Annotated[str, AfterValidator(_check_email)]


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    email: Email
    password: str = Field(..., min_length=6)


class UserCreate(UserRegister):
    role: Role = "user"


class UserLogin(BaseModel):
    # both optional so a missing field gets the login-specific 400 message
    username: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(BaseModel):
    email: Optional[Email] = None
    role: Optional[Role] = None
    status: Optional[AccountStatus] = None


class ProfileUpdate(BaseModel):
    email: Optional[Email] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=6)


class UserSummary(BaseModel):
    id: str
    username: str
    email: str
    role: str

    class Config:
        from_attributes = True


class User(UserSummary):
    status: str
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class RecentScan(BaseModel):
    id: str
    target_url: str
    scan_type: str
    status: str
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class UserDetail(User):
    scans: List[RecentScan] = []


class UserResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: User


class UserDetailResponse(BaseModel):
    success: bool = True
    user: UserDetail


class PaginatedUsers(BaseModel):
    success: bool = True
    users: List[User]
    pagination: PaginationInfo


class UserStats(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int
    admin_users: int
    regular_users: int
    recent_registrations: int


class UserStatsResponse(BaseModel):
    success: bool = True
    stats: UserStats
