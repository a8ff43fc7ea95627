# vulnscan_api/schemas/auth.py
from pydantic import BaseModel
from .user import User


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user: User
