# vulnscan_api/services/auth_service.py
import logging
import datetime
from sqlalchemy.orm import Session
from fastapi import HTTPException, status

from vulnscan_api import crud, models, schemas
from vulnscan_api.core.errors import bad_request
from vulnscan_api.core.security import create_access_token, get_password_hash, verify_password
from vulnscan_api.models.user import ROLE_ADMIN, ROLE_USER

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, *, user_in: schemas.user.UserRegister) -> schemas.auth.AuthResponse:
        """Create an account; the very first account becomes administrator."""
        if crud.crud_user.get_by_username_or_email(self.db, username=user_in.username, email=user_in.email):
            raise bad_request("User with that email or username already exists")

        role = ROLE_ADMIN if crud.crud_user.count(self.db) == 0 else ROLE_USER
        user = crud.crud_user.create(self.db, user_obj=models.User(
            username=user_in.username,
            email=user_in.email,
            hashed_password=get_password_hash(user_in.password),
            role=role,
        ))
        logger.info(f"New user registered: {user.username}")
        return schemas.auth.AuthResponse(token=create_access_token(user.id), user=user)

    def login(self, *, login_in: schemas.user.UserLogin) -> schemas.auth.AuthResponse:
        if not login_in.username or not login_in.password:
            raise bad_request("Please provide username and password")

        user = crud.crud_user.get_by_username(self.db, username=login_in.username)
        if not user or not verify_password(login_in.password, user.hashed_password):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Your account is inactive")

        user = crud.crud_user.update(self.db, db_obj=user, obj_in={"last_login": datetime.datetime.utcnow()})
        logger.info(f"User logged in: {user.username}")
        return schemas.auth.AuthResponse(token=create_access_token(user.id), user=user)

    def update_profile(self, *, user: models.User, profile_in: schemas.user.ProfileUpdate) -> models.User:
        if profile_in.email and profile_in.email != user.email:
            if crud.crud_user.get_by_email(self.db, email=profile_in.email):
                raise bad_request("Email is already in use")
            user = crud.crud_user.update(self.db, db_obj=user, obj_in={"email": profile_in.email})
        return user

    def change_password(self, *, user: models.User, password_in: schemas.user.PasswordChange):
        if not verify_password(password_in.current_password, user.hashed_password):
            raise bad_request("Current password is incorrect")
        crud.crud_user.update(self.db, db_obj=user, obj_in={"hashed_password": get_password_hash(password_in.new_password)})
        logger.info(f"Password changed for user: {user.username}")
