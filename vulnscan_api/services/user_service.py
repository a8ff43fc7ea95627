# vulnscan_api/services/user_service.py
import logging
import datetime
from sqlalchemy.orm import Session

from vulnscan_api import crud, models, schemas
from vulnscan_api.core.errors import bad_request, not_found
from vulnscan_api.core.security import get_password_hash
from vulnscan_api.models.user import ROLE_ADMIN, ROLE_USER, STATUS_ACTIVE

logger = logging.getLogger(__name__)

RECENT_REGISTRATION_DAYS = 30


class UserService:
    """Account administration; every method here is reserved to administrators."""

    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, user_id: str) -> models.User:
        user = crud.crud_user.get(self.db, user_id=user_id)
        if not user:
            raise not_found("User")
        return user

    def list_users(self, *, page: int, page_size: int, search: str | None = None) -> schemas.user.PaginatedUsers:
        users, pagination = crud.crud_user.get_multi_paginated(self.db, page=page, page_size=page_size, search=search)
        return schemas.user.PaginatedUsers(users=users, pagination=pagination)

    def get_stats(self) -> schemas.user.UserStats:
        total = crud.crud_user.count(self.db)
        active = crud.crud_user.count(self.db, status=STATUS_ACTIVE)
        since = datetime.datetime.utcnow() - datetime.timedelta(days=RECENT_REGISTRATION_DAYS)
        return schemas.user.UserStats(
            total_users=total,
            active_users=active,
            inactive_users=total - active,
            admin_users=crud.crud_user.count(self.db, role=ROLE_ADMIN),
            regular_users=crud.crud_user.count(self.db, role=ROLE_USER),
            recent_registrations=crud.crud_user.count_created_since(self.db, since=since),
        )

    def create_user(self, *, user_in: schemas.user.UserCreate) -> models.User:
        if crud.crud_user.get_by_username_or_email(self.db, username=user_in.username, email=user_in.email):
            raise bad_request("User with that email or username already exists")
        user = crud.crud_user.create(self.db, user_obj=models.User(
            username=user_in.username,
            email=user_in.email,
            hashed_password=get_password_hash(user_in.password),
            role=user_in.role,
        ))
        logger.info(f"User created by admin: {user.username}")
        return user

    def get_user(self, *, user_id: str) -> schemas.user.UserDetail:
        """A user together with their five most recent scans."""
        user = self._get_or_404(user_id)
        recent = crud.crud_scan.get_recent_for_user(self.db, user_id=user.id)
        return schemas.user.UserDetail(
            **schemas.user.User.model_validate(user).model_dump(),
            scans=[schemas.user.RecentScan.model_validate(s) for s in recent],
        )

    def update_user(self, *, actor: models.User, user_id: str, user_in: schemas.user.UserUpdate) -> models.User:
        user = self._get_or_404(user_id)
        if actor.id == user.id and user_in.role and user_in.role != user.role:
            raise bad_request("Cannot change your own role")

        changes = user_in.model_dump(exclude_none=True)
        if "email" in changes and changes["email"] != user.email:
            if crud.crud_user.get_by_email(self.db, email=changes["email"]):
                raise bad_request("Email is already in use")
        user = crud.crud_user.update(self.db, db_obj=user, obj_in=changes)
        logger.info(f"User updated by admin: {user.username}")
        return user

    def delete_user(self, *, actor: models.User, user_id: str):
        if actor.id == user_id:
            raise bad_request("Cannot delete your own account")
        user = self._get_or_404(user_id)
        if crud.crud_scan.count(self.db, user_id=user.id) > 0:
            raise bad_request("Cannot delete user with existing scans. Please delete scans first.")
        username = user.username
        crud.crud_user.remove(self.db, db_obj=user)
        logger.info(f"User deleted by admin: {username}")

    def reset_password(self, *, user_id: str, new_password: str):
        user = self._get_or_404(user_id)
        crud.crud_user.update(self.db, db_obj=user, obj_in={"hashed_password": get_password_hash(new_password)})
        logger.info(f"Password reset by admin for user: {user.username}")
