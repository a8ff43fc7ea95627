# vulnscan_api/db/init_db.py
import logging
from sqlalchemy.orm import Session
from vulnscan_api.core.config import settings
from vulnscan_api.core.security import get_password_hash
from vulnscan_api.models.user import User, ROLE_ADMIN

logger = logging.getLogger(__name__)


def init_admin_if_empty(db: Session, *, username: str | None = None, email: str | None = None,
                        password: str | None = None) -> User | None:
    """
    Create the first administrator when the users table is empty.

    Credentials default to the FIRST_ADMIN_* settings; nothing is created when
    any of them is missing, so the first registered user becomes administrator instead.
    """
    username = username or settings.FIRST_ADMIN_USERNAME
    email = email or settings.FIRST_ADMIN_EMAIL
    password = password or settings.FIRST_ADMIN_PASSWORD
    if not (username and email and password):
        return None

    if db.query(User).count() > 0:
        return None

    admin = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        role=ROLE_ADMIN,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info(f"Bootstrap administrator created: {username}")
    return admin
