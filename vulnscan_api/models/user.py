# vulnscan_api/models/user.py
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from vulnscan_api.db.base import Base
import datetime
import uuid

ROLE_ADMIN = "administrator"
ROLE_USER = "user"

STATUS_ACTIVE = "active"


class User(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(String, default=ROLE_USER, nullable=False)
    status = Column(String, default=STATUS_ACTIVE, nullable=False)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    scans = relationship("Scan", back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE
