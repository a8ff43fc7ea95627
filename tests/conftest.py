"""Pytest configuration for the scan gateway."""
import os

# Must be set before the application modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("ACUNETIX_API_URL", "https://acunetix.test/api/v1")

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from vulnscan_api.api.deps import get_acunetix_service, get_db, get_report_acunetix_service
from vulnscan_api.core.security import create_access_token, get_password_hash
from vulnscan_api.db.base import Base
from vulnscan_api.main import app
from vulnscan_api.models import Scan, User
from vulnscan_api.services.acunetix_service import AcunetixService


@pytest.fixture
def db_session():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def acunetix():
    engine = MagicMock(spec=AcunetixService)
    # no current_session: stored status is left alone unless a test says otherwise
    engine.get_scan_status.return_value = {}
    return engine


@pytest.fixture
def client(db_session, acunetix):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_acunetix_service] = lambda: acunetix
    app.dependency_overrides[get_report_acunetix_service] = lambda: acunetix
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_user(db, username, role="user", status="active", password="secret123"):
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(password),
        role=role,
        status=status,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_scan(db, owner, **fields):
    values = {
        "acunetix_scan_id": f"acx-{owner.username}",
        "target_url": "https://target.example.com",
        "scan_type": "full",
        "status": "scheduled",
    }
    values.update(fields)
    scan = Scan(user_id=owner.id, **values)
    db.add(scan)
    db.commit()
    db.refresh(scan)
    return scan


def auth_headers(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "admin", role="administrator")


@pytest.fixture
def alice(db_session):
    return make_user(db_session, "alice")


@pytest.fixture
def bob(db_session):
    return make_user(db_session, "bob")
