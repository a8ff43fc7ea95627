# vulnscan_api/api/deps.py
from typing import Iterator, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from vulnscan_api import crud, models
from vulnscan_api.core.security import decode_access_token
from vulnscan_api.db.session import SessionLocal
from vulnscan_api.models.user import ROLE_ADMIN
from vulnscan_api.services.acunetix_service import AcunetixService
from vulnscan_api.services.auth_service import AuthService
from vulnscan_api.services.scan_service import ScanService
from vulnscan_api.services.user_service import UserService

security = HTTPBearer(auto_error=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_acunetix_service() -> Iterator[AcunetixService]:
    acunetix = AcunetixService()
    try:
        yield acunetix
    finally:
        acunetix.close()


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        db: Session = Depends(get_db)
) -> models.User:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Not authorized to access this route")
    try:
        user_id = decode_access_token(credentials.credentials)
    except jwt.PyJWTError:
        raise _unauthorized("Not authorized to access this route")

    user = crud.crud_user.get(db, user_id=user_id)
    if not user:
        raise _unauthorized("The user belonging to this token no longer exists")
    if not user.is_active:
        raise _unauthorized("User account is inactive")
    return user


def require_role(*roles: str):
    """Dependency factory letting only users with one of `roles` through."""
    def checker(current_user: models.User = Depends(get_current_user)) -> models.User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You do not have permission to perform this action",
            )
        return current_user
    return checker


get_current_admin = require_role(ROLE_ADMIN)


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db)


def get_scan_service(
        db: Session = Depends(get_db),
        acunetix: AcunetixService = Depends(get_acunetix_service)
) -> ScanService:
    return ScanService(db, acunetix)


def get_report_acunetix_service() -> AcunetixService:
    """
    Acunetix client for streamed report downloads.

    Not closed when the request's dependencies are torn down: the response body
    is still being read from it, so the download endpoint closes it once sent.
    """
    return AcunetixService()


def get_report_scan_service(
        db: Session = Depends(get_db),
        acunetix: AcunetixService = Depends(get_report_acunetix_service)
) -> ScanService:
    return ScanService(db, acunetix)
