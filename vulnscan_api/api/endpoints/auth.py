# vulnscan_api/api/endpoints/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from vulnscan_api import models
from vulnscan_api.schemas import auth as auth_schema, common, user as user_schema
from vulnscan_api.services.auth_service import AuthService
from vulnscan_api.api.deps import get_auth_service, get_current_user
from vulnscan_api.core.errors import server_error

router = APIRouter(tags=["Auth"])


@router.post("/api/auth/register", response_model=auth_schema.AuthResponse, status_code=status.HTTP_201_CREATED,
             summary="Register a new account")
def register(
        user_in: user_schema.UserRegister,
        auth_service: AuthService = Depends(get_auth_service)
):
    """The first account ever registered is made administrator."""
    try:
        return auth_service.register(user_in=user_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error registering user", e)


@router.post("/api/auth/login", response_model=auth_schema.AuthResponse, summary="Log in and obtain a bearer token")
def login(
        login_in: user_schema.UserLogin,
        auth_service: AuthService = Depends(get_auth_service)
):
    try:
        return auth_service.login(login_in=login_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error during login", e)


@router.get("/api/auth/me", response_model=user_schema.UserResponse, summary="Current user profile")
def get_me(current_user: models.User = Depends(get_current_user)):
    return {"user": current_user}


@router.put("/api/auth/me", response_model=user_schema.UserResponse, summary="Update own profile")
def update_profile(
        profile_in: user_schema.ProfileUpdate,
        current_user: models.User = Depends(get_current_user),
        auth_service: AuthService = Depends(get_auth_service)
):
    try:
        user = auth_service.update_profile(user=current_user, profile_in=profile_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error updating profile", e)
    return {"message": "Profile updated successfully", "user": user}


@router.put("/api/auth/change-password", response_model=common.MessageResponse, summary="Change own password")
def change_password(
        password_in: user_schema.PasswordChange,
        current_user: models.User = Depends(get_current_user),
        auth_service: AuthService = Depends(get_auth_service)
):
    try:
        auth_service.change_password(user=current_user, password_in=password_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error changing password", e)
    return {"message": "Password changed successfully"}
