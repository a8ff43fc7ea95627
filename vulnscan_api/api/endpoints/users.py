# vulnscan_api/api/endpoints/users.py
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from vulnscan_api import models
from vulnscan_api.schemas import common, user as user_schema
from vulnscan_api.services.user_service import UserService
from vulnscan_api.api.deps import get_current_admin, get_user_service
from vulnscan_api.core.errors import server_error

# Every route here is administrator only
router = APIRouter(tags=["Users"], dependencies=[Depends(get_current_admin)])


@router.get("/api/users", response_model=user_schema.PaginatedUsers, summary="List users")
def get_users(
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        search: Optional[str] = Query(None, description="Case-insensitive match on username or email"),
        user_service: UserService = Depends(get_user_service)
):
    try:
        return user_service.list_users(page=page, page_size=limit, search=search)
    except Exception as e:
        raise server_error("Error fetching users", e)


@router.get("/api/users/stats", response_model=user_schema.UserStatsResponse, summary="Account statistics")
def get_user_stats(user_service: UserService = Depends(get_user_service)):
    try:
        return {"stats": user_service.get_stats()}
    except Exception as e:
        raise server_error("Error fetching user statistics", e)


@router.post("/api/users", response_model=user_schema.UserResponse, status_code=status.HTTP_201_CREATED,
             summary="Create a user")
def create_user(
        user_in: user_schema.UserCreate,
        user_service: UserService = Depends(get_user_service)
):
    try:
        user = user_service.create_user(user_in=user_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error creating user", e)
    return {"message": "User created successfully", "user": user}


@router.get("/api/users/{user_id}", response_model=user_schema.UserDetailResponse, summary="User details with recent scans")
def get_user(
        user_id: str,
        user_service: UserService = Depends(get_user_service)
):
    try:
        return {"user": user_service.get_user(user_id=user_id)}
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error fetching user", e)


@router.put("/api/users/{user_id}", response_model=user_schema.UserResponse, summary="Update a user")
def update_user(
        user_id: str,
        user_in: user_schema.UserUpdate,
        current_user: models.User = Depends(get_current_admin),
        user_service: UserService = Depends(get_user_service)
):
    try:
        user = user_service.update_user(actor=current_user, user_id=user_id, user_in=user_in)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error updating user", e)
    return {"message": "User updated successfully", "user": user}


@router.delete("/api/users/{user_id}", response_model=common.MessageResponse, summary="Delete a user")
def delete_user(
        user_id: str,
        current_user: models.User = Depends(get_current_admin),
        user_service: UserService = Depends(get_user_service)
):
    """Users still owning scans cannot be deleted."""
    try:
        user_service.delete_user(actor=current_user, user_id=user_id)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error deleting user", e)
    return {"message": "User deleted successfully"}


@router.put("/api/users/{user_id}/reset-password", response_model=common.MessageResponse, summary="Reset a user's password")
def reset_password(
        user_id: str,
        password_in: user_schema.PasswordReset,
        user_service: UserService = Depends(get_user_service)
):
    try:
        user_service.reset_password(user_id=user_id, new_password=password_in.new_password)
    except HTTPException:
        raise
    except Exception as e:
        raise server_error("Error resetting password", e)
    return {"message": "Password reset successfully"}
