"""
FastAPI router for Auth endpoints.

Provides registration, login, token verification and own-profile updates.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from common.auth import JWTAuth
from common.utils import success_response
from academy.dependencies import get_jwt_auth, get_user_service, require_auth
from academy.pipelines import auth as auth_pipelines
from academy.schemas.auth import LoginRequest, RegisterRequest, UpdateProfileRequest
from academy.services.user import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Register a new student account and return a token."""
    result = await auth_pipelines.register_pipeline(
        jwt_auth=jwt_auth,
        user_service=user_service,
        name=body.name,
        email=body.email,
        password=body.password,
    )
    return success_response(result, message="Registration successful")


@router.post("/login")
async def login(
    body: LoginRequest,
    jwt_auth: Annotated[JWTAuth, Depends(get_jwt_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Log in with email and password."""
    result = await auth_pipelines.login_pipeline(
        jwt_auth=jwt_auth,
        user_service=user_service,
        email=body.email,
        password=body.password,
    )
    return success_response(result, message="Login successful")


@router.get("/verify")
async def verify(
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Check that the bearer token is still valid."""
    return success_response({"valid": True, "user": user_service.format_user(user)})


@router.get("/me")
async def me(
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get the current user."""
    return success_response({"user": user_service.format_user(user)})


@router.put("/update-profile")
async def update_profile(
    body: UpdateProfileRequest,
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Update the current user's name, email or avatar."""
    updated = await auth_pipelines.update_profile_pipeline(
        user_service=user_service,
        user=user,
        changes=body.model_dump(exclude_none=True),
    )
    return success_response({"user": updated}, message="Profile updated successfully")
