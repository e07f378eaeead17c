"""
FastAPI router for User endpoints.

Provides admin user management, self-service profile access and
per-lesson progress tracking.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from common.utils import paginated_response, success_response
from academy.config import settings
from academy.dependencies import (
    get_progress_service,
    get_user_service,
    require_admin,
    require_auth,
)
from academy.pipelines import users as user_pipelines
from academy.schemas.progress import ProgressUpdateRequest
from academy.schemas.user import Role, UserUpdateRequest
from academy.services.progress import ProgressService
from academy.services.user import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
async def list_users(
    admin: Annotated[dict, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
    role: Optional[Role] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort: str = Query("-createdAt", description="Field to sort by, \"-\" prefix for descending"),
):
    """List users (admin)."""
    limit = min(limit, settings.MAX_PAGE_SIZE)
    result = await user_pipelines.list_users_pipeline(user_service, role, page, limit, sort)
    return paginated_response(
        result["users"],
        total=result["total"],
        page=page,
        limit=limit,
        key="users",
    )


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Get a user (self or admin)."""
    data = await user_pipelines.get_user_pipeline(user_service, user, user_id)
    return success_response({"user": data})


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdateRequest,
    user: Annotated[dict, Depends(require_auth)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Update a user (self or admin). Only admins may change role."""
    data = await user_pipelines.update_user_pipeline(
        user_service,
        user,
        user_id,
        body.model_dump(exclude_none=True),
    )
    return success_response({"user": data}, message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    admin: Annotated[dict, Depends(require_admin)],
    user_service: Annotated[UserService, Depends(get_user_service)],
):
    """Delete a user (admin)."""
    await user_pipelines.delete_user_pipeline(user_service, admin, user_id)
    return success_response(message="User deleted successfully")


@router.get("/{user_id}/progress")
async def get_progress(
    user_id: str,
    user: Annotated[dict, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Get progress summary (self or admin)."""
    data = await user_pipelines.get_progress_pipeline(progress_service, user, user_id)
    return success_response(data)


@router.post("/{user_id}/progress/{course_id}")
async def update_progress(
    user_id: str,
    course_id: str,
    body: ProgressUpdateRequest,
    user: Annotated[dict, Depends(require_auth)],
    progress_service: Annotated[ProgressService, Depends(get_progress_service)],
):
    """Mark or un-mark a lesson (self or admin)."""
    data = await user_pipelines.record_progress_pipeline(
        progress_service,
        user,
        user_id,
        course_id,
        lesson_id=body.lessonId,
        completed=body.completed,
    )
    return success_response(data, message="Progress updated successfully")
