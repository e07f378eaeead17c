"""
User pipeline functions.

Stateless orchestration logic for account management and progress,
including the self-or-admin access rules.
"""

import logging
from typing import Any, Dict, Optional

from common.utils.exceptions import BadRequestException, ForbiddenException
from academy.services.progress import ProgressService
from academy.services.user import UserService

logger = logging.getLogger(__name__)

LIST_COURSE_FIELDS = {"title": 1, "slug": 1}
DETAIL_COURSE_FIELDS = {
    "title": 1,
    "description": 1,
    "emoji": 1,
    "slug": 1,
    "category": 1,
    "difficulty": 1,
}


def _is_admin(user: dict) -> bool:
    return user.get("role") == "admin"


def ensure_self_or_admin(actor: dict, user_id: str, action: str = "view") -> None:
    """
    Allow the account owner or an admin.

    Raises:
        ForbiddenException: Caller is neither
    """
    if str(actor["_id"]) != user_id and not _is_admin(actor):
        raise ForbiddenException(
            message=f"Not authorized to {action} this user",
            code="NOT_AUTHORIZED",
        )


async def list_users_pipeline(
    user_service: UserService,
    role: Optional[str],
    page: int,
    limit: int,
    sort: str = "-createdAt",
) -> Dict[str, Any]:
    """List users with their courses in summary form."""
    users, total = await user_service.list_users(role=role, page=page, limit=limit, sort=sort)
    items = [await user_service.populate_courses(user, LIST_COURSE_FIELDS) for user in users]
    return {"users": items, "total": total}


async def get_user_pipeline(
    user_service: UserService,
    actor: dict,
    user_id: str,
) -> Dict[str, Any]:
    """Load one user (self or admin) with course details."""
    ensure_self_or_admin(actor, user_id, "view")
    user = await user_service.get_user(user_id)
    return await user_service.populate_courses(user, DETAIL_COURSE_FIELDS)


async def update_user_pipeline(
    user_service: UserService,
    actor: dict,
    user_id: str,
    changes: dict,
) -> Dict[str, Any]:
    """
    Update a user (self or admin).

    Raises:
        ForbiddenException: Not self/admin, or a non-admin changing role
    """
    ensure_self_or_admin(actor, user_id, "update")

    if "role" in changes and not _is_admin(actor):
        raise ForbiddenException(
            message="Not authorized to change user role",
            code="ROLE_CHANGE_FORBIDDEN",
        )

    user = await user_service.update_user(user_id, changes)
    return user_service.format_user(user)


async def delete_user_pipeline(
    user_service: UserService,
    admin: dict,
    user_id: str,
) -> None:
    """
    Delete a user on behalf of an admin.

    Raises:
        BadRequestException: Admin deleting their own account
    """
    if str(admin["_id"]) == user_id:
        raise BadRequestException(
            message="Cannot delete your own account",
            code="SELF_DELETE",
        )

    await user_service.delete_user(user_id)
    logger.info(f"Admin {admin['_id']} deleted user {user_id}")


async def get_progress_pipeline(
    progress_service: ProgressService,
    actor: dict,
    user_id: str,
) -> Dict[str, Any]:
    """Progress summary for a user (self or admin)."""
    ensure_self_or_admin(actor, user_id, "view")
    return await progress_service.get_progress_summary(user_id)


async def record_progress_pipeline(
    progress_service: ProgressService,
    actor: dict,
    user_id: str,
    course_id: str,
    lesson_id: Optional[str],
    completed: Optional[bool],
) -> Dict[str, Any]:
    """Record lesson progress for a user (self or admin)."""
    ensure_self_or_admin(actor, user_id, "update")
    return await progress_service.record_progress(
        user_id=user_id,
        course_id=course_id,
        lesson_id=lesson_id,
        completed=completed,
    )
