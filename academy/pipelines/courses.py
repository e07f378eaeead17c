"""
Course pipeline functions.

Stateless orchestration logic for catalog and enrollment operations.
"""

import logging
from typing import Any, Dict, Optional

from academy.schemas.course import CourseResponse
from academy.services.course import CourseService
from academy.services.enrollment import EnrollmentService

logger = logging.getLogger(__name__)


def _render_course(formatted: dict, is_enrolled: Optional[bool]) -> Dict[str, Any]:
    """Shape a formatted course for the client, adding isEnrolled when known."""
    data = CourseResponse(**formatted, isEnrolled=is_enrolled).model_dump(mode="json")
    if is_enrolled is None:
        data.pop("isEnrolled")
    return data


def _enrolled_flag(course: dict, user: Optional[dict]) -> Optional[bool]:
    if not user:
        return None
    return CourseService.is_enrolled(course, user["_id"])


async def list_courses_pipeline(
    course_service: CourseService,
    user: Optional[dict],
    category: Optional[str],
    difficulty: Optional[str],
    search: Optional[str],
    page: int,
    limit: int,
    sort: Optional[str],
) -> Dict[str, Any]:
    """
    List active courses for the catalog page.

    Returns:
        Dict with courses and pagination info
    """
    courses, total = await course_service.list_courses(
        category=category,
        difficulty=difficulty,
        search=search,
        page=page,
        limit=limit,
        sort=sort,
    )

    items = [
        _render_course(course_service.format_course(course), _enrolled_flag(course, user))
        for course in courses
    ]

    return {"courses": items, "total": total}


async def get_course_pipeline(
    course_service: CourseService,
    user: Optional[dict],
    course_id: str,
    include_inactive: bool = False,
) -> Dict[str, Any]:
    """Load one course by id with references resolved."""
    # Only admins may look behind the soft delete
    if include_inactive and (not user or user.get("role") != "admin"):
        include_inactive = False

    course = await course_service.get_course(course_id, include_inactive=include_inactive)
    populated = await course_service.populate_course(course)
    return _render_course(populated, _enrolled_flag(course, user))


async def get_course_by_slug_pipeline(
    course_service: CourseService,
    user: Optional[dict],
    slug: str,
) -> Dict[str, Any]:
    """Load one active course by slug with references resolved."""
    course = await course_service.get_course_by_slug(slug)
    populated = await course_service.populate_course(course)
    return _render_course(populated, _enrolled_flag(course, user))


async def create_course_pipeline(
    course_service: CourseService,
    admin: dict,
    data: dict,
) -> Dict[str, Any]:
    """Create a course on behalf of an admin."""
    course = await course_service.create_course(data)
    logger.info(f"Admin {admin['_id']} created course {course['_id']}")
    return _render_course(course_service.format_course(course), None)


async def update_course_pipeline(
    course_service: CourseService,
    admin: dict,
    course_id: str,
    changes: dict,
) -> Dict[str, Any]:
    """Apply a partial update on behalf of an admin."""
    course = await course_service.update_course(course_id, changes)
    logger.info(f"Admin {admin['_id']} updated course {course_id}")
    return _render_course(course_service.format_course(course), None)


async def delete_course_pipeline(
    course_service: CourseService,
    admin: dict,
    course_id: str,
) -> None:
    """Soft-delete a course on behalf of an admin."""
    await course_service.soft_delete_course(course_id)
    logger.info(f"Admin {admin['_id']} deactivated course {course_id}")


async def enroll_pipeline(
    enrollment_service: EnrollmentService,
    user: dict,
    course_id: str,
) -> None:
    """Enroll the current user."""
    await enrollment_service.enroll(str(user["_id"]), course_id)


async def unenroll_pipeline(
    enrollment_service: EnrollmentService,
    user: dict,
    course_id: str,
) -> None:
    """Unenroll the current user."""
    await enrollment_service.unenroll(str(user["_id"]), course_id)
