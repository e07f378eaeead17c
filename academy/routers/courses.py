"""
FastAPI router for Course endpoints.

Provides the public catalog, admin course management and enrollment.
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status

from common.utils import paginated_response, success_response
from academy.config import settings
from academy.dependencies import (
    get_course_service,
    get_enrollment_service,
    optional_auth,
    require_admin,
    require_auth,
)
from academy.pipelines import courses as course_pipelines
from academy.schemas.course import Category, CreateCourseRequest, Difficulty, UpdateCourseRequest
from academy.services.course import CourseService
from academy.services.enrollment import EnrollmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("")
async def list_courses(
    user: Annotated[Optional[dict], Depends(optional_auth)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
    category: Optional[Category] = None,
    difficulty: Optional[Difficulty] = None,
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1),
    sort: str = Query(CourseService.DEFAULT_SORT),
):
    """List active courses with optional filters and text search."""
    limit = min(limit, settings.MAX_PAGE_SIZE)
    result = await course_pipelines.list_courses_pipeline(
        course_service=course_service,
        user=user,
        category=category,
        difficulty=difficulty,
        search=search,
        page=page,
        limit=limit,
        sort=sort,
    )
    return paginated_response(
        result["courses"],
        total=result["total"],
        page=page,
        limit=limit,
        key="courses",
    )


@router.get("/slug/{slug}")
async def get_course_by_slug(
    slug: str,
    user: Annotated[Optional[dict], Depends(optional_auth)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    """Get an active course by slug."""
    course = await course_pipelines.get_course_by_slug_pipeline(course_service, user, slug)
    return success_response({"course": course})


@router.get("/{course_id}")
async def get_course(
    course_id: str,
    user: Annotated[Optional[dict], Depends(optional_auth)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
    includeInactive: bool = False,
):
    """Get a course by id. Admins may pass includeInactive=true."""
    course = await course_pipelines.get_course_pipeline(
        course_service,
        user,
        course_id,
        include_inactive=includeInactive,
    )
    return success_response({"course": course})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CreateCourseRequest,
    admin: Annotated[dict, Depends(require_admin)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    """Create a course (admin)."""
    course = await course_pipelines.create_course_pipeline(
        course_service,
        admin,
        body.model_dump(),
    )
    return success_response({"course": course}, message="Course created successfully")


@router.put("/{course_id}")
async def update_course(
    course_id: str,
    body: UpdateCourseRequest,
    admin: Annotated[dict, Depends(require_admin)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    """Update a course (admin). Only supplied fields change."""
    course = await course_pipelines.update_course_pipeline(
        course_service,
        admin,
        course_id,
        body.model_dump(exclude_none=True),
    )
    return success_response({"course": course}, message="Course updated successfully")


@router.delete("/{course_id}")
async def delete_course(
    course_id: str,
    admin: Annotated[dict, Depends(require_admin)],
    course_service: Annotated[CourseService, Depends(get_course_service)],
):
    """Soft-delete a course (admin)."""
    await course_pipelines.delete_course_pipeline(course_service, admin, course_id)
    return success_response(message="Course deleted successfully")


@router.post("/{course_id}/enroll")
async def enroll(
    course_id: str,
    user: Annotated[dict, Depends(require_auth)],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
):
    """Enroll the current user in a course."""
    await course_pipelines.enroll_pipeline(enrollment_service, user, course_id)
    return success_response(message="Successfully enrolled in course")


@router.post("/{course_id}/unenroll")
async def unenroll(
    course_id: str,
    user: Annotated[dict, Depends(require_auth)],
    enrollment_service: Annotated[EnrollmentService, Depends(get_enrollment_service)],
):
    """Unenroll the current user from a course."""
    await course_pipelines.unenroll_pipeline(enrollment_service, user, course_id)
    return success_response(message="Successfully unenrolled from course")
