"""
FastAPI dependencies for the GiftTech Academy application.

Provides dependency injection for all services.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from common.auth import JWTAuth
from academy.config import settings
from academy.middleware.auth import AuthMiddleware
from academy.services.course import CourseService
from academy.services.enrollment import EnrollmentService
from academy.services.progress import ProgressService
from academy.services.user import UserService


# ─────────────────────────────────────────────────────────────────
# Global service instances
# ─────────────────────────────────────────────────────────────────

# Auth
_jwt_auth: Optional[JWTAuth] = None
_auth_middleware: Optional[AuthMiddleware] = None

# Users
_user_service: Optional[UserService] = None

# Catalog
_course_service: Optional[CourseService] = None

# Enrollment & progress
_enrollment_service: Optional[EnrollmentService] = None
_progress_service: Optional[ProgressService] = None


# ─────────────────────────────────────────────────────────────────
# Initialization functions
# ─────────────────────────────────────────────────────────────────

def init_user_services(db: AsyncIOMotorDatabase) -> None:
    """Initialize user services."""
    global _user_service

    _user_service = UserService(db=db, max_page_size=settings.MAX_PAGE_SIZE)


def init_auth_services() -> None:
    """Initialize auth services. Requires user services."""
    global _jwt_auth, _auth_middleware

    _jwt_auth = JWTAuth(
        secret=settings.get_jwt_secret(),
        algorithm=settings.JWT_ALGORITHM,
        access_token_expire_minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES,
    )
    _auth_middleware = AuthMiddleware(jwt_auth=_jwt_auth, user_service=get_user_service())


def init_course_services(
    db: AsyncIOMotorDatabase,
    client: Optional[AsyncIOMotorClient] = None,
) -> None:
    """Initialize catalog, enrollment and progress services."""
    global _course_service, _enrollment_service, _progress_service

    _course_service = CourseService(db=db, max_page_size=settings.MAX_PAGE_SIZE)
    _enrollment_service = EnrollmentService(
        db=db,
        client=client,
        use_transactions=settings.MONGODB_TRANSACTIONS,
    )
    _progress_service = ProgressService(
        db=db,
        client=client,
        use_transactions=settings.MONGODB_TRANSACTIONS,
    )


def init_all_services(
    db: AsyncIOMotorDatabase,
    client: Optional[AsyncIOMotorClient] = None,
) -> None:
    """
    Initialize all services at application startup.

    Args:
        db: Main MongoDB database connection
        client: Motor client, used for transactions when enabled
    """
    init_user_services(db)
    init_auth_services()
    init_course_services(db, client)


# ─────────────────────────────────────────────────────────────────
# Auth getters
# ─────────────────────────────────────────────────────────────────

def get_jwt_auth() -> JWTAuth:
    """Get JWT auth provider."""
    if _jwt_auth is None:
        raise RuntimeError("Auth services not initialized.")
    return _jwt_auth


def get_auth_middleware() -> AuthMiddleware:
    """Get auth middleware instance."""
    if _auth_middleware is None:
        raise RuntimeError("Auth services not initialized.")
    return _auth_middleware


async def require_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> dict:
    """Dependency that requires authentication."""
    return await auth_middleware.require_auth(request)


async def require_admin(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> dict:
    """Dependency that requires an admin user."""
    return await auth_middleware.require_admin(request)


async def optional_auth(
    request: Request,
    auth_middleware: Annotated[AuthMiddleware, Depends(get_auth_middleware)]
) -> Optional[dict]:
    """Dependency that optionally authenticates."""
    return await auth_middleware.optional_auth(request)


# ─────────────────────────────────────────────────────────────────
# Service getters
# ─────────────────────────────────────────────────────────────────

def get_user_service() -> UserService:
    """Get user service instance."""
    if _user_service is None:
        raise RuntimeError("User services not initialized.")
    return _user_service


def get_course_service() -> CourseService:
    """Get course service instance."""
    if _course_service is None:
        raise RuntimeError("Course services not initialized.")
    return _course_service


def get_enrollment_service() -> EnrollmentService:
    """Get enrollment service instance."""
    if _enrollment_service is None:
        raise RuntimeError("Course services not initialized.")
    return _enrollment_service


def get_progress_service() -> ProgressService:
    """Get progress service instance."""
    if _progress_service is None:
        raise RuntimeError("Course services not initialized.")
    return _progress_service
