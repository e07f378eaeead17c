"""
GiftTech Academy API Routers.

All routers are imported here for easy access.
"""

from academy.routers.auth import router as auth_router
from academy.routers.courses import router as courses_router
from academy.routers.users import router as users_router

__all__ = [
    "auth_router",
    "courses_router",
    "users_router",
]
