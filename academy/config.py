"""
GiftTech Academy application settings.

Extends the base settings with course-platform configuration.
"""

from typing import Optional
from common.config import BaseAppSettings


class Settings(BaseAppSettings):
    """Course platform settings."""

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    APP_NAME: str = "GiftTech Innovators API"
    APP_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # ==========================================================================
    # Pagination
    # ==========================================================================
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # ==========================================================================
    # Admin bootstrap (created at startup when both are set)
    # ==========================================================================
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_NAME: str = "Administrator"

    # ==========================================================================
    # Seed data
    # ==========================================================================
    COURSES_SEED_FILE: str = "scripts/data/courses.json"


# Global settings instance
settings = Settings()
