"""
GiftTech Academy Schemas.

Pydantic models for request/response validation.
"""

from academy.schemas.auth import *
from academy.schemas.course import *
from academy.schemas.user import *
from academy.schemas.progress import *
