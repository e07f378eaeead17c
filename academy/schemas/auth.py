"""
Pydantic models for Auth request/response validation.

Defines schemas for registration, login and profile updates.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, EmailStr


class RegisterRequest(BaseModel):
    """Request body for account registration."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)


class LoginRequest(BaseModel):
    """Request body for login."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateProfileRequest(BaseModel):
    """Request body for updating the caller's own profile."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    avatar: Optional[str] = None


class AuthResponse(BaseModel):
    """Token plus the authenticated user."""
    token: str
    user: dict
