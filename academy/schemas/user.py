"""
Pydantic models for User management request/response validation.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, EmailStr

from academy.schemas.course import CourseReference


Role = Literal["student", "admin"]


class UserUpdateRequest(BaseModel):
    """Request body for updating a user (self or admin)."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None
    avatar: Optional[str] = None


class ProgressRecordResponse(BaseModel):
    """Stored progress record for one course."""
    courseId: str
    completedLessons: List[str] = []
    quizScores: List[Any] = []


class UserCourseReference(CourseReference):
    """Enrolled or completed course; detail views add the catalog fields."""
    description: Optional[str] = None
    emoji: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None


class UserResponse(BaseModel):
    """
    User in API responses.

    Built from the stored document; fields not declared here, the
    password hash among them, are dropped.
    """
    id: str
    name: str
    email: str
    role: Role = "student"
    avatar: str = ""
    enrolledCourses: List[Union[UserCourseReference, str]] = []
    completedCourses: List[Union[UserCourseReference, str]] = []
    progress: List[ProgressRecordResponse] = []
    lastLoginAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
