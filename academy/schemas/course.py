"""
Pydantic models for Course catalog request/response validation.

Request models validate admin input; response models describe what
clients receive. Persisted documents are plain dicts built by the
course service and never returned as-is.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


CATEGORIES = (
    "programming",
    "web-development",
    "game-development",
    "robotics",
    "ai",
    "animation",
    "design",
)
DIFFICULTIES = ("beginner", "intermediate", "advanced")
RESOURCE_TYPES = ("document", "video", "link", "code")

Category = Literal[
    "programming",
    "web-development",
    "game-development",
    "robotics",
    "ai",
    "animation",
    "design",
]
Difficulty = Literal["beginner", "intermediate", "advanced"]
ResourceType = Literal["document", "video", "link", "code"]


def _dedupe(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value not in seen:
            seen.add(value)
            result.append(value)
    return result


# =============================================================================
# Embedded lesson content
# =============================================================================

class ResourceInput(BaseModel):
    """Lesson resource link."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    url: str = Field(..., min_length=1)
    type: ResourceType = "link"


class QuizQuestionInput(BaseModel):
    """Single multiple-choice question."""
    question: str = Field(..., min_length=1)
    options: List[str] = Field(..., min_length=2)
    correctAnswer: int = Field(..., ge=0)
    explanation: Optional[str] = None

    @field_validator("correctAnswer")
    @classmethod
    def answer_in_range(cls, value: int, info):
        options = info.data.get("options")
        if options is not None and value >= len(options):
            raise ValueError("correctAnswer must index one of the options")
        return value


class QuizInput(BaseModel):
    """Lesson quiz."""
    questions: List[QuizQuestionInput] = []
    passingScore: int = Field(default=70, ge=0, le=100)


class LessonInput(BaseModel):
    """
    Lesson as supplied by an admin.

    `id` is optional; pass the existing id when resubmitting a course's
    lessons so learners keep their completion credit.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    order: int = Field(..., ge=0)
    videoUrl: Optional[str] = None
    resources: List[ResourceInput] = []
    quiz: QuizInput = Field(default_factory=QuizInput)


# =============================================================================
# Request Schemas
# =============================================================================

class CreateCourseRequest(BaseModel):
    """Request body for creating a course."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    emoji: str = Field(..., min_length=1, max_length=10)
    slug: Optional[str] = Field(None, max_length=120)
    category: Category
    difficulty: Difficulty
    duration: int = Field(..., ge=1, description="Length in hours")
    instructor: str = Field(..., min_length=1, max_length=100)
    thumbnail: str = ""
    tags: List[str] = []
    lessons: List[LessonInput] = []
    prerequisites: List[str] = []

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, value: List[str]) -> List[str]:
        return _dedupe([tag.strip() for tag in value if tag.strip()])

    @field_validator("prerequisites")
    @classmethod
    def unique_prerequisites(cls, value: List[str]) -> List[str]:
        return _dedupe(value)


class UpdateCourseRequest(BaseModel):
    """Request body for a partial course update."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=500)
    emoji: Optional[str] = Field(None, min_length=1, max_length=10)
    slug: Optional[str] = Field(None, max_length=120)
    category: Optional[Category] = None
    difficulty: Optional[Difficulty] = None
    duration: Optional[int] = Field(None, ge=1)
    instructor: Optional[str] = Field(None, min_length=1, max_length=100)
    thumbnail: Optional[str] = None
    tags: Optional[List[str]] = None
    lessons: Optional[List[LessonInput]] = None
    prerequisites: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def unique_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        return _dedupe([tag.strip() for tag in value if tag.strip()])

    @field_validator("prerequisites")
    @classmethod
    def unique_prerequisites(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is None:
            return value
        return _dedupe(value)


# =============================================================================
# Response Schemas (used inside success_response data)
# =============================================================================

class CourseReference(BaseModel):
    """Prerequisite course in summary form."""
    id: str
    title: str
    slug: str


class StudentReference(BaseModel):
    """Enrolled student in summary form."""
    id: str
    name: str


class LessonResponse(BaseModel):
    """Lesson in API responses."""
    id: str
    title: str
    content: str
    order: int
    videoUrl: Optional[str] = None
    resources: List[Dict[str, Any]] = []
    quiz: Dict[str, Any] = {}


class CourseResponse(BaseModel):
    """Course in API responses."""
    id: str
    title: str
    description: str
    emoji: str
    slug: str
    category: str
    difficulty: str
    duration: int
    instructor: str
    thumbnail: str = ""
    tags: List[str] = []
    lessons: List[LessonResponse] = []
    prerequisites: List[Union[CourseReference, str]] = []
    enrolledStudents: List[Union[StudentReference, str]] = []
    isActive: bool = True
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    isEnrolled: Optional[bool] = None
