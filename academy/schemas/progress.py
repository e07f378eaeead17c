"""
Pydantic models for lesson progress tracking.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class ProgressUpdateRequest(BaseModel):
    """
    Request body for recording lesson progress.

    `completed=true` marks `lessonId` done; a falsy or missing value
    un-marks it. Completion of the course is recomputed either way.
    """
    lessonId: Optional[str] = Field(None, description="Lesson id within the course")
    completed: Optional[bool] = None


class CourseProgressEntry(BaseModel):
    """Per-course progress line in the summary."""
    courseId: str
    courseTitle: str
    courseSlug: str
    completedLessons: int
    totalLessons: int
    completionPercentage: int


class ProgressSummary(BaseModel):
    """Aggregated progress across enrolled courses."""
    totalEnrolled: int
    totalCompleted: int
    overallProgress: int
    courseProgress: List[CourseProgressEntry] = []
