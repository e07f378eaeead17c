"""
GiftTech Academy services.

Each service owns the collections it reads and writes.
"""

from academy.services.course import CourseService, COURSE_INDEXES, slugify
from academy.services.enrollment import EnrollmentService
from academy.services.progress import ProgressService
from academy.services.user import UserService, USER_INDEXES

__all__ = [
    "CourseService",
    "COURSE_INDEXES",
    "slugify",
    "EnrollmentService",
    "ProgressService",
    "UserService",
    "USER_INDEXES",
]
