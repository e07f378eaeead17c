from academy.services.course.course_service import CourseService, COURSE_INDEXES
from academy.services.course.slug import slugify

__all__ = ["CourseService", "COURSE_INDEXES", "slugify"]
