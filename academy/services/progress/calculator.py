"""
Pure progress arithmetic.

No I/O here: the progress service loads documents, these functions decide
what changes, and the service writes the result back.
"""

import math
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def lesson_ids(course: dict) -> List[str]:
    """String ids of the course's current lessons, in order."""
    return [str(lesson["_id"]) for lesson in course.get("lessons") or [] if lesson.get("_id")]


def find_progress(progress: Iterable[dict], course_id: ObjectId) -> Optional[dict]:
    """Return the progress record for a course, or None."""
    for record in progress:
        if str(record.get("courseId")) == str(course_id):
            return record
    return None


def new_progress_record(course_id: ObjectId) -> Dict[str, Any]:
    return {"courseId": course_id, "completedLessons": [], "quizScores": []}


def apply_lesson_change(record: dict, lesson_id: str, completed: bool) -> dict:
    """
    Mark or un-mark a lesson on a progress record, in place.

    Marking twice leaves a single entry; un-marking an absent lesson is a
    no-op.
    """
    completed_lessons = list(record.get("completedLessons") or [])
    if completed:
        if lesson_id not in completed_lessons:
            completed_lessons.append(lesson_id)
    else:
        completed_lessons = [item for item in completed_lessons if item != lesson_id]
    record["completedLessons"] = completed_lessons
    return record


def completed_lesson_count(course: dict, completed_lessons: Iterable[str]) -> int:
    """Number of the course's current lessons found in completed_lessons."""
    done = set(completed_lessons or [])
    return sum(1 for lesson_id in lesson_ids(course) if lesson_id in done)


def is_course_complete(course: dict, completed_lessons: Iterable[str]) -> bool:
    """A course is complete when it has lessons and every one is done."""
    total = len(lesson_ids(course))
    return total > 0 and completed_lesson_count(course, completed_lessons) == total


def completion_ratio(course: dict, completed_lessons: Iterable[str]) -> float:
    """Unrounded completion percentage for one course; 0.0 without lessons."""
    total = len(lesson_ids(course))
    if total == 0:
        return 0.0
    return completed_lesson_count(course, completed_lessons) / total * 100


def course_percentage(course: dict, completed_lessons: Iterable[str]) -> int:
    """Completion percentage for one course; 0 when it has no lessons."""
    return round_half_up(completion_ratio(course, completed_lessons))


def overall_percentage(percentages: List[float]) -> int:
    """
    Mean of unrounded per-course percentages, rounded once.

    0 with no enrollments.
    """
    if not percentages:
        return 0
    return round_half_up(sum(percentages) / len(percentages))


def update_completed_courses(
    completed_courses: Iterable[ObjectId],
    course_id: ObjectId,
    is_complete: bool,
) -> List[ObjectId]:
    """Add or remove course_id so membership matches is_complete."""
    result = [cid for cid in completed_courses or [] if cid != course_id]
    if is_complete:
        result.append(course_id)
    return result


def build_summary(
    enrolled_courses: List[dict],
    progress: List[dict],
    completed_courses: List[Any],
) -> Dict[str, Any]:
    """
    Summarise progress across enrolled courses.

    Args:
        enrolled_courses: Course documents the user is enrolled in
        progress: The user's stored progress records
        completed_courses: The user's completedCourses ids
    """
    course_progress = []
    ratios = []
    for course in enrolled_courses:
        record = find_progress(progress, course["_id"]) or {}
        completed_lessons = record.get("completedLessons") or []
        course_progress.append({
            "courseId": str(course["_id"]),
            "courseTitle": course.get("title", ""),
            "courseSlug": course.get("slug", ""),
            "completedLessons": completed_lesson_count(course, completed_lessons),
            "totalLessons": len(lesson_ids(course)),
            "completionPercentage": course_percentage(course, completed_lessons),
        })
        ratios.append(completion_ratio(course, completed_lessons))

    return {
        "totalEnrolled": len(enrolled_courses),
        "totalCompleted": len(completed_courses or []),
        "overallProgress": overall_percentage(ratios),
        "courseProgress": course_progress,
    }
