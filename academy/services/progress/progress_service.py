"""
Progress service for per-lesson completion tracking.

Progress records live inside the user document, one per enrolled course.
Every call re-reads the user, changes the record in memory and writes the
whole progress list back together with completedCourses.
"""

import logging
from typing import Any, Dict, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from common.database import touch, transaction_scope
from common.utils import serialize, to_object_id
from common.utils.exceptions import BadRequestException, NotFoundException
from academy.schemas.progress import ProgressSummary
from academy.schemas.user import ProgressRecordResponse
from academy.services.progress import calculator

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Records lesson completion and derives course completion.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        client: Optional[AsyncIOMotorClient] = None,
        use_transactions: bool = False,
    ):
        """
        Initialize ProgressService.

        Args:
            db: MongoDB database connection
            client: Motor client, required when use_transactions is set
            use_transactions: Run read-modify-write inside a transaction
        """
        self._db = db
        self._client = client
        self._use_transactions = use_transactions
        self._courses_collection = db["courses"]
        self._users_collection = db["users"]

    async def record_progress(
        self,
        user_id: str,
        course_id: str,
        lesson_id: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Mark or un-mark a lesson and recompute course completion.

        Args:
            user_id: Learner's ObjectId as string
            course_id: Course ObjectId as string
            lesson_id: Lesson id within the course; None only recomputes
            completed: True marks the lesson, anything falsy un-marks it

        Returns:
            {"courseProgress": record, "isCompleted": bool}

        Raises:
            BadRequestException: Malformed id, not enrolled, unknown lesson
            NotFoundException: Course or user absent
        """
        course_oid = to_object_id(course_id, "course ID")
        user_oid = to_object_id(user_id, "user ID")

        async with transaction_scope(self._client, self._use_transactions) as session:
            course = await self._courses_collection.find_one({"_id": course_oid}, session=session)
            if not course:
                raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")

            user = await self._users_collection.find_one({"_id": user_oid}, session=session)
            if not user:
                raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

            if course_oid not in (user.get("enrolledCourses") or []):
                raise BadRequestException(
                    message="User is not enrolled in this course",
                    code="NOT_ENROLLED",
                )

            progress = list(user.get("progress") or [])
            record = calculator.find_progress(progress, course_oid)
            if record is None:
                record = calculator.new_progress_record(course_oid)
                progress.append(record)

            if lesson_id:
                if completed and lesson_id not in calculator.lesson_ids(course):
                    raise BadRequestException(
                        message="Lesson not found in this course",
                        code="LESSON_NOT_FOUND",
                    )
                calculator.apply_lesson_change(record, lesson_id, bool(completed))

            is_completed = calculator.is_course_complete(course, record["completedLessons"])
            completed_courses = calculator.update_completed_courses(
                user.get("completedCourses") or [],
                course_oid,
                is_completed,
            )

            await self._users_collection.update_one(
                {"_id": user_oid},
                touch({"$set": {"progress": progress, "completedCourses": completed_courses}}),
                session=session,
            )

        logger.info(
            f"Progress recorded: user={user_id} course={course_id} "
            f"lesson={lesson_id} completed={bool(completed)} courseComplete={is_completed}"
        )
        return {"courseProgress": self._render_record(record), "isCompleted": is_completed}

    async def get_progress_summary(self, user_id: str) -> Dict[str, Any]:
        """
        Summarise a learner's progress across enrolled courses.

        Returns:
            {"progress": summary, "detailedProgress": stored records}

        Raises:
            BadRequestException: Malformed id
            NotFoundException: User absent
        """
        user_oid = to_object_id(user_id, "user ID")
        user = await self._users_collection.find_one({"_id": user_oid})
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        enrolled_ids = list(user.get("enrolledCourses") or [])
        courses_by_id: Dict[ObjectId, dict] = {}
        if enrolled_ids:
            cursor = self._courses_collection.find(
                {"_id": {"$in": enrolled_ids}},
                {"title": 1, "slug": 1, "lessons._id": 1},
            )
            courses_by_id = {doc["_id"]: doc for doc in await cursor.to_list(length=None)}

        # Keep enrollment order; drop references that no longer resolve
        enrolled_courses = [courses_by_id[cid] for cid in enrolled_ids if cid in courses_by_id]
        progress = user.get("progress") or []

        summary = calculator.build_summary(
            enrolled_courses,
            progress,
            user.get("completedCourses") or [],
        )
        logger.debug(f"Progress summary for {user_id}: {summary['overallProgress']}%")

        return {
            "progress": ProgressSummary(**summary).model_dump(),
            "detailedProgress": [self._render_record(record) for record in progress],
        }

    @staticmethod
    def _render_record(record: dict) -> dict:
        return ProgressRecordResponse(**serialize(record)).model_dump(mode="json")
