"""
Enrollment service for course membership.

Enrollment is stored on both sides: course.enrolledStudents and
user.enrolledCourses. With transactions enabled both writes commit
together. Without them the course write is reverted when the user write
fails, and scripts/reconcile_enrollments.py repairs anything left over.
"""

import logging
from typing import Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import PyMongoError

from common.database import touch, transaction_scope
from common.utils import to_object_id
from common.utils.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
)

logger = logging.getLogger(__name__)


class EnrollmentService:
    """
    Manages enrollment and unenrollment.
    """

    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        client: Optional[AsyncIOMotorClient] = None,
        use_transactions: bool = False,
    ):
        """
        Initialize EnrollmentService.

        Args:
            db: MongoDB database connection
            client: Motor client, required when use_transactions is set
            use_transactions: Wrap both writes in a multi-document transaction
        """
        self._db = db
        self._client = client
        self._use_transactions = use_transactions
        self._courses_collection = db["courses"]
        self._users_collection = db["users"]

    async def enroll(self, user_id: str, course_id: str) -> None:
        """
        Enroll a user in an active course.

        Checks run in order: course exists and is active, user not already
        enrolled, every prerequisite completed. Nothing is written unless
        all checks pass.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: Course absent or inactive, user absent
            ConflictException: Already enrolled, prerequisites not met
        """
        course_oid = to_object_id(course_id, "course ID")
        user_oid = to_object_id(user_id, "user ID")

        async with transaction_scope(self._client, self._use_transactions) as session:
            course = await self._courses_collection.find_one(
                {"_id": course_oid, "isActive": True},
                session=session,
            )
            if not course:
                raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")

            if user_oid in (course.get("enrolledStudents") or []):
                raise ConflictException(
                    message="Already enrolled in this course",
                    code="ALREADY_ENROLLED",
                )

            user = await self._users_collection.find_one({"_id": user_oid}, session=session)
            if not user:
                raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

            completed = set(user.get("completedCourses") or [])
            missing = [pid for pid in course.get("prerequisites") or [] if pid not in completed]
            if missing:
                raise ConflictException(
                    message="Prerequisites not met for this course",
                    code="PREREQUISITES_NOT_MET",
                    details={"missing": [str(pid) for pid in missing]},
                )

            await self._courses_collection.update_one(
                {"_id": course_oid},
                touch({"$addToSet": {"enrolledStudents": user_oid}}),
                session=session,
            )
            try:
                await self._users_collection.update_one(
                    {"_id": user_oid},
                    touch({"$addToSet": {"enrolledCourses": course_oid}}),
                    session=session,
                )
            except PyMongoError:
                if session is None:
                    await self._compensate(
                        course_oid,
                        {"$pull": {"enrolledStudents": user_oid}},
                        f"enroll user={user_id}",
                    )
                raise

        logger.info(f"User {user_id} enrolled in course {course_id}")

    async def unenroll(self, user_id: str, course_id: str) -> None:
        """
        Remove a user from a course (active or not).

        Progress records are left in place.

        Raises:
            BadRequestException: Malformed id, not enrolled
            NotFoundException: Course absent
        """
        course_oid = to_object_id(course_id, "course ID")
        user_oid = to_object_id(user_id, "user ID")

        async with transaction_scope(self._client, self._use_transactions) as session:
            course = await self._courses_collection.find_one({"_id": course_oid}, session=session)
            if not course:
                raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")

            if user_oid not in (course.get("enrolledStudents") or []):
                raise BadRequestException(
                    message="Not enrolled in this course",
                    code="NOT_ENROLLED",
                )

            await self._courses_collection.update_one(
                {"_id": course_oid},
                touch({"$pull": {"enrolledStudents": user_oid}}),
                session=session,
            )
            try:
                await self._users_collection.update_one(
                    {"_id": user_oid},
                    touch({"$pull": {"enrolledCourses": course_oid}}),
                    session=session,
                )
            except PyMongoError:
                if session is None:
                    await self._compensate(
                        course_oid,
                        {"$addToSet": {"enrolledStudents": user_oid}},
                        f"unenroll user={user_id}",
                    )
                raise

        logger.info(f"User {user_id} unenrolled from course {course_id}")

    async def _compensate(self, course_oid: ObjectId, update: dict, action: str) -> None:
        """Best-effort revert of a course write whose user write failed."""
        logger.warning(f"User write failed during {action} course={course_oid}; reverting course")
        try:
            await self._courses_collection.update_one({"_id": course_oid}, touch(update))
        except PyMongoError as e:
            logger.error(
                f"Compensation failed for {action} course={course_oid}: {e}. "
                f"Run scripts/reconcile_enrollments.py"
            )
