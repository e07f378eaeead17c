"""
Course service for catalog management.

Handles listing, lookup, creation, update and soft deletion of courses.
Courses embed their lessons; references to other courses and to users are
stored as ObjectIds and resolved on the read path.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, TEXT, IndexModel, ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.database import touch, with_timestamps
from common.utils import serialize, to_object_id
from common.utils.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from academy.services.course.slug import slugify

logger = logging.getLogger(__name__)


COURSE_INDEXES = [
    IndexModel([("slug", ASCENDING)], unique=True, name="slug_unique"),
    IndexModel([("title", TEXT), ("description", TEXT)], name="title_description_text"),
    IndexModel([("category", ASCENDING), ("difficulty", ASCENDING)], name="category_difficulty"),
]


class CourseService:
    """
    Manages the course catalog.
    """

    SORTABLE_FIELDS = ("createdAt", "updatedAt", "title", "duration", "difficulty", "category")
    DEFAULT_SORT = "-createdAt"

    def __init__(self, db: AsyncIOMotorDatabase, max_page_size: int = 100):
        """
        Initialize CourseService.

        Args:
            db: MongoDB database connection
            max_page_size: Upper bound applied to list page sizes
        """
        self._db = db
        self._courses_collection = db["courses"]
        self._users_collection = db["users"]
        self._max_page_size = max_page_size

    # =========================================================================
    # Reads
    # =========================================================================

    async def list_courses(
        self,
        category: Optional[str] = None,
        difficulty: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        sort: Optional[str] = None,
    ) -> Tuple[List[dict], int]:
        """
        List active courses.

        Args:
            category: Exact category filter
            difficulty: Exact difficulty filter
            search: Free text matched against the title/description text index
            page: 1-based page number
            limit: Page size, capped at max_page_size
            sort: Comma-separated field list, "-" prefix for descending

        Returns:
            Tuple of (course documents for the page, total matching count)

        Raises:
            ValidationException: Unknown sort field
        """
        query: Dict[str, Any] = {"isActive": True}
        if category:
            query["category"] = category
        if difficulty:
            query["difficulty"] = difficulty
        if search:
            query["$text"] = {"$search": search}

        page = max(page, 1)
        limit = max(1, min(limit, self._max_page_size))
        sort_spec = self.parse_sort(sort or self.DEFAULT_SORT)

        cursor = (
            self._courses_collection.find(query)
            .sort(sort_spec)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        courses = await cursor.to_list(length=limit)
        total = await self._courses_collection.count_documents(query)

        logger.debug(f"Listed {len(courses)} of {total} courses (page {page})")
        return courses, total

    def parse_sort(self, sort: str) -> List[Tuple[str, int]]:
        """
        Turn a sort string like "-createdAt,title" into a pymongo sort spec.

        Raises:
            ValidationException: Empty or unknown field
        """
        spec = []
        for token in sort.split(","):
            token = token.strip()
            if not token:
                continue
            direction = DESCENDING if token.startswith("-") else ASCENDING
            field = token.lstrip("-+")
            if field not in self.SORTABLE_FIELDS:
                raise ValidationException(
                    message=f"Cannot sort by '{field}'",
                    code="INVALID_SORT",
                    errors=[{"field": "sort", "message": f"Allowed fields: {', '.join(self.SORTABLE_FIELDS)}"}],
                )
            spec.append((field, direction))

        if not spec:
            raise ValidationException(message="Sort must name at least one field", code="INVALID_SORT")
        return spec

    async def get_course(self, course_id: str, include_inactive: bool = False) -> dict:
        """
        Load a course by id.

        Args:
            course_id: Course ObjectId as string
            include_inactive: Also resolve soft-deleted courses

        Raises:
            BadRequestException: Malformed id
            NotFoundException: Course absent (or inactive)
        """
        query: Dict[str, Any] = {"_id": to_object_id(course_id, "course ID")}
        if not include_inactive:
            query["isActive"] = True

        course = await self._courses_collection.find_one(query)
        if not course:
            raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")
        return course

    async def get_course_by_slug(self, slug: str) -> dict:
        """Load an active course by slug."""
        course = await self._courses_collection.find_one({"slug": slug.lower(), "isActive": True})
        if not course:
            raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")
        return course

    async def find_by_ids(
        self,
        course_ids: List[ObjectId],
        projection: Optional[Dict[str, int]] = None,
    ) -> Dict[ObjectId, dict]:
        """Load several courses (active or not), keyed by _id."""
        if not course_ids:
            return {}
        cursor = self._courses_collection.find({"_id": {"$in": list(course_ids)}}, projection)
        docs = await cursor.to_list(length=None)
        return {doc["_id"]: doc for doc in docs}

    # =========================================================================
    # Writes
    # =========================================================================

    async def create_course(self, data: dict) -> dict:
        """
        Create a course.

        Args:
            data: Validated course fields (see CreateCourseRequest)

        Returns:
            Created course document

        Raises:
            ValidationException: Title yields an empty slug
            ConflictException: Slug already used by another course
        """
        slug = self._normalize_slug(data.get("slug") or data["title"])

        if await self._courses_collection.find_one({"slug": slug}):
            raise ConflictException(
                message="A course with this title already exists",
                code="DUPLICATE_SLUG",
            )

        course_doc = with_timestamps({
            "title": data["title"],
            "description": data["description"],
            "emoji": data["emoji"],
            "slug": slug,
            "category": data["category"],
            "difficulty": data["difficulty"],
            "duration": data["duration"],
            "instructor": data["instructor"],
            "thumbnail": data.get("thumbnail") or "",
            "tags": list(data.get("tags") or []),
            "lessons": self._build_lessons(data.get("lessons") or []),
            "prerequisites": self._parse_prerequisites(data.get("prerequisites") or []),
            "enrolledStudents": [],
            "isActive": True,
        })

        try:
            result = await self._courses_collection.insert_one(course_doc)
        except DuplicateKeyError:
            raise ConflictException(
                message="A course with this title already exists",
                code="DUPLICATE_SLUG",
            )
        course_doc["_id"] = result.inserted_id

        logger.info(f"Course created: {result.inserted_id} ({slug})")
        return course_doc

    async def update_course(self, course_id: str, changes: dict) -> dict:
        """
        Apply a partial update to an active course.

        Only the supplied fields are touched. The slug changes only when
        `slug` itself is supplied; a new title keeps the old slug.

        Replacing `lessons` changes what counts as complete, but learners'
        completedCourses are only recomputed on their next progress call
        or by scripts/reconcile_enrollments.py.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: Course absent or inactive
            ConflictException: Requested slug belongs to another course
            ValidationException: Course listed as its own prerequisite
        """
        oid = to_object_id(course_id, "course ID")
        existing = await self._courses_collection.find_one({"_id": oid, "isActive": True})
        if not existing:
            raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")

        updates = dict(changes)

        if "slug" in updates:
            slug = self._normalize_slug(updates["slug"])
            taken = await self._courses_collection.find_one({"slug": slug, "_id": {"$ne": oid}})
            if taken:
                raise ConflictException(
                    message="A course with this slug already exists",
                    code="DUPLICATE_SLUG",
                )
            updates["slug"] = slug

        if "lessons" in updates:
            updates["lessons"] = self._build_lessons(updates["lessons"])

        if "prerequisites" in updates:
            prerequisites = self._parse_prerequisites(updates["prerequisites"])
            if oid in prerequisites:
                raise ValidationException(
                    message="A course cannot be its own prerequisite",
                    code="SELF_PREREQUISITE",
                )
            updates["prerequisites"] = prerequisites

        # Fields owned by other operations
        for key in ("_id", "id", "enrolledStudents", "isActive", "createdAt"):
            updates.pop(key, None)

        try:
            course = await self._courses_collection.find_one_and_update(
                {"_id": oid, "isActive": True},
                touch({"$set": updates}),
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(
                message="A course with this slug already exists",
                code="DUPLICATE_SLUG",
            )

        if not course:
            raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")

        logger.info(f"Course updated: {course_id} ({', '.join(sorted(updates)) or 'no fields'})")
        return course

    async def soft_delete_course(self, course_id: str) -> None:
        """
        Deactivate a course. Repeated calls succeed.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No course with this id
        """
        oid = to_object_id(course_id, "course ID")
        result = await self._courses_collection.update_one(
            {"_id": oid},
            touch({"$set": {"isActive": False}}),
        )
        if result.matched_count == 0:
            raise NotFoundException(message="Course not found", code="COURSE_NOT_FOUND")

        logger.info(f"Course deactivated: {course_id}")

    # =========================================================================
    # Read-path decoration
    # =========================================================================

    @staticmethod
    def is_enrolled(course: dict, user_id: Any) -> bool:
        """Check whether the user appears in the course's enrolledStudents."""
        return ObjectId(str(user_id)) in (course.get("enrolledStudents") or [])

    async def populate_course(self, course: dict) -> dict:
        """
        Format a course with references resolved.

        prerequisites become {id, title, slug} and enrolledStudents become
        {id, name}. References that no longer resolve are dropped.
        """
        prerequisite_ids = course.get("prerequisites") or []
        student_ids = course.get("enrolledStudents") or []

        prerequisites_by_id = await self.find_by_ids(prerequisite_ids, {"title": 1, "slug": 1})

        students_by_id: Dict[ObjectId, dict] = {}
        if student_ids:
            cursor = self._users_collection.find({"_id": {"$in": list(student_ids)}}, {"name": 1})
            students_by_id = {doc["_id"]: doc for doc in await cursor.to_list(length=None)}

        formatted = self.format_course(course)
        formatted["prerequisites"] = [
            {
                "id": str(pid),
                "title": prerequisites_by_id[pid]["title"],
                "slug": prerequisites_by_id[pid]["slug"],
            }
            for pid in prerequisite_ids
            if pid in prerequisites_by_id
        ]
        formatted["enrolledStudents"] = [
            {"id": str(sid), "name": students_by_id[sid].get("name", "")}
            for sid in student_ids
            if sid in students_by_id
        ]
        return formatted

    def format_course(self, course: dict) -> dict:
        """Format course document for API response."""
        return serialize(course)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _normalize_slug(self, value: str) -> str:
        slug = slugify(value)
        if not slug:
            raise ValidationException(
                message="Title must contain letters or digits",
                code="INVALID_SLUG",
                errors=[{"field": "title", "message": "Cannot derive a URL slug"}],
            )
        return slug

    def _build_lessons(self, lessons: List[dict]) -> List[dict]:
        """Assign lesson ids and order lessons by their `order` field."""
        built = []
        for lesson in lessons:
            lesson_id = lesson.get("id") or lesson.get("_id")
            built.append({
                "_id": to_object_id(lesson_id, "lesson ID") if lesson_id else ObjectId(),
                "title": lesson["title"],
                "content": lesson["content"],
                "order": lesson["order"],
                "videoUrl": lesson.get("videoUrl"),
                "resources": list(lesson.get("resources") or []),
                "quiz": lesson.get("quiz") or {"questions": [], "passingScore": 70},
            })
        return sorted(built, key=lambda item: item["order"])

    def _parse_prerequisites(self, prerequisites: List[Any]) -> List[ObjectId]:
        parsed: List[ObjectId] = []
        for value in prerequisites:
            oid = to_object_id(value, "prerequisite ID")
            if oid not in parsed:
                parsed.append(oid)
        return parsed
