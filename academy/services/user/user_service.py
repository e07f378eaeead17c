"""
User service for account lifecycle management.

Handles user creation, lookup, listing, profile updates and deletion.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, IndexModel, ReturnDocument
from pymongo.errors import DuplicateKeyError

from common.database import touch, utcnow, with_timestamps
from common.utils import serialize, to_object_id
from common.utils.exceptions import ConflictException, NotFoundException, ValidationException
from academy.schemas.user import UserResponse

logger = logging.getLogger(__name__)


USER_INDEXES = [
    IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
    IndexModel([("role", ASCENDING)], name="role"),
]


class UserService:
    """
    Manages user accounts.
    """

    ROLES = ("student", "admin")
    EDITABLE_FIELDS = ("name", "email", "role", "avatar")
    SORTABLE_FIELDS = ("createdAt", "updatedAt", "lastLoginAt", "name", "email", "role")

    def __init__(self, db: AsyncIOMotorDatabase, max_page_size: int = 100):
        """
        Initialize UserService.

        Args:
            db: MongoDB database connection
            max_page_size: Upper bound applied to list page sizes
        """
        self._db = db
        self._users_collection = db["users"]
        self._courses_collection = db["courses"]
        self._max_page_size = max_page_size

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str = "student",
    ) -> dict:
        """
        Create a new user record.

        Args:
            name: Display name
            email: Email address (stored lower-cased)
            password_hash: bcrypt hash from the auth provider
            role: "student" or "admin"

        Returns:
            Created user document

        Raises:
            ConflictException: Email already registered
        """
        email = email.lower()
        if await self._users_collection.find_one({"email": email}):
            raise ConflictException(
                message="An account with this email already exists",
                code="EMAIL_TAKEN",
            )

        user_doc = with_timestamps({
            "name": name,
            "email": email,
            "passwordHash": password_hash,
            "role": role,
            "avatar": "",
            "enrolledCourses": [],
            "completedCourses": [],
            "progress": [],
            "lastLoginAt": None,
        })

        try:
            result = await self._users_collection.insert_one(user_doc)
        except DuplicateKeyError:
            raise ConflictException(
                message="An account with this email already exists",
                code="EMAIL_TAKEN",
            )
        user_doc["_id"] = result.inserted_id

        logger.info(f"User created: {result.inserted_id} (role={role})")
        return user_doc

    async def get_user_by_id(self, user_id: str) -> Optional[dict]:
        """
        Load user by MongoDB ID.

        Returns:
            User document or None if not found or the id is malformed
        """
        if not ObjectId.is_valid(str(user_id)):
            return None
        return await self._users_collection.find_one({"_id": ObjectId(str(user_id))})

    async def get_user(self, user_id: str) -> dict:
        """
        Load user by MongoDB ID, raising when absent.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user
        """
        user = await self._users_collection.find_one({"_id": to_object_id(user_id, "user ID")})
        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")
        return user

    async def get_user_by_email(self, email: str) -> Optional[dict]:
        """Load user by email address."""
        return await self._users_collection.find_one({"email": email.lower()})

    async def update_last_login(self, user_id: ObjectId) -> None:
        """Update user's last login timestamp."""
        now = utcnow()
        await self._users_collection.update_one(
            {"_id": user_id},
            {"$set": {"lastLoginAt": now, "updatedAt": now}},
        )

    async def list_users(
        self,
        role: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
        sort: str = "-createdAt",
    ) -> Tuple[List[dict], int]:
        """
        List users, newest first by default.

        Args:
            sort: One field, prefixed with "-" for descending

        Returns:
            Tuple of (user documents for the page, total matching count)

        Raises:
            ValidationException: Unknown sort field
        """
        query: Dict[str, Any] = {}
        if role:
            query["role"] = role

        page = max(page, 1)
        limit = max(1, min(limit, self._max_page_size))
        field = sort.lstrip("-+") or "createdAt"
        if field not in self.SORTABLE_FIELDS:
            raise ValidationException(
                message=f"Cannot sort by '{field}'",
                code="INVALID_SORT",
                errors=[{"field": "sort", "message": f"Allowed fields: {', '.join(self.SORTABLE_FIELDS)}"}],
            )
        direction = DESCENDING if sort.startswith("-") else ASCENDING

        cursor = (
            self._users_collection.find(query, {"passwordHash": 0})
            .sort([(field, direction)])
            .skip((page - 1) * limit)
            .limit(limit)
        )
        users = await cursor.to_list(length=limit)
        total = await self._users_collection.count_documents(query)
        return users, total

    async def update_user(self, user_id: str, changes: dict) -> dict:
        """
        Update name, email, role or avatar.

        Authorization (who may change role) is decided by the caller.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user
            ConflictException: Email used by another account
        """
        oid = to_object_id(user_id, "user ID")
        updates = {key: value for key, value in changes.items() if key in self.EDITABLE_FIELDS}

        if "email" in updates:
            updates["email"] = updates["email"].lower()
            taken = await self._users_collection.find_one({"email": updates["email"], "_id": {"$ne": oid}})
            if taken:
                raise ConflictException(message="Email is already taken", code="EMAIL_TAKEN")

        try:
            user = await self._users_collection.find_one_and_update(
                {"_id": oid},
                touch({"$set": updates}),
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictException(message="Email is already taken", code="EMAIL_TAKEN")

        if not user:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        logger.info(f"User updated: {user_id} ({', '.join(sorted(updates)) or 'no fields'})")
        return user

    async def delete_user(self, user_id: str) -> None:
        """
        Delete a user and pull them from every course roster.

        Raises:
            BadRequestException: Malformed id
            NotFoundException: No such user
        """
        oid = to_object_id(user_id, "user ID")
        result = await self._users_collection.delete_one({"_id": oid})
        if result.deleted_count == 0:
            raise NotFoundException(message="User not found", code="USER_NOT_FOUND")

        cleanup = await self._courses_collection.update_many(
            {"enrolledStudents": oid},
            touch({"$pull": {"enrolledStudents": oid}}),
        )
        logger.info(f"User deleted: {user_id} (removed from {cleanup.modified_count} courses)")

    async def ensure_admin(self, name: str, email: str, password_hash: str) -> dict:
        """
        Create the bootstrap admin account unless the email already exists.

        An existing account with that email is promoted to admin.
        """
        existing = await self.get_user_by_email(email)
        if existing:
            if existing.get("role") != "admin":
                await self._users_collection.update_one(
                    {"_id": existing["_id"]},
                    touch({"$set": {"role": "admin"}}),
                )
                existing["role"] = "admin"
                logger.info(f"Promoted existing user to admin: {existing['_id']}")
            return existing
        return await self.create_user(name=name, email=email, password_hash=password_hash, role="admin")

    # =========================================================================
    # Formatting
    # =========================================================================

    def format_user(self, user: dict) -> dict:
        """Format user document for API response, without the password hash."""
        return self._render_user(serialize(user))

    @staticmethod
    def _render_user(formatted: dict) -> dict:
        return UserResponse(**formatted).model_dump(mode="json", exclude_none=True)

    async def populate_courses(
        self,
        user: dict,
        projection: Dict[str, int],
    ) -> dict:
        """
        Format a user with enrolledCourses/completedCourses resolved.

        Args:
            user: User document
            projection: Course fields to include, e.g. {"title": 1, "slug": 1}
        """
        course_ids = list(user.get("enrolledCourses") or []) + list(user.get("completedCourses") or [])
        courses_by_id: Dict[ObjectId, dict] = {}
        if course_ids:
            cursor = self._courses_collection.find({"_id": {"$in": course_ids}}, projection)
            courses_by_id = {doc["_id"]: doc for doc in await cursor.to_list(length=None)}

        formatted = serialize(user)
        for field in ("enrolledCourses", "completedCourses"):
            formatted[field] = [
                serialize(courses_by_id[cid])
                for cid in user.get(field) or []
                if cid in courses_by_id
            ]
        return self._render_user(formatted)
