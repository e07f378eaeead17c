"""Unit tests for UserService and the self-or-admin user pipelines."""

import pytest
from unittest.mock import MagicMock
from bson import ObjectId

from common.utils.exceptions import (
    BadRequestException,
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from academy.pipelines import users as user_pipelines
from academy.services.user import UserService


@pytest.fixture
def service(mock_db):
    return UserService(mock_db)


# ─────────────────────────────────────────────────────────────────
# create_user
# ─────────────────────────────────────────────────────────────────


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_creates_student_with_lowercased_email(self, service, mock_users_collection):
        mock_users_collection.find_one.return_value = None
        inserted_id = ObjectId()
        mock_users_collection.insert_one.return_value = MagicMock(inserted_id=inserted_id)

        user = await service.create_user("Ada Lovelace", "Ada@Example.COM", "hash")

        assert user["_id"] == inserted_id
        assert user["email"] == "ada@example.com"
        assert user["role"] == "student"
        assert user["enrolledCourses"] == []
        assert user["completedCourses"] == []
        assert user["progress"] == []

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service, mock_users_collection, sample_user):
        mock_users_collection.find_one.return_value = sample_user

        with pytest.raises(ConflictException):
            await service.create_user("Ada", "ada@example.com", "hash")
        mock_users_collection.insert_one.assert_not_called()


# ─────────────────────────────────────────────────────────────────
# format / lookup
# ─────────────────────────────────────────────────────────────────


class TestFormatUser:
    def test_password_hash_never_returned(self, service, sample_user):
        formatted = service.format_user(sample_user)

        assert "passwordHash" not in formatted
        assert formatted["id"] == str(sample_user["_id"])
        assert "_id" not in formatted

    def test_only_response_fields_are_exposed(self, service, sample_user):
        course_id = ObjectId()
        sample_user["resetToken"] = "do-not-leak"
        sample_user["progress"] = [{"courseId": course_id, "completedLessons": ["l1"], "quizScores": []}]

        formatted = service.format_user(sample_user)

        assert "resetToken" not in formatted
        assert "lastLoginAt" not in formatted
        assert formatted["progress"] == [
            {"courseId": str(course_id), "completedLessons": ["l1"], "quizScores": []},
        ]

    @pytest.mark.asyncio
    async def test_get_user_by_id_with_malformed_id(self, service, mock_users_collection):
        assert await service.get_user_by_id("garbage") is None
        mock_users_collection.find_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_populate_courses_resolves_references(
        self, service, mock_courses_collection, make_cursor, sample_user,
    ):
        course = {"_id": ObjectId(), "title": "Python", "slug": "python"}
        sample_user["enrolledCourses"] = [course["_id"], ObjectId()]
        sample_user["completedCourses"] = [course["_id"]]
        mock_courses_collection.find.return_value = make_cursor([course])

        formatted = await service.populate_courses(sample_user, {"title": 1, "slug": 1})

        expected = [{"id": str(course["_id"]), "title": "Python", "slug": "python"}]
        assert formatted["enrolledCourses"] == expected
        assert formatted["completedCourses"] == expected


# ─────────────────────────────────────────────────────────────────
# list / update / delete
# ─────────────────────────────────────────────────────────────────


class TestListUsers:
    @pytest.mark.asyncio
    async def test_filters_by_role_and_hides_hash(
        self, service, mock_users_collection, make_cursor, sample_user,
    ):
        cursor = make_cursor([sample_user])
        mock_users_collection.find.return_value = cursor
        mock_users_collection.count_documents.return_value = 1

        users, total = await service.list_users(role="student", page=2, limit=5)

        assert total == 1
        mock_users_collection.find.assert_called_once_with({"role": "student"}, {"passwordHash": 0})
        cursor.skip.assert_called_once_with(5)

    @pytest.mark.asyncio
    async def test_sorts_by_requested_field(self, service, mock_users_collection, make_cursor):
        cursor = make_cursor([])
        mock_users_collection.find.return_value = cursor
        mock_users_collection.count_documents.return_value = 0

        await service.list_users(sort="name")

        cursor.sort.assert_called_once_with([("name", 1)])

    @pytest.mark.asyncio
    async def test_unknown_sort_field_rejected(self, service, mock_users_collection):
        with pytest.raises(ValidationException) as exc_info:
            await service.list_users(sort="-passwordHash")

        assert exc_info.value.code == "INVALID_SORT"
        mock_users_collection.find.assert_not_called()


class TestUpdateUser:
    @pytest.mark.asyncio
    async def test_email_taken_by_other_user(self, service, mock_users_collection, sample_user_id):
        mock_users_collection.find_one.return_value = {"_id": ObjectId(), "email": "taken@example.com"}

        with pytest.raises(ConflictException) as exc_info:
            await service.update_user(sample_user_id, {"email": "Taken@example.com"})

        assert exc_info.value.message == "Email is already taken"
        mock_users_collection.find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_ignores_non_editable_fields(
        self, service, mock_users_collection, sample_user, sample_user_id,
    ):
        mock_users_collection.find_one_and_update.return_value = sample_user

        await service.update_user(sample_user_id, {"name": "Ada L", "completedCourses": [ObjectId()]})

        update = mock_users_collection.find_one_and_update.call_args[0][1]
        assert update["$set"]["name"] == "Ada L"
        assert "completedCourses" not in update["$set"]

    @pytest.mark.asyncio
    async def test_missing_user_not_found(self, service, mock_users_collection, sample_user_id):
        mock_users_collection.find_one_and_update.return_value = None

        with pytest.raises(NotFoundException):
            await service.update_user(sample_user_id, {"name": "Nobody"})


class TestDeleteUser:
    @pytest.mark.asyncio
    async def test_pulls_user_from_courses(
        self, service, mock_users_collection, mock_courses_collection, sample_user_id,
    ):
        mock_users_collection.delete_one.return_value = MagicMock(deleted_count=1)
        mock_courses_collection.update_many.return_value = MagicMock(modified_count=2)

        await service.delete_user(sample_user_id)

        query, update = mock_courses_collection.update_many.call_args[0]
        assert query == {"enrolledStudents": ObjectId(sample_user_id)}
        assert update["$pull"] == {"enrolledStudents": ObjectId(sample_user_id)}

    @pytest.mark.asyncio
    async def test_missing_user_not_found(self, service, mock_users_collection, mock_courses_collection):
        mock_users_collection.delete_one.return_value = MagicMock(deleted_count=0)

        with pytest.raises(NotFoundException):
            await service.delete_user(str(ObjectId()))
        mock_courses_collection.update_many.assert_not_called()


class TestEnsureAdmin:
    @pytest.mark.asyncio
    async def test_promotes_existing_account(self, service, mock_users_collection, sample_user):
        mock_users_collection.find_one.return_value = sample_user

        admin = await service.ensure_admin("Admin", "ada@example.com", "hash")

        assert admin["role"] == "admin"
        update = mock_users_collection.update_one.call_args[0][1]
        assert update["$set"]["role"] == "admin"
        mock_users_collection.insert_one.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_missing_admin(self, service, mock_users_collection):
        mock_users_collection.find_one.return_value = None
        mock_users_collection.insert_one.return_value = MagicMock(inserted_id=ObjectId())

        admin = await service.ensure_admin("Admin", "admin@example.com", "hash")

        assert admin["role"] == "admin"


# ─────────────────────────────────────────────────────────────────
# access rules
# ─────────────────────────────────────────────────────────────────


class TestUserPipelines:
    @pytest.mark.asyncio
    async def test_student_cannot_view_other_user(self, service, sample_user):
        with pytest.raises(ForbiddenException) as exc_info:
            await user_pipelines.get_user_pipeline(service, sample_user, str(ObjectId()))
        assert exc_info.value.message == "Not authorized to view this user"

    @pytest.mark.asyncio
    async def test_student_cannot_change_own_role(self, service, mock_users_collection, sample_user):
        with pytest.raises(ForbiddenException):
            await user_pipelines.update_user_pipeline(
                service, sample_user, str(sample_user["_id"]), {"role": "admin"},
            )
        mock_users_collection.find_one_and_update.assert_not_called()

    @pytest.mark.asyncio
    async def test_admin_can_change_role(
        self, service, mock_users_collection, admin_user, sample_user,
    ):
        mock_users_collection.find_one_and_update.return_value = {**sample_user, "role": "admin"}

        updated = await user_pipelines.update_user_pipeline(
            service, admin_user, str(sample_user["_id"]), {"role": "admin"},
        )

        assert updated["role"] == "admin"
        assert "passwordHash" not in updated

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_self(self, service, mock_users_collection, admin_user):
        with pytest.raises(BadRequestException) as exc_info:
            await user_pipelines.delete_user_pipeline(service, admin_user, str(admin_user["_id"]))

        assert exc_info.value.message == "Cannot delete your own account"
        mock_users_collection.delete_one.assert_not_called()
