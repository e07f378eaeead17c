"""Shared test fixtures for GiftTech Academy backend tests."""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from bson import ObjectId


def _make_cursor(docs):
    # Motor cursors chain synchronously; only to_list is awaited
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=list(docs))
    return cursor


def _make_collection():
    collection = AsyncMock()
    # Motor's find() returns a cursor synchronously (not a coroutine),
    # so use MagicMock for it. Async methods like find_one, insert_one,
    # count_documents etc. stay as AsyncMock.
    collection.find = MagicMock(return_value=_make_cursor([]))
    return collection


@pytest.fixture
def make_cursor():
    return _make_cursor


@pytest.fixture
def sample_user_id():
    return str(ObjectId())


@pytest.fixture
def sample_course_id():
    return str(ObjectId())


@pytest.fixture
def mock_courses_collection():
    return _make_collection()


@pytest.fixture
def mock_users_collection():
    return _make_collection()


@pytest.fixture
def mock_db(mock_courses_collection, mock_users_collection):
    collections = {
        "courses": mock_courses_collection,
        "users": mock_users_collection,
    }
    db = MagicMock()
    db.__getitem__ = MagicMock(side_effect=lambda name: collections[name])
    return db


@pytest.fixture
def sample_course(sample_course_id):
    """The seeded Python course: five lessons, no prerequisites."""
    now = datetime.now(timezone.utc)
    titles = [
        "Introduction to Python",
        "Variables and Data Types",
        "Control Structures",
        "Functions",
        "Lists and Dictionaries",
    ]
    return {
        "_id": ObjectId(sample_course_id),
        "title": "Python",
        "description": "Learn Python basics and build projects.",
        "emoji": "🐍",
        "slug": "python",
        "category": "programming",
        "difficulty": "beginner",
        "duration": 20,
        "instructor": "GiftTech Team",
        "thumbnail": "",
        "tags": [],
        "lessons": [
            {
                "_id": ObjectId(),
                "title": title,
                "content": f"{title} lesson content.",
                "order": index + 1,
                "videoUrl": None,
                "resources": [],
                "quiz": {"questions": [], "passingScore": 70},
            }
            for index, title in enumerate(titles)
        ],
        "prerequisites": [],
        "enrolledStudents": [],
        "isActive": True,
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def sample_user(sample_user_id):
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(sample_user_id),
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "passwordHash": "$2b$12$notarealhash",
        "role": "student",
        "avatar": "",
        "enrolledCourses": [],
        "completedCourses": [],
        "progress": [],
        "lastLoginAt": None,
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def admin_user():
    now = datetime.now(timezone.utc)
    return {
        "_id": ObjectId(),
        "name": "Grace Hopper",
        "email": "grace@example.com",
        "passwordHash": "$2b$12$notarealhash",
        "role": "admin",
        "avatar": "",
        "enrolledCourses": [],
        "completedCourses": [],
        "progress": [],
        "createdAt": now,
        "updatedAt": now,
    }
