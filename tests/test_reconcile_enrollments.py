"""Unit tests for the enrollment reconciliation planner."""

import pytest
from bson import ObjectId

from scripts.reconcile_enrollments import plan_reconciliation


def _course(lesson_count=2, students=None):
    return {
        "_id": ObjectId(),
        "lessons": [{"_id": ObjectId()} for _ in range(lesson_count)],
        "enrolledStudents": list(students or []),
    }


def _user(courses=None, completed=None, progress=None):
    return {
        "_id": ObjectId(),
        "enrolledCourses": list(courses or []),
        "completedCourses": list(completed or []),
        "progress": list(progress or []),
    }


def _record(course, lesson_count):
    return {
        "courseId": course["_id"],
        "completedLessons": [str(lesson["_id"]) for lesson in course["lessons"][:lesson_count]],
        "quizScores": [],
    }


# ─────────────────────────────────────────────────────────────────
# membership
# ─────────────────────────────────────────────────────────────────


class TestMembership:
    def test_consistent_data_needs_no_changes(self):
        user = _user()
        course = _course(students=[user["_id"]])
        user["enrolledCourses"] = [course["_id"]]

        assert plan_reconciliation([course], [user]) == ({}, {})

    def test_course_side_only_is_copied_to_user(self):
        user = _user()
        course = _course(students=[user["_id"]])

        course_updates, user_updates = plan_reconciliation([course], [user])

        assert course_updates == {}
        assert user_updates == {user["_id"]: {"enrolledCourses": [course["_id"]]}}

    def test_user_side_only_is_copied_to_course(self):
        course = _course()
        user = _user(courses=[course["_id"]])

        course_updates, user_updates = plan_reconciliation([course], [user])

        assert course_updates == {course["_id"]: {"enrolledStudents": [user["_id"]]}}
        assert user_updates == {}

    def test_existing_order_is_kept(self):
        first, second = _user(), _user()
        course = _course(students=[second["_id"], first["_id"]])
        first["enrolledCourses"] = [course["_id"]]
        second["enrolledCourses"] = [course["_id"]]

        course_updates, _ = plan_reconciliation([course], [first, second])

        assert course_updates == {}


class TestDanglingReferences:
    def test_deleted_user_dropped_from_roster(self):
        user = _user()
        course = _course(students=[ObjectId(), user["_id"]])
        user["enrolledCourses"] = [course["_id"]]

        course_updates, user_updates = plan_reconciliation([course], [user])

        assert course_updates == {course["_id"]: {"enrolledStudents": [user["_id"]]}}
        assert user_updates == {}

    def test_deleted_course_dropped_from_user(self):
        course = _course()
        user = _user(courses=[ObjectId(), course["_id"]])
        course["enrolledStudents"] = [user["_id"]]

        course_updates, user_updates = plan_reconciliation([course], [user])

        assert course_updates == {}
        assert user_updates == {user["_id"]: {"enrolledCourses": [course["_id"]]}}


# ─────────────────────────────────────────────────────────────────
# completedCourses
# ─────────────────────────────────────────────────────────────────


class TestCompletedCourses:
    @pytest.fixture
    def enrolled(self):
        user = _user()
        course = _course(lesson_count=2, students=[user["_id"]])
        user["enrolledCourses"] = [course["_id"]]
        return course, user

    def test_promoted_when_all_lessons_done(self, enrolled):
        course, user = enrolled
        user["progress"] = [_record(course, 2)]

        _, user_updates = plan_reconciliation([course], [user])

        assert user_updates == {user["_id"]: {"completedCourses": [course["_id"]]}}

    def test_demoted_when_a_lesson_is_missing(self, enrolled):
        course, user = enrolled
        user["progress"] = [_record(course, 1)]
        user["completedCourses"] = [course["_id"]]

        _, user_updates = plan_reconciliation([course], [user])

        assert user_updates == {user["_id"]: {"completedCourses": []}}

    def test_demoted_after_lesson_added(self, enrolled):
        course, user = enrolled
        user["progress"] = [_record(course, 2)]
        user["completedCourses"] = [course["_id"]]
        course["lessons"].append({"_id": ObjectId()})

        _, user_updates = plan_reconciliation([course], [user])

        assert user_updates == {user["_id"]: {"completedCourses": []}}

    def test_record_for_deleted_course_is_not_completion(self, enrolled):
        course, user = enrolled
        gone = _course(lesson_count=1)
        user["progress"] = [_record(gone, 1)]
        user["completedCourses"] = [gone["_id"]]

        _, user_updates = plan_reconciliation([course], [user])

        assert user_updates == {user["_id"]: {"completedCourses": []}}
