"""Unit tests for the pure progress arithmetic."""

from bson import ObjectId

from academy.services.progress import calculator


def _course(lesson_count):
    return {
        "_id": ObjectId(),
        "title": "Course",
        "slug": "course",
        "lessons": [{"_id": ObjectId(), "order": i} for i in range(lesson_count)],
    }


# ─────────────────────────────────────────────────────────────────
# apply_lesson_change
# ─────────────────────────────────────────────────────────────────


class TestApplyLessonChange:
    def test_marking_twice_keeps_single_entry(self):
        record = calculator.new_progress_record(ObjectId())
        calculator.apply_lesson_change(record, "l1", True)
        calculator.apply_lesson_change(record, "l1", True)
        assert record["completedLessons"] == ["l1"]

    def test_unmarking_removes_lesson(self):
        record = {"courseId": ObjectId(), "completedLessons": ["l1", "l2"], "quizScores": []}
        calculator.apply_lesson_change(record, "l1", False)
        assert record["completedLessons"] == ["l2"]

    def test_unmarking_absent_lesson_is_noop(self):
        record = {"courseId": ObjectId(), "completedLessons": ["l2"], "quizScores": []}
        calculator.apply_lesson_change(record, "l9", False)
        assert record["completedLessons"] == ["l2"]


# ─────────────────────────────────────────────────────────────────
# completion
# ─────────────────────────────────────────────────────────────────


class TestCompletion:
    def test_complete_when_every_lesson_done(self):
        course = _course(3)
        assert calculator.is_course_complete(course, calculator.lesson_ids(course)) is True

    def test_incomplete_with_missing_lesson(self):
        course = _course(3)
        assert calculator.is_course_complete(course, calculator.lesson_ids(course)[:2]) is False

    def test_course_without_lessons_is_never_complete(self):
        assert calculator.is_course_complete(_course(0), []) is False

    def test_stale_lesson_ids_do_not_count(self):
        course = _course(2)
        completed = [calculator.lesson_ids(course)[0], str(ObjectId())]
        assert calculator.completed_lesson_count(course, completed) == 1
        assert calculator.is_course_complete(course, completed) is False

    def test_update_completed_courses_promotes_and_demotes(self):
        course_id = ObjectId()
        other = ObjectId()

        promoted = calculator.update_completed_courses([other], course_id, True)
        assert promoted == [other, course_id]

        again = calculator.update_completed_courses(promoted, course_id, True)
        assert again.count(course_id) == 1

        demoted = calculator.update_completed_courses(promoted, course_id, False)
        assert demoted == [other]


# ─────────────────────────────────────────────────────────────────
# percentages
# ─────────────────────────────────────────────────────────────────


class TestPercentages:
    def test_course_percentage_rounds(self):
        course = _course(3)
        assert calculator.course_percentage(course, calculator.lesson_ids(course)[:1]) == 33
        assert calculator.course_percentage(course, calculator.lesson_ids(course)[:2]) == 67

    def test_half_rounds_up(self):
        course = _course(8)
        assert calculator.course_percentage(course, calculator.lesson_ids(course)[:1]) == 13

    def test_course_without_lessons_is_zero(self):
        assert calculator.course_percentage(_course(0), []) == 0

    def test_overall_is_mean_of_courses(self):
        assert calculator.overall_percentage([50, 100]) == 75

    def test_overall_uses_raw_values(self):
        assert calculator.overall_percentage([200 / 3, 0.0]) == 33

    def test_overall_without_enrollments_is_zero(self):
        assert calculator.overall_percentage([]) == 0


class TestBuildSummary:
    def test_summary_for_two_courses(self):
        half = _course(2)
        full = _course(1)
        progress = [
            {"courseId": half["_id"], "completedLessons": calculator.lesson_ids(half)[:1], "quizScores": []},
            {"courseId": full["_id"], "completedLessons": calculator.lesson_ids(full), "quizScores": []},
        ]

        summary = calculator.build_summary([half, full], progress, [full["_id"]])

        assert summary["totalEnrolled"] == 2
        assert summary["totalCompleted"] == 1
        assert summary["overallProgress"] == 75
        assert [entry["completionPercentage"] for entry in summary["courseProgress"]] == [50, 100]
        assert summary["courseProgress"][0]["totalLessons"] == 2
        assert summary["courseProgress"][0]["completedLessons"] == 1

    def test_overall_rounds_once_from_unrounded_course_values(self):
        two_thirds = _course(3)
        untouched = _course(3)
        progress = [
            {"courseId": two_thirds["_id"], "completedLessons": calculator.lesson_ids(two_thirds)[:2], "quizScores": []},
        ]

        summary = calculator.build_summary([two_thirds, untouched], progress, [])

        assert [entry["completionPercentage"] for entry in summary["courseProgress"]] == [67, 0]
        assert summary["overallProgress"] == 33

    def test_enrolled_course_without_progress_record(self):
        course = _course(4)
        summary = calculator.build_summary([course], [], [])
        assert summary["courseProgress"][0]["completionPercentage"] == 0
        assert summary["overallProgress"] == 0
