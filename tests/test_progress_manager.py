import pytest
from sqlalchemy.exc import SQLAlchemyError

from classes.enrolment_manager import EnrolmentManager
from classes.errors import ForbiddenError, NotFoundError, StorageError, ValidationError
from classes.progress_manager import ProgressManager
from models import Enrolment, LessonProgress


def _enrolment(db, enrolment_id):
    return db.session.get(Enrolment, enrolment_id)


def test_mark_lesson_complete_creates_progress(db, student, course, enrolment):
    lesson = course.lessons[0]

    progress = ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)

    assert progress.is_completed is True
    assert progress.completed_at is not None
    assert progress.course_id == course.id
    assert LessonProgress.query.filter_by(user_id=student.id).count() == 1


def test_mark_lesson_complete_is_idempotent(db, student, course, enrolment):
    lesson = course.lessons[0]

    first = ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)
    completed_at = first.completed_at
    second = ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)

    assert second.id == first.id
    assert second.is_completed is True
    assert second.completed_at == completed_at
    assert LessonProgress.query.filter_by(user_id=student.id).count() == 1
    assert _enrolment(db, enrolment.id).completed_lessons == 1


def test_mark_complete_flips_accessed_lesson(db, student, course, enrolment):
    lesson = course.lessons[0]
    ProgressManager.record_lesson_access(student.id, lesson.id, enrolment.id)

    progress = ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)

    assert progress.is_completed is True
    assert LessonProgress.query.filter_by(user_id=student.id).count() == 1


def test_course_completion_scenario(db, student, course, enrolment):
    lessons = course.lessons

    ProgressManager.mark_lesson_complete(student.id, lessons[0].id, enrolment.id)
    ProgressManager.mark_lesson_complete(student.id, lessons[1].id, enrolment.id)

    halfway = _enrolment(db, enrolment.id)
    assert halfway.completed_lessons == 2
    assert halfway.completion_percentage == 50
    assert halfway.status == "in_progress"
    assert halfway.started_at is not None
    assert halfway.completed_at is None

    ProgressManager.mark_lesson_complete(student.id, lessons[2].id, enrolment.id)
    ProgressManager.mark_lesson_complete(student.id, lessons[3].id, enrolment.id)

    done = _enrolment(db, enrolment.id)
    assert done.completed_lessons == 4
    assert done.completion_percentage == 100
    assert done.status == "completed"
    assert done.completed_at is not None


def test_enrolment_counters_stay_in_bounds(db, student, course, enrolment):
    for lesson in course.lessons + course.lessons:
        ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)
        current = _enrolment(db, enrolment.id)
        assert 0 <= current.completed_lessons <= current.total_lessons
        assert current.completion_percentage == round(100 * current.completed_lessons / current.total_lessons)


def test_mark_complete_unknown_lesson(student, enrolment):
    with pytest.raises(NotFoundError):
        ProgressManager.mark_lesson_complete(student.id, 9999, enrolment.id)


def test_mark_complete_unknown_enrolment(student, course):
    with pytest.raises(NotFoundError):
        ProgressManager.mark_lesson_complete(student.id, course.lessons[0].id, 9999)


def test_mark_complete_with_someone_elses_enrolment(make_user, course, enrolment):
    intruder = make_user()

    with pytest.raises(ForbiddenError):
        ProgressManager.mark_lesson_complete(intruder.id, course.lessons[0].id, enrolment.id)

    assert LessonProgress.query.count() == 0


def test_mark_complete_lesson_from_another_course(student, make_course, enrolment):
    other = make_course(title="Other")

    with pytest.raises(ValidationError):
        ProgressManager.mark_lesson_complete(student.id, other.lessons[0].id, enrolment.id)



def test_mark_complete_inactive_lesson(db, student, course, enrolment):
    lesson = course.lessons[0]
    lesson.is_active = False
    db.session.commit()

    with pytest.raises(NotFoundError):
        ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)

    assert LessonProgress.query.count() == 0
    assert _enrolment(db, enrolment.id).completed_lessons == 0


def test_concurrent_completion_is_retried(monkeypatch, db, student, course, enrolment):
    lesson = course.lessons[0]
    completed_at = ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id).completed_at

    real_get_or_create = ProgressManager._get_or_create_progress
    calls = []

    def stale_get_or_create(user_id, lesson, enrolment, now):
        calls.append(lesson.id)
        if len(calls) == 1:
            # a second writer that never saw the committed row
            progress = LessonProgress(user_id=user_id, lesson_id=lesson.id, course_id=lesson.course_id,
                                      enrollment_id=enrolment.id, is_completed=False,
                                      first_accessed_at=now, last_accessed_at=now)
            db.session.add(progress)
            return progress
        return real_get_or_create(user_id, lesson, enrolment, now)

    monkeypatch.setattr(ProgressManager, "_get_or_create_progress", staticmethod(stale_get_or_create))

    progress = ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)

    assert len(calls) == 2
    assert progress.completed_at == completed_at
    assert LessonProgress.query.filter_by(user_id=student.id, lesson_id=lesson.id).count() == 1
    assert _enrolment(db, enrolment.id).completed_lessons == 1

def test_failed_recompute_rolls_back_lesson_progress(monkeypatch, db, student, course, enrolment):
    def broken_recompute(enrollment_id):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(EnrolmentManager, "recompute_enrolment", staticmethod(broken_recompute))

    with pytest.raises(StorageError):
        ProgressManager.mark_lesson_complete(student.id, course.lessons[0].id, enrolment.id)

    assert LessonProgress.query.count() == 0
    assert _enrolment(db, enrolment.id).completed_lessons == 0


def test_get_progress_for_course_empty(student, course, enrolment):
    assert ProgressManager.get_progress_for_course(student.id, course.id) == []


def test_get_progress_for_course_ordered_and_scoped(student, make_user, course, enrolment):
    lessons = course.lessons
    ProgressManager.mark_lesson_complete(student.id, lessons[2].id, enrolment.id)
    ProgressManager.record_lesson_access(student.id, lessons[0].id, enrolment.id)

    other = make_user()
    other_enrolment = EnrolmentManager.enroll_student(other.id, course.id)
    ProgressManager.mark_lesson_complete(other.id, lessons[1].id, other_enrolment.id)

    rows = ProgressManager.get_progress_for_course(student.id, course.id)

    assert [(r.lesson_id, r.is_completed) for r in rows] == [(lessons[0].id, False), (lessons[2].id, True)]


def test_record_lesson_access_updates_enrolment(db, student, course, enrolment):
    lesson = course.lessons[1]

    progress = ProgressManager.record_lesson_access(student.id, lesson.id, enrolment.id)

    assert progress.is_completed is False
    assert progress.completed_at is None
    current = _enrolment(db, enrolment.id)
    assert current.last_lesson_id == lesson.id
    assert current.last_accessed_at is not None
    assert current.status == "yet_to_start"


def test_record_lesson_access_keeps_completion(student, course, enrolment):
    lesson = course.lessons[0]
    ProgressManager.mark_lesson_complete(student.id, lesson.id, enrolment.id)

    progress = ProgressManager.record_lesson_access(student.id, lesson.id, enrolment.id)

    assert progress.is_completed is True
