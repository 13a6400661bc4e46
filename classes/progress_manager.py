import logging

from classes.enrolment_manager import EnrolmentManager
from classes.errors import ForbiddenError, NotFoundError, ValidationError
from models import db
from models.course_lessons import Lesson
from models.enrolments import Enrolment
from models.lesson_progress import LessonProgress
from utils.helpers import utcnow
from utils.transactions import transactional

logger = logging.getLogger(__name__)


class ProgressManager:
    @staticmethod
    def _load_lesson_and_enrolment(user_id, lesson_id, enrollment_id):
        lesson = db.session.get(Lesson, lesson_id)
        if not lesson or not lesson.is_active:
            raise NotFoundError("Lesson", lesson_id)

        enrolment = db.session.get(Enrolment, enrollment_id)
        if not enrolment:
            raise NotFoundError("Enrolment", enrollment_id)
        if enrolment.user_id != user_id:
            raise ForbiddenError("Enrolment does not belong to this user")
        if lesson.course_id != enrolment.course_id:
            raise ValidationError("Lesson is not part of the enrolled course")

        return lesson, enrolment

    @staticmethod
    def _get_or_create_progress(user_id, lesson, enrolment, now):
        progress = LessonProgress.query.filter_by(
            user_id=user_id,
            lesson_id=lesson.id
        ).with_for_update().first()

        if not progress:
            progress = LessonProgress(
                user_id=user_id,
                lesson_id=lesson.id,
                course_id=lesson.course_id,
                enrollment_id=enrolment.id,
                is_completed=False,
                first_accessed_at=now,
                last_accessed_at=now,
            )
            db.session.add(progress)
        return progress

    @staticmethod
    @transactional(retries=1)
    def mark_lesson_complete(user_id, lesson_id, enrollment_id):
        """Mark a lesson complete for a user and refresh the owning enrolment.

        Marking an already completed lesson again is a no-op.
        """
        lesson, enrolment = ProgressManager._load_lesson_and_enrolment(user_id, lesson_id, enrollment_id)
        now = utcnow()

        progress = ProgressManager._get_or_create_progress(user_id, lesson, enrolment, now)
        if progress.is_completed:
            return progress

        progress.is_completed = True
        progress.completed_at = now
        progress.last_accessed_at = now
        db.session.flush()
        logger.info("User %s completed lesson %s", user_id, lesson_id)

        EnrolmentManager.recompute_enrolment(enrolment.id)
        return progress

    @staticmethod
    @transactional(retries=1)
    def record_lesson_access(user_id, lesson_id, enrollment_id):
        """Note that a user opened a lesson, creating its progress row on first visit."""
        lesson, enrolment = ProgressManager._load_lesson_and_enrolment(user_id, lesson_id, enrollment_id)
        now = utcnow()

        progress = ProgressManager._get_or_create_progress(user_id, lesson, enrolment, now)
        progress.last_accessed_at = now
        enrolment.last_accessed_at = now
        enrolment.last_lesson_id = lesson.id
        db.session.flush()
        return progress

    @staticmethod
    def get_progress_for_course(user_id, course_id):
        return (
            LessonProgress.query
            .join(Lesson, LessonProgress.lesson_id == Lesson.id)
            .filter(LessonProgress.user_id == user_id, Lesson.course_id == course_id)
            .order_by(Lesson.sequence_order, Lesson.id)
            .all()
        )
