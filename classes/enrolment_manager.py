import logging

from sqlalchemy import func, select

from classes.errors import NotFoundError
from models import db, Course, Enrolment, Lesson, LessonProgress, User
from utils.helpers import percentage, utcnow
from utils.transactions import transactional

logger = logging.getLogger(__name__)


def status_for(completed_lessons, total_lessons):
    if completed_lessons <= 0 or total_lessons <= 0:
        return "yet_to_start"
    if completed_lessons >= total_lessons:
        return "completed"
    return "in_progress"


class EnrolmentManager:
    @staticmethod
    def _find_enrolment(user_id, course_id):
        return Enrolment.query.filter_by(user_id=user_id, course_id=course_id).first()

    @staticmethod
    @transactional(retries=1)
    def enroll_student(user_id, course_id):
        """Enrol a user in a course, returning the existing enrolment if there is one."""
        if not db.session.get(User, user_id):
            raise NotFoundError("User", user_id)
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError("Course", course_id)

        enrolment = EnrolmentManager._find_enrolment(user_id, course_id)
        if enrolment:
            return enrolment

        enrolment = Enrolment(
            user_id=user_id,
            course_id=course_id,
            status="yet_to_start",
            completed_lessons=0,
            total_lessons=len(course.active_lesson_ids()),
            completion_percentage=0,
            enrolled_at=utcnow(),
        )
        db.session.add(enrolment)
        db.session.flush()
        logger.info("User %s enrolled in course %s", user_id, course_id)
        return enrolment

    @staticmethod
    def get_enrolments(user_id):
        return Enrolment.query.filter_by(user_id=user_id).order_by(Enrolment.enrolled_at.desc()).all()

    @staticmethod
    @transactional()
    def recompute_enrolment(enrollment_id):
        """Bring completed_lessons, completion_percentage and status in line with lesson progress."""
        enrolment = Enrolment.query.filter_by(id=enrollment_id).with_for_update().first()
        if not enrolment:
            raise NotFoundError("Enrolment", enrollment_id)

        active_lessons = select(Lesson.id).where(
            Lesson.course_id == enrolment.course_id,
            Lesson.is_active.is_(True),
        )
        total = db.session.scalar(select(func.count()).select_from(active_lessons.subquery()))
        completed = LessonProgress.query.filter(
            LessonProgress.user_id == enrolment.user_id,
            LessonProgress.is_completed.is_(True),
            LessonProgress.lesson_id.in_(active_lessons),
        ).count()
        completed = min(completed, total)

        previous_status = enrolment.status
        new_status = status_for(completed, total)
        now = utcnow()

        enrolment.total_lessons = total
        enrolment.completed_lessons = completed
        enrolment.completion_percentage = percentage(completed, total)
        enrolment.status = new_status

        if new_status != "yet_to_start" and enrolment.started_at is None:
            enrolment.started_at = now
        if new_status == "completed" and previous_status != "completed":
            enrolment.completed_at = now

        if new_status != previous_status:
            logger.info("Enrolment %s moved from %s to %s (%d/%d lessons)",
                        enrollment_id, previous_status, new_status, completed, total)

        db.session.flush()
        return enrolment
