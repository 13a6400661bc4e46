from flask import Blueprint, jsonify, g, request

from classes.enrolment_manager import EnrolmentManager
from classes.errors import ForbiddenError, NotFoundError, ValidationError
from classes.progress_manager import ProgressManager
from classes.quiz_manager import QuizManager
from models import db
from models.courses import Course
from models.enrolments import Enrolment
from utils.badge_service import get_points_summary
from utils.utils import login_required

# Students' blueprint
student_bp = Blueprint("student", __name__)


def _enrollment_id_from_body():
    data = request.get_json(silent=True) or {}
    enrollment_id = data.get("enrollment_id")
    if isinstance(enrollment_id, bool) or not isinstance(enrollment_id, int):
        raise ValidationError("'enrollment_id' is required")
    return enrollment_id, data


#                                                         COURSES
#_____________________________________________________________________________________________________________
@student_bp.route("/courses/<int:course_id>/enroll", methods=["POST"])
@login_required
def enroll(course_id):
    enrolment = EnrolmentManager.enroll_student(g.user["user_id"], course_id)
    return jsonify({"enrollment": enrolment.to_dict()}), 201


@student_bp.route("/courses/<int:course_id>/progress", methods=["GET"])
@login_required
def get_course_progress(course_id):
    student_id = g.user["user_id"]

    course = db.session.get(Course, course_id)
    if not course:
        raise NotFoundError("Course", course_id)

    enrolment = Enrolment.query.filter_by(user_id=student_id, course_id=course_id).first()
    if not enrolment:
        raise ForbiddenError("Not enrolled in this course")

    lessons = ProgressManager.get_progress_for_course(student_id, course_id)
    return jsonify({
        "enrollment": enrolment.to_dict(),
        "lessons": [progress.to_dict() for progress in lessons],
        "course_lessons": [lesson.to_dict() for lesson in course.lessons if lesson.is_active],
    }), 200


#                                                         LESSONS
#_____________________________________________________________________________________________________________
@student_bp.route("/lessons/<int:lesson_id>/access", methods=["POST"])
@login_required
def access_lesson(lesson_id):
    enrollment_id, _ = _enrollment_id_from_body()
    progress = ProgressManager.record_lesson_access(g.user["user_id"], lesson_id, enrollment_id)
    return jsonify({"progress": progress.to_dict()}), 200


@student_bp.route("/lessons/<int:lesson_id>/complete", methods=["POST"])
@login_required
def complete_lesson(lesson_id):
    enrollment_id, _ = _enrollment_id_from_body()
    progress = ProgressManager.mark_lesson_complete(g.user["user_id"], lesson_id, enrollment_id)
    enrolment = db.session.get(Enrolment, enrollment_id)
    return jsonify({
        "progress": progress.to_dict(),
        "enrollment": enrolment.to_dict(),
    }), 200


#                                                         QUIZZES
#_____________________________________________________________________________________________________________
@student_bp.route("/quiz/<int:quiz_id>/submit", methods=["POST"])
@login_required
def submit_quiz(quiz_id):
    """Grades the quiz and awards points for the attempt."""
    enrollment_id, data = _enrollment_id_from_body()
    result = QuizManager.submit_quiz_attempt(quiz_id, enrollment_id, g.user["user_id"], data.get("answers", {}))

    award = result.points_award
    return jsonify({
        "attempt_id": result.attempt_id,
        "attempt_number": result.attempt_number,
        "correct_count": result.correct_count,
        "total_questions": result.total_questions,
        "score_percentage": result.score_percentage,
        "points_earned": result.points_earned,
        "passed": result.passed,
        "total_points": award.new_total if award else None,
        "current_badge": award.new_badge if award else None,
        "badge_changed": award.badge_changed if award else False,
    }), 201


@student_bp.route("/quiz/<int:quiz_id>/attempts", methods=["GET"])
@login_required
def get_quiz_attempts(quiz_id):
    attempts = QuizManager.get_attempts(g.user["user_id"], quiz_id)
    return jsonify({"attempts": [attempt.to_dict() for attempt in attempts]}), 200


#                                                         POINTS
#_____________________________________________________________________________________________________________
@student_bp.route("/points", methods=["GET"])
@login_required
def get_points():
    return jsonify(get_points_summary(g.user["user_id"])), 200
