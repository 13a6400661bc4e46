from flask import Blueprint, jsonify, request

from classes.quiz_manager import QuizManager
from utils.utils import login_required, role_required

# Lecturers' blueprint
lecturer_bp = Blueprint("lecturer", __name__)


#CREATE a New Quiz
# --------------------------------------------------------------------------------
@lecturer_bp.route("/courses/<int:course_id>/quizzes", methods=["POST"])
@login_required
@role_required("lecturer", "admin")
def create_quiz(course_id):
    data = request.get_json(silent=True) or {}
    quiz = QuizManager.create_quiz(course_id, data)
    return jsonify({"message": "Quiz created successfully", "quiz": quiz.to_dict(include_answers=True)}), 201


# REPLACE the Questions of a Quiz
# --------------------------------------------------------------------------------
@lecturer_bp.route("/quizzes/<int:quiz_id>/questions", methods=["PUT"])
@login_required
@role_required("lecturer", "admin")
def save_questions(quiz_id):
    data = request.get_json(silent=True) or {}
    questions = QuizManager.save_questions(quiz_id, data.get("questions"))
    return jsonify({
        "message": "Questions saved",
        "questions": [q.to_dict(include_answers=True) for q in questions],
    }), 200
