import logging
from collections import namedtuple
from collections.abc import Mapping

from sqlalchemy import func

from classes.errors import ForbiddenError, NotFoundError, ValidationError
from classes.validators import validate_length, validate_questions, validate_reward_schedule
from models import db, Course, Enrolment, Quiz, QuizAttempt, QuizAttemptAnswer, QuizQuestion, User
from utils.badge_service import award_points
from utils.helpers import percentage
from utils.transactions import transactional

logger = logging.getLogger(__name__)

AttemptResult = namedtuple("AttemptResult", [
    "attempt_id",
    "attempt_number",
    "correct_count",
    "total_questions",
    "score_percentage",
    "points_earned",
    "passed",
    "points_award",
])


def grade_question(selected_ids, correct_ids):
    """A question counts only when the selection matches the correct set exactly."""
    return {str(i) for i in selected_ids} == {str(i) for i in correct_ids}


def points_for_attempt(quiz, attempt_number):
    """Reward for the given 1-based attempt; every attempt from the 4th on uses the last tier."""
    schedule = quiz.reward_schedule
    return schedule[min(attempt_number, len(schedule)) - 1]


def _normalise_answers(quiz, selected_answers):
    """Map question id -> set of option ids, rejecting anything that is not part of the quiz."""
    if selected_answers is None:
        selected_answers = {}
    if not isinstance(selected_answers, Mapping):
        raise ValidationError("Answers must map question ids to lists of option ids.")

    questions = {str(q.id): q for q in quiz.active_questions}
    normalised = {}
    for question_id, selected in selected_answers.items():
        question = questions.get(str(question_id))
        if question is None:
            raise ValidationError(f"Question {question_id} does not belong to quiz {quiz.id}")

        if selected is None:
            selected = []
        elif isinstance(selected, (str, int)):
            selected = [selected]
        elif not isinstance(selected, (list, tuple, set, frozenset)):
            raise ValidationError(f"Answers for question {question_id} must be a list of option ids.")

        selected = {str(option_id) for option_id in selected}
        unknown = selected - question.option_ids
        if unknown:
            raise ValidationError(
                f"Option(s) {', '.join(sorted(unknown))} do not belong to question {question_id}"
            )
        normalised[question.id] = selected
    return normalised


class QuizManager:
    @staticmethod
    def _next_attempt_number(user_id, quiz_id):
        prior = db.session.query(func.count(QuizAttempt.id)).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id,
        ).scalar()
        return prior + 1

    @staticmethod
    @transactional(retries="QUIZ_ATTEMPT_MAX_RETRIES")
    def submit_quiz_attempt(quiz_id, enrollment_id, user_id, selected_answers):
        quiz = db.session.get(Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz", quiz_id)
        enrolment = db.session.get(Enrolment, enrollment_id)
        if not enrolment:
            raise NotFoundError("Enrolment", enrollment_id)
        if enrolment.user_id != user_id:
            raise ForbiddenError("Enrolment does not belong to this user")
        if enrolment.course_id != quiz.course_id:
            raise ValidationError("Quiz is not part of the enrolled course")

        answers = _normalise_answers(quiz, selected_answers)

        # Serialises concurrent submissions by the same user on backends with row locks;
        # the unique (user, quiz, attempt_number) constraint catches the rest.
        User.query.filter_by(id=user_id).with_for_update().first()
        attempt_number = QuizManager._next_attempt_number(user_id, quiz_id)

        questions = quiz.active_questions
        results = []
        for question in questions:
            selected = answers.get(question.id, set())
            results.append((question, selected, grade_question(selected, question.correct_set)))
        correct_count = sum(1 for _, _, is_correct in results if is_correct)
        score = percentage(correct_count, len(questions))
        points = points_for_attempt(quiz, attempt_number)

        attempt = QuizAttempt(
            user_id=user_id,
            quiz_id=quiz_id,
            enrollment_id=enrollment_id,
            attempt_number=attempt_number,
            total_questions=len(questions),
            correct_count=correct_count,
            score_percentage=score,
            points_earned=points,
            passed=score >= quiz.passing_percentage,
        )
        attempt.answers = [
            QuizAttemptAnswer(question_id=question.id, selected_answer_ids=sorted(selected), is_correct=is_correct)
            for question, selected, is_correct in results
        ]
        db.session.add(attempt)
        db.session.flush()
        logger.info("User %s attempt %d on quiz %s: %d/%d correct, %d points",
                    user_id, attempt_number, quiz_id, correct_count, len(questions), points)

        points_award = None
        if points > 0:
            points_award = award_points(
                user_id, points,
                source_type="quiz_attempt",
                source_id=attempt.id,
                description=f"Quiz '{quiz.title}' attempt {attempt_number}",
            )

        return AttemptResult(
            attempt_id=attempt.id,
            attempt_number=attempt_number,
            correct_count=correct_count,
            total_questions=len(questions),
            score_percentage=score,
            points_earned=points,
            passed=attempt.passed,
            points_award=points_award,
        )

    @staticmethod
    def get_attempts(user_id, quiz_id):
        if not db.session.get(Quiz, quiz_id):
            raise NotFoundError("Quiz", quiz_id)
        return (
            QuizAttempt.query
            .filter_by(user_id=user_id, quiz_id=quiz_id)
            .order_by(QuizAttempt.attempt_number.desc())
            .all()
        )

    #                                 QUIZ AUTHORING
    # ------------------------------------------------------------------------------
    @staticmethod
    @transactional()
    def create_quiz(course_id, data):
        if not db.session.get(Course, course_id):
            raise NotFoundError("Course", course_id)
        if not isinstance(data, Mapping):
            raise ValidationError("Quiz data must be an object.")

        title = (data.get("title") or "").strip()
        if not title:
            raise ValidationError("Title is required")
        validate_length("Title", title, 255)
        validate_reward_schedule(data)

        passing_percentage = data.get("passing_percentage", 70)
        if isinstance(passing_percentage, bool) or not isinstance(passing_percentage, int) \
                or not 0 <= passing_percentage <= 100:
            raise ValidationError("'passing_percentage' must be an integer between 0 and 100.")

        quiz = Quiz(
            course_id=course_id,
            title=title,
            description=data.get("description"),
            points_first_attempt=data.get("points_first_attempt", 10),
            points_second_attempt=data.get("points_second_attempt", 7),
            points_third_attempt=data.get("points_third_attempt", 5),
            points_fourth_plus_attempt=data.get("points_fourth_plus_attempt", 2),
            passing_percentage=passing_percentage,
        )
        db.session.add(quiz)
        db.session.flush()
        logger.info("Created quiz %s for course %s", quiz.id, course_id)
        return quiz

    @staticmethod
    @transactional()
    def save_questions(quiz_id, questions):
        """Replace the active question set of a quiz.

        Old questions are deactivated rather than deleted so recorded attempts keep their answers.
        """
        quiz = db.session.get(Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz", quiz_id)
        validate_questions(questions)

        for question in quiz.active_questions:
            question.is_active = False

        for order, data in enumerate(questions, start=1):
            db.session.add(QuizQuestion(
                quiz=quiz,
                question_text=data["question_text"],
                sequence_order=data.get("sequence_order", order),
                options=[{"id": str(o["id"]), "text": o.get("text", "")} for o in data["options"]],
                correct_answer_ids=[str(c) for c in data["correct_answer_ids"]],
                explanation=data.get("explanation"),
                is_active=True,
            ))
        db.session.flush()
        db.session.expire(quiz, ["questions"])
        return quiz.active_questions
