import itertools

import pytest

from app import create_app
from classes.enrolment_manager import EnrolmentManager
from models import db as _db
from models import Course, Lesson, Quiz, QuizQuestion, User
from utils.badge_service import calculate_badge
from utils.tokens import get_jwt_token


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def make_user(db):
    counter = itertools.count(1)

    def _make(role="student", total_points=0):
        n = next(counter)
        user = User(
            email=f"user{n}@example.com",
            full_name=f"User {n}",
            role=role,
            total_points=total_points,
            current_badge=calculate_badge(total_points),
        )
        db.session.add(user)
        db.session.commit()
        return user

    return _make


@pytest.fixture
def make_course(db):
    def _make(lesson_count=4, title="Python Basics"):
        course = Course(title=title, description="Learn things")
        db.session.add(course)
        db.session.flush()
        for order in range(1, lesson_count + 1):
            db.session.add(Lesson(course_id=course.id, title=f"Lesson {order}", sequence_order=order))
        db.session.commit()
        return course

    return _make


@pytest.fixture
def make_quiz(db):
    def _make(course, question_count=5, **schedule):
        quiz = Quiz(course_id=course.id, title="Checkpoint", **schedule)
        db.session.add(quiz)
        db.session.flush()
        for order in range(1, question_count + 1):
            db.session.add(QuizQuestion(
                quiz_id=quiz.id,
                question_text=f"Question {order}",
                sequence_order=order,
                options=[{"id": "a", "text": "A"}, {"id": "b", "text": "B"},
                         {"id": "c", "text": "C"}, {"id": "d", "text": "D"}],
                correct_answer_ids=["b"],
            ))
        db.session.commit()
        return quiz

    return _make


@pytest.fixture
def student(make_user):
    return make_user()


@pytest.fixture
def course(make_course):
    return make_course(lesson_count=4)


@pytest.fixture
def enrolment(student, course):
    return EnrolmentManager.enroll_student(student.id, course.id)


@pytest.fixture
def quiz(make_quiz, course):
    return make_quiz(course, question_count=5)


@pytest.fixture
def answer_sheet():
    def _answers(quiz, correct):
        """Answer the first `correct` questions right and the rest wrong."""
        return {
            question.id: ["b"] if index < correct else ["a"]
            for index, question in enumerate(quiz.active_questions)
        }

    return _answers


@pytest.fixture
def login(app):
    def _login(user):
        client = app.test_client()
        token = get_jwt_token({"user_id": user.id, "role": user.role})
        client.set_cookie("access_token", token)
        return client

    return _login
