from flask_sqlalchemy import SQLAlchemy

# Initialize SQLAlchemy
db = SQLAlchemy()

# Import models
from models.users import User

from models.courses import Course
from models.course_lessons import Lesson
from models.enrolments import Enrolment
from models.lesson_progress import LessonProgress

from models.quizzes import Quiz
from models.quiz_questions import QuizQuestion
from models.quiz_attempts import QuizAttempt
from models.quiz_attempts_answers import QuizAttemptAnswer

from models.badges import UserBadge
from models.points_history import PointsHistory
