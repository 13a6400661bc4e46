from models import db
from utils.helpers import format_datetime

class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    enrollment_id = db.Column(db.Integer, db.ForeignKey("enrolments.id"), nullable=False)
    attempt_number = db.Column(db.Integer, nullable=False)
    total_questions = db.Column(db.Integer, nullable=False, default=0)
    correct_count = db.Column(db.Integer, nullable=False, default=0)
    score_percentage = db.Column(db.Integer, nullable=False, default=0)
    points_earned = db.Column(db.Integer, nullable=False, default=0)
    passed = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    quiz = db.relationship("Quiz", backref=db.backref("attempts", lazy=True))
    answers = db.relationship("QuizAttemptAnswer", back_populates="attempt", lazy=True, cascade="all, delete-orphan")

    __table_args__ = (
        db.UniqueConstraint("user_id", "quiz_id", "attempt_number", name="unique_user_quiz_attempt"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "quiz_id": self.quiz_id,
            "enrollment_id": self.enrollment_id,
            "attempt_number": self.attempt_number,
            "total_questions": self.total_questions,
            "correct_count": self.correct_count,
            "score_percentage": self.score_percentage,
            "points_earned": self.points_earned,
            "passed": self.passed,
            "created_at": format_datetime(self.created_at),
            "answers": [answer.to_dict() for answer in self.answers],
        }
