from models import db
from sqlalchemy.orm import relationship

class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    # reward schedule, looked up by attempt number
    points_first_attempt = db.Column(db.Integer, nullable=False, default=10)
    points_second_attempt = db.Column(db.Integer, nullable=False, default=7)
    points_third_attempt = db.Column(db.Integer, nullable=False, default=5)
    points_fourth_plus_attempt = db.Column(db.Integer, nullable=False, default=2)

    passing_percentage = db.Column(db.Integer, nullable=False, default=70)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    course = relationship("Course", back_populates="quizzes")
    questions = relationship("QuizQuestion", back_populates="quiz", order_by="QuizQuestion.sequence_order")

    @property
    def active_questions(self):
        return [q for q in self.questions if q.is_active]

    @property
    def reward_schedule(self):
        return (
            self.points_first_attempt,
            self.points_second_attempt,
            self.points_third_attempt,
            self.points_fourth_plus_attempt,
        )

    def __repr__(self):
        return f"<Quiz {self.title}>"

    def to_dict(self, include_answers=False):
        return {
            "id": self.id,
            "course_id": self.course_id,
            "title": self.title,
            "description": self.description,
            "points_first_attempt": self.points_first_attempt,
            "points_second_attempt": self.points_second_attempt,
            "points_third_attempt": self.points_third_attempt,
            "points_fourth_plus_attempt": self.points_fourth_plus_attempt,
            "passing_percentage": self.passing_percentage,
            "questions": [q.to_dict(include_answers=include_answers) for q in self.active_questions],
        }
