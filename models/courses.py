from models import db
from sqlalchemy.orm import relationship

class Course(db.Model):
    __tablename__ = "courses"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    lessons = relationship("Lesson", back_populates="course", order_by="Lesson.sequence_order")
    quizzes = relationship("Quiz", back_populates="course")

    def __repr__(self):
        return f"<Course {self.title}>"

    def active_lesson_ids(self):
        return [lesson.id for lesson in self.lessons if lesson.is_active]

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "created_by": self.created_by,
            "created_at": self.created_at
        }
