from models import db
from utils.helpers import format_datetime

class LessonProgress(db.Model):
    __tablename__ = "lesson_progress"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    lesson_id = db.Column(db.Integer, db.ForeignKey("course_lessons.id"), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey("courses.id"), nullable=False)
    enrollment_id = db.Column(db.Integer, db.ForeignKey("enrolments.id"), nullable=False)
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    completed_at = db.Column(db.DateTime, nullable=True)
    first_accessed_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    last_accessed_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    lesson = db.relationship("Lesson")

    __table_args__ = (
        db.UniqueConstraint("user_id", "lesson_id", name="unique_user_lesson"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "lesson_id": self.lesson_id,
            "course_id": self.course_id,
            "enrollment_id": self.enrollment_id,
            "is_completed": self.is_completed,
            "completed_at": format_datetime(self.completed_at),
            "last_accessed_at": format_datetime(self.last_accessed_at),
        }
