from models import db
from utils.helpers import format_datetime

ENROLMENT_STATUSES = ("yet_to_start", "in_progress", "completed")


class Enrolment(db.Model):
    __tablename__ = 'enrolments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    status = db.Column(db.String(20), nullable=False, default="yet_to_start")
    completed_lessons = db.Column(db.Integer, nullable=False, default=0)
    total_lessons = db.Column(db.Integer, nullable=False, default=0)
    completion_percentage = db.Column(db.Integer, nullable=False, default=0)
    enrolled_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)
    last_accessed_at = db.Column(db.DateTime, nullable=True)
    last_lesson_id = db.Column(db.Integer, db.ForeignKey('course_lessons.id'), nullable=True)

    user = db.relationship("User", backref="enrolments")
    course = db.relationship("Course", backref="enrolments")

    __table_args__ = (
        db.UniqueConstraint("user_id", "course_id", name="unique_user_course"),
        db.CheckConstraint("completed_lessons <= total_lessons", name="ck_enrolments_completed_le_total"),
        db.CheckConstraint(
            "status IN (%s)" % ", ".join(f"'{s}'" for s in ENROLMENT_STATUSES),
            name="ck_enrolments_status",
        ),
    )

    def __repr__(self):
        return f"<Enrolment User {self.user_id} Course {self.course_id} ({self.status})>"

    def to_dict(self):
        return {
            "id": self.id,
            "user_id": self.user_id,
            "course_id": self.course_id,
            "status": self.status,
            "completed_lessons": self.completed_lessons,
            "total_lessons": self.total_lessons,
            "completion_percentage": self.completion_percentage,
            "enrolled_at": format_datetime(self.enrolled_at),
            "started_at": format_datetime(self.started_at),
            "completed_at": format_datetime(self.completed_at),
            "last_accessed_at": format_datetime(self.last_accessed_at),
            "last_lesson_id": self.last_lesson_id,
        }
