from models import db
from utils.helpers import format_datetime

class PointsHistory(db.Model):
    __tablename__ = "user_points_history"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    points_change = db.Column(db.Integer, nullable=False)
    running_total = db.Column(db.Integer, nullable=False)
    source_type = db.Column(db.String(30), nullable=True)  # 'quiz_attempt', 'manual'
    source_id = db.Column(db.Integer, nullable=True)
    description = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    def to_dict(self):
        return {
            "points_change": self.points_change,
            "running_total": self.running_total,
            "source_type": self.source_type,
            "source_id": self.source_id,
            "description": self.description,
            "created_at": format_datetime(self.created_at),
        }
