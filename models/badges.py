from models import db
from utils.helpers import format_datetime

class UserBadge(db.Model):
    """A badge tier reached by a user, kept as history next to users.current_badge."""
    __tablename__ = "user_badges"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    badge_level = db.Column(db.String(20), nullable=False)
    total_points_at_achievement = db.Column(db.Integer, nullable=False)
    achieved_at = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    def to_dict(self):
        return {
            "badge_level": self.badge_level,
            "total_points_at_achievement": self.total_points_at_achievement,
            "achieved_at": format_datetime(self.achieved_at),
        }
