from models import db


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(100), nullable=False, unique=True)
    full_name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="student")  # 'student', 'lecturer', 'admin'
    total_points = db.Column(db.Integer, nullable=False, default=0)
    current_badge = db.Column(db.String(20), nullable=False, default="newbie")
    date_created = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    __table_args__ = (
        db.CheckConstraint("total_points >= 0", name="ck_users_total_points_non_negative"),
    )

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "total_points": self.total_points,
            "current_badge": self.current_badge,
            "date_created": self.date_created,
        }
