import logging
from collections import namedtuple

from sqlalchemy import case, update

from classes.errors import NotFoundError
from classes.validators import validate_points_amount
from models import db, User, UserBadge, PointsHistory
from utils.transactions import transactional

logger = logging.getLogger(__name__)

# ascending, inclusive lower bounds
BADGE_THRESHOLDS = (
    ("newbie", 0),
    ("explorer", 40),
    ("achiever", 60),
    ("specialist", 80),
    ("expert", 100),
    ("master", 120),
)

BADGE_LEVELS = tuple(name for name, _ in BADGE_THRESHOLDS)

PointsAward = namedtuple("PointsAward", ["new_total", "new_badge", "badge_changed"])


def calculate_badge(total_points):
    badge = BADGE_LEVELS[0]
    for name, threshold in BADGE_THRESHOLDS:
        if total_points >= threshold:
            badge = name
    return badge


def get_next_badge(current_badge):
    """Return (badge, threshold) of the tier after current_badge, or None at the top."""
    index = BADGE_LEVELS.index(current_badge)
    if index >= len(BADGE_THRESHOLDS) - 1:
        return None
    return BADGE_THRESHOLDS[index + 1]


def badge_case(points_expr):
    """SQL expression mirroring calculate_badge for a points column expression."""
    whens = [(points_expr >= threshold, name) for name, threshold in reversed(BADGE_THRESHOLDS[1:])]
    return case(*whens, else_=BADGE_LEVELS[0])


@transactional()
def award_points(user_id, amount, source_type=None, source_id=None, description=None):
    validate_points_amount(amount)

    user = User.query.filter_by(id=user_id).with_for_update().first()
    if not user:
        raise NotFoundError("User", user_id)
    previous_badge = user.current_badge

    new_total = User.total_points + amount
    db.session.execute(
        update(User)
        .where(User.id == user_id)
        .values(total_points=new_total, current_badge=badge_case(new_total))
        .execution_options(synchronize_session=False)
    )
    db.session.refresh(user)

    badge_changed = user.current_badge != previous_badge

    if amount > 0:
        db.session.add(PointsHistory(
            user_id=user_id,
            points_change=amount,
            running_total=user.total_points,
            source_type=source_type,
            source_id=source_id,
            description=description,
        ))
        logger.info("Awarded %d points to user %s (total %d)", amount, user_id, user.total_points)

    if badge_changed:
        db.session.add(UserBadge(
            user_id=user_id,
            badge_level=user.current_badge,
            total_points_at_achievement=user.total_points,
        ))
        logger.info("User %s moved from %s to %s", user_id, previous_badge, user.current_badge)

    return PointsAward(user.total_points, user.current_badge, badge_changed)


def get_points_summary(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError("User", user_id)

    next_badge = get_next_badge(user.current_badge)
    history = (
        PointsHistory.query
        .filter_by(user_id=user_id)
        .order_by(PointsHistory.created_at.desc(), PointsHistory.id.desc())
        .all()
    )
    badges = UserBadge.query.filter_by(user_id=user_id).order_by(UserBadge.id).all()

    return {
        "total_points": user.total_points,
        "current_badge": user.current_badge,
        "next_badge": (
            {"badge": next_badge[0], "threshold": next_badge[1],
             "points_needed": max(0, next_badge[1] - user.total_points)}
            if next_badge else None
        ),
        "history": [entry.to_dict() for entry in history],
        "badges": [badge.to_dict() for badge in badges],
    }
