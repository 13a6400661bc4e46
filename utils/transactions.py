import logging
from functools import wraps

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from classes.errors import StorageError
from models import db

logger = logging.getLogger(__name__)

_DEPTH_KEY = "lms_tx_depth"


def _max_retries(retries):
    if isinstance(retries, str):
        return current_app.config.get(retries, 0)
    return retries


def transactional(retries=0):
    """Run the wrapped operation as one unit of work on ``db.session``.

    The outermost call commits; calls made while a unit is already open join
    it and leave the commit to the caller. Any database error rolls the whole
    unit back and is raised as StorageError. An IntegrityError in the
    outermost call re-runs the operation up to ``retries`` times (an int, or
    the name of a config key holding one).
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            session = db.session
            depth = session.info.get(_DEPTH_KEY, 0)
            if depth:
                session.info[_DEPTH_KEY] = depth + 1
                try:
                    return func(*args, **kwargs)
                finally:
                    session.info[_DEPTH_KEY] = depth

            attempt = 0
            while True:
                session.info[_DEPTH_KEY] = 1
                try:
                    result = func(*args, **kwargs)
                    session.commit()
                    return result
                except IntegrityError as e:
                    session.rollback()
                    if attempt < _max_retries(retries):
                        attempt += 1
                        logger.warning("Conflict in %s, retrying (%d): %s", func.__name__, attempt, e.orig)
                        continue
                    logger.error("Conflict in %s after %d retries: %s", func.__name__, attempt, e.orig)
                    raise StorageError(f"Could not save changes for {func.__name__}") from e
                except SQLAlchemyError as e:
                    session.rollback()
                    logger.error("Database error in %s: %s", func.__name__, e)
                    raise StorageError(f"Could not save changes for {func.__name__}") from e
                except Exception:
                    session.rollback()
                    raise
                finally:
                    session.info[_DEPTH_KEY] = 0

        return wrapper
    return decorator
