import logging
from flask import jsonify
from classes.errors import LMSError, StorageError

logger = logging.getLogger(__name__)


def register_error_handlers(app):
    @app.errorhandler(LMSError)
    def handle_lms_error(error):
        if isinstance(error, StorageError):
            logger.error("Storage error: %s", error.message)
        else:
            logger.info("%s: %s", type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code
