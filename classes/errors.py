class LMSError(Exception):
    """Base class for errors raised by the progress and scoring core."""

    status_code = 500

    def __init__(self, message):
        self.message = message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class ValidationError(LMSError):
    """Malformed or out-of-range input."""

    status_code = 400


class NotFoundError(LMSError):
    status_code = 404

    def __init__(self, resource_type, resource_id):
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} with ID {resource_id} not found")


class ForbiddenError(LMSError):
    """The referenced entity belongs to someone else."""

    status_code = 403


class StorageError(LMSError):
    """The unit of work could not be committed."""

    status_code = 500
