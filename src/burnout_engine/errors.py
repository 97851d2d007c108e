"""Error taxonomy for the burnout engine."""
from typing import Any, Dict, Optional


class BurnoutError(Exception):
    """Base class for engine errors.

    Carries an error code and the HTTP status the API layer should use.
    """

    status_code = 400
    error_code = "BURNOUT_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(BurnoutError):
    """Malformed input: answers outside [1,5], missing dimensions, bad tags."""

    status_code = 422
    error_code = "VALIDATION_ERROR"


class RemoteUnavailable(BurnoutError):
    """The durable store could not be reached (network, auth, quota, timeout)."""

    status_code = 503
    error_code = "REMOTE_UNAVAILABLE"


class NoDataAvailable(BurnoutError):
    """No assessments exist for the user, remotely or locally.

    A legitimate first-time-user state rather than a failure.
    """

    status_code = 200
    error_code = "NO_DATA"


class MigrationConflict(BurnoutError):
    """A local record already exists remotely during migration (remote wins)."""

    error_code = "MIGRATION_CONFLICT"

    def __init__(self, user_id: str, assessment_date: str):
        self.user_id = user_id
        self.assessment_date = assessment_date
        super().__init__(
            f"Assessment for {assessment_date} already stored remotely",
            details={"user_id": user_id, "assessment_date": assessment_date},
        )
