"""Error taxonomy shared by the engine, the lifecycle services and the API.

Services raise these immediately; ``unispace.main`` turns them into JSON
responses with the same ``{"detail": ...}`` shape FastAPI uses for
``HTTPException``.
"""

from typing import Any, List, Optional

from fastapi import status


class UniSpaceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(UniSpaceError):
    """Malformed or out-of-policy input (bad interval, duration, advance window)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class BadRequestError(UniSpaceError):
    """The target exists but its current state does not allow the operation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class NotFoundError(UniSpaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(UniSpaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class ConflictError(UniSpaceError):
    """Availability or uniqueness violation.

    ``conflicts`` holds the blocking entities (bookings or schedules) so
    callers can show the user what is in the way.
    """

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"

    def __init__(self, message: Optional[str] = None, conflicts: Optional[List[Any]] = None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class InternalError(UniSpaceError):
    pass
