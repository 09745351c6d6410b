"""
Exceptions raised by the service layer.

Services never build HTTP responses themselves.  They raise one of the
exceptions below with a human readable (Albanian) message and the
endpoints convert it into an ``HTTPException`` with the matching status
code.  Anything else that escapes a handler is turned into a 500 by the
application‑level handlers registered in ``main.py``.
"""

from fastapi import HTTPException, status


class ServiceError(Exception):
    """Base class for expected business errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """A required field is missing or a value is not allowed."""

    status_code = status.HTTP_400_BAD_REQUEST


class PermissionDeniedError(ServiceError):
    """The caller's role or ownership does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    """The requested record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ServiceError):
    """The write collides with an existing record (e.g. a duplicate identifier)."""

    status_code = status.HTTP_409_CONFLICT


def to_http(exc: ServiceError) -> HTTPException:
    """Translate a service error into the equivalent ``HTTPException``."""
    return HTTPException(status_code=exc.status_code, detail=exc.message)
