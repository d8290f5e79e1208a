"""Domain exceptions raised by the service layer.

Routers never catch these; ``middleware.error_handler`` maps each family to an
HTTP status with the usual ``{"detail": ...}`` body.
"""

from __future__ import annotations


class StreakboardError(Exception):
    """Base class for all domain errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StreakboardError, ValueError):
    """Malformed input: flag/metric out of range, unknown period or metric."""

    status_code = 422

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field


class NotFoundError(StreakboardError, LookupError):
    """A requested entity does not exist."""

    status_code = 404


class IntegrityError(StreakboardError):
    """A write would break a referential or lifecycle rule."""

    status_code = 409


class UnknownUserError(IntegrityError, NotFoundError):
    status_code = 404

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found")
        self.user_id = user_id


class UserNotApprovedError(IntegrityError):
    status_code = 403

    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} is not approved yet")
        self.user_id = user_id


class ConflictError(IntegrityError):
    """Entity already exists or is not in the expected state."""
