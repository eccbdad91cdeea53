"""Divelog error classes.

Every failure the engine raises derives from DivelogError so callers can
translate them into user-facing behaviour in one place. Field validation
problems are never raised one at a time: they are collected into a
ValidationFailure and only wrapped in ValidationFailedError by save operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation.validator import ValidationFailure


class DivelogError(Exception):
    """Base exception for divelog errors."""

    pass


class NotFoundError(DivelogError):
    """Raised when a record does not exist or is not visible to the owner."""

    pass


class UpdateConflictError(DivelogError):
    """Raised when an update carries a stale version number."""

    def __init__(self, entity: str, record_id: str, expected: int, actual: int) -> None:
        self.entity = entity
        self.record_id = record_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"{entity} {record_id} was modified: expected version {expected}, found {actual}")


class DuplicateKeyError(DivelogError):
    """Raised when a per-owner uniqueness rule is violated (e.g. dive number)."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class NoDataError(DivelogError):
    """Raised when a rollup is requested over an empty dive history."""

    pass


class ValidationFailedError(DivelogError):
    """Raised by save operations when input failed validation.

    Carries the complete set of field and non-field messages.
    """

    def __init__(self, failure: ValidationFailure) -> None:
        self.failure = failure
        super().__init__(f"validation failed for {len(failure.field_errors)} field(s)")


class DependencyError(DivelogError):
    """Raised when a collaborator (database, timezone data) fails."""

    pass


class DependencyTimeoutError(DependencyError):
    """Raised when a collaborator call exceeds its deadline. Retryable."""

    pass


class TimezoneResolutionError(DependencyError):
    """Raised when a dive site or its IANA timezone cannot be resolved."""

    pass
