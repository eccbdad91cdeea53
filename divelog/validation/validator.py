"""Field validation primitive.

A Validator collects every failing check instead of stopping at the first one,
so a form can show all of its problems at once. Messages are kept per field in
the order the checks were registered; the last message registered for a field
is the one a single-message UI shows.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from urllib.parse import urlparse

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

MAX_CHARS_MESSAGE = "This field cannot be more than {limit:,} characters long"
BLANK_MESSAGE = "This field cannot be blank"
SELECT_MESSAGE = "This field must be selected"


@dataclass(frozen=True)
class ValidationFailure:
    """Snapshot of everything that failed validation."""

    field_errors: dict[str, tuple[str, ...]] = field(default_factory=dict)
    non_field_errors: tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.field_errors and not self.non_field_errors

    def errors(self) -> list[tuple[str, str]]:
        """All field messages as (field, message) pairs in registration order."""
        return [(name, message) for name, messages in self.field_errors.items() for message in messages]

    def field_error(self, name: str) -> str | None:
        """The message a single-message UI shows for a field: the last registered."""
        messages = self.field_errors.get(name)
        return messages[-1] if messages else None


class Validator:
    """Collects field and non-field errors without short-circuiting."""

    def __init__(self) -> None:
        self._field_errors: dict[str, list[str]] = {}
        self._non_field_errors: list[str] = []

    @property
    def valid(self) -> bool:
        return not self._field_errors and not self._non_field_errors

    def add_field_error(self, name: str, message: str) -> None:
        self._field_errors.setdefault(name, []).append(message)

    def add_non_field_error(self, message: str) -> None:
        self._non_field_errors.append(message)

    def check_field(self, ok: bool, name: str, message: str) -> None:
        if not ok:
            self.add_field_error(name, message)

    def field_error(self, name: str) -> str | None:
        messages = self._field_errors.get(name)
        return messages[-1] if messages else None

    def errors(self) -> list[tuple[str, str]]:
        return self.as_failure().errors()

    def merge(self, other: Validator) -> None:
        """Fold another validator's messages into this one, preserving order."""
        for name, messages in other._field_errors.items():
            for message in messages:
                self.add_field_error(name, message)
        self._non_field_errors.extend(other._non_field_errors)

    def as_failure(self) -> ValidationFailure:
        return ValidationFailure(
            field_errors={name: tuple(messages) for name, messages in self._field_errors.items()},
            non_field_errors=tuple(self._non_field_errors),
        )


def not_blank(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def max_chars(value: str | None, limit: int) -> bool:
    return value is None or len(value) <= limit


def between(value: float | int, low: float | int, high: float | int) -> bool:
    return low <= value <= high


def matches(value: str, rx: re.Pattern[str]) -> bool:
    return rx.match(value) is not None


def is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def check_max_chars(v: Validator, value: str | None, name: str, limit: int) -> None:
    v.check_field(max_chars(value, limit), name, MAX_CHARS_MESSAGE.format(limit=limit))


def check_between(
    v: Validator,
    value: float | int | None,
    name: str,
    low: float | int,
    high: float | int,
    unit: str = "",
) -> None:
    """Range check for an optional numeric value; None is not checked."""
    if value is None:
        return
    suffix = f" {unit}" if unit else ""
    v.check_field(
        between(value, low, high),
        name,
        f"This field must be between {low:,} and {high:,}{suffix} inclusive",
    )
