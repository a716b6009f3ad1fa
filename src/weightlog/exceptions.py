"""Error types raised by weightlog."""

from __future__ import annotations

from datetime import date


class WeightLogError(Exception):
    """Base class for all weightlog errors."""


class NotFoundError(WeightLogError, LookupError):
    """A requested entity does not exist."""


class UserNotFoundError(NotFoundError):
    """No profile exists for the requested user."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class SampleNotFoundError(NotFoundError):
    """No weight sample exists with the requested ID."""

    def __init__(self, log_id: int):
        self.log_id = log_id
        super().__init__(f"Weight sample with ID {log_id} not found")


class InvalidRangeError(WeightLogError, ValueError):
    """A date range ends before it starts."""

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"end_date {end_date.isoformat()} is before start_date {start_date.isoformat()}"
        )


class TransientStoreError(WeightLogError):
    """The sample store could not be read. Not retried here."""
