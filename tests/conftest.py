"""Pytest fixtures for weightlog tests."""

from __future__ import annotations

import tempfile
from datetime import date, time, timedelta
from decimal import Decimal
from pathlib import Path
from typing import Optional

import pytest

from weightlog.db.connection import DatabaseConnection
from weightlog.exceptions import UserNotFoundError
from weightlog.tracking.models import DateRange, WeightSample

BASE_DATE = date(2025, 3, 1)


class FakeSampleStore:
    """In-memory SampleStore that records every fetch."""

    def __init__(self, samples=None, goals: Optional[dict] = None):
        self.samples: list[WeightSample] = list(samples or [])
        self.goals: dict[int, Optional[Decimal]] = goals if goals is not None else {1: None}
        self.fetches: list[tuple[int, DateRange]] = []
        self.error: Optional[Exception] = None

    def fetch_samples(self, user_id: int, date_range: DateRange) -> list[WeightSample]:
        self.fetches.append((user_id, date_range))
        if self.error is not None:
            raise self.error
        selected = [
            s for s in self.samples
            if date_range.start_date <= s.measured_at <= date_range.end_date
        ]
        return sorted(selected, key=lambda s: s.sort_key)

    def fetch_goal_weight(self, user_id: int) -> Optional[Decimal]:
        if self.error is not None:
            raise self.error
        if user_id not in self.goals:
            raise UserNotFoundError(user_id)
        return self.goals[user_id]


@pytest.fixture
def make_series():
    """Build a list of samples from (day offset, weight) pairs."""

    def _make(points, base: date = BASE_DATE, at: time = time(8, 0)) -> list[WeightSample]:
        return [
            WeightSample(
                measured_at=base + timedelta(days=offset),
                time_of_day=at,
                weight_kg=Decimal(str(weight)),
                user_id=1,
            )
            for offset, weight in points
        ]

    return _make


@pytest.fixture
def fake_store():
    """Empty in-memory store with one known user (ID 1, no goal)."""
    return FakeSampleStore()


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)
