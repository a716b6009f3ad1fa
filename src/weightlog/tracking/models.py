"""Data models for weight samples and trend analytics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional, Sequence

from weightlog.exceptions import InvalidRangeError

# Exact by definition of the international avoirdupois pound
KG_PER_LB = Decimal("0.45359237")


class WeightUnit(Enum):
    """Unit a weight was entered or is displayed in. Storage is always kg."""

    KG = "kg"
    LB = "lb"

    def to_kg(self, value: Decimal) -> Decimal:
        """Convert a value in this unit to kilograms."""
        if self is WeightUnit.LB:
            return value * KG_PER_LB
        return value

    def from_kg(self, value_kg: Decimal) -> Decimal:
        """Convert kilograms to this unit."""
        if self is WeightUnit.LB:
            return value_kg / KG_PER_LB
        return value_kg


class TrendClassification(Enum):
    """Direction of a weight change relative to an earlier sample."""

    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


@dataclass
class UserProfile:
    """User profile for weight tracking."""

    user_id: Optional[int]
    name: str
    height_cm: Optional[float] = None
    goal_weight_kg: Optional[Decimal] = None
    starting_weight_kg: Optional[Decimal] = None
    preferred_unit: WeightUnit = WeightUnit.KG
    created_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name must not be empty")
        if isinstance(self.preferred_unit, str):
            self.preferred_unit = WeightUnit(self.preferred_unit)
        if self.goal_weight_kg is not None and self.goal_weight_kg <= 0:
            raise ValueError(f"goal_weight_kg must be positive, got {self.goal_weight_kg}")


@dataclass(frozen=True)
class WeightSample:
    """A single recorded weight observation, normalized to kilograms.

    ``trend`` is the classification computed when the sample was written,
    kept alongside the raw weight rather than in place of it.
    """

    measured_at: date
    time_of_day: time
    weight_kg: Decimal
    note: Optional[str] = None
    log_id: Optional[int] = None
    user_id: Optional[int] = None
    trend: Optional[TrendClassification] = None

    @property
    def sort_key(self) -> tuple[date, time]:
        """Ordering key for a time series: date, then time of day."""
        return (self.measured_at, self.time_of_day)


# An ordered (date, time ascending) read-only sequence of one user's samples
TimeSeries = Sequence[WeightSample]


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start_date: date
    end_date: date

    @property
    def days_in_range(self) -> int:
        """Number of calendar days covered, both ends included."""
        return (self.end_date - self.start_date).days + 1

    @property
    def is_valid(self) -> bool:
        return self.start_date <= self.end_date

    def validate(self) -> None:
        """Raise InvalidRangeError if the range ends before it starts."""
        if not self.is_valid:
            raise InvalidRangeError(self.start_date, self.end_date)

    @classmethod
    def last_days(cls, days: int, today: Optional[date] = None) -> "DateRange":
        """Range covering the last ``days`` days up to and including today."""
        if days <= 0:
            raise ValueError(f"days must be positive, got {days}")
        end = today or date.today()
        return cls(start_date=end - timedelta(days=days), end_date=end)

    @classmethod
    def current_month(cls, today: Optional[date] = None) -> "DateRange":
        """Range covering the calendar month containing today."""
        today = today or date.today()
        first_day = today.replace(day=1)
        next_month = (first_day + timedelta(days=32)).replace(day=1)
        return cls(start_date=first_day, end_date=next_month - timedelta(days=1))


@dataclass(frozen=True)
class DataPoint:
    """A (date, weight) pair for charting."""

    measured_at: date
    weight_kg: Decimal


@dataclass(frozen=True)
class RangeStats:
    """Summary statistics over a date range.

    All weight fields are None when record_count is 0.
    """

    current: Optional[Decimal] = None
    starting: Optional[Decimal] = None
    average: Optional[Decimal] = None
    minimum: Optional[Decimal] = None
    maximum: Optional[Decimal] = None
    total_change: Optional[Decimal] = None
    record_count: int = 0


@dataclass(frozen=True)
class RegressionModel:
    """Least-squares line: weight_kg = slope * days_since_first + intercept."""

    slope: float  # kg/day
    intercept: float  # kg


@dataclass(frozen=True)
class Projection:
    """Projected weight and goal arrival estimate."""

    user_id: int
    projection_date: date
    projected_weight: Optional[Decimal] = None
    goal_weight: Optional[Decimal] = None
    estimated_goal_date: Optional[date] = None
    is_on_track: bool = False


@dataclass(frozen=True)
class TrendAnalysis:
    """Range trend with average rates and chart points."""

    user_id: int
    start_date: date
    end_date: date
    range_trend: TrendClassification = TrendClassification.STABLE
    average_daily_change: Optional[Decimal] = None
    average_weekly_change: Optional[Decimal] = None
    data_points: tuple[DataPoint, ...] = field(default_factory=tuple)
