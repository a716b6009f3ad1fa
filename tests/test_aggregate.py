"""Tests for range statistics and overall trend."""

from __future__ import annotations

import random
from datetime import date, time
from decimal import Decimal

from weightlog.tracking.aggregate import aggregate, average_changes, days_between, overall_trend
from weightlog.tracking.models import TrendClassification, WeightSample


class TestDaysBetween:
    """Tests for days_between function."""

    def test_whole_days(self) -> None:
        assert days_between(date(2025, 1, 1), date(2025, 1, 11)) == 10

    def test_same_day(self) -> None:
        assert days_between(date(2025, 1, 1), date(2025, 1, 1)) == 0

    def test_never_negative(self) -> None:
        assert days_between(date(2025, 1, 11), date(2025, 1, 1)) == 0


class TestAggregate:
    """Tests for aggregate function."""

    def test_empty_series(self) -> None:
        """Empty series has a zero count and no weights."""
        stats = aggregate([])

        assert stats.record_count == 0
        assert stats.current is None
        assert stats.starting is None
        assert stats.average is None
        assert stats.minimum is None
        assert stats.maximum is None
        assert stats.total_change is None

    def test_basic_stats(self, make_series) -> None:
        series = make_series([(0, 80.0), (5, 78.0), (10, 79.0)])
        stats = aggregate(series)

        assert stats.record_count == 3
        assert stats.starting == Decimal("80.0")
        assert stats.current == Decimal("79.0")
        assert stats.minimum == Decimal("78.0")
        assert stats.maximum == Decimal("80.0")
        assert stats.average == Decimal("79.0")
        assert stats.total_change == Decimal("-1.0")

    def test_single_sample(self, make_series) -> None:
        stats = aggregate(make_series([(0, 70.0)]))

        assert stats.record_count == 1
        assert stats.current == stats.starting == stats.average == Decimal("70.0")
        assert stats.total_change == Decimal("0.0")

    def test_min_le_average_le_max(self, make_series) -> None:
        """Average always lies between min and max."""
        rng = random.Random(42)
        for size in range(1, 25):
            points = [(day, round(rng.uniform(50, 120), 2)) for day in range(size)]
            stats = aggregate(make_series(points))
            assert stats.minimum <= stats.average <= stats.maximum

    def test_input_not_mutated(self, make_series) -> None:
        series = make_series([(0, 80.0), (1, 79.0)])
        snapshot = list(series)

        aggregate(series)
        overall_trend(series)
        average_changes(series)

        assert series == snapshot


class TestOverallTrend:
    """Tests for overall_trend function."""

    def test_empty_is_stable(self) -> None:
        assert overall_trend([]) is TrendClassification.STABLE

    def test_compares_last_against_first(self, make_series) -> None:
        """Intermediate samples do not affect the range trend."""
        series = make_series([(0, 80.0), (3, 90.0), (6, 70.0), (9, 80.5)])
        assert overall_trend(series) is TrendClassification.RISING

    def test_falling(self, make_series) -> None:
        series = make_series([(0, 80.0), (9, 79.0)])
        assert overall_trend(series) is TrendClassification.FALLING

    def test_small_range_change_is_stable(self, make_series) -> None:
        """A 0.08 kg change over 10 days is within tolerance."""
        series = make_series([(0, 75.0), (10, 75.08)])

        assert overall_trend(series) is TrendClassification.STABLE
        assert average_changes(series) == (None, None)


class TestAverageChanges:
    """Tests for average_changes function."""

    def test_rising_rates(self, make_series) -> None:
        series = make_series([(0, 70.0), (10, 71.0)])
        daily, weekly = average_changes(series)

        assert daily == Decimal("0.100")
        assert weekly == Decimal("0.700")

    def test_rates_rounded_to_three_places(self, make_series) -> None:
        series = make_series([(0, 70.0), (3, 69.0)])
        daily, weekly = average_changes(series)

        assert daily == Decimal("-0.333")
        assert weekly == Decimal("-2.331")

    def test_single_sample_has_no_rate(self, make_series) -> None:
        assert average_changes(make_series([(0, 70.0)])) == (None, None)

    def test_same_day_has_no_rate(self, make_series) -> None:
        """Three samples on one day still aggregate, but no rate is reported."""
        series = make_series([(0, 75.0), (0, 75.5), (0, 76.0)])
        series = [
            WeightSample(s.measured_at, time(7 + i, 0), s.weight_kg, user_id=1)
            for i, s in enumerate(series)
        ]
        stats = aggregate(series)

        assert overall_trend(series) is TrendClassification.RISING
        assert average_changes(series) == (None, None)
        assert stats.record_count == 3
        assert stats.minimum == Decimal("75.0")
        assert stats.maximum == Decimal("76.0")
        assert stats.average == Decimal("75.5")
