"""Tests for the TrendAnalytics facade."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from weightlog.exceptions import InvalidRangeError, TransientStoreError, UserNotFoundError
from weightlog.tracking.analytics import TrendAnalytics
from weightlog.tracking.models import DateRange, TrendClassification

START = date(2025, 3, 1)


def _day(offset: int) -> date:
    return START + timedelta(days=offset)


class TestConstruction:
    """Tests for TrendAnalytics configuration."""

    def test_defaults(self, fake_store) -> None:
        analytics = TrendAnalytics(fake_store)

        assert analytics.regression_window_days == 30
        assert analytics.projection_horizon_days == 30
        assert analytics.max_goal_horizon_days == 365

    @pytest.mark.parametrize("field", ["regression_window_days", "projection_horizon_days"])
    def test_non_positive_window_rejected(self, fake_store, field: str) -> None:
        with pytest.raises(ValueError, match=field):
            TrendAnalytics(fake_store, **{field: 0})


class TestGetStats:
    """Tests for TrendAnalytics.get_stats."""

    def test_stats_over_range(self, fake_store, make_series) -> None:
        fake_store.samples = make_series([(0, 80.0), (5, 79.0), (40, 60.0)])
        stats = TrendAnalytics(fake_store).get_stats(1, _day(0), _day(10))

        assert stats.record_count == 2
        assert stats.total_change == Decimal("-1.0")

    def test_empty_range_logs_warning(self, fake_store, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="weightlog"):
            stats = TrendAnalytics(fake_store).get_stats(1, _day(0), _day(10))

        assert stats.record_count == 0
        assert "No weight samples" in caplog.text

    def test_invalid_range(self, fake_store) -> None:
        with pytest.raises(InvalidRangeError):
            TrendAnalytics(fake_store).get_stats(1, _day(5), _day(0))
        assert fake_store.fetches == []


class TestGetTrendAnalysis:
    """Tests for TrendAnalytics.get_trend_analysis."""

    def test_falling_trend(self, fake_store, make_series) -> None:
        fake_store.samples = make_series([(0, 80.0), (5, 79.5), (10, 79.0)])
        analysis = TrendAnalytics(fake_store).get_trend_analysis(1, _day(0), _day(10))

        assert analysis.range_trend is TrendClassification.FALLING
        assert analysis.average_daily_change == Decimal("-0.100")
        assert analysis.average_weekly_change == Decimal("-0.700")
        assert [p.weight_kg for p in analysis.data_points] == [
            Decimal("80.0"), Decimal("79.5"), Decimal("79.0"),
        ]
        assert analysis.start_date == _day(0)
        assert analysis.end_date == _day(10)

    def test_empty_range(self, fake_store) -> None:
        analysis = TrendAnalytics(fake_store).get_trend_analysis(1, _day(0), _day(10))

        assert analysis.range_trend is TrendClassification.STABLE
        assert analysis.average_daily_change is None
        assert analysis.average_weekly_change is None
        assert analysis.data_points == ()

    def test_stable_within_tolerance(self, fake_store, make_series) -> None:
        fake_store.samples = make_series([(0, 75.0), (10, 75.08)])
        analysis = TrendAnalytics(fake_store).get_trend_analysis(1, _day(0), _day(10))

        assert analysis.range_trend is TrendClassification.STABLE
        assert analysis.average_daily_change is None
        assert len(analysis.data_points) == 2

    def test_invalid_range_does_not_fetch(self, fake_store) -> None:
        with pytest.raises(InvalidRangeError):
            TrendAnalytics(fake_store).get_trend_analysis(1, _day(10), _day(0))
        assert fake_store.fetches == []

    def test_single_day_range_is_valid(self, fake_store, make_series) -> None:
        fake_store.samples = make_series([(3, 70.0)])
        analysis = TrendAnalytics(fake_store).get_trend_analysis(1, _day(3), _day(3))

        assert len(analysis.data_points) == 1
        assert analysis.range_trend is TrendClassification.STABLE

    def test_store_error_propagates(self, fake_store) -> None:
        fake_store.error = TransientStoreError("database is locked")

        with pytest.raises(TransientStoreError):
            TrendAnalytics(fake_store).get_trend_analysis(1, _day(0), _day(10))

    def test_repeatable(self, fake_store, make_series) -> None:
        """Two calls over unchanged data give equal results."""
        fake_store.samples = make_series([(0, 80.0), (4, 78.0)])
        analytics = TrendAnalytics(fake_store)

        first = analytics.get_trend_analysis(1, _day(0), _day(10))
        second = analytics.get_trend_analysis(1, _day(0), _day(10))

        assert first == second
        assert len(fake_store.fetches) == 2


class TestGetProjection:
    """Tests for TrendAnalytics.get_projection."""

    SCENARIO = [(0, 75.0), (10, 73.3), (20, 71.7), (30, 70.0)]

    def test_projection_on_track(self, fake_store, make_series) -> None:
        fake_store.samples = make_series(self.SCENARIO)
        fake_store.goals = {1: Decimal("68")}

        projection = TrendAnalytics(fake_store).get_projection(1, today=_day(30))

        assert projection.projection_date == _day(60)
        assert projection.projected_weight == Decimal("65.03")
        assert projection.goal_weight == Decimal("68")
        assert projection.estimated_goal_date == _day(42)
        assert projection.is_on_track is True

    def test_fits_on_regression_window(self, fake_store, make_series) -> None:
        fake_store.samples = make_series(self.SCENARIO)
        TrendAnalytics(fake_store, regression_window_days=14).get_projection(1, today=_day(30))

        _, window = fake_store.fetches[-1]
        assert window == DateRange(_day(16), _day(30))

    def test_no_goal(self, fake_store, make_series) -> None:
        fake_store.samples = make_series(self.SCENARIO)

        projection = TrendAnalytics(fake_store).get_projection(1, today=_day(30))

        assert projection.projected_weight == Decimal("65.03")
        assert projection.goal_weight is None
        assert projection.estimated_goal_date is None
        assert projection.is_on_track is False

    def test_moving_away_from_goal(self, fake_store, make_series) -> None:
        fake_store.samples = make_series([(0, 70.0), (10, 71.0), (20, 72.0)])
        fake_store.goals = {1: Decimal("65")}

        projection = TrendAnalytics(fake_store).get_projection(1, today=_day(20))

        assert projection.projected_weight is not None
        assert projection.estimated_goal_date is None
        assert projection.is_on_track is False

    def test_insufficient_data(self, fake_store, make_series, caplog) -> None:
        fake_store.samples = make_series([(30, 70.0)])
        fake_store.goals = {1: Decimal("68")}

        with caplog.at_level(logging.WARNING, logger="weightlog"):
            projection = TrendAnalytics(fake_store).get_projection(1, today=_day(30))

        assert projection.projected_weight is None
        assert projection.estimated_goal_date is None
        assert projection.goal_weight == Decimal("68")
        assert projection.is_on_track is False
        assert "Insufficient data" in caplog.text

    def test_same_day_samples_insufficient(self, fake_store, make_series) -> None:
        fake_store.samples = make_series([(30, 70.0), (30, 70.4)])

        projection = TrendAnalytics(fake_store).get_projection(1, today=_day(30))

        assert projection.projected_weight is None
        assert projection.is_on_track is False

    def test_unknown_user(self, fake_store) -> None:
        with pytest.raises(UserNotFoundError):
            TrendAnalytics(fake_store).get_projection(99, today=_day(30))
        assert fake_store.fetches == []

    def test_defaults_to_today(self, fake_store) -> None:
        projection = TrendAnalytics(fake_store).get_projection(1)
        assert projection.projection_date == date.today() + timedelta(days=30)
