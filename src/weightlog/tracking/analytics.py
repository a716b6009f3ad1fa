"""Trend analysis and goal projection over a user's weight samples.

TrendAnalytics fetches a snapshot of samples once per call from a
SampleStore and hands it to the pure aggregation and regression functions.
Nothing is cached and nothing is written back. Store errors (unknown user,
transient I/O failure) propagate to the caller unchanged; an empty or
too-small series is not an error and yields a neutral result.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, Protocol

from weightlog.exceptions import UserNotFoundError
from weightlog.tracking.aggregate import aggregate, average_changes, overall_trend
from weightlog.tracking.models import (
    DataPoint,
    DateRange,
    Projection,
    RangeStats,
    TimeSeries,
    TrendAnalysis,
)
from weightlog.tracking.regression import (
    DEFAULT_WINDOW_DAYS,
    MAX_GOAL_HORIZON_DAYS,
    estimate_goal_date,
    fit,
    project,
)

logger = logging.getLogger(__name__)

DEFAULT_PROJECTION_DAYS = 30


class SampleStore(Protocol):
    """Read access to persisted weight samples and goals."""

    def fetch_samples(self, user_id: int, date_range: DateRange) -> TimeSeries:
        """Samples within the inclusive range, ordered by date then time."""
        ...

    def fetch_goal_weight(self, user_id: int) -> Optional[Decimal]:
        """Goal weight in kg; raises UserNotFoundError for an unknown user."""
        ...


class TrendAnalytics:
    """Read-only analytics over a SampleStore."""

    def __init__(
        self,
        store: SampleStore,
        regression_window_days: int = DEFAULT_WINDOW_DAYS,
        projection_horizon_days: int = DEFAULT_PROJECTION_DAYS,
        max_goal_horizon_days: int = MAX_GOAL_HORIZON_DAYS,
    ):
        """Initialize analytics.

        Args:
            store: Source of samples and goal weights
            regression_window_days: Days of history the projection line is fitted on
            projection_horizon_days: How far past today the projection looks
            max_goal_horizon_days: Goal dates further out than this are not reported
        """
        if regression_window_days <= 0:
            raise ValueError("regression_window_days must be positive")
        if projection_horizon_days <= 0:
            raise ValueError("projection_horizon_days must be positive")

        self.store = store
        self.regression_window_days = regression_window_days
        self.projection_horizon_days = projection_horizon_days
        self.max_goal_horizon_days = max_goal_horizon_days

    def get_stats(self, user_id: int, start_date: date, end_date: date) -> RangeStats:
        """Summary statistics for the samples in a date range."""
        date_range = DateRange(start_date, end_date)
        date_range.validate()

        logger.info(
            "Getting weight stats for user %s - range %s to %s",
            user_id, start_date, end_date,
        )
        series = self.store.fetch_samples(user_id, date_range)
        stats = aggregate(series)

        if stats.record_count == 0:
            logger.warning(
                "No weight samples for user %s in range %s to %s",
                user_id, start_date, end_date,
            )
        else:
            logger.info(
                "Stats for user %s - current %skg, average %skg, change %skg",
                user_id, stats.current, stats.average, stats.total_change,
            )
        return stats

    def get_trend_analysis(
        self, user_id: int, start_date: date, end_date: date
    ) -> TrendAnalysis:
        """
        Overall trend, average rates of change and chart points for a range.

        Args:
            user_id: User to analyze
            start_date: First day of the range (inclusive)
            end_date: Last day of the range (inclusive)

        Returns:
            TrendAnalysis; STABLE with no points or rates when the range is empty

        Raises:
            InvalidRangeError: end_date is before start_date
        """
        date_range = DateRange(start_date, end_date)
        date_range.validate()

        logger.info(
            "Getting trend analysis for user %s - range %s to %s",
            user_id, start_date, end_date,
        )
        series = self.store.fetch_samples(user_id, date_range)

        if not series:
            logger.warning(
                "No weight samples for user %s in range %s to %s",
                user_id, start_date, end_date,
            )
            return TrendAnalysis(user_id=user_id, start_date=start_date, end_date=end_date)

        trend = overall_trend(series)
        daily_change, weekly_change = average_changes(series)

        logger.info(
            "Trend analysis for user %s - samples %d, trend %s, daily %s, weekly %s",
            user_id, len(series), trend.value, daily_change, weekly_change,
        )
        return TrendAnalysis(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            range_trend=trend,
            average_daily_change=daily_change,
            average_weekly_change=weekly_change,
            data_points=tuple(DataPoint(s.measured_at, s.weight_kg) for s in series),
        )

    def get_projection(self, user_id: int, today: Optional[date] = None) -> Projection:
        """
        Project weight forward and estimate when the goal weight is reached.

        The line is fitted on the last ``regression_window_days`` days and
        evaluated ``projection_horizon_days`` after today.

        Args:
            user_id: User to project for
            today: Reference date, defaults to date.today()

        Returns:
            Projection; projected_weight is None and is_on_track False when
            the window holds too little data to fit a line

        Raises:
            UserNotFoundError: the user has no profile
        """
        today = today or date.today()
        logger.info("Getting weight projection for user %s", user_id)

        try:
            goal_weight = self.store.fetch_goal_weight(user_id)
        except UserNotFoundError:
            logger.warning("User not found for projection: %s", user_id)
            raise

        projection_date = today + timedelta(days=self.projection_horizon_days)
        window = DateRange.last_days(self.regression_window_days, today)
        series = self.store.fetch_samples(user_id, window)

        model = fit(series)
        if model is None:
            logger.warning(
                "Insufficient data for projection - user %s, samples %d",
                user_id, len(series),
            )
            return Projection(
                user_id=user_id,
                projection_date=projection_date,
                goal_weight=goal_weight,
            )

        logger.debug(
            "Linear regression for user %s - slope %.4f, intercept %.4f",
            user_id, model.slope, model.intercept,
        )

        first_date = series[0].measured_at
        projected_weight = project(model, projection_date, first_date)

        estimated_goal_date = None
        if goal_weight is not None:
            estimated_goal_date = estimate_goal_date(
                model, first_date, goal_weight, self.max_goal_horizon_days
            )

        projection = Projection(
            user_id=user_id,
            projection_date=projection_date,
            projected_weight=projected_weight,
            goal_weight=goal_weight,
            estimated_goal_date=estimated_goal_date,
            is_on_track=goal_weight is not None and estimated_goal_date is not None,
        )
        logger.info(
            "Projection for user %s - %skg on %s, on track: %s",
            user_id, projected_weight, projection_date, projection.is_on_track,
        )
        return projection
