"""Summary statistics and overall trend for a date-bounded series of samples."""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional

from weightlog.tracking.classifier import classify
from weightlog.tracking.models import RangeStats, TimeSeries, TrendClassification

RATE_QUANTUM = Decimal("0.001")


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end, never negative."""
    return max((end - start).days, 0)


def aggregate(series: TimeSeries) -> RangeStats:
    """
    Compute summary statistics for an ordered series.

    Args:
        series: Samples ordered by date then time, oldest first

    Returns:
        RangeStats; every weight field is None for an empty series
    """
    if not series:
        return RangeStats(record_count=0)

    weights = [sample.weight_kg for sample in series]
    starting = weights[0]
    current = weights[-1]

    return RangeStats(
        current=current,
        starting=starting,
        average=sum(weights, Decimal(0)) / len(weights),
        minimum=min(weights),
        maximum=max(weights),
        total_change=current - starting,
        record_count=len(weights),
    )


def overall_trend(series: TimeSeries) -> TrendClassification:
    """Classify the last sample of the series against the first."""
    if not series:
        return TrendClassification.STABLE
    return classify(series[-1].weight_kg, series[0].weight_kg)


def average_changes(series: TimeSeries) -> tuple[Optional[Decimal], Optional[Decimal]]:
    """
    Average daily and weekly weight change across the series.

    Both are None when there are fewer than two samples, when the range
    trend is stable, or when all samples fall on the same day.

    Returns:
        (average_daily_change, average_weekly_change) in kg, 3 decimal places
    """
    if len(series) < 2 or overall_trend(series) is TrendClassification.STABLE:
        return None, None

    days = days_between(series[0].measured_at, series[-1].measured_at)
    if days == 0:
        return None, None

    total_change = series[-1].weight_kg - series[0].weight_kg
    daily = (total_change / days).quantize(RATE_QUANTUM, rounding=ROUND_HALF_EVEN)
    weekly = (daily * 7).quantize(RATE_QUANTUM, rounding=ROUND_HALF_EVEN)
    return daily, weekly
