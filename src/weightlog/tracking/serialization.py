"""JSON-safe dict conversion for analytics results.

Weights and rates are emitted as decimal strings (never binary floats) and
dates as ISO-8601 calendar dates.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from weightlog.tracking.models import (
    Projection,
    RangeStats,
    TrendAnalysis,
    UserProfile,
    WeightSample,
)


def _decimal(value: Optional[Decimal]) -> Optional[str]:
    return str(value) if value is not None else None


def _date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def serialize_sample(sample: WeightSample) -> dict[str, Any]:
    """Convert a WeightSample to a JSON-serializable dict."""
    return {
        "log_id": sample.log_id,
        "date": sample.measured_at.isoformat(),
        "time": sample.time_of_day.isoformat(),
        "weight_kg": _decimal(sample.weight_kg),
        "trend": sample.trend.value if sample.trend else None,
        "note": sample.note,
    }


def serialize_user(profile: UserProfile) -> dict[str, Any]:
    """Convert a UserProfile to a JSON-serializable dict."""
    return {
        "user_id": profile.user_id,
        "name": profile.name,
        "height_cm": profile.height_cm,
        "goal_weight_kg": _decimal(profile.goal_weight_kg),
        "starting_weight_kg": _decimal(profile.starting_weight_kg),
        "preferred_unit": profile.preferred_unit.value,
    }


def serialize_stats(stats: RangeStats) -> dict[str, Any]:
    """Convert RangeStats to a JSON-serializable dict."""
    return {
        "current": _decimal(stats.current),
        "starting": _decimal(stats.starting),
        "average": _decimal(stats.average),
        "min": _decimal(stats.minimum),
        "max": _decimal(stats.maximum),
        "total_change": _decimal(stats.total_change),
        "record_count": stats.record_count,
    }


def serialize_trend_analysis(analysis: TrendAnalysis) -> dict[str, Any]:
    """Convert TrendAnalysis to a JSON-serializable dict."""
    return {
        "user_id": analysis.user_id,
        "start_date": analysis.start_date.isoformat(),
        "end_date": analysis.end_date.isoformat(),
        "range_trend": analysis.range_trend.value,
        "average_daily_change": _decimal(analysis.average_daily_change),
        "average_weekly_change": _decimal(analysis.average_weekly_change),
        "data_points": [
            {"date": point.measured_at.isoformat(), "weight_kg": _decimal(point.weight_kg)}
            for point in analysis.data_points
        ],
    }


def serialize_projection(projection: Projection) -> dict[str, Any]:
    """Convert Projection to a JSON-serializable dict."""
    return {
        "user_id": projection.user_id,
        "projection_date": projection.projection_date.isoformat(),
        "projected_weight": _decimal(projection.projected_weight),
        "goal_weight": _decimal(projection.goal_weight),
        "estimated_goal_date": _date(projection.estimated_goal_date),
        "is_on_track": projection.is_on_track,
    }
