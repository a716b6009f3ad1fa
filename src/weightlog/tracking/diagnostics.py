"""Text rendering of weight stats, trend analysis and projections."""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional

from weightlog.tracking.models import (
    Projection,
    RangeStats,
    TrendAnalysis,
    WeightUnit,
)


def format_weight(value_kg: Optional[Decimal], unit: WeightUnit = WeightUnit.KG) -> str:
    """Format a kg value in the display unit, one decimal place."""
    if value_kg is None:
        return "-"
    shown = unit.from_kg(value_kg).quantize(Decimal("0.1"), rounding=ROUND_HALF_EVEN)
    return f"{shown} {unit.value}"


def format_change(value_kg: Optional[Decimal], unit: WeightUnit = WeightUnit.KG, places: int = 1) -> str:
    """Format a signed weight change in the display unit."""
    if value_kg is None:
        return "-"
    quantum = Decimal(1).scaleb(-places)
    shown = unit.from_kg(value_kg).quantize(quantum, rounding=ROUND_HALF_EVEN)
    sign = "+" if shown > 0 else ""
    return f"{sign}{shown} {unit.value}"


def format_stats_report(stats: RangeStats, unit: WeightUnit = WeightUnit.KG) -> str:
    """Format range statistics as text."""
    if stats.record_count == 0:
        return "No weight entries in this range"

    lines = [
        f"Weight Statistics ({stats.record_count} entries)",
        "=" * 45,
        f"Current:      {format_weight(stats.current, unit)}",
        f"Starting:     {format_weight(stats.starting, unit)}",
        f"Average:      {format_weight(stats.average, unit)}",
        f"Min / Max:    {format_weight(stats.minimum, unit)} / {format_weight(stats.maximum, unit)}",
        f"Total change: {format_change(stats.total_change, unit)}",
    ]
    return "\n".join(lines)


def format_trend_report(analysis: TrendAnalysis, unit: WeightUnit = WeightUnit.KG) -> str:
    """Format a trend analysis as text."""
    lines = [
        f"Trend Analysis ({analysis.start_date} to {analysis.end_date})",
        "=" * 45,
        f"Trend:          {analysis.range_trend.value}",
        f"Data points:    {len(analysis.data_points)}",
    ]

    if analysis.average_daily_change is not None:
        lines.append(f"Daily change:   {format_change(analysis.average_daily_change, unit, 3)}/day")
        lines.append(f"Weekly change:  {format_change(analysis.average_weekly_change, unit, 2)}/week")
    elif analysis.data_points:
        lines.append("Rate:           no significant change")

    return "\n".join(lines)


def format_projection_report(projection: Projection, unit: WeightUnit = WeightUnit.KG) -> str:
    """Format a projection as text."""
    lines = [
        f"Weight Projection for {projection.projection_date}",
        "=" * 45,
    ]

    if projection.projected_weight is None:
        lines.append("Not enough recent data to project (need entries on at least 2 days)")
    else:
        lines.append(f"Projected weight: {format_weight(projection.projected_weight, unit)}")

    if projection.goal_weight is not None:
        lines.append("")
        lines.append(f"Progress toward goal ({format_weight(projection.goal_weight, unit)})")
        lines.append("-" * 45)
        if projection.is_on_track:
            lines.append(f"  On track: goal reached around {projection.estimated_goal_date}")
        else:
            lines.append("  Not on track: current trend does not reach the goal")

    return "\n".join(lines)
