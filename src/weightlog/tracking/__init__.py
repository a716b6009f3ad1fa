"""Weight tracking and trend analytics.

Key components:
- Trend classification (±0.1 kg deadband) of a weight against an earlier one
- Range statistics and average daily/weekly change
- Least-squares projection and goal arrival estimate
- SQLite-backed user and sample queries
"""

from __future__ import annotations

from weightlog.tracking.aggregate import aggregate, average_changes, days_between, overall_trend
from weightlog.tracking.analytics import SampleStore, TrendAnalytics
from weightlog.tracking.classifier import STABLE_TOLERANCE_KG, classify
from weightlog.tracking.models import (
    DataPoint,
    DateRange,
    Projection,
    RangeStats,
    RegressionModel,
    TimeSeries,
    TrendAnalysis,
    TrendClassification,
    UserProfile,
    WeightSample,
    WeightUnit,
)
from weightlog.tracking.regression import estimate_goal_date, fit, project

__all__ = [
    "DataPoint",
    "DateRange",
    "Projection",
    "RangeStats",
    "RegressionModel",
    "STABLE_TOLERANCE_KG",
    "SampleStore",
    "TimeSeries",
    "TrendAnalysis",
    "TrendAnalytics",
    "TrendClassification",
    "UserProfile",
    "WeightSample",
    "WeightUnit",
    "aggregate",
    "average_changes",
    "classify",
    "days_between",
    "estimate_goal_date",
    "fit",
    "overall_trend",
    "project",
]
