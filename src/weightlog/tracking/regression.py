"""Linear trend fitting and projection toward a goal weight.

Each sample in the fitting window becomes a point (x, y) where x is whole
days since the earliest sample in the window and y is the weight in kg.
An ordinary least-squares line is fitted in closed form:

    slope     = (n·Σxy − Σx·Σy) / (n·Σx² − (Σx)²)
    intercept = (Σy − slope·Σx) / n

The sums run in float64; projected weights are converted back to Decimal
and rounded to 2 places before they leave this module.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional

import numpy as np

from weightlog.tracking.aggregate import days_between
from weightlog.tracking.models import RegressionModel, TimeSeries

# Callers fit over the most recent 30 days of samples unless configured otherwise
DEFAULT_WINDOW_DAYS = 30

# Below this many kg/day the line is treated as flat: no goal is reachable
MIN_GOAL_SLOPE = 0.001

# Goal dates further out than this are not reported
MAX_GOAL_HORIZON_DAYS = 365

WEIGHT_QUANTUM = Decimal("0.01")


def fit(series: TimeSeries) -> Optional[RegressionModel]:
    """
    Fit a least-squares line to a series of samples.

    Args:
        series: Samples in the fitting window, ordered oldest first

    Returns:
        RegressionModel, or None when fewer than two samples exist or all
        samples fall on the same day (zero denominator)

    Example:
        >>> fit(samples)  # 75.0 on day 0, 74.0 on day 10
        RegressionModel(slope=-0.1, intercept=75.0)
    """
    n = len(series)
    if n < 2:
        return None

    first_date = series[0].measured_at
    xs = np.array([days_between(first_date, s.measured_at) for s in series], dtype=float)
    ys = np.array([float(s.weight_kg) for s in series], dtype=float)

    sum_x = xs.sum()
    sum_y = ys.sum()
    sum_xy = (xs * ys).sum()
    sum_x2 = (xs * xs).sum()

    denominator = n * sum_x2 - sum_x * sum_x
    if denominator == 0:
        return None

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return RegressionModel(slope=float(slope), intercept=float(intercept))


def project(model: RegressionModel, target_date: date, series_first_date: date) -> Decimal:
    """
    Projected weight on a date, rounded to 2 decimal places.

    Args:
        model: Fitted line
        target_date: Date to project to
        series_first_date: Date of the earliest sample used for the fit (x = 0)

    Returns:
        Projected weight in kg
    """
    x = days_between(series_first_date, target_date)
    value = model.slope * x + model.intercept
    return Decimal(str(value)).quantize(WEIGHT_QUANTUM, rounding=ROUND_HALF_EVEN)


def estimate_goal_date(
    model: RegressionModel,
    series_first_date: date,
    goal_weight: Decimal,
    max_horizon_days: int = MAX_GOAL_HORIZON_DAYS,
) -> Optional[date]:
    """
    Date on which the fitted line reaches the goal weight.

    Solves goal = slope·x + intercept for x.

    Args:
        model: Fitted line
        series_first_date: Date of the earliest sample used for the fit
        goal_weight: Goal weight in kg
        max_horizon_days: Upper bound on x (exclusive)

    Returns:
        series_first_date + x days, or None if the line is nearly flat
        (|slope| <= 0.001 kg/day) or x falls outside (0, max_horizon_days)
    """
    if abs(model.slope) <= MIN_GOAL_SLOPE:
        return None

    days_to_goal = (float(goal_weight) - model.intercept) / model.slope
    if not 0 < days_to_goal < max_horizon_days:
        return None

    return series_first_date + timedelta(days=round(days_to_goal))
