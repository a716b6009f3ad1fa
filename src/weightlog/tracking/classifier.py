"""Three-state trend classification of a weight against an earlier weight."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from weightlog.tracking.models import TrendClassification

# 100 g deadband. Used for both sample-to-sample and whole-range comparisons.
STABLE_TOLERANCE_KG = Decimal("0.1")


def classify(
    current_weight: Decimal,
    previous_weight: Optional[Decimal],
) -> TrendClassification:
    """
    Classify a weight relative to the previous one.

    Args:
        current_weight: The newer weight in kg
        previous_weight: The earlier weight in kg, or None if there is none

    Returns:
        STABLE when there is no previous weight or the difference is within
        ±0.1 kg, otherwise RISING or FALLING.

    Example:
        >>> classify(Decimal("75.2"), Decimal("75.0"))
        <TrendClassification.RISING: 'rising'>
        >>> classify(Decimal("75.1"), Decimal("75.0"))
        <TrendClassification.STABLE: 'stable'>
    """
    if previous_weight is None:
        return TrendClassification.STABLE

    diff = current_weight - previous_weight
    if diff > STABLE_TOLERANCE_KG:
        return TrendClassification.RISING
    if diff < -STABLE_TOLERANCE_KG:
        return TrendClassification.FALLING
    return TrendClassification.STABLE
