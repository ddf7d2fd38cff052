"""
Guarded arithmetic shared by the analytics services.

Every division in the engine goes through safe_divide: a denominator that is
zero, negative or not finite yields 0.0.
"""
import math
from typing import Any, Optional


def as_finite(value: Any) -> Optional[float]:
    """Float value, or None for missing, non-numeric, NaN and infinite input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def safe_divide(numerator: float, denominator: float) -> float:
    """Safe division that returns 0 on a non-positive denominator."""
    if denominator is None or not denominator > 0:
        return 0.0
    result = numerator / denominator
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def percentage(part: float, whole: float) -> float:
    """part / whole x 100, or 0 when whole <= 0."""
    if whole is None or not whole > 0:
        return 0.0
    return safe_divide(part * 100.0, whole)


def clamp_percent(value: float) -> float:
    """Clamp a progress percentage to [0, 100]."""
    return max(0.0, min(100.0, value))
