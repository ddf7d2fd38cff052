"""
Rate Deriver - Unit rate per BOQ activity.

rate = value / units, with value = total_value (else planned_value) and
units = total_units (else planned_units). A zero rate is a valid result
meaning "no basis to price this activity".
"""
from dataclasses import dataclass
from typing import Optional

from ..entities.activity import Activity
from .numeric import as_finite, clamp_percent, percentage, safe_divide


def scope_units(activity: Activity) -> float:
    """Total units, falling back to planned units when missing, zero or not finite."""
    return as_finite(activity.total_units) or as_finite(activity.planned_units) or 0.0


def scope_value(activity: Activity) -> float:
    """Total value, falling back to planned value when missing, zero or not finite."""
    return as_finite(activity.total_value) or as_finite(activity.planned_value) or 0.0


def derive_rate(activity: Optional[Activity]) -> float:
    """
    Unit rate for an activity.

    Zero or missing quantity, and zero or negative value, give 0.0.
    Never raises and never returns inf or NaN.
    """
    if activity is None:
        return 0.0
    value = scope_value(activity)
    if value <= 0:
        return 0.0
    return safe_divide(value, scope_units(activity))


@dataclass(frozen=True)
class ActivityRate:
    """Derived rate and earned-value figures for one activity."""
    activity_id: Optional[str]
    activity_name: str
    project_code: str
    planned_units: float
    planned_value: float
    rate: float
    actual_units: float
    actual_value: float
    earned_value: float
    progress: float

    def to_dict(self) -> dict:
        return {
            'activity_id': self.activity_id,
            'activity_name': self.activity_name,
            'project_code': self.project_code,
            'planned_units': self.planned_units,
            'planned_value': self.planned_value,
            'rate': self.rate,
            'actual_units': self.actual_units,
            'actual_value': self.actual_value,
            'earned_value': self.earned_value,
            'progress': self.progress,
        }


def compute_activity_rate(activity: Activity) -> ActivityRate:
    """
    Rate plus earned value from the activity's own actual units.

    Earned value is capped at the planned value and progress at 100%.
    """
    planned_units = scope_units(activity)
    planned_value = scope_value(activity)
    rate = derive_rate(activity)
    actual_units = as_finite(activity.actual_units) or 0.0

    actual_value = actual_units * rate
    earned_value = min(actual_value, planned_value)

    return ActivityRate(
        activity_id=activity.id,
        activity_name=activity.activity_name,
        project_code=activity.project_full_code or activity.project_code,
        planned_units=planned_units,
        planned_value=planned_value,
        rate=rate,
        actual_units=actual_units,
        actual_value=actual_value,
        earned_value=earned_value,
        progress=clamp_percent(percentage(earned_value, planned_value)),
    )
