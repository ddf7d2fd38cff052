"""
Activity Entity - Bill-of-quantities scope line.

An activity is a planned scope-of-work item belonging to one project. Its
unit rate is derived from declared value and quantity, never stored.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Activity:
    """
    Immutable BOQ activity.

    Attributes:
        id: Store identifier, if known
        project_code: Base project code as entered on the activity
        project_sub_code: Sub-code as entered on the activity
        project_full_code: Full code as entered on the activity
        activity_name: Activity description
        zone: Optional sub-grouping ('Enabling Division' / '0' mean not zoned)
        total_units: Total scope quantity
        planned_units: Fallback scope quantity (older rows)
        total_value: Total scope value
        planned_value: Fallback scope value (older rows)
        actual_units: Quantity completed to date
        activity_completed: Completion flag
        activity_on_track: On-track flag
        activity_delayed: Delayed flag
        delay_percentage: Reported delay %, used for risk scoring
        activity_progress_percentage: Reported progress %
        deadline: Planned completion date
    """

    id: Optional[str] = None
    project_code: str = ""
    project_sub_code: str = ""
    project_full_code: str = ""
    activity_name: str = ""
    zone: str = ""

    # Scope
    total_units: Optional[float] = None
    planned_units: Optional[float] = None
    total_value: Optional[float] = None
    planned_value: Optional[float] = None
    actual_units: float = 0.0

    # Status flags
    activity_completed: bool = False
    activity_on_track: bool = False
    activity_delayed: bool = False
    delay_percentage: float = 0.0
    activity_progress_percentage: float = 0.0
    deadline: Optional[date] = None

    @property
    def is_not_started(self) -> bool:
        return not (self.activity_completed or self.activity_on_track or self.activity_delayed)

    @property
    def record_key(self) -> str:
        """Stable key for write-back when no store id is available."""
        if self.id:
            return str(self.id)
        full = self.project_full_code or self.project_code
        return f"{full}|{self.activity_name}|{self.zone}"
