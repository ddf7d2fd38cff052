"""
KPI Record Entity - Dated quantity observation.

Each record is either Planned (intended quantity/value) or Actual (achieved
quantity/value). Records whose input type cannot be recognized carry
input_type=None and are left out of both totals.
"""
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Optional


class InputType(Enum):
    """Kind of KPI observation."""
    PLANNED = "Planned"
    ACTUAL = "Actual"

    @classmethod
    def parse(cls, value: Any) -> Optional['InputType']:
        """Case-insensitive parse; unknown or empty values give None."""
        if value is None:
            return None
        if isinstance(value, InputType):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == text:
                return member
        return None


class KPIStatus(Enum):
    """Status reported on a KPI record."""
    COMPLETED = "completed"
    ON_TRACK = "on_track"
    DELAYED = "delayed"
    AT_RISK = "at_risk"

    @classmethod
    def parse(cls, value: Any) -> Optional['KPIStatus']:
        """Accepts 'On Track', 'on-track', 'ON_TRACK' and the like."""
        if value is None:
            return None
        if isinstance(value, KPIStatus):
            return value
        text = str(value).strip().lower().replace("-", "_").replace(" ", "_")
        for member in cls:
            if member.value == text:
                return member
        return None


@dataclass(frozen=True)
class KPIRecord:
    """
    Immutable KPI quantity record.

    Attributes:
        id: Store identifier, if known
        project_code: Base project code as entered
        project_sub_code: Sub-code as entered
        project_full_code: Full code as entered
        activity_name: Linked activity name (matched by name + zone)
        zone: Optional zone
        input_type: Planned / Actual, None when unrecognized
        quantity: Observed quantity
        planned_value: Explicit planned value
        actual_value: Explicit actual value
        value: Generic value column
        status: Reported status
        target_date: Target date
        actual_date: Actual date
    """

    id: Optional[str] = None
    project_code: str = ""
    project_sub_code: str = ""
    project_full_code: str = ""
    activity_name: str = ""
    zone: str = ""
    input_type: Optional[InputType] = None
    quantity: float = 0.0
    planned_value: Optional[float] = None
    actual_value: Optional[float] = None
    value: Optional[float] = None
    status: Optional[KPIStatus] = None
    target_date: Optional[date] = None
    actual_date: Optional[date] = None

    @property
    def is_planned(self) -> bool:
        return self.input_type is InputType.PLANNED

    @property
    def is_actual(self) -> bool:
        return self.input_type is InputType.ACTUAL
