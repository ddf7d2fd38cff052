"""
Aggregator - Earned-value metric set for one project.

Sums resolved KPI contributions by record kind:
- Planned records -> planned value / quantity (all history, no date filter)
- Actual records  -> earned value / quantity
- Records with no recognized input type are counted but excluded from both

total_value is the Planned-KPI value sum by definition. total_quantity
prefers the Activity unit sum when it is non-zero, else the Planned-KPI
quantity sum, so the two totals can come from different sources.
"""
from dataclasses import dataclass
from datetime import date
from typing import Optional, Sequence, Tuple
import logging

from ..entities.activity import Activity
from ..entities.kpi_record import KPIRecord, KPIStatus
from ..entities.project import Project
from .numeric import as_finite, clamp_percent, percentage, safe_divide
from .rate_deriver import scope_units
from .value_resolver import (
    DEFAULT_UNZONED_SENTINELS,
    ResolutionContext,
    resolve_contribution,
)

logger = logging.getLogger(__name__)

DEFAULT_ON_SCHEDULE_PROGRESS = 80.0


@dataclass(frozen=True)
class ProjectTotals:
    """Aggregated counts and metrics, before classification."""

    # Activity statistics
    total_activities: int = 0
    completed_activities: int = 0
    on_track_activities: int = 0
    delayed_activities: int = 0
    not_started_activities: int = 0

    # KPI statistics
    total_kpis: int = 0
    planned_kpis: int = 0
    actual_kpis: int = 0
    unclassified_kpis: int = 0
    completed_kpis: int = 0
    on_track_kpis: int = 0
    delayed_kpis: int = 0
    at_risk_kpis: int = 0

    # Financial metrics
    total_contract_value: float = 0.0
    total_value: float = 0.0
    total_planned_value: float = 0.0
    total_earned_value: float = 0.0
    total_remaining_value: float = 0.0
    variance: float = 0.0

    # Quantity metrics
    total_quantity: float = 0.0
    total_planned_quantity: float = 0.0
    total_earned_quantity: float = 0.0
    total_remaining_quantity: float = 0.0
    quantity_variance: float = 0.0

    # Progress metrics
    actual_progress: float = 0.0
    planned_progress: float = 0.0
    overall_progress: float = 0.0
    quantity_progress: float = 0.0

    # Schedule metrics
    activities_on_schedule: int = 0
    activities_behind_schedule: int = 0
    average_delay: float = 0.0


def _activity_units(activities: Sequence[Activity]) -> float:
    return sum(scope_units(activity) for activity in activities)


def _schedule_counts(
    activities: Sequence[Activity],
    as_of: date,
    on_schedule_progress: float,
) -> Tuple[int, int]:
    """
    (on schedule, behind schedule) among activities with a deadline.

    On schedule: progress at or above the threshold, or deadline still ahead.
    Behind: progress below the threshold and deadline already passed.
    """
    on_schedule = 0
    behind = 0
    for activity in activities:
        if activity.deadline is None:
            continue
        progress = as_finite(activity.activity_progress_percentage) or 0.0
        if progress >= on_schedule_progress or activity.deadline > as_of:
            on_schedule += 1
        elif activity.deadline < as_of:
            behind += 1
    return on_schedule, behind


def aggregate_project(
    project: Project,
    activities: Sequence[Activity],
    kpis: Sequence[KPIRecord],
    as_of: Optional[date] = None,
    unzoned_sentinels: Tuple[str, ...] = DEFAULT_UNZONED_SENTINELS,
    on_schedule_progress: float = DEFAULT_ON_SCHEDULE_PROGRESS,
) -> ProjectTotals:
    """
    Aggregate a project's matched activities and KPI records.

    Args:
        project: The project being aggregated
        activities: Activities already matched to the project
        kpis: KPI records already matched to the project
        as_of: Reference date for schedule counts (default: today)
        unzoned_sentinels: Zone values meaning 'not zoned'
        on_schedule_progress: Activity progress counted as on schedule

    Returns:
        ProjectTotals
    """
    as_of = as_of or date.today()
    context = ResolutionContext(activities=tuple(activities), unzoned_sentinels=tuple(unzoned_sentinels))

    planned_value = 0.0
    earned_value = 0.0
    planned_quantity = 0.0
    earned_quantity = 0.0
    planned_kpis = 0
    actual_kpis = 0
    unclassified_kpis = 0

    for kpi in kpis:
        if kpi.is_planned:
            contribution = resolve_contribution(kpi, context)
            planned_value += contribution.value
            planned_quantity += contribution.quantity
            planned_kpis += 1
        elif kpi.is_actual:
            contribution = resolve_contribution(kpi, context)
            earned_value += contribution.value
            earned_quantity += contribution.quantity
            actual_kpis += 1
        else:
            unclassified_kpis += 1

    if unclassified_kpis:
        logger.warning(
            f"Project {project.full_code}: {unclassified_kpis} KPI records without "
            f"a recognized input type excluded from totals"
        )

    total_value = planned_value
    activity_units = _activity_units(activities)
    total_quantity = activity_units if activity_units else planned_quantity

    actual_progress = clamp_percent(percentage(earned_value, total_value))
    planned_progress = clamp_percent(percentage(planned_value, total_value))

    on_schedule, behind = _schedule_counts(activities, as_of, on_schedule_progress)
    delay_sum = sum(as_finite(a.delay_percentage) or 0.0 for a in activities)

    contract_amount = as_finite(project.contract_amount)

    totals = ProjectTotals(
        total_activities=len(activities),
        completed_activities=sum(1 for a in activities if a.activity_completed),
        on_track_activities=sum(1 for a in activities if a.activity_on_track and not a.activity_completed),
        delayed_activities=sum(1 for a in activities if a.activity_delayed),
        not_started_activities=sum(1 for a in activities if a.is_not_started),
        total_kpis=len(kpis),
        planned_kpis=planned_kpis,
        actual_kpis=actual_kpis,
        unclassified_kpis=unclassified_kpis,
        completed_kpis=sum(1 for k in kpis if k.status is KPIStatus.COMPLETED),
        on_track_kpis=sum(1 for k in kpis if k.status is KPIStatus.ON_TRACK),
        delayed_kpis=sum(1 for k in kpis if k.status is KPIStatus.DELAYED),
        at_risk_kpis=sum(1 for k in kpis if k.status is KPIStatus.AT_RISK),
        total_contract_value=contract_amount or total_value,
        total_value=total_value,
        total_planned_value=planned_value,
        total_earned_value=earned_value,
        total_remaining_value=total_value - earned_value,
        variance=earned_value - planned_value,
        total_quantity=total_quantity,
        total_planned_quantity=planned_quantity,
        total_earned_quantity=earned_quantity,
        total_remaining_quantity=total_quantity - earned_quantity,
        quantity_variance=earned_quantity - planned_quantity,
        actual_progress=actual_progress,
        planned_progress=planned_progress,
        overall_progress=actual_progress,
        quantity_progress=clamp_percent(percentage(earned_quantity, total_quantity)),
        activities_on_schedule=on_schedule,
        activities_behind_schedule=behind,
        average_delay=safe_divide(delay_sum, len(activities)),
    )

    logger.debug(
        f"Project {project.full_code}: planned={planned_value:.2f} "
        f"earned={earned_value:.2f} activities={len(activities)} kpis={len(kpis)}"
    )
    return totals
