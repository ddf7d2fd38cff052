"""
Classifier - Status, health, risk and recommendations for a project.

Pure functions over aggregated ProjectTotals. Thresholds come from the
classification section of the configuration.
"""
from dataclasses import dataclass
from typing import List, Tuple

from ..entities.project_analytics import HealthTier, ProjectStatus, RiskLevel
from .aggregator import ProjectTotals
from .numeric import safe_divide


@dataclass(frozen=True)
class Thresholds:
    """
    Classification thresholds.

    Health tiers are (min_progress, max_delayed_share); risk levels are
    (max_delayed_share, max_average_delay). Shares are fractions of the
    project's activities.
    """
    status_band_pct: float = 5.0
    excellent: Tuple[float, float] = (90.0, 0.0)
    good: Tuple[float, float] = (70.0, 0.20)
    warning: Tuple[float, float] = (50.0, 0.40)
    risk_low: Tuple[float, float] = (0.0, 5.0)
    risk_medium: Tuple[float, float] = (0.20, 15.0)
    risk_high: Tuple[float, float] = (0.40, 30.0)
    significantly_behind_progress: float = 50.0
    min_schedule_performance: float = 0.8


@dataclass(frozen=True)
class Classification:
    """Classifier output for one project."""
    variance_percentage: float
    project_status: ProjectStatus
    project_health: HealthTier
    risk_level: RiskLevel
    recommendations: Tuple[str, ...]


def variance_percentage(actual_progress: float, planned_progress: float) -> float:
    """
    Relative gap between actual and planned progress.

    (actual - planned) / planned x 100 when planned > 0; 100 when only actual
    progress exists; otherwise 0.
    """
    if planned_progress > 0:
        return (actual_progress - planned_progress) / planned_progress * 100
    if actual_progress > 0:
        return 100.0
    return 0.0


def project_status(variance_pct: float, band: float = 5.0) -> ProjectStatus:
    if variance_pct > band:
        return ProjectStatus.AHEAD
    if variance_pct < -band:
        return ProjectStatus.DELAYED
    return ProjectStatus.ON_TRACK


def project_health(
    overall_progress: float,
    delayed_activities: int,
    total_activities: int,
    thresholds: Thresholds = Thresholds(),
) -> HealthTier:
    """
    Health tier from progress and the delayed-activity share.

    Shares are compared as counts against total x share, so a project with
    no activities has a share of zero.
    """
    min_progress, max_share = thresholds.excellent
    if overall_progress >= min_progress and delayed_activities <= total_activities * max_share:
        return HealthTier.EXCELLENT

    min_progress, max_share = thresholds.good
    if overall_progress >= min_progress and delayed_activities <= total_activities * max_share:
        return HealthTier.GOOD

    # warning accepts either condition
    min_progress, max_share = thresholds.warning
    if overall_progress >= min_progress or delayed_activities <= total_activities * max_share:
        return HealthTier.WARNING

    return HealthTier.CRITICAL


def risk_level(
    delayed_activities: int,
    total_activities: int,
    average_delay: float,
    thresholds: Thresholds = Thresholds(),
) -> RiskLevel:
    """Risk level from the delayed-activity share and the average delay %."""
    levels = (
        (RiskLevel.LOW, thresholds.risk_low),
        (RiskLevel.MEDIUM, thresholds.risk_medium),
        (RiskLevel.HIGH, thresholds.risk_high),
    )
    for level, (max_share, max_delay) in levels:
        if delayed_activities <= total_activities * max_share and average_delay < max_delay:
            return level
    return RiskLevel.CRITICAL


def recommendations(
    totals: ProjectTotals,
    status: ProjectStatus,
    thresholds: Thresholds = Thresholds(),
) -> Tuple[str, ...]:
    """Human-readable recommendations, most severe first."""
    result: List[str] = []

    if status is ProjectStatus.DELAYED and totals.actual_progress < thresholds.significantly_behind_progress:
        result.append(
            "Project is significantly behind schedule. Consider increasing resources or adjusting scope."
        )

    if totals.total_planned_value > 0:
        schedule_performance = safe_divide(totals.total_earned_value, totals.total_planned_value)
        if schedule_performance < thresholds.min_schedule_performance:
            result.append(
                "Schedule performance is below target. Review critical path and resource allocation."
            )
        elif totals.total_earned_value > totals.total_value:
            result.append(
                "Earned value exceeds total planned value. Review planned KPI coverage."
            )

    if totals.at_risk_kpis > 0:
        result.append(f"{totals.at_risk_kpis} KPI records are at risk. Focus on risk mitigation.")

    if totals.delayed_activities > 0:
        result.append(
            f"{totals.delayed_activities} activities are behind schedule. Consider acceleration strategies."
        )

    if not result:
        result.append("Project is performing well. Continue current approach.")

    return tuple(result)


def classify(totals: ProjectTotals, thresholds: Thresholds = Thresholds()) -> Classification:
    """Classify aggregated project totals."""
    variance_pct = variance_percentage(totals.actual_progress, totals.planned_progress)
    status = project_status(variance_pct, thresholds.status_band_pct)
    return Classification(
        variance_percentage=variance_pct,
        project_status=status,
        project_health=project_health(
            totals.overall_progress, totals.delayed_activities, totals.total_activities, thresholds
        ),
        risk_level=risk_level(
            totals.delayed_activities, totals.total_activities, totals.average_delay, thresholds
        ),
        recommendations=recommendations(totals, status, thresholds),
    )
