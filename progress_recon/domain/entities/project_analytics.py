"""
Project Analytics - Derived, disposable views of project progress.

Both ProjectAnalytics and PortfolioSummary are recomputed from the input
snapshot on every request and never mutated afterwards.
"""
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Tuple


class ProjectStatus(Enum):
    """Schedule status derived from the variance percentage."""
    AHEAD = "ahead"
    ON_TRACK = "on_track"
    DELAYED = "delayed"


class HealthTier(Enum):
    """Project health tier, best first."""
    EXCELLENT = "excellent"
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class RiskLevel(Enum):
    """Project risk level, lowest first."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ProjectAnalytics:
    """
    Earned-value metric set for one project.

    Progress fields are percentages clamped to [0, 100]. Variance fields are
    signed and never clamped.
    """

    project_code: str
    project_sub_code: str = ""
    project_full_code: str = ""
    project_name: str = ""

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

    # Classification
    variance_percentage: float = 0.0
    project_status: ProjectStatus = ProjectStatus.ON_TRACK
    project_health: HealthTier = HealthTier.WARNING
    risk_level: RiskLevel = RiskLevel.LOW
    recommendations: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with enum values flattened to strings."""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            result[f.name] = value
        return result


# Numeric fields that a portfolio rollup sums across projects
SUMMABLE_FIELDS: Tuple[str, ...] = tuple(
    f.name for f in fields(ProjectAnalytics)
    if f.type in (int, float, 'int', 'float')
    and f.name not in (
        'actual_progress', 'planned_progress', 'overall_progress',
        'quantity_progress', 'average_delay', 'variance_percentage',
    )
)


@dataclass(frozen=True)
class PortfolioSummary:
    """
    Portfolio-wide rollup of per-project analytics.

    Attributes:
        total_projects: Number of projects rolled up
        totals: Sum of every summable ProjectAnalytics field
        overall_progress: Earned / total value, clamped to [0, 100]
        health_distribution: Count per health tier (all tiers present)
        risk_distribution: Count per risk level (all levels present)
        status_distribution: Count per project status (all statuses present)
        recommendations: De-duplicated recommendations, first-seen order
        unmatched_activities: Activities attributed to no project
        unmatched_kpis: KPI records attributed to no project
        unidentified_records: Records without any usable code
    """

    total_projects: int = 0
    totals: Dict[str, float] = field(default_factory=dict)
    overall_progress: float = 0.0
    health_distribution: Dict[str, int] = field(default_factory=dict)
    risk_distribution: Dict[str, int] = field(default_factory=dict)
    status_distribution: Dict[str, int] = field(default_factory=dict)
    recommendations: Tuple[str, ...] = ()
    unmatched_activities: int = 0
    unmatched_kpis: int = 0
    unidentified_records: int = 0

    @property
    def total_value(self) -> float:
        return self.totals.get('total_value', 0.0)

    @property
    def total_planned_value(self) -> float:
        return self.totals.get('total_planned_value', 0.0)

    @property
    def total_earned_value(self) -> float:
        return self.totals.get('total_earned_value', 0.0)

    @property
    def variance(self) -> float:
        return self.totals.get('variance', 0.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_projects': self.total_projects,
            'totals': dict(self.totals),
            'overall_progress': self.overall_progress,
            'health_distribution': dict(self.health_distribution),
            'risk_distribution': dict(self.risk_distribution),
            'status_distribution': dict(self.status_distribution),
            'recommendations': list(self.recommendations),
            'unmatched_activities': self.unmatched_activities,
            'unmatched_kpis': self.unmatched_kpis,
            'unidentified_records': self.unidentified_records,
        }
