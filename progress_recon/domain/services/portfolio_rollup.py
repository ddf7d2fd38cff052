"""
Portfolio Rollup - Combines per-project analytics.

Totals are sums of the per-project results; nothing is recomputed from raw
records, so portfolio totals always equal the sum of the project fields.
"""
from typing import Dict, Iterable, List, Optional, Sequence

from ..entities.project_analytics import (
    SUMMABLE_FIELDS,
    HealthTier,
    PortfolioSummary,
    ProjectAnalytics,
    ProjectStatus,
    RiskLevel,
)
from .numeric import clamp_percent, percentage

AT_RISK_LEVELS = (RiskLevel.HIGH, RiskLevel.CRITICAL)


def _distribution(values: Iterable, members) -> Dict[str, int]:
    counts = {member.value: 0 for member in members}
    for value in values:
        counts[value.value] += 1
    return counts


def _unique(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


def rollup(
    analytics: Sequence[ProjectAnalytics],
    unmatched_activities: int = 0,
    unmatched_kpis: int = 0,
    unidentified_records: int = 0,
) -> PortfolioSummary:
    """
    Roll per-project analytics into a PortfolioSummary.

    Args:
        analytics: One ProjectAnalytics per project
        unmatched_activities: Activities attributed to no project
        unmatched_kpis: KPI records attributed to no project
        unidentified_records: Records without any usable code

    Returns:
        PortfolioSummary
    """
    totals: Dict[str, float] = {name: 0 for name in SUMMABLE_FIELDS}
    for item in analytics:
        for name in SUMMABLE_FIELDS:
            totals[name] += getattr(item, name)

    return PortfolioSummary(
        total_projects=len(analytics),
        totals=totals,
        overall_progress=clamp_percent(
            percentage(totals['total_earned_value'], totals['total_value'])
        ),
        health_distribution=_distribution((a.project_health for a in analytics), HealthTier),
        risk_distribution=_distribution((a.risk_level for a in analytics), RiskLevel),
        status_distribution=_distribution((a.project_status for a in analytics), ProjectStatus),
        recommendations=tuple(_unique(r for a in analytics for r in a.recommendations)),
        unmatched_activities=unmatched_activities,
        unmatched_kpis=unmatched_kpis,
        unidentified_records=unidentified_records,
    )


def top_performing(analytics: Sequence[ProjectAnalytics], limit: int = 5) -> List[ProjectAnalytics]:
    """Projects with the highest overall progress; ties keep input order."""
    return sorted(analytics, key=lambda a: -a.overall_progress)[:limit]


def projects_at_risk(analytics: Sequence[ProjectAnalytics]) -> List[ProjectAnalytics]:
    """Projects whose risk level is high or critical."""
    return [a for a in analytics if a.risk_level in AT_RISK_LEVELS]


def find_by_code(analytics: Sequence[ProjectAnalytics], code: str) -> Optional[ProjectAnalytics]:
    """
    Look up analytics by full code, falling back to base code.

    Comparison is case-insensitive.
    """
    wanted = (code or "").strip().upper()
    if not wanted:
        return None
    for item in analytics:
        if item.project_full_code.upper() == wanted:
            return item
    for item in analytics:
        if item.project_code.upper() == wanted:
            return item
    return None
