"""
Value Resolver - Monetary contribution of a single KPI record.

The contribution is resolved through an ordered chain of tiers. Each tier is
a function returning Optional[float]; the first non-zero finite result wins:

1. planned_value  - Planned record with an explicit planned value
2. generic_value  - the generic 'value' field
3. activity_rate  - Actual record priced at its matched activity's rate
4. actual_value   - explicit actual value
5. none           - contribution is 0

Quantity is carried alongside the value whichever tier fired.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
import logging

from ..entities.activity import Activity
from ..entities.kpi_record import KPIRecord
from .identifier_normalizer import is_unzoned, normalize_zone
from .numeric import as_finite
from .rate_deriver import derive_rate

logger = logging.getLogger(__name__)

DEFAULT_UNZONED_SENTINELS: Tuple[str, ...] = ("Enabling Division", "0")


class ValueSource(Enum):
    """Tier that produced a KPI contribution."""
    PLANNED_VALUE = "planned_value"
    GENERIC_VALUE = "generic_value"
    ACTIVITY_RATE = "activity_rate"
    ACTUAL_VALUE = "actual_value"
    NONE = "none"


@dataclass(frozen=True)
class ResolutionContext:
    """
    Everything a tier may consult besides the KPI itself.

    Attributes:
        activities: The project's matched activities, in input order
        unzoned_sentinels: Zone values meaning 'not zoned'
    """
    activities: Sequence[Activity] = ()
    unzoned_sentinels: Tuple[str, ...] = DEFAULT_UNZONED_SENTINELS


@dataclass(frozen=True)
class ResolvedContribution:
    """Resolved value and quantity of one KPI record."""
    value: float
    quantity: float
    source: ValueSource
    activity: Optional[Activity] = None


# =============================================================================
# Activity lookup
# =============================================================================

def _zones_compatible(kpi_zone: str, activity_zone: str) -> bool:
    return kpi_zone == activity_zone or kpi_zone in activity_zone or activity_zone in kpi_zone


def find_matching_activity(
    kpi: KPIRecord,
    activities: Iterable[Activity],
    unzoned_sentinels: Iterable[str] = DEFAULT_UNZONED_SENTINELS,
) -> Optional[Activity]:
    """
    Best activity for a KPI record by name and zone.

    Names match case-insensitively on equality or substring. When both the
    KPI and a candidate carry a real zone, the zones must also match on
    equality or substring; empty and sentinel zones are ignored.

    Ranking: exact name beats substring name, then a zone match beats an
    ignored zone. Ties keep input order.
    """
    name = (kpi.activity_name or "").strip().lower()
    if not name:
        return None

    sentinels = tuple(unzoned_sentinels)
    kpi_zone = "" if is_unzoned(kpi.zone, sentinels) else normalize_zone(kpi.zone, kpi.project_code)

    best: Optional[Activity] = None
    best_score: Tuple[int, int] = (0, 0)

    for activity in activities:
        candidate = (activity.activity_name or "").strip().lower()
        if not candidate:
            continue
        exact = candidate == name
        if not (exact or name in candidate or candidate in name):
            continue

        zone_matched = 0
        if kpi_zone and not is_unzoned(activity.zone, sentinels):
            activity_zone = normalize_zone(activity.zone, activity.project_code or kpi.project_code)
            if activity_zone:
                if not _zones_compatible(kpi_zone, activity_zone):
                    continue
                zone_matched = 1

        score = (2 if exact else 1, zone_matched)
        if score > best_score:
            best, best_score = activity, score

    return best


# =============================================================================
# Resolver tiers
# =============================================================================

def planned_value_tier(kpi: KPIRecord, context: ResolutionContext) -> Optional[float]:
    if not kpi.is_planned:
        return None
    return as_finite(kpi.planned_value)


def generic_value_tier(kpi: KPIRecord, context: ResolutionContext) -> Optional[float]:
    return as_finite(kpi.value)


def activity_rate_tier(kpi: KPIRecord, context: ResolutionContext) -> Optional[float]:
    if not kpi.is_actual:
        return None
    activity = find_matching_activity(kpi, context.activities, context.unzoned_sentinels)
    if activity is None:
        return None
    quantity = as_finite(kpi.quantity) or 0.0
    return derive_rate(activity) * quantity


def actual_value_tier(kpi: KPIRecord, context: ResolutionContext) -> Optional[float]:
    return as_finite(kpi.actual_value)


Tier = Callable[[KPIRecord, ResolutionContext], Optional[float]]

RESOLVER_TIERS: List[Tuple[ValueSource, Tier]] = [
    (ValueSource.PLANNED_VALUE, planned_value_tier),
    (ValueSource.GENERIC_VALUE, generic_value_tier),
    (ValueSource.ACTIVITY_RATE, activity_rate_tier),
    (ValueSource.ACTUAL_VALUE, actual_value_tier),
]


def resolve_contribution(
    kpi: KPIRecord,
    context: Optional[ResolutionContext] = None,
    tiers: Sequence[Tuple[ValueSource, Tier]] = RESOLVER_TIERS,
) -> ResolvedContribution:
    """
    Resolve the value and quantity a KPI record contributes.

    Args:
        kpi: KPI record already matched to a project
        context: Project activities and zone sentinels
        tiers: Ordered (source, tier) pairs

    Returns:
        ResolvedContribution with the winning tier, or ValueSource.NONE
    """
    context = context or ResolutionContext()
    quantity = as_finite(kpi.quantity) or 0.0

    for source, tier in tiers:
        value = as_finite(tier(kpi, context))
        if value:
            activity = None
            if source is ValueSource.ACTIVITY_RATE:
                activity = find_matching_activity(kpi, context.activities, context.unzoned_sentinels)
            return ResolvedContribution(value=value, quantity=quantity, source=source, activity=activity)

    return ResolvedContribution(value=0.0, quantity=quantity, source=ValueSource.NONE)
