"""
Data Quality Module - Surfaces records the engine could not attribute.

Unattributed records are excluded from analytics, never raised. This report
lists them for human review, with a closest-project suggestion per unmatched
code. Suggestions are advisory only and never change matching.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from rapidfuzz import fuzz, process

from progress_recon.config import ProgressConfig, get_config
from progress_recon.domain.entities import Activity, KPIRecord, Project
from progress_recon.domain.services.analytics_engine import EngineSettings, ProgressAnalyticsEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UnmatchedRecord:
    """A record whose codes matched no project."""
    kind: str  # 'activity' or 'kpi'
    record_key: str
    codes: Tuple[str, ...]
    suggestion: Optional[str] = None
    score: float = 0.0

    def to_dict(self) -> Dict:
        return {
            'kind': self.kind,
            'record_key': self.record_key,
            'codes': list(self.codes),
            'suggestion': self.suggestion,
            'score': self.score,
        }


@dataclass
class DataQualityReport:
    """Attribution problems found in one input snapshot."""
    unmatched_activities: List[UnmatchedRecord] = field(default_factory=list)
    unmatched_kpis: List[UnmatchedRecord] = field(default_factory=list)
    unidentified_activities: int = 0
    unidentified_kpis: int = 0
    unclassified_kpis: int = 0

    @property
    def is_clean(self) -> bool:
        return not (
            self.unmatched_activities or self.unmatched_kpis
            or self.unidentified_activities or self.unidentified_kpis
            or self.unclassified_kpis
        )

    def summary_lines(self) -> List[str]:
        """Human-readable signals, e.g. '3 KPI records unmatched'."""
        lines = []
        if self.unmatched_activities:
            lines.append(f"{len(self.unmatched_activities)} activities unmatched")
        if self.unmatched_kpis:
            lines.append(f"{len(self.unmatched_kpis)} KPI records unmatched")
        if self.unidentified_activities:
            lines.append(f"{self.unidentified_activities} activities without a project code")
        if self.unidentified_kpis:
            lines.append(f"{self.unidentified_kpis} KPI records without a project code")
        if self.unclassified_kpis:
            lines.append(f"{self.unclassified_kpis} KPI records without a Planned/Actual input type")
        return lines

    def to_dict(self) -> Dict:
        return {
            'unmatched_activities': [r.to_dict() for r in self.unmatched_activities],
            'unmatched_kpis': [r.to_dict() for r in self.unmatched_kpis],
            'unidentified_activities': self.unidentified_activities,
            'unidentified_kpis': self.unidentified_kpis,
            'unclassified_kpis': self.unclassified_kpis,
            'summary': self.summary_lines(),
        }


def suggest_project(code: str, project_codes: List[str], threshold: int) -> Tuple[Optional[str], float]:
    """
    Closest project full code for an unmatched code.

    Returns (suggestion, score) or (None, 0) if nothing scores above threshold.
    """
    if not code or not project_codes:
        return None, 0.0
    result = process.extractOne(code.upper(), project_codes, scorer=fuzz.ratio)
    if result and result[1] >= threshold:
        return result[0], float(result[1])
    return None, 0.0


def _kpi_key(kpi: KPIRecord) -> str:
    if kpi.id:
        return str(kpi.id)
    code = kpi.project_full_code or kpi.project_code
    kind = kpi.input_type.value if kpi.input_type else ''
    return f"{code}|{kpi.activity_name}|{kind}"


def build_data_quality_report(
    projects: Sequence[Project],
    activities: Sequence[Activity],
    kpis: Sequence[KPIRecord],
    engine: Optional[ProgressAnalyticsEngine] = None,
    config: Optional[ProgressConfig] = None,
) -> DataQualityReport:
    """
    Find unmatched, unidentified and unclassified records.

    Args:
        projects: Project snapshot
        activities: Activity snapshot
        kpis: KPI snapshot
        engine: Engine whose matcher decides attribution (default: from config)
        config: Configuration for the suggestion threshold

    Returns:
        DataQualityReport
    """
    config = config or get_config()
    engine = engine or ProgressAnalyticsEngine(EngineSettings.from_config(config))
    matcher = engine.matcher
    threshold = config.suggestion_min_score

    identities = [matcher.identity_for(p) for p in projects]
    project_codes = sorted({i.full_code for i in identities if i.full_code})

    report = DataQualityReport(
        unclassified_kpis=sum(1 for k in kpis if k.input_type is None),
    )

    def check(kind: str, record, key: str) -> Optional[UnmatchedRecord]:
        codes = matcher.codes_for(record)
        if not codes:
            return None
        if any(matcher.matches(codes, identity) for identity in identities):
            return None
        display = tuple(sorted({c.upper() for c in codes}))
        suggestion, score = suggest_project(max(display, key=len), project_codes, threshold)
        return UnmatchedRecord(kind=kind, record_key=key, codes=display, suggestion=suggestion, score=score)

    for activity in activities:
        if not matcher.codes_for(activity):
            report.unidentified_activities += 1
            continue
        unmatched = check('activity', activity, activity.record_key)
        if unmatched:
            report.unmatched_activities.append(unmatched)

    for kpi in kpis:
        if not matcher.codes_for(kpi):
            report.unidentified_kpis += 1
            continue
        unmatched = check('kpi', kpi, _kpi_key(kpi))
        if unmatched:
            report.unmatched_kpis.append(unmatched)

    for line in report.summary_lines():
        logger.warning(f"Data quality: {line}")

    return report
