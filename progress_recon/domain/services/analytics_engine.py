"""
Progress Analytics Engine - Orchestrates the per-project pipeline.

For each project:
1. Normalize the project identity
2. Filter the global Activity and KPI collections to the project's subset
3. Aggregate resolved KPI contributions (rates derived on demand)
4. Classify status, health and risk
Then roll all projects into a portfolio summary.

The engine is a pure function of its three input collections. It holds no
mutable state and allocates fresh results on every call, so it is safe to
call repeatedly and concurrently.
"""
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple, TypeVar
import logging

from ...config import get_config
from ..entities.activity import Activity
from ..entities.kpi_record import KPIRecord
from ..entities.project import Project
from ..entities.project_analytics import PortfolioSummary, ProjectAnalytics
from ..exceptions import ProjectNotFoundError
from .aggregator import DEFAULT_ON_SCHEDULE_PROGRESS, aggregate_project
from .classifier import Thresholds, classify
from .code_matcher import CodeMatcher
from .identifier_normalizer import (
    DEFAULT_SEPARATOR,
    DEFAULT_SEPARATORS,
    ProjectIdentity,
    canonical_full_code,
)
from .portfolio_rollup import rollup
from .value_resolver import DEFAULT_UNZONED_SENTINELS

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass(frozen=True)
class EngineSettings:
    """Immutable snapshot of the configuration values the engine reads."""
    separators: Tuple[str, ...] = DEFAULT_SEPARATORS
    default_separator: str = DEFAULT_SEPARATOR
    unzoned_sentinels: Tuple[str, ...] = DEFAULT_UNZONED_SENTINELS
    on_schedule_progress: float = DEFAULT_ON_SCHEDULE_PROGRESS
    thresholds: Thresholds = field(default_factory=Thresholds)

    @classmethod
    def from_config(cls, config=None) -> 'EngineSettings':
        """
        Build settings from a ProgressConfig.

        Args:
            config: ProgressConfig instance (default: get_config())
        """
        config = config or get_config()

        def health(tier: str) -> Tuple[float, float]:
            values = config.get_health_thresholds(tier)
            return float(values["min_progress"]), float(values["max_delayed_share"])

        def risk(level: str) -> Tuple[float, float]:
            values = config.get_risk_thresholds(level)
            return float(values["max_delayed_share"]), float(values["max_average_delay"])

        return cls(
            separators=config.code_separators,
            default_separator=config.default_separator,
            unzoned_sentinels=config.unzoned_sentinels,
            on_schedule_progress=config.on_schedule_progress,
            thresholds=Thresholds(
                status_band_pct=config.status_band_pct,
                excellent=health("excellent"),
                good=health("good"),
                warning=health("warning"),
                risk_low=risk("low"),
                risk_medium=risk("medium"),
                risk_high=risk("high"),
                significantly_behind_progress=config.significantly_behind_progress,
                min_schedule_performance=config.min_schedule_performance,
            ),
        )


@dataclass(frozen=True)
class MatchStats:
    """Attribution counts for the data-quality signal."""
    unmatched_activities: int = 0
    unmatched_kpis: int = 0
    unidentified_activities: int = 0
    unidentified_kpis: int = 0

    @property
    def unidentified_records(self) -> int:
        return self.unidentified_activities + self.unidentified_kpis


@dataclass(frozen=True)
class AnalysisResult:
    """Per-project analytics plus the portfolio summary built from them."""
    projects: Tuple[ProjectAnalytics, ...]
    portfolio: PortfolioSummary
    match_stats: MatchStats


class ProgressAnalyticsEngine:
    """
    Computes ProjectAnalytics and PortfolioSummary from input snapshots.

    Usage:
        engine = ProgressAnalyticsEngine(EngineSettings.from_config())
        result = engine.analyze(projects, activities, kpis)
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()
        self.matcher = CodeMatcher(
            separators=self.settings.separators,
            default_separator=self.settings.default_separator,
        )

    # =========================================================================
    # Matching
    # =========================================================================

    def _index(self, records: Iterable[T]) -> List[Tuple[FrozenSet[str], T]]:
        """Pair every record with its candidate codes, extracted once."""
        return [(self.matcher.codes_for(record), record) for record in records]

    def _select(self, indexed: Sequence[Tuple[FrozenSet[str], T]], identity: ProjectIdentity) -> List[T]:
        return [record for codes, record in indexed if codes and self.matcher.matches(codes, identity)]

    def match_stats(
        self,
        projects: Sequence[Project],
        activities: Sequence[Activity],
        kpis: Sequence[KPIRecord],
    ) -> MatchStats:
        """Count records attributed to no project and records with no code."""
        identities = [self.matcher.identity_for(p) for p in projects]

        def tally(indexed) -> Tuple[int, int]:
            unmatched = 0
            unidentified = 0
            for codes, _ in indexed:
                if not codes:
                    unidentified += 1
                elif not any(self.matcher.matches(codes, identity) for identity in identities):
                    unmatched += 1
            return unmatched, unidentified

        unmatched_activities, unidentified_activities = tally(self._index(activities))
        unmatched_kpis, unidentified_kpis = tally(self._index(kpis))

        if unmatched_activities or unmatched_kpis:
            logger.warning(
                f"{unmatched_activities} activities and {unmatched_kpis} KPI records "
                f"matched no project"
            )
        if unidentified_activities or unidentified_kpis:
            logger.warning(
                f"{unidentified_activities} activities and {unidentified_kpis} KPI records "
                f"carry no usable project code"
            )

        return MatchStats(
            unmatched_activities=unmatched_activities,
            unmatched_kpis=unmatched_kpis,
            unidentified_activities=unidentified_activities,
            unidentified_kpis=unidentified_kpis,
        )

    # =========================================================================
    # Per-project computation
    # =========================================================================

    def _compute(
        self,
        project: Project,
        indexed_activities: Sequence[Tuple[FrozenSet[str], Activity]],
        indexed_kpis: Sequence[Tuple[FrozenSet[str], KPIRecord]],
        as_of: date,
    ) -> ProjectAnalytics:
        identity = self.matcher.identity_for(project)
        project_activities = self._select(indexed_activities, identity)
        project_kpis = self._select(indexed_kpis, identity)

        logger.debug(
            f"Project {identity.full_code}: {len(project_activities)} activities, "
            f"{len(project_kpis)} KPI records"
        )

        totals = aggregate_project(
            project,
            project_activities,
            project_kpis,
            as_of=as_of,
            unzoned_sentinels=self.settings.unzoned_sentinels,
            on_schedule_progress=self.settings.on_schedule_progress,
        )
        classification = classify(totals, self.settings.thresholds)

        return ProjectAnalytics(
            project_code=project.code,
            project_sub_code=project.sub_code,
            project_full_code=canonical_full_code(
                project.code, project.sub_code,
                self.settings.separators, self.settings.default_separator,
            ),
            project_name=project.name,
            variance_percentage=classification.variance_percentage,
            project_status=classification.project_status,
            project_health=classification.project_health,
            risk_level=classification.risk_level,
            recommendations=classification.recommendations,
            **asdict(totals),
        )

    def compute_project(
        self,
        project: Project,
        activities: Sequence[Activity],
        kpis: Sequence[KPIRecord],
        as_of: Optional[date] = None,
    ) -> ProjectAnalytics:
        """
        Analytics for a single project.

        Args:
            project: Project to analyze
            activities: Global activity collection (filtered here)
            kpis: Global KPI collection (filtered here)
            as_of: Reference date for schedule counts (default: today)
        """
        return self._compute(project, self._index(activities), self._index(kpis), as_of or date.today())

    def compute_all(
        self,
        projects: Sequence[Project],
        activities: Sequence[Activity],
        kpis: Sequence[KPIRecord],
        as_of: Optional[date] = None,
    ) -> List[ProjectAnalytics]:
        """Analytics for every project, in input order."""
        as_of = as_of or date.today()
        indexed_activities = self._index(activities)
        indexed_kpis = self._index(kpis)
        return [self._compute(p, indexed_activities, indexed_kpis, as_of) for p in projects]

    def compute_by_code(
        self,
        code: str,
        projects: Sequence[Project],
        activities: Sequence[Activity],
        kpis: Sequence[KPIRecord],
        as_of: Optional[date] = None,
    ) -> ProjectAnalytics:
        """
        Analytics for the project with the given full or base code.

        Raises:
            ProjectNotFoundError: If no project carries the code
        """
        wanted = (code or "").strip().upper()
        for project in projects:
            if self.matcher.identity_for(project).full_code == wanted:
                return self.compute_project(project, activities, kpis, as_of)
        for project in projects:
            if self.matcher.identity_for(project).code == wanted:
                return self.compute_project(project, activities, kpis, as_of)
        raise ProjectNotFoundError(code)

    # =========================================================================
    # Portfolio
    # =========================================================================

    def analyze(
        self,
        projects: Sequence[Project],
        activities: Sequence[Activity],
        kpis: Sequence[KPIRecord],
        as_of: Optional[date] = None,
    ) -> AnalysisResult:
        """Per-project analytics and the portfolio summary in one pass."""
        analytics = self.compute_all(projects, activities, kpis, as_of)
        stats = self.match_stats(projects, activities, kpis)
        portfolio = rollup(
            analytics,
            unmatched_activities=stats.unmatched_activities,
            unmatched_kpis=stats.unmatched_kpis,
            unidentified_records=stats.unidentified_records,
        )
        logger.info(
            f"Analyzed {len(analytics)} projects: total value {portfolio.total_value:.2f}, "
            f"earned {portfolio.total_earned_value:.2f}"
        )
        return AnalysisResult(projects=tuple(analytics), portfolio=portfolio, match_stats=stats)

    def compute_portfolio(
        self,
        projects: Sequence[Project],
        activities: Sequence[Activity],
        kpis: Sequence[KPIRecord],
        as_of: Optional[date] = None,
    ) -> PortfolioSummary:
        """Portfolio summary built from per-project results."""
        return self.analyze(projects, activities, kpis, as_of).portfolio

