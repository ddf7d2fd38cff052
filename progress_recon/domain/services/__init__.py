"""
Domain Services - Identifier matching, value resolution, aggregation and classification.
"""

from .identifier_normalizer import (
    CandidateCodes,
    ProjectIdentity,
    canonical_full_code,
    extract_codes,
    normalize_zone,
    project_identity,
    split_code,
)
from .code_matcher import CodeMatcher, MatchRule
from .rate_deriver import ActivityRate, compute_activity_rate, derive_rate
from .value_resolver import (
    ResolutionContext,
    ResolvedContribution,
    ValueSource,
    find_matching_activity,
    resolve_contribution,
)
from .aggregator import ProjectTotals, aggregate_project
from .classifier import Classification, Thresholds, classify
from .portfolio_rollup import find_by_code, projects_at_risk, rollup, top_performing
from .analytics_engine import AnalysisResult, EngineSettings, MatchStats, ProgressAnalyticsEngine
from .write_back_service import WriteBackResult, WriteBackService

__all__ = [
    # Identity and matching
    'CandidateCodes',
    'ProjectIdentity',
    'canonical_full_code',
    'extract_codes',
    'normalize_zone',
    'project_identity',
    'split_code',
    'CodeMatcher',
    'MatchRule',
    # Valuation
    'ActivityRate',
    'compute_activity_rate',
    'derive_rate',
    'ResolutionContext',
    'ResolvedContribution',
    'ValueSource',
    'find_matching_activity',
    'resolve_contribution',
    # Aggregation and classification
    'ProjectTotals',
    'aggregate_project',
    'Classification',
    'Thresholds',
    'classify',
    # Portfolio
    'find_by_code',
    'projects_at_risk',
    'rollup',
    'top_performing',
    # Orchestration
    'AnalysisResult',
    'EngineSettings',
    'MatchStats',
    'ProgressAnalyticsEngine',
    # Write-back
    'WriteBackResult',
    'WriteBackService',
]
