"""
Analytics API Endpoints - Earned-value analytics over posted snapshots.

The caller posts the current Projects / Activities / KPI rows; every request
recomputes from that snapshot.

Implements:
- POST /api/v1/analytics/projects - Analytics for every project
- POST /api/v1/analytics/projects/{code} - Analytics for one project
- POST /api/v1/analytics/portfolio - Portfolio summary
- POST /api/v1/analytics/data-quality - Unmatched / unidentified records
- POST /api/v1/analytics/write-back - Persist derived figures
"""
from typing import Any, Dict, List, Optional
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from progress_recon.models import get_db
from progress_recon.config import get_config
from progress_recon.domain.exceptions import IngestionError, ProjectNotFoundError
from progress_recon.domain.services import (
    EngineSettings,
    ProgressAnalyticsEngine,
    WriteBackService,
    projects_at_risk,
    top_performing,
)
from progress_recon.modules.ingestion import Snapshot, build_snapshot
from progress_recon.modules.data_quality import build_data_quality_report

router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================

class SnapshotRequest(BaseModel):
    """Raw input rows, addressed by any configured column spelling."""
    projects: List[Dict[str, Any]] = Field(default_factory=list)
    activities: List[Dict[str, Any]] = Field(default_factory=list)
    kpis: List[Dict[str, Any]] = Field(default_factory=list)
    as_of: Optional[date] = None


class ProjectAnalyticsResponse(BaseModel):
    """Earned-value metric set for one project."""
    project_code: str
    project_sub_code: str
    project_full_code: str
    project_name: str

    total_activities: int
    completed_activities: int
    on_track_activities: int
    delayed_activities: int
    not_started_activities: int

    total_kpis: int
    planned_kpis: int
    actual_kpis: int
    unclassified_kpis: int
    completed_kpis: int
    on_track_kpis: int
    delayed_kpis: int
    at_risk_kpis: int

    total_contract_value: float
    total_value: float
    total_planned_value: float
    total_earned_value: float
    total_remaining_value: float
    variance: float

    total_quantity: float
    total_planned_quantity: float
    total_earned_quantity: float
    total_remaining_quantity: float
    quantity_variance: float

    actual_progress: float
    planned_progress: float
    overall_progress: float
    quantity_progress: float

    activities_on_schedule: int
    activities_behind_schedule: int
    average_delay: float

    variance_percentage: float
    project_status: str  # ahead, on_track, delayed
    project_health: str  # excellent, good, warning, critical
    risk_level: str      # low, medium, high, critical
    recommendations: List[str]


class PortfolioResponse(BaseModel):
    """Portfolio rollup of per-project analytics."""
    total_projects: int
    totals: Dict[str, float]
    overall_progress: float
    health_distribution: Dict[str, int]
    risk_distribution: Dict[str, int]
    status_distribution: Dict[str, int]
    recommendations: List[str]
    unmatched_activities: int
    unmatched_kpis: int
    unidentified_records: int
    top_performing: List[str]
    projects_at_risk: List[str]


class UnmatchedRecordResponse(BaseModel):
    kind: str
    record_key: str
    codes: List[str]
    suggestion: Optional[str]
    score: float


class DataQualityResponse(BaseModel):
    """Attribution problems in the posted snapshot."""
    unmatched_activities: List[UnmatchedRecordResponse]
    unmatched_kpis: List[UnmatchedRecordResponse]
    unidentified_activities: int
    unidentified_kpis: int
    unclassified_kpis: int
    summary: List[str]


class WriteBackErrorResponse(BaseModel):
    record_key: str
    code: str
    reason: str


class WriteBackResponse(BaseModel):
    """Outcome of a write-back batch."""
    updated_activities: int
    updated_projects: int
    errors: List[WriteBackErrorResponse]


# =============================================================================
# Helpers
# =============================================================================

def get_engine() -> ProgressAnalyticsEngine:
    """Engine dependency built from the current configuration."""
    return ProgressAnalyticsEngine(EngineSettings.from_config(get_config()))


def _snapshot(request: SnapshotRequest) -> Snapshot:
    try:
        return build_snapshot(request.projects, request.activities, request.kpis)
    except IngestionError as e:
        raise HTTPException(
            status_code=422,
            detail=e.message
        )


# =============================================================================
# Endpoints
# =============================================================================

@router.post(
    "/projects",
    response_model=List[ProjectAnalyticsResponse],
    summary="Analytics for every project",
    description="Match, value, aggregate and classify every posted project"
)
def compute_projects(
    request: SnapshotRequest,
    engine: ProgressAnalyticsEngine = Depends(get_engine),
):
    """Compute analytics for every project in the snapshot."""
    snapshot = _snapshot(request)
    analytics = engine.compute_all(snapshot.projects, snapshot.activities, snapshot.kpis, request.as_of)
    return [a.to_dict() for a in analytics]


@router.post(
    "/projects/{code}",
    response_model=ProjectAnalyticsResponse,
    summary="Analytics for one project",
    description="Look up a project by full code (or base code) and compute its analytics"
)
def compute_project(
    code: str,
    request: SnapshotRequest,
    engine: ProgressAnalyticsEngine = Depends(get_engine),
):
    """Compute analytics for a single project."""
    snapshot = _snapshot(request)
    try:
        analytics = engine.compute_by_code(
            code, snapshot.projects, snapshot.activities, snapshot.kpis, request.as_of
        )
    except ProjectNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=e.message
        )
    return analytics.to_dict()


@router.post(
    "/portfolio",
    response_model=PortfolioResponse,
    summary="Portfolio summary",
    description="Totals, health/risk/status distributions and recommendations across projects"
)
def compute_portfolio(
    request: SnapshotRequest,
    engine: ProgressAnalyticsEngine = Depends(get_engine),
):
    """Compute the portfolio rollup."""
    snapshot = _snapshot(request)
    result = engine.analyze(snapshot.projects, snapshot.activities, snapshot.kpis, request.as_of)

    response = result.portfolio.to_dict()
    response['top_performing'] = [a.project_full_code for a in top_performing(result.projects)]
    response['projects_at_risk'] = [a.project_full_code for a in projects_at_risk(result.projects)]
    return response


@router.post(
    "/data-quality",
    response_model=DataQualityResponse,
    summary="Data-quality report",
    description="Records that match no project or carry no usable project code"
)
def data_quality(
    request: SnapshotRequest,
    engine: ProgressAnalyticsEngine = Depends(get_engine),
):
    """Report unattributed records with closest-project suggestions."""
    snapshot = _snapshot(request)
    report = build_data_quality_report(
        snapshot.projects, snapshot.activities, snapshot.kpis, engine=engine
    )
    return report.to_dict()


@router.post(
    "/write-back",
    response_model=WriteBackResponse,
    summary="Persist derived figures",
    description="Cache activity rates/progress and project metrics; per-record failures are reported, not raised"
)
def write_back(
    request: SnapshotRequest,
    db: Session = Depends(get_db),
    engine: ProgressAnalyticsEngine = Depends(get_engine),
):
    """Write derived figures back record by record."""
    snapshot = _snapshot(request)
    analytics = engine.compute_all(snapshot.projects, snapshot.activities, snapshot.kpis, request.as_of)
    result = WriteBackService(db).write_back(snapshot.activities, analytics)
    return result.to_dict()
