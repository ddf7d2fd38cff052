"""
Write-back Service - Persists derived figures for callers that cache them.

This path sits on top of the engine and is optional. Every record is
committed on its own: a failing record is rolled back, logged and reported
in WriteBackResult.errors while the rest of the batch continues.
"""
from dataclasses import dataclass, field
from typing import List, Sequence
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...infrastructure.repositories import ActivityCalculationRepository, ProjectCalculationRepository
from ..entities.activity import Activity
from ..entities.project_analytics import ProjectAnalytics
from ..exceptions import DomainError, WriteBackError
from .rate_deriver import compute_activity_rate

logger = logging.getLogger(__name__)


@dataclass
class WriteBackResult:
    """Outcome of a write-back batch."""
    updated_activities: int = 0
    updated_projects: int = 0
    errors: List[WriteBackError] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            'updated_activities': self.updated_activities,
            'updated_projects': self.updated_projects,
            'errors': [
                {'record_key': e.record_key, 'code': e.code, 'reason': e.reason}
                for e in self.errors
            ],
        }


class WriteBackService:
    """
    Writes activity rates/progress and project metrics to the calculation tables.

    Usage:
        service = WriteBackService(session)
        result = service.write_back(activities, analytics)
    """

    def __init__(self, session: Session):
        self.session = session
        self.activity_repo = ActivityCalculationRepository(session)
        self.project_repo = ProjectCalculationRepository(session)

    def _fail(self, result: WriteBackResult, repo, record_key: str, error: Exception) -> None:
        repo.rollback()
        if isinstance(error, WriteBackError):
            failure = error
        else:
            failure = WriteBackError(record_key, str(error))
        logger.warning(failure.message)
        result.errors.append(failure)

    def write_activity(self, activity: Activity) -> None:
        """
        Persist one activity's derived rate and progress.

        Raises:
            WriteBackError: If the activity has neither a store id nor a name
        """
        if not activity.id and not activity.activity_name:
            raise WriteBackError(activity.record_key, "activity has neither an id nor a name")
        rate = compute_activity_rate(activity)
        self.activity_repo.upsert(activity.record_key, activity.zone, rate)

    def write_project(self, analytics: ProjectAnalytics) -> None:
        """
        Persist one project's metrics.

        Raises:
            WriteBackError: If the analytics carry no full code
        """
        if not analytics.project_full_code:
            raise WriteBackError(analytics.project_code or "<unknown>", "project has no code")
        self.project_repo.upsert(analytics)

    def write_back(
        self,
        activities: Sequence[Activity] = (),
        analytics: Sequence[ProjectAnalytics] = (),
    ) -> WriteBackResult:
        """
        Persist derived figures record by record.

        Args:
            activities: Activities whose rate/progress should be cached
            analytics: Project analytics to cache

        Returns:
            WriteBackResult with update counts and the per-record error list
        """
        result = WriteBackResult()

        for activity in activities:
            try:
                self.write_activity(activity)
                self.activity_repo.commit()
                result.updated_activities += 1
            except (SQLAlchemyError, DomainError) as e:
                self._fail(result, self.activity_repo, activity.record_key, e)

        for item in analytics:
            try:
                self.write_project(item)
                self.project_repo.commit()
                result.updated_projects += 1
            except (SQLAlchemyError, DomainError) as e:
                self._fail(result, self.project_repo, item.project_full_code or item.project_code, e)

        logger.info(
            f"Write-back complete: {result.updated_activities} activities, "
            f"{result.updated_projects} projects, {len(result.errors)} errors"
        )
        return result
