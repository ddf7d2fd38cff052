"""
Calculation Repositories - Data access for persisted derived figures.

Both repositories upsert by natural key: the activity record key and the
project full code. Rows are overwritten on every write-back.
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from progress_recon.models import ActivityCalculation, ProjectCalculation
from .base_repository import BaseRepository


class ActivityCalculationRepository(BaseRepository[ActivityCalculation]):
    """Repository for derived activity rates and progress."""

    def __init__(self, session: Session):
        super().__init__(session, ActivityCalculation)

    def exists(self, **criteria) -> bool:
        """Check if an ActivityCalculation matching the criteria exists."""
        query = self.session.query(ActivityCalculation)
        for field, value in criteria.items():
            query = query.filter(getattr(ActivityCalculation, field) == value)
        return query.first() is not None

    def get_by_key(self, activity_key: str) -> Optional[ActivityCalculation]:
        return self.session.query(ActivityCalculation).filter(
            ActivityCalculation.activity_key == activity_key
        ).first()

    def upsert(self, activity_key: str, zone: str, rate) -> ActivityCalculation:
        """
        Insert or overwrite the calculation row for an activity.

        Args:
            activity_key: Store id, else 'full code|name|zone'
            zone: Activity zone
            rate: Derived ActivityRate

        Returns:
            The persisted row (flushed, not committed)
        """
        row = self.get_by_key(activity_key)
        if row is None:
            row = ActivityCalculation(activity_key=activity_key)
            self.add(row)

        row.activity_id = rate.activity_id
        row.project_code = rate.project_code
        row.activity_name = rate.activity_name
        row.zone = zone or None
        row.rate = rate.rate
        row.planned_units = rate.planned_units
        row.planned_value = rate.planned_value
        row.actual_units = rate.actual_units
        row.actual_value = rate.actual_value
        row.earned_value = rate.earned_value
        row.progress = rate.progress
        row.calculated_at = datetime.utcnow()

        self.flush()
        return row


class ProjectCalculationRepository(BaseRepository[ProjectCalculation]):
    """Repository for derived project metrics."""

    def __init__(self, session: Session):
        super().__init__(session, ProjectCalculation)

    def exists(self, **criteria) -> bool:
        """Check if a ProjectCalculation matching the criteria exists."""
        query = self.session.query(ProjectCalculation)
        for field, value in criteria.items():
            query = query.filter(getattr(ProjectCalculation, field) == value)
        return query.first() is not None

    def get_by_full_code(self, project_full_code: str) -> Optional[ProjectCalculation]:
        return self.session.query(ProjectCalculation).filter(
            ProjectCalculation.project_full_code == project_full_code
        ).first()

    def upsert(self, analytics) -> ProjectCalculation:
        """Insert or overwrite the calculation row for a project from its ProjectAnalytics."""
        row = self.get_by_full_code(analytics.project_full_code)
        if row is None:
            row = ProjectCalculation(project_full_code=analytics.project_full_code)
            self.add(row)

        row.project_code = analytics.project_code
        row.total_value = analytics.total_value
        row.planned_value = analytics.total_planned_value
        row.earned_value = analytics.total_earned_value
        row.variance = analytics.variance
        row.actual_progress = analytics.actual_progress
        row.planned_progress = analytics.planned_progress
        row.variance_percentage = analytics.variance_percentage
        row.project_status = analytics.project_status.value
        row.project_health = analytics.project_health.value
        row.risk_level = analytics.risk_level.value
        row.calculated_at = datetime.utcnow()

        self.flush()
        return row
