"""
Domain Entities - Immutable inputs and derived analytics.
"""

from .project import Project
from .activity import Activity
from .kpi_record import KPIRecord, InputType, KPIStatus
from .project_analytics import (
    ProjectAnalytics, PortfolioSummary, ProjectStatus, HealthTier, RiskLevel, SUMMABLE_FIELDS,
)

__all__ = [
    'Project',
    'Activity',
    'KPIRecord', 'InputType', 'KPIStatus',
    'ProjectAnalytics', 'PortfolioSummary',
    'ProjectStatus', 'HealthTier', 'RiskLevel', 'SUMMABLE_FIELDS',
]
