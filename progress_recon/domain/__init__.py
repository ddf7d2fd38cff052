"""
Domain Layer - Core entities and services for progress reconciliation.

This module contains:
- entities/: Immutable inputs (Project, Activity, KPIRecord) and derived analytics
- services/: Matching, valuation, aggregation, classification and rollup
"""

from .entities.project import Project
from .entities.activity import Activity
from .entities.kpi_record import KPIRecord, InputType, KPIStatus
from .entities.project_analytics import (
    ProjectAnalytics, PortfolioSummary, ProjectStatus, HealthTier, RiskLevel,
)

__all__ = [
    'Project',
    'Activity',
    'KPIRecord', 'InputType', 'KPIStatus',
    'ProjectAnalytics', 'PortfolioSummary', 'ProjectStatus', 'HealthTier', 'RiskLevel',
]
