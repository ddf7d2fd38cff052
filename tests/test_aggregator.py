"""
Tests for per-project aggregation.
"""
import pytest
import sys
from datetime import date
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from progress_recon.domain.entities import Activity, InputType, KPIRecord, KPIStatus, Project
from progress_recon.domain.services.aggregator import aggregate_project

AS_OF = date(2024, 6, 30)


@pytest.fixture
def project():
    return Project(code="Y2", name="Villa Y2")


def kpi(input_type, **kwargs):
    return KPIRecord(project_code="Y2", input_type=input_type, **kwargs)


class TestValueTotals:
    """Financial totals from KPI contributions."""

    def test_planned_and_earned_totals(self, project):
        kpis = [
            kpi(InputType.PLANNED, planned_value=1000),
            kpi(InputType.PLANNED, planned_value=2000),
            kpi(InputType.ACTUAL, actual_value=900),
        ]
        totals = aggregate_project(project, [], kpis, as_of=AS_OF)
        assert totals.total_value == 3000
        assert totals.total_planned_value == 3000
        assert totals.total_earned_value == 900
        assert totals.total_remaining_value == 2100
        assert totals.variance == -2100
        assert totals.actual_progress == pytest.approx(30.0)
        assert totals.planned_progress == pytest.approx(100.0)
        assert totals.overall_progress == totals.actual_progress

    def test_total_value_ignores_activity_values(self, project):
        """Value comes from Planned KPIs even when activities declare another total."""
        activities = [Activity(activity_name="Slab", total_units=10, total_value=99999)]
        kpis = [kpi(InputType.PLANNED, planned_value=500)]
        totals = aggregate_project(project, activities, kpis, as_of=AS_OF)
        assert totals.total_value == 500

    def test_progress_clamped_when_earned_exceeds_total(self, project):
        kpis = [
            kpi(InputType.PLANNED, planned_value=100),
            kpi(InputType.ACTUAL, actual_value=250),
        ]
        totals = aggregate_project(project, [], kpis, as_of=AS_OF)
        assert totals.actual_progress == 100.0
        assert totals.variance == 150

    def test_contract_value_falls_back_to_total(self, project):
        totals = aggregate_project(project, [], [kpi(InputType.PLANNED, planned_value=400)], as_of=AS_OF)
        assert totals.total_contract_value == 400

        contracted = Project(code="Y2", contract_amount=500000)
        totals = aggregate_project(contracted, [], [kpi(InputType.PLANNED, planned_value=400)], as_of=AS_OF)
        assert totals.total_contract_value == 500000


class TestQuantityTotals:
    """Quantity totals prefer activity units over Planned-KPI quantities."""

    def test_activity_units_preferred(self, project):
        activities = [
            Activity(activity_name="Slab", total_units=60),
            Activity(activity_name="Walls", planned_units=40),
        ]
        kpis = [
            kpi(InputType.PLANNED, quantity=500, planned_value=1),
            kpi(InputType.ACTUAL, quantity=25, actual_value=1),
        ]
        totals = aggregate_project(project, activities, kpis, as_of=AS_OF)
        assert totals.total_quantity == 100
        assert totals.total_planned_quantity == 500
        assert totals.total_earned_quantity == 25
        assert totals.quantity_progress == pytest.approx(25.0)
        assert totals.total_remaining_quantity == 75

    def test_planned_quantity_when_no_activity_units(self, project):
        kpis = [kpi(InputType.PLANNED, quantity=80, planned_value=1)]
        totals = aggregate_project(project, [], kpis, as_of=AS_OF)
        assert totals.total_quantity == 80
        assert totals.quantity_variance == -80


class TestCounts:
    """Activity and KPI counters."""

    def test_unclassified_kpis_excluded(self, project):
        kpis = [
            kpi(InputType.PLANNED, planned_value=100),
            kpi(None, value=5000),
        ]
        totals = aggregate_project(project, [], kpis, as_of=AS_OF)
        assert totals.total_kpis == 2
        assert totals.planned_kpis == 1
        assert totals.unclassified_kpis == 1
        assert totals.total_value == 100
        assert totals.total_earned_value == 0

    def test_kpi_status_counts(self, project):
        kpis = [
            kpi(InputType.ACTUAL, status=KPIStatus.AT_RISK),
            kpi(InputType.ACTUAL, status=KPIStatus.AT_RISK),
            kpi(InputType.ACTUAL, status=KPIStatus.COMPLETED),
            kpi(InputType.PLANNED, status=KPIStatus.DELAYED),
        ]
        totals = aggregate_project(project, [], kpis, as_of=AS_OF)
        assert totals.at_risk_kpis == 2
        assert totals.completed_kpis == 1
        assert totals.delayed_kpis == 1
        assert totals.on_track_kpis == 0

    def test_activity_flags(self, project):
        activities = [
            Activity(activity_name="a", activity_completed=True, activity_on_track=True),
            Activity(activity_name="b", activity_on_track=True),
            Activity(activity_name="c", activity_delayed=True, delay_percentage=30),
            Activity(activity_name="d"),
        ]
        totals = aggregate_project(project, activities, [], as_of=AS_OF)
        assert totals.total_activities == 4
        assert totals.completed_activities == 1
        assert totals.on_track_activities == 1
        assert totals.delayed_activities == 1
        assert totals.not_started_activities == 1
        assert totals.average_delay == pytest.approx(7.5)

    def test_schedule_counts(self, project):
        activities = [
            Activity(activity_name="done", deadline=date(2024, 1, 1), activity_progress_percentage=90),
            Activity(activity_name="future", deadline=date(2024, 12, 31), activity_progress_percentage=10),
            Activity(activity_name="late", deadline=date(2024, 3, 1), activity_progress_percentage=40),
            Activity(activity_name="today", deadline=AS_OF, activity_progress_percentage=40),
            Activity(activity_name="undated", activity_progress_percentage=10),
        ]
        totals = aggregate_project(project, activities, [], as_of=AS_OF)
        assert totals.activities_on_schedule == 2
        assert totals.activities_behind_schedule == 1


class TestEmptyProject:
    """A project with nothing attributed to it."""

    def test_all_zero(self, project):
        totals = aggregate_project(project, [], [], as_of=AS_OF)
        assert totals.total_value == 0
        assert totals.total_earned_value == 0
        assert totals.actual_progress == 0
        assert totals.planned_progress == 0
        assert totals.quantity_progress == 0
        assert totals.average_delay == 0
