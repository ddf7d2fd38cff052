"""
Tests for the portfolio rollup and lookups over project analytics.
"""
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from progress_recon.domain.entities import (
    SUMMABLE_FIELDS,
    HealthTier,
    ProjectAnalytics,
    ProjectStatus,
    RiskLevel,
)
from progress_recon.domain.services.portfolio_rollup import (
    find_by_code,
    projects_at_risk,
    rollup,
    top_performing,
)


@pytest.fixture
def analytics():
    return [
        ProjectAnalytics(
            project_code="P100", project_sub_code="A", project_full_code="P100-A",
            total_activities=4, total_kpis=10, total_value=1000.0, total_planned_value=1000.0,
            total_earned_value=400.0, variance=-600.0, actual_progress=40.0, overall_progress=40.0,
            project_status=ProjectStatus.DELAYED, project_health=HealthTier.CRITICAL,
            risk_level=RiskLevel.HIGH,
            recommendations=("Review schedule.", "Add crews."),
        ),
        ProjectAnalytics(
            project_code="X1", project_full_code="X1",
            total_activities=2, total_kpis=3, total_value=3000.0, total_planned_value=3000.0,
            total_earned_value=2700.0, variance=-300.0, actual_progress=90.0, overall_progress=90.0,
            project_status=ProjectStatus.ON_TRACK, project_health=HealthTier.EXCELLENT,
            risk_level=RiskLevel.LOW,
            recommendations=("Add crews.",),
        ),
    ]


class TestRollup:
    """Tests for rollup."""

    def test_totals_equal_sum_of_projects(self, analytics):
        summary = rollup(analytics)
        for name in SUMMABLE_FIELDS:
            assert summary.totals[name] == sum(getattr(a, name) for a in analytics)

    def test_summable_fields_exclude_percentages(self):
        assert 'total_value' in SUMMABLE_FIELDS
        assert 'total_kpis' in SUMMABLE_FIELDS
        assert 'actual_progress' not in SUMMABLE_FIELDS
        assert 'variance_percentage' not in SUMMABLE_FIELDS

    def test_overall_progress(self, analytics):
        summary = rollup(analytics)
        assert summary.total_projects == 2
        assert summary.total_value == 4000.0
        assert summary.total_earned_value == 3100.0
        assert summary.overall_progress == pytest.approx(77.5)

    def test_distributions_include_every_member(self, analytics):
        summary = rollup(analytics)
        assert summary.health_distribution == {'excellent': 1, 'good': 0, 'warning': 0, 'critical': 1}
        assert summary.risk_distribution == {'low': 1, 'medium': 0, 'high': 1, 'critical': 0}
        assert summary.status_distribution == {'ahead': 0, 'on_track': 1, 'delayed': 1}

    def test_recommendations_deduplicated_in_order(self, analytics):
        summary = rollup(analytics)
        assert summary.recommendations == ("Review schedule.", "Add crews.")

    def test_match_counts_carried(self, analytics):
        summary = rollup(analytics, unmatched_activities=2, unmatched_kpis=5, unidentified_records=1)
        data = summary.to_dict()
        assert data['unmatched_activities'] == 2
        assert data['unmatched_kpis'] == 5
        assert data['unidentified_records'] == 1

    def test_empty_portfolio(self):
        summary = rollup([])
        assert summary.total_projects == 0
        assert summary.overall_progress == 0.0
        assert summary.total_value == 0


class TestLookups:
    """Tests for top_performing, projects_at_risk and find_by_code."""

    def test_top_performing(self, analytics):
        assert [a.project_full_code for a in top_performing(analytics)] == ["X1", "P100-A"]
        assert len(top_performing(analytics, limit=1)) == 1

    def test_projects_at_risk(self, analytics):
        assert [a.project_full_code for a in projects_at_risk(analytics)] == ["P100-A"]

    def test_find_by_full_code(self, analytics):
        assert find_by_code(analytics, "p100-a").project_code == "P100"

    def test_find_by_base_code(self, analytics):
        assert find_by_code(analytics, "P100").project_full_code == "P100-A"

    def test_not_found(self, analytics):
        assert find_by_code(analytics, "Z9") is None
        assert find_by_code(analytics, "") is None
