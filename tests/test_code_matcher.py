"""
Tests for the rule-based project code matcher.
"""
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from progress_recon.domain.entities import Activity, KPIRecord, Project
from progress_recon.domain.services.code_matcher import (
    DEFAULT_RULES,
    CodeMatcher,
    MatchRule,
    composed_full_code,
    exact_full_code,
    legacy_base_code,
    straight_legacy,
)
from progress_recon.domain.services.identifier_normalizer import project_identity


@pytest.fixture
def matcher():
    return CodeMatcher()


@pytest.fixture
def p100a():
    return Project(code="P100", sub_code="A", name="Tower A")


class TestRulePredicates:
    """Each rule in isolation."""

    def test_exact_full_code(self):
        identity = project_identity(Project(code="P100", sub_code="A"))
        assert exact_full_code("P100-A", identity) is True
        assert exact_full_code("P100-B", identity) is False

    def test_legacy_base_code(self):
        identity = project_identity(Project(code="P100", sub_code="A"))
        assert legacy_base_code("P100", identity) is True
        assert legacy_base_code("P100-B", identity) is False

    def test_legacy_base_code_needs_sub_code(self):
        identity = project_identity(Project(code="P100"))
        assert legacy_base_code("P100", identity) is False

    def test_composed_full_code(self):
        identity = project_identity(Project(code="P100", sub_code="A"), separators=("-", "/"))
        assert composed_full_code("P100/A", identity) is True
        assert composed_full_code("P100/B", identity) is False
        assert composed_full_code("P100", identity) is False

    def test_straight_legacy(self):
        assert straight_legacy("X1", project_identity(Project(code="X1"))) is True
        assert straight_legacy("X1", project_identity(Project(code="X1", sub_code="01"))) is False

    def test_default_rule_priorities(self):
        names = [r.name for r in sorted(DEFAULT_RULES, key=lambda r: -r.priority)]
        assert names == ["exact_full_code", "legacy_base_code", "composed_full_code", "straight_legacy"]


class TestCodeMatcher:
    """Tests for CodeMatcher over records and projects."""

    def test_legacy_record_matches_sub_coded_project(self, matcher, p100a):
        """A record carrying only the base code matches P100-A."""
        kpi = KPIRecord(project_code="P100")
        assert matcher.record_matches(kpi, p100a) is True

    def test_other_full_code_does_not_match(self, matcher, p100a):
        """A record for P100-B never matches P100-A through its base code."""
        kpi = KPIRecord(project_code="P100", project_full_code="P100-B")
        assert matcher.record_matches(kpi, p100a) is False

    def test_full_coded_record_matches_plain_project(self, matcher):
        """A record with base and full code reaches a project without sub-code via its base code."""
        kpi = KPIRecord(project_code="X1", project_full_code="X1-01")
        assert matcher.record_matches(kpi, Project(code="X1")) is True
        assert matcher.explain(matcher.codes_for(kpi), matcher.identity_for(Project(code="X1"))) == "straight_legacy"

    def test_full_code_matches_case_insensitively(self, matcher, p100a):
        kpi = KPIRecord(project_full_code="p100-a")
        assert matcher.record_matches(kpi, p100a) is True

    def test_base_and_sub_code_match(self, matcher, p100a):
        activity = Activity(project_code="P100", project_sub_code="-A")
        assert matcher.record_matches(activity, p100a) is True

    def test_sub_code_prefixed_with_code(self, matcher):
        project = Project(code="P5067", sub_code="P5067-01")
        kpi = KPIRecord(project_code="P5067", project_sub_code="01")
        assert matcher.record_matches(kpi, project) is True

    def test_plain_project(self, matcher):
        project = Project(code="X1")
        assert matcher.record_matches(KPIRecord(project_code="x1"), project) is True
        assert matcher.record_matches(KPIRecord(project_code="X2"), project) is False

    def test_record_without_code_never_matches(self, matcher, p100a):
        assert matcher.record_matches(KPIRecord(), p100a) is False

    def test_explain_reports_rule(self, matcher, p100a):
        identity = matcher.identity_for(p100a)
        assert matcher.explain({"P100-A"}, identity) == "exact_full_code"
        assert matcher.explain({"P100"}, identity) == "legacy_base_code"
        assert matcher.explain({"P200"}, identity) is None

    def test_rule_order_does_not_change_result(self, p100a):
        """Reversing rule priorities gives the same match decisions."""
        reversed_rules = [
            MatchRule(name=r.name, priority=-r.priority, predicate=r.predicate, bare_records_only=r.bare_records_only)
            for r in DEFAULT_RULES
        ]
        forward = CodeMatcher()
        backward = CodeMatcher(rules=reversed_rules)
        records = [
            KPIRecord(project_code="P100"),
            KPIRecord(project_full_code="P100-A"),
            KPIRecord(project_full_code="P100-B"),
            KPIRecord(project_code="P200"),
        ]
        assert [forward.record_matches(r, p100a) for r in records] == \
               [backward.record_matches(r, p100a) for r in records]

    def test_filter_records(self, matcher, p100a):
        records = [
            KPIRecord(id="1", project_code="P100"),
            KPIRecord(id="2", project_full_code="P100-B"),
            KPIRecord(id="3", project_full_code="P100-A"),
            KPIRecord(id="4"),
        ]
        assert [r.id for r in matcher.filter_records(records, p100a)] == ["1", "3"]
