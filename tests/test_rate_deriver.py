"""
Tests for activity rate derivation and guarded arithmetic.
"""
import math
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from progress_recon.domain.entities import Activity
from progress_recon.domain.services.numeric import as_finite, clamp_percent, percentage, safe_divide
from progress_recon.domain.services.rate_deriver import compute_activity_rate, derive_rate


class TestNumeric:
    """Tests for the guarded arithmetic helpers."""

    def test_safe_divide(self):
        assert safe_divide(10, 4) == 2.5
        assert safe_divide(10, 0) == 0.0
        assert safe_divide(10, -5) == 0.0
        assert safe_divide(10, float('nan')) == 0.0
        assert safe_divide(10, None) == 0.0

    def test_percentage(self):
        assert percentage(30, 120) == 25.0
        assert percentage(30, 0) == 0.0

    def test_clamp_percent(self):
        assert clamp_percent(150.0) == 100.0
        assert clamp_percent(-3.0) == 0.0
        assert clamp_percent(42.0) == 42.0

    def test_as_finite(self):
        assert as_finite("12.5") == 12.5
        assert as_finite(None) is None
        assert as_finite(float('inf')) is None
        assert as_finite("abc") is None
        assert as_finite(True) is None


class TestDeriveRate:
    """Tests for derive_rate."""

    def test_basic_rate(self):
        assert derive_rate(Activity(total_units=100, total_value=50000)) == 500.0

    def test_falls_back_to_planned_fields(self):
        activity = Activity(planned_units=40, planned_value=2000)
        assert derive_rate(activity) == 50.0

    def test_total_fields_take_precedence(self):
        activity = Activity(total_units=10, planned_units=40, total_value=1000, planned_value=2000)
        assert derive_rate(activity) == 100.0

    @pytest.mark.parametrize("units", [0, None])
    def test_zero_units_gives_zero(self, units):
        """No exception, no inf or NaN."""
        rate = derive_rate(Activity(total_units=units, total_value=50000))
        assert rate == 0.0
        assert math.isfinite(rate)

    @pytest.mark.parametrize("value", [0, -100, None])
    def test_non_positive_value_gives_zero(self, value):
        assert derive_rate(Activity(total_units=10, total_value=value)) == 0.0

    def test_none_activity(self):
        assert derive_rate(None) == 0.0


class TestComputeActivityRate:
    """Tests for compute_activity_rate."""

    def test_earned_value_and_progress(self):
        activity = Activity(
            id="A1", project_code="X1", activity_name="Excavation",
            total_units=100, total_value=50000, actual_units=20,
        )
        result = compute_activity_rate(activity)
        assert result.rate == 500.0
        assert result.actual_value == 10000.0
        assert result.earned_value == 10000.0
        assert result.progress == 20.0
        assert result.project_code == "X1"

    def test_earned_value_capped_at_planned(self):
        activity = Activity(total_units=10, total_value=1000, actual_units=15)
        result = compute_activity_rate(activity)
        assert result.actual_value == 1500.0
        assert result.earned_value == 1000.0
        assert result.progress == 100.0

    def test_to_dict(self):
        result = compute_activity_rate(Activity(activity_name="Piling"))
        data = result.to_dict()
        assert data['activity_name'] == "Piling"
        assert data['rate'] == 0.0
        assert data['progress'] == 0.0
