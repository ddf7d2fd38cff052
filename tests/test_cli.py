"""
Tests for the analytics CLI commands.
"""
import json
import logging
import pytest
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from click.testing import CliRunner

from progress_recon.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def csv_files(tmp_path):
    projects = tmp_path / "projects.csv"
    projects.write_text(
        "Project Code,Project Sub Code,Project Name\n"
        "X1,,Warehouse\n"
        "Y2,,Villa\n"
    )
    activities = tmp_path / "boq.csv"
    activities.write_text(
        "id,Project Code,Activity Name,Total Units,Total Value\n"
        "A1,X1,Excavation,100,50000\n"
        "A2,Z9,Orphan,1,1\n"
    )
    kpis = tmp_path / "kpis.csv"
    kpis.write_text(
        "Project Code,Activity Name,Input Type,Quantity,Planned Value,Actual Value\n"
        "X1,Excavation,Planned,100,50000,\n"
        "X1,Excavation,Actual,20,,\n"
        "Y2,,Planned,,1000,\n"
        "Y2,,Planned,,2000,\n"
        "Y2,,Actual,,,900\n"
        "X2,,Actual,,,10\n"
    )
    return [
        '--projects', str(projects),
        '--activities', str(activities),
        '--kpis', str(kpis),
        '--as-of', '2024-06-30',
    ]


class TestReport:
    """Tests for `analytics report`."""

    def test_table(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'report'] + csv_files)
        assert result.exit_code == 0, result.output
        assert "X1" in result.output
        assert "AED 50,000.00" in result.output
        assert "delayed" in result.output

    def test_json(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'report', '--json'] + csv_files)
        assert result.exit_code == 0, result.output
        data = {p['project_full_code']: p for p in json.loads(result.output)}
        assert data['X1']['total_earned_value'] == 10000.0
        assert data['Y2']['variance'] == -2100.0

    def test_csv_output(self, runner, csv_files, tmp_path):
        output = tmp_path / "report.csv"
        result = runner.invoke(cli, ['analytics', 'report', '--output', str(output)] + csv_files)
        assert result.exit_code == 0, result.output
        assert output.exists()
        assert output.read_text().startswith("project_full_code,project_name")

    def test_logs_load_summary(self, runner, csv_files, caplog):
        with caplog.at_level(logging.INFO, logger="progress_recon.cli.analytics_commands"):
            result = runner.invoke(cli, ['analytics', 'report'] + csv_files)
        assert result.exit_code == 0, result.output
        assert "Loaded 2 projects, 2 activities, 6 KPI records" in caplog.text

    def test_missing_code_column(self, runner, csv_files, tmp_path):
        bad = tmp_path / "bad_kpis.csv"
        bad.write_text("Activity Name,Quantity\nSlab,3\n")
        args = list(csv_files)
        args[args.index('--kpis') + 1] = str(bad)
        result = runner.invoke(cli, ['analytics', 'report'] + args)
        assert result.exit_code != 0
        assert "Cannot ingest" in result.output


class TestProject:
    """Tests for `analytics project`."""

    def test_found(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'project', 'y2'] + csv_files)
        assert result.exit_code == 0, result.output
        assert "Villa" in result.output
        assert "significantly behind schedule" in result.output

    def test_not_found(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'project', 'Q42'] + csv_files)
        assert result.exit_code != 0
        assert "not found" in result.output


class TestPortfolio:
    """Tests for `analytics portfolio`."""

    def test_summary(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'portfolio'] + csv_files)
        assert result.exit_code == 0, result.output
        assert "Projects: 2" in result.output
        assert "Unmatched KPI records: 1" in result.output

    def test_json(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'portfolio', '--json'] + csv_files)
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data['totals']['total_value'] == 53000.0
        assert data['unmatched_activities'] == 1


class TestUnmatched:
    """Tests for `analytics unmatched`."""

    def test_lists_records(self, runner, csv_files):
        result = runner.invoke(cli, ['analytics', 'unmatched'] + csv_files)
        assert result.exit_code == 0, result.output
        assert "1 activities unmatched" in result.output
        assert "[activity] A2: Z9" in result.output
        assert "[kpi]" in result.output

    def test_clean(self, runner, tmp_path):
        projects = tmp_path / "projects.csv"
        projects.write_text("project_code\nX1\n")
        result = runner.invoke(cli, ['analytics', 'unmatched', '--projects', str(projects)])
        assert result.exit_code == 0, result.output
        assert "Every record is attributed" in result.output


class TestVersion:
    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert "1.0.0" in result.output
