"""
Analytics CLI Commands - Run the engine over CSV exports.

Provides command-line interface for:
- Per-project analytics reports
- Single project lookup
- Portfolio summary
- Unmatched / unidentified record review
- Write-back of derived figures
"""
import click
import json
import logging
from datetime import datetime
from functools import wraps
from typing import Optional

import pandas as pd

from progress_recon.config import get_config
from progress_recon.models import get_db, init_db
from progress_recon.domain.exceptions import IngestionError, ProjectNotFoundError
from progress_recon.domain.services import (
    EngineSettings,
    ProgressAnalyticsEngine,
    WriteBackService,
    projects_at_risk,
    top_performing,
)
from progress_recon.modules.ingestion import Snapshot, load_snapshot_csv
from progress_recon.modules.reporting import analytics_to_dataframe, format_for_display, portfolio_rows
from progress_recon.modules.data_quality import build_data_quality_report

logger = logging.getLogger(__name__)


def snapshot_options(command):
    """Shared CSV input options; the wrapped command receives a loaded Snapshot."""
    @click.option('--projects', 'projects_path', required=True, type=click.Path(exists=True),
                  help='Projects CSV export')
    @click.option('--activities', 'activities_path', type=click.Path(exists=True),
                  help='BOQ activities CSV export')
    @click.option('--kpis', 'kpis_path', type=click.Path(exists=True),
                  help='KPI records CSV export')
    @click.option('--as-of', type=click.DateTime(formats=['%Y-%m-%d']),
                  help='Reference date for schedule counts (default: today)')
    @wraps(command)
    def wrapper(projects_path: str, activities_path: Optional[str], kpis_path: Optional[str],
                as_of: Optional[datetime], **kwargs):
        try:
            snapshot = load_snapshot_csv(projects_path, activities_path, kpis_path)
        except IngestionError as e:
            raise click.ClickException(e.message)
        logger.info(
            f"Loaded {len(snapshot.projects)} projects, {len(snapshot.activities)} activities, "
            f"{len(snapshot.kpis)} KPI records"
        )
        return command(snapshot=snapshot, as_of=as_of.date() if as_of else None, **kwargs)
    return wrapper


def _engine() -> ProgressAnalyticsEngine:
    return ProgressAnalyticsEngine(EngineSettings.from_config(get_config()))


@click.group()
def analytics():
    """Earned-value analytics commands."""
    pass


@analytics.command()
@snapshot_options
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
@click.option('--output', type=click.Path(), help='Also write the report to a CSV file')
def report(snapshot: Snapshot, as_of, output_json: bool, output: Optional[str]):
    """Analytics for every project."""
    results = _engine().compute_all(snapshot.projects, snapshot.activities, snapshot.kpis, as_of)

    if output_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
        return

    df = analytics_to_dataframe(results)
    if output:
        df.to_csv(output, index=False)
        click.echo(f"Report written to {output}")

    if df.empty:
        click.echo("No projects to report")
        return

    display = pd.DataFrame(format_for_display(df)).drop(columns=['variance_raw'])
    click.echo(display.to_string(index=False))


@analytics.command()
@click.argument('code')
@snapshot_options
def project(code: str, snapshot: Snapshot, as_of):
    """Analytics for one project by full or base code."""
    try:
        result = _engine().compute_by_code(code, snapshot.projects, snapshot.activities, snapshot.kpis, as_of)
    except ProjectNotFoundError as e:
        raise click.ClickException(e.message)

    click.echo(click.style(f"\n{result.project_full_code} {result.project_name}", fg='cyan', bold=True))
    row = format_for_display(analytics_to_dataframe([result]))[0]
    for column, value in row.items():
        if column in ('project_full_code', 'project_name', 'variance_raw'):
            continue
        click.echo(f"  {column}: {value}")

    click.echo("\nRecommendations:")
    for recommendation in result.recommendations:
        click.echo(f"  - {recommendation}")


@analytics.command()
@snapshot_options
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON')
def portfolio(snapshot: Snapshot, as_of, output_json: bool):
    """Portfolio summary across all projects."""
    result = _engine().analyze(snapshot.projects, snapshot.activities, snapshot.kpis, as_of)
    summary = result.portfolio

    if output_json:
        click.echo(json.dumps(summary.to_dict(), indent=2))
        return

    click.echo(click.style('Portfolio Summary', fg='cyan', bold=True))
    for row in portfolio_rows(summary):
        click.echo(f"  {row['label']}: {row['value']}")

    click.echo("\nHealth:")
    for tier, count in summary.health_distribution.items():
        click.echo(f"  {tier}: {count}")

    click.echo("\nRisk:")
    for level, count in summary.risk_distribution.items():
        click.echo(f"  {level}: {count}")

    best = top_performing(result.projects)
    if best:
        click.echo("\nTop performing:")
        for item in best:
            click.echo(f"  {item.project_full_code} ({item.actual_progress:.1f}%)")

    at_risk = projects_at_risk(result.projects)
    if at_risk:
        click.echo(click.style("\nProjects at risk:", fg='red'))
        for item in at_risk:
            click.echo(f"  {item.project_full_code} ({item.risk_level.value})")

    if summary.recommendations:
        click.echo("\nRecommendations:")
        for recommendation in summary.recommendations:
            click.echo(f"  - {recommendation}")


@analytics.command()
@snapshot_options
def unmatched(snapshot: Snapshot, as_of):
    """List records that matched no project."""
    report = build_data_quality_report(snapshot.projects, snapshot.activities, snapshot.kpis, engine=_engine())

    if report.is_clean:
        click.echo(click.style("✓ Every record is attributed to a project", fg='green'))
        return

    for line in report.summary_lines():
        click.echo(click.style(line, fg='yellow'))

    for record in report.unmatched_activities + report.unmatched_kpis:
        hint = f" (did you mean {record.suggestion}?)" if record.suggestion else ""
        click.echo(f"  [{record.kind}] {record.record_key}: {', '.join(record.codes)}{hint}")


@analytics.command('write-back')
@snapshot_options
def write_back(snapshot: Snapshot, as_of):
    """Persist activity rates and project metrics to the database."""
    init_db()
    results = _engine().compute_all(snapshot.projects, snapshot.activities, snapshot.kpis, as_of)

    db = next(get_db())
    try:
        result = WriteBackService(db).write_back(snapshot.activities, results)
    finally:
        db.close()

    if not result.success:
        logger.warning(f"Write-back finished with {len(result.errors)} failed records")
    click.echo(f"Updated {result.updated_activities} activities, {result.updated_projects} projects")
    if result.success:
        click.echo(click.style("✓ Write-back complete", fg='green'))
        return

    click.echo(click.style(f"✗ {len(result.errors)} records failed:", fg='red'))
    for error in result.errors:
        click.echo(f"  - {error.record_key}: {error.reason}")


def register_commands(cli):
    """Register analytics commands with main CLI."""
    cli.add_command(analytics)
