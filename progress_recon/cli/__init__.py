"""
CLI Module - Command-line interface for the Progress Reconciliation App.

Provides commands for:
- Analytics reports over CSV exports
- Data-quality review
- Write-back of derived figures
- Serving the API
"""
import click

from .analytics_commands import analytics, register_commands


@click.group()
@click.version_option(version='1.0.0')
def cli():
    """Progress Reconciliation CLI.

    Reconcile projects, BOQ activities and KPI records into
    earned-value analytics.
    """
    pass


@cli.command()
@click.option('--port', type=int, default=8000, help='Server port')
@click.option('--host', default='0.0.0.0', help='Server host')
@click.option('--reload', is_flag=True, help='Enable auto-reload')
def serve(port: int, host: str, reload: bool):
    """Start the API server.

    Example:
        progress-recon serve --port 8000 --reload
    """
    import uvicorn

    click.echo(click.style('Progress Reconciliation - API Server', fg='cyan', bold=True))
    click.echo(f"Starting server at http://{host}:{port}")

    uvicorn.run(
        "progress_recon.main:app",
        host=host,
        port=port,
        reload=reload
    )


register_commands(cli)

__all__ = ['cli', 'analytics', 'register_commands']
