#!/usr/bin/env python3
"""
CLI for the Progress Reconciliation App.

Usage:
    python cli.py analytics report --projects projects.csv --activities boq.csv --kpis kpis.csv
    python cli.py analytics portfolio --projects projects.csv --kpis kpis.csv --json
    python cli.py analytics unmatched --projects projects.csv --activities boq.csv --kpis kpis.csv
    python cli.py serve --port 8000

Commands:
    analytics   Earned-value reports, data-quality review and write-back
    serve       Start the API server
"""
import logging

from progress_recon.cli import cli

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


if __name__ == '__main__':
    cli()
