# Progress Reconciliation - Modules
from .ingestion import (
    Snapshot, build_snapshot, load_snapshot_csv,
    project_from_row, activity_from_row, kpi_from_row, read_field,
)
from .reporting import analytics_to_dataframe, format_for_display, portfolio_rows
from .data_quality import DataQualityReport, build_data_quality_report

__all__ = [
    "Snapshot",
    "build_snapshot",
    "load_snapshot_csv",
    "project_from_row",
    "activity_from_row",
    "kpi_from_row",
    "read_field",
    "analytics_to_dataframe",
    "format_for_display",
    "portfolio_rows",
    "DataQualityReport",
    "build_data_quality_report",
]
