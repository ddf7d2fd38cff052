"""
Reporting Module - Tabular and display views of project analytics.

Turns ProjectAnalytics into a pandas DataFrame for export and CLI output, and
formats money/percent columns for display using the ui.currency settings.
"""
import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from progress_recon.config import ProgressConfig, get_config
from progress_recon.domain.entities import PortfolioSummary, ProjectAnalytics

logger = logging.getLogger(__name__)

REPORT_COLUMNS = [
    'project_full_code', 'project_name',
    'total_activities', 'delayed_activities', 'total_kpis', 'unclassified_kpis',
    'total_contract_value', 'total_value', 'total_planned_value', 'total_earned_value',
    'total_remaining_value', 'variance',
    'total_quantity', 'total_earned_quantity',
    'actual_progress', 'planned_progress', 'quantity_progress', 'variance_percentage',
    'average_delay', 'project_status', 'project_health', 'risk_level',
]

MONEY_COLUMNS = [
    'total_contract_value', 'total_value', 'total_planned_value', 'total_earned_value',
    'total_remaining_value', 'variance',
]

PERCENT_COLUMNS = [
    'actual_progress', 'planned_progress', 'quantity_progress', 'variance_percentage', 'average_delay',
]


def analytics_to_dataframe(analytics: Sequence[ProjectAnalytics]) -> pd.DataFrame:
    """
    One row per project, REPORT_COLUMNS order, money and percents rounded to 2dp.
    """
    if not analytics:
        return pd.DataFrame(columns=REPORT_COLUMNS)

    df = pd.DataFrame([a.to_dict() for a in analytics])[REPORT_COLUMNS]
    rounded = MONEY_COLUMNS + PERCENT_COLUMNS + ['total_quantity', 'total_earned_quantity']
    df[rounded] = np.round(df[rounded].astype(float), 2)
    return df


def format_money(amount: float, currency: Optional[Dict] = None) -> str:
    """
    Format an amount using the configured currency.

    Examples:
        1234.5  -> 'AED 1,234.50'
        -500    -> '-AED 500.00'
    """
    currency = currency or get_config().currency_config
    symbol = currency.get('symbol', '')
    places = int(currency.get('decimal_places', 2))
    separator = currency.get('thousands_separator', ',')

    text = f"{abs(amount):,.{places}f}"
    if separator != ',':
        text = text.replace(',', separator)
    sign = '-' if amount < 0 else ''
    return f"{sign}{symbol}{text}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_for_display(df: pd.DataFrame, config: Optional[ProgressConfig] = None) -> List[Dict]:
    """
    Convert an analytics DataFrame to a list of dicts for display.

    Money columns become currency strings, percent columns 'x.x%'. The raw
    variance is kept as 'variance_raw' for sign-based styling.
    """
    config = config or get_config()
    currency = config.currency_config

    rows = []
    for _, row in df.iterrows():
        display = {}
        for column in df.columns:
            value = row[column]
            if column in MONEY_COLUMNS:
                display[column] = format_money(float(value), currency)
            elif column in PERCENT_COLUMNS:
                display[column] = format_percent(float(value))
            else:
                display[column] = value
        display['variance_raw'] = float(row['variance']) if 'variance' in df.columns else 0.0
        rows.append(display)
    return rows


def portfolio_rows(summary: PortfolioSummary, config: Optional[ProgressConfig] = None) -> List[Dict]:
    """Label/value rows for the portfolio headline figures."""
    config = config or get_config()
    currency = config.currency_config
    return [
        {'label': 'Projects', 'value': str(summary.total_projects)},
        {'label': 'Total value', 'value': format_money(summary.total_value, currency)},
        {'label': 'Planned value', 'value': format_money(summary.total_planned_value, currency)},
        {'label': 'Earned value', 'value': format_money(summary.total_earned_value, currency)},
        {'label': 'Variance', 'value': format_money(summary.variance, currency)},
        {'label': 'Overall progress', 'value': format_percent(summary.overall_progress)},
        {'label': 'Unmatched activities', 'value': str(summary.unmatched_activities)},
        {'label': 'Unmatched KPI records', 'value': str(summary.unmatched_kpis)},
    ]
