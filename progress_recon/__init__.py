"""
Progress & Earned-Value Reconciliation.

Reconciles projects, BOQ activities and KPI quantity records into earned-value
analytics per project and per portfolio.
"""

__version__ = "1.0.0"
