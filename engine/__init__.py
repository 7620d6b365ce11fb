"""
Projection engine — single-path projection, account-level projection with income and expense
streams, and the Monte Carlo runner.
"""

from .accounts import AccountProjection, project_accounts
from .cashflows import amount_for_year, annual_expense, annual_income, apply_change_over_time, cash_flow_schedule
from .projector import project, projection_table
from .runner import (
    HistoricalBacktestResult,
    MonteCarloAnalysis,
    SimulationResult,
    run_historical_backtest,
    run_monte_carlo_analysis,
    run_monte_carlo_simulation,
)

__all__ = [
    "AccountProjection",
    "project_accounts",
    "amount_for_year",
    "annual_expense",
    "annual_income",
    "apply_change_over_time",
    "cash_flow_schedule",
    "project",
    "projection_table",
    "HistoricalBacktestResult",
    "MonteCarloAnalysis",
    "SimulationResult",
    "run_historical_backtest",
    "run_monte_carlo_analysis",
    "run_monte_carlo_simulation",
]
