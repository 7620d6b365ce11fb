"""
Tax evaluation — progressive brackets over injected tables, plus flat-rate helpers and required minimum distributions.
"""

from .brackets import (
    TaxBracket,
    TaxSchedule,
    TaxTable,
    brackets_from_rows,
    calculate_tax,
    effective_rate,
    marginal_rate,
)
from .rates import CapitalGainsTaxResult, calculate_capital_gains_tax, calculate_ordinary_income_tax
from .rmd import (
    UNIFORM_LIFETIME_TABLE,
    is_subject_to_rmd,
    life_expectancy_factor,
    required_distributions,
    required_minimum_distribution,
)

__all__ = [
    "TaxBracket",
    "TaxSchedule",
    "TaxTable",
    "brackets_from_rows",
    "calculate_tax",
    "effective_rate",
    "marginal_rate",
    "CapitalGainsTaxResult",
    "calculate_capital_gains_tax",
    "calculate_ordinary_income_tax",
    "UNIFORM_LIFETIME_TABLE",
    "is_subject_to_rmd",
    "life_expectancy_factor",
    "required_distributions",
    "required_minimum_distribution",
]
