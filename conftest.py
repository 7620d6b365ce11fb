# Root conftest: shared fixtures only.

import pytest

from core.config import InflationSettings, ProjectionSettings, TaxSettings
from core.schema import Profile


@pytest.fixture
def make_profile():
    """Profile factory with inflation off and a short horizon unless overridden."""

    def _make(
        *,
        age=60,
        current_savings=100_000.0,
        annual_growth_rate=5.0,
        annual_spending=0.0,
        accounts=(),
        inflation_rate=0.0,
        adjust_spending=True,
        adjust_growth=False,
        max_projection_years=3,
        retirement_age=65,
        tax=None,
        withdrawal_strategy="proportional",
        incomes=(),
        expenses=(),
        rmd_start_age=73,
    ):
        settings = ProjectionSettings(
            inflation=InflationSettings(
                rate=inflation_rate,
                adjust_spending=adjust_spending,
                adjust_growth=adjust_growth,
            ),
            tax=tax if tax is not None else TaxSettings(),
            withdrawal_strategy=withdrawal_strategy,
            retirement_age=retirement_age,
            max_projection_years=max_projection_years,
            rmd_start_age=rmd_start_age,
        )
        return Profile(
            age=age,
            current_savings=current_savings,
            annual_growth_rate=annual_growth_rate,
            annual_spending=annual_spending,
            accounts=tuple(accounts),
            incomes=tuple(incomes),
            expenses=tuple(expenses),
            projection_settings=settings,
        )

    return _make
