"""Tiered interest rate table and rate selection by monthly income"""

from decimal import Decimal
from typing import Optional, Sequence

from interest_account.domain.exceptions import NoApplicableRateError
from interest_account.domain.models import RateTier

# Monthly income in pennies. The zero-floor tier only applies to unknown income.
RATE_TIERS: tuple[RateTier, ...] = (
    RateTier(annual_rate=Decimal("0.5"), min_income=0, max_income=0),
    RateTier(annual_rate=Decimal("0.93"), min_income=1, max_income=4999),
    RateTier(annual_rate=Decimal("1.02"), min_income=5000, max_income=0),
)


def select_rate(monthly_income: Optional[int], tiers: Sequence[RateTier] = RATE_TIERS) -> Decimal:
    """
    Select the yearly interest rate for a monthly income.

    Rules:
    - Unknown income (None or < 1) gets the zero-floor tier (min_income == 0)
    - Otherwise the first tier whose range contains the income wins
    - max_income == 0 means the tier has no upper bound, except for the
      zero-floor tier (0, 0) which never takes part in the range scan

    Raises:
        NoApplicableRateError: No tier covers the income
    """
    if monthly_income is None:
        monthly_income = 0

    if monthly_income < 1:
        for tier in tiers:
            if tier.min_income == 0:
                return tier.annual_rate

    for tier in tiers:
        if tier.matches(monthly_income):
            return tier.annual_rate

    raise NoApplicableRateError("No interest rate is available for given monthly income")
