"""Payout scheduling and interest calculation - pure functions on Decimal money"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from interest_account.domain.exceptions import TooManyMissedIntervalsError
from interest_account.utils.date_utils import whole_days_between

ZERO = Decimal("0.0")


def intervals_per_year(interval_days: int, days_per_year: int = 365) -> int:
    """Number of settlements in a year, e.g. 365 // 3 = 121"""
    return days_per_year // interval_days


def elapsed_intervals(last_payout_date: Optional[datetime], now: datetime, interval_days: int) -> int:
    """
    Count whole payout intervals since the last settlement.

    The day difference is absolute, so the result is never negative.
    A never-settled account (no date) has zero elapsed time.
    """
    if last_payout_date is None:
        return 0
    return whole_days_between(last_payout_date, now) // interval_days


def compute_interest(
    balance: int,
    annual_rate_percent: Decimal,
    elapsed: int,
    periods_per_year: int,
) -> Decimal:
    """
    Interest due for the current settlement, in fractional pennies.

    Policy:
    - 0 intervals elapsed: nothing accrued
    - 1 interval: balance * (rate / 100) / periods_per_year
    - more than 1: rejected, missed intervals are never summed

    Example:
        600000 pennies at 0.93% over 121 periods
        600000 * 0.0093 / 121 = 46.1157024793...

    Raises:
        TooManyMissedIntervalsError: More than one interval elapsed
    """
    if elapsed > 1:
        raise TooManyMissedIntervalsError(
            f"Handling of missed payout days not yet implemented ({elapsed} intervals elapsed)"
        )

    if elapsed < 1:
        return ZERO

    rate = Decimal(annual_rate_percent) / Decimal(100)
    return Decimal(balance) * rate / Decimal(periods_per_year)
