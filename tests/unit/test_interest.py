"""Unit tests for payout scheduling and interest calculation"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from interest_account.domain.exceptions import TooManyMissedIntervalsError
from interest_account.domain.interest import compute_interest, elapsed_intervals, intervals_per_year
from interest_account.utils.date_utils import whole_days_between

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def test_intervals_per_year():
    assert intervals_per_year(3) == 121
    assert intervals_per_year(7) == 52
    assert intervals_per_year(1) == 365


def test_whole_days_between_is_absolute():
    earlier = NOW - timedelta(days=3)
    assert whole_days_between(earlier, NOW) == 3
    assert whole_days_between(NOW, earlier) == 3


def test_whole_days_between_counts_complete_days():
    """2 days and 23 hours is still 2 days"""
    assert whole_days_between(NOW - timedelta(days=2, hours=23), NOW) == 2


def test_whole_days_between_naive_is_utc():
    naive = datetime(2024, 2, 27, 12, 0)
    assert whole_days_between(naive, NOW) == 3


def test_elapsed_intervals_same_day():
    assert elapsed_intervals(NOW, NOW, 3) == 0
    assert elapsed_intervals(NOW - timedelta(days=1), NOW, 3) == 0
    assert elapsed_intervals(NOW - timedelta(days=2), NOW, 3) == 0


def test_elapsed_intervals_whole_intervals():
    assert elapsed_intervals(NOW - timedelta(days=3), NOW, 3) == 1
    assert elapsed_intervals(NOW - timedelta(days=5), NOW, 3) == 1
    assert elapsed_intervals(NOW - timedelta(days=6), NOW, 3) == 2
    assert elapsed_intervals(NOW - timedelta(days=10), NOW, 3) == 3
    assert elapsed_intervals(NOW - timedelta(days=11), NOW, 3) == 3


def test_elapsed_intervals_never_negative():
    """A last payout in the future still counts absolute days"""
    assert elapsed_intervals(NOW + timedelta(days=3), NOW, 3) == 1


def test_elapsed_intervals_never_settled():
    assert elapsed_intervals(None, NOW, 3) == 0


def test_compute_interest_no_interval():
    assert compute_interest(600000, Decimal("0.93"), 0, 121) == Decimal("0.0")


def test_compute_interest_single_interval_exact():
    """600000 * 0.0093 / 121 computed in Decimal, no float drift"""
    interest = compute_interest(600000, Decimal("0.93"), 1, 121)

    expected = Decimal(600000) * (Decimal("0.93") / Decimal(100)) / Decimal(121)
    assert interest == expected
    assert isinstance(interest, Decimal)
    assert str(interest).startswith("46.11570247933884297520661")


def test_compute_interest_terminating_value():
    # 6000 * 0.0121 / 121 = 0.6
    assert compute_interest(6000, Decimal("1.21"), 1, 121) == Decimal("0.6")


def test_compute_interest_zero_balance():
    assert compute_interest(0, Decimal("1.02"), 1, 121) == 0


@pytest.mark.parametrize("elapsed", [2, 3, 10])
def test_compute_interest_rejects_missed_intervals(elapsed: int):
    with pytest.raises(TooManyMissedIntervalsError):
        compute_interest(600000, Decimal("0.93"), elapsed, 121)
