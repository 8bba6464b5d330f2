"""Settlement engine - decides whether interest is due and pays it into the ledger"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_FLOOR
from typing import Callable

from interest_account.config import settings
from interest_account.domain.exceptions import LedgerWriteError, TooManyMissedIntervalsError
from interest_account.domain.interest import compute_interest, elapsed_intervals, intervals_per_year
from interest_account.domain.ledger import LedgerClient
from interest_account.domain.models import (
    AccountSnapshot,
    BelowMinimumUnit,
    NoPayoutDue,
    Settled,
    SettlementError,
    SettlementResult,
    ZeroInterestAccrued,
)
from interest_account.utils.date_utils import utcnow

MINIMUM_UNIT = Decimal(1)  # one penny

INTEREST_CALCULATION_ERROR = "InterestCalculationError"


def split_whole_units(amount: Decimal) -> tuple[int, Decimal]:
    """
    Split a fractional penny amount into depositable pennies and a remainder.

    Example:
        46.1157 -> (46, 0.1157)
    """
    whole = amount.to_integral_value(rounding=ROUND_FLOOR)
    return int(whole), amount - whole


class SettlementEngine:
    """Runs one interest payout against a fresh account snapshot"""

    def __init__(
        self,
        ledger: LedgerClient,
        interval_days: int | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.ledger = ledger
        self.interval_days = interval_days or settings.payout_interval_days
        self.periods_per_year = intervals_per_year(self.interval_days, settings.days_per_year)
        self.clock = clock

    def settle(self, snapshot: AccountSnapshot) -> SettlementResult:
        """
        Settle accrued interest for the snapshot's account.

        Flow:
        1. No whole interval elapsed -> NoPayoutDue
        2. Compute interest, more than one interval -> SettlementError
        3. Zero interest -> ZeroInterestAccrued
        4. Add the carried remainder
        5. Below one penny -> store interest as remainder, BelowMinimumUnit
        6. Deposit whole pennies, reset and store the new remainder, log transaction

        Ledger writes always happen in the order deposit -> reset remainder ->
        set remainder -> log transaction, so an operator can recover the
        remainder from the transaction log after a partial failure.

        Raises:
            LedgerWriteError: Deposit or one of the writes after it was not
                accepted by the ledger
        """
        now = self.clock()
        elapsed = elapsed_intervals(snapshot.last_payout_date, now, self.interval_days)
        if elapsed == 0:
            return NoPayoutDue()

        try:
            interest = compute_interest(
                snapshot.total_balance,
                snapshot.interest_rate,
                elapsed,
                self.periods_per_year,
            )
        except TooManyMissedIntervalsError as e:
            logging.warning(f"Interest calculation failed: {e}", extra={"user_id": str(snapshot.user_id)})
            return SettlementError(kind=INTEREST_CALCULATION_ERROR)

        if interest == 0:
            return ZeroInterestAccrued()

        total_due = interest + snapshot.skipped_payout

        if total_due < MINIMUM_UNIT:
            # Stores the new interest alone, the existing remainder is not added in
            if not self.ledger.set_skipped_payout(interest):
                raise LedgerWriteError("Storing skipped payout failed. Contact support", remainder=interest)
            if not self.ledger.record_transaction(now, True):
                raise LedgerWriteError("Payout transaction was not logged. Contact support", remainder=interest)
            return BelowMinimumUnit(carried=interest)

        deposit_amount, remainder = split_whole_units(total_due)

        new_balance = self.ledger.deposit_into_account(deposit_amount)
        if new_balance is None:
            raise LedgerWriteError("Interest payout deposit failed. Contact support")

        # Pennies have moved; each remaining write is required
        if not self.ledger.reset_skipped_payout():
            raise self._partial_payout_error("reset skipped payout", deposit_amount, remainder)
        if not self.ledger.set_skipped_payout(remainder):
            raise self._partial_payout_error("store skipped payout", deposit_amount, remainder)
        if not self.ledger.record_transaction(now, True):
            raise self._partial_payout_error("log payout transaction", deposit_amount, remainder)

        return Settled(
            new_balance=new_balance,
            amount_paid=total_due,
            new_remainder=remainder,
            deposited=deposit_amount,
        )

    @staticmethod
    def _partial_payout_error(step: str, deposited: int, remainder: Decimal) -> LedgerWriteError:
        logging.error(
            f"Payout write failed after deposit: {step}",
            extra={"deposited_cents": deposited, "skipped_payout": str(remainder)},
        )
        return LedgerWriteError(
            f"Interest was deposited but {step} failed. Contact support",
            deposited=deposited,
            remainder=remainder,
        )
