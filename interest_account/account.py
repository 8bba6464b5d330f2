"""Account session - the entry point for operating a user's interest account"""

import logging
import time
from datetime import datetime
from enum import Enum
from typing import Callable

from interest_account.domain.exceptions import (
    AccountAlreadyActiveError,
    FeatureNotAvailableError,
    LedgerWriteError,
    NoApplicableRateError,
    RateAlreadySetError,
)
from interest_account.domain.ledger import LedgerClient
from interest_account.domain.models import (
    AccountSnapshot,
    BelowMinimumUnit,
    ErrorCode,
    NoPayoutDue,
    Result,
    Settled,
    SettlementError,
    SettlementResult,
    UserId,
    ZeroInterestAccrued,
)
from interest_account.domain.rates import select_rate
from interest_account.domain.settlement import SettlementEngine
from interest_account.infrastructure.observability.logging import log_deposit, log_settlement
from interest_account.infrastructure.observability.metrics import record_deposit, record_settlement
from interest_account.utils.date_utils import utcnow

MSG_NOT_ACTIVE = "Unable to open user account"
MSG_OPENED = "Interest Account is opened and active"
MSG_DEPOSIT_INVALID = "Deposit amount must be more than 0"
MSG_DEPOSITED = "Funds have been successfully deposited"
MSG_NO_PAYOUT_DUE = "No payout due."
MSG_ZERO_INTEREST = "No interest accrued."
MSG_BELOW_MINIMUM = "Interest is below one penny and has been carried to the next payout."
MSG_PAID_OUT = "Interest has been successfully paid out."
MSG_INTEREST_FAILED = "Interest calculation error"
MSG_STATEMENT = "Statement retrieved"


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVATED = "activated"
    DEPOSITING = "depositing"
    SETTLING = "settling"
    LISTING = "listing"


def _not_active() -> Result:
    return Result(success=False, error_code=ErrorCode.ACCOUNT_NOT_ACTIVE, message=MSG_NOT_ACTIVE)


class AccountSession:
    """
    One user's interest account, backed by the external ledger.

    Every operation fetches a fresh snapshot first and stops with an
    ACCOUNT_NOT_ACTIVE result when the ledger does not confirm the account.
    Operations for one account must be serialized by the caller.
    """

    def __init__(
        self,
        user_id: UserId,
        ledger: LedgerClient,
        clock: Callable[[], datetime] = utcnow,
        interval_days: int | None = None,
    ):
        self._user_id = user_id
        self.ledger = ledger
        self.engine = SettlementEngine(ledger, interval_days=interval_days, clock=clock)
        self.state = SessionState.UNINITIALIZED
        self.snapshot: AccountSnapshot | None = None

    @property
    def user_id(self) -> UserId:
        return self._user_id

    def activate(self) -> AccountSnapshot:
        """Fetch account existence and income; marks the session activated when active"""
        info = self.ledger.fetch_account()
        self.snapshot = AccountSnapshot(
            user_id=self._user_id,
            monthly_income=info.monthly_income,
            active=info.active,
        )
        self.state = SessionState.ACTIVATED if info.active else SessionState.UNINITIALIZED
        return self.snapshot

    def create_interest_account(self) -> None:
        """
        Not offered: accounts are created outside this library.

        Raises:
            AccountAlreadyActiveError: User already has an active account
            FeatureNotAvailableError: Always, when no active account exists
        """
        if self.activate().active:
            raise AccountAlreadyActiveError("Can't open account, user already has an active account.")

        raise FeatureNotAvailableError("Functionality not available")

    def open_interest_account(self) -> Result:
        """
        Activate the account and make sure it has an interest rate.

        The rate is selected from the income tiers only the first time the
        account is opened; afterwards the stored rate is reused as is.
        """
        snapshot = self.activate()
        if not snapshot.active:
            return _not_active()

        rate = self.ledger.get_interest_rate()
        message = "Rate successfully retrieved"

        if rate == 0:
            try:
                rate = select_rate(snapshot.monthly_income)
            except NoApplicableRateError as e:
                logging.warning(f"Rate selection failed: {e}", extra={"user_id": str(self._user_id)})
                return Result(success=False, error_code=ErrorCode.INTEREST_CALCULATION, message=str(e))

            try:
                if not self.ledger.set_interest_rate(rate):
                    logging.warning("Assigned rate was not persisted", extra={"user_id": str(self._user_id)})
            except RateAlreadySetError:
                rate = self.ledger.get_interest_rate()
            message = "Rate successfully assigned"

        snapshot.interest_rate = rate
        logging.info(message, extra={"user_id": str(self._user_id), "rate": str(rate)})

        return Result(success=True, error_code=ErrorCode.NONE, message=MSG_OPENED, data={"rate": rate})

    def deposit_funds(self, amount: int) -> Result:
        """
        Deposit pennies into the account.

        Raises:
            LedgerWriteError: Ledger did not accept the deposit
        """
        if amount < 1:
            record_deposit(accepted=False)
            return Result(success=False, error_code=ErrorCode.INVALID_DEPOSIT_AMOUNT, message=MSG_DEPOSIT_INVALID)

        snapshot = self.activate()
        if not snapshot.active:
            return _not_active()

        self.state = SessionState.DEPOSITING
        try:
            total_balance = self.ledger.deposit_into_account(amount)
            if total_balance is None:
                raise LedgerWriteError("Deposit funds fatal error. Contact support")
        finally:
            self.state = SessionState.ACTIVATED

        snapshot.total_balance = total_balance
        record_deposit(accepted=True)
        log_deposit(str(self._user_id), amount, total_balance)

        return Result(
            success=True,
            error_code=ErrorCode.NONE,
            message=MSG_DEPOSITED,
            data={"total_balance": total_balance},
        )

    def payout(self) -> Result:
        """Settle interest accrued since the last payout, including skipped remainders"""
        snapshot = self.activate()
        if not snapshot.active:
            return _not_active()

        start_time = time.time()
        self.state = SessionState.SETTLING
        try:
            snapshot.last_payout_date = self.ledger.get_last_payout_date()
            snapshot.interest_rate = self.ledger.get_interest_rate()
            snapshot.total_balance = self.ledger.get_balance()
            snapshot.skipped_payout = self.ledger.get_skipped_payout()

            result = self.engine.settle(snapshot)
        finally:
            self.state = SessionState.ACTIVATED

        record_settlement(result)
        log_settlement(str(self._user_id), result, (time.time() - start_time) * 1000)

        if isinstance(result, Settled):
            snapshot.total_balance = result.new_balance
            snapshot.skipped_payout = result.new_remainder

        return settlement_to_result(result)

    def list_statement(self) -> Result:
        """Transactions for the account, most recent first"""
        snapshot = self.activate()
        if not snapshot.active:
            return _not_active()

        self.state = SessionState.LISTING
        try:
            transactions = self.ledger.get_statement()
        finally:
            self.state = SessionState.ACTIVATED

        return Result(
            success=True,
            error_code=ErrorCode.NONE,
            message=MSG_STATEMENT,
            data={"transactions": transactions},
        )


def settlement_to_result(result: SettlementResult) -> Result:
    """Map a settlement outcome onto the uniform result shape"""
    if isinstance(result, NoPayoutDue):
        return Result(success=True, error_code=ErrorCode.NONE, message=MSG_NO_PAYOUT_DUE)
    if isinstance(result, ZeroInterestAccrued):
        return Result(success=True, error_code=ErrorCode.NONE, message=MSG_ZERO_INTEREST)
    if isinstance(result, BelowMinimumUnit):
        return Result(
            success=True,
            error_code=ErrorCode.NONE,
            message=MSG_BELOW_MINIMUM,
            data={"skipped_payout": result.carried},
        )
    if isinstance(result, Settled):
        return Result(
            success=True,
            error_code=ErrorCode.NONE,
            message=MSG_PAID_OUT,
            data={
                "total_balance": result.new_balance,
                "total_paid": result.amount_paid,
                "skipped_payout": result.new_remainder,
            },
        )
    if isinstance(result, SettlementError):
        return Result(success=False, error_code=ErrorCode.INTEREST_CALCULATION, message=MSG_INTEREST_FAILED)

    raise TypeError(f"Unknown settlement result: {result!r}")
