"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Optional, Set, Tuple
from fastapi.testclient import TestClient
from interest_account.account import AccountSession
from interest_account.api.dependencies import get_ledger_factory
from interest_account.api.main import create_app
from interest_account.domain.models import UNSET_RATE, AccountInfo, Transaction, UserId
from interest_account.utils.date_utils import utcnow

USER_ID = "88224979-406e-4e32-9458-55836e4e1f95"
OTHER_USER_ID = "0f4c2f6e-2b7a-4c1d-8e3f-5a6b7c8d9e0f"


class Clock:
    """Controllable time source"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, days: int) -> None:
        self.now = self.now + timedelta(days=days)


class InMemoryLedger:
    """
    Ledger double following the remote contract.

    Skipped payouts are stored as records and summed on read, like the ledger API.
    Every mutating call is appended to `writes`.
    Writes named in `rejected_writes` are reported as failed and change nothing.
    """

    def __init__(
        self,
        user_id: str = USER_ID,
        active: bool = True,
        monthly_income: int = 0,
        rate: Decimal = UNSET_RATE,
        balance: int = 0,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.user_id = user_id
        self.active = active
        self.monthly_income = monthly_income
        self.rate = rate
        self.balance = balance
        self.clock = clock
        self.skipped_records: List[Decimal] = []
        self.transactions: List[Transaction] = []
        self.writes: List[Tuple[str, tuple]] = []
        self.fail_deposit = False
        self.rejected_writes: Set[str] = set()

    def fetch_account(self) -> AccountInfo:
        return AccountInfo(active=self.active, monthly_income=self.monthly_income)

    def get_interest_rate(self) -> Decimal:
        return self.rate

    def set_interest_rate(self, rate: Decimal) -> bool:
        self.writes.append(("set_interest_rate", (rate,)))
        self.rate = rate
        return True

    def get_balance(self) -> int:
        return self.balance

    def deposit_into_account(self, amount: int) -> Optional[int]:
        self.writes.append(("deposit_into_account", (amount,)))
        if self.fail_deposit:
            return None
        self.balance += amount
        self.transactions.insert(0, Transaction(type="deposit", date_time=self.clock(), amount=amount))
        return self.balance

    def get_skipped_payout(self) -> Decimal:
        return sum(self.skipped_records, Decimal("0"))

    def set_skipped_payout(self, amount: Decimal) -> bool:
        self.writes.append(("set_skipped_payout", (amount,)))
        if "set_skipped_payout" in self.rejected_writes:
            return False
        self.skipped_records.append(amount)
        return True

    def reset_skipped_payout(self) -> bool:
        self.writes.append(("reset_skipped_payout", ()))
        if "reset_skipped_payout" in self.rejected_writes:
            return False
        self.skipped_records = []
        return True

    def get_last_payout_date(self) -> datetime:
        for txn in self.transactions:
            if txn.type == "payout":
                return txn.date_time
        return self.clock()

    def get_statement(self) -> List[Transaction]:
        return list(self.transactions)

    def record_transaction(self, timestamp: datetime, concluded: bool = True) -> bool:
        self.writes.append(("record_transaction", (timestamp, concluded)))
        if "record_transaction" in self.rejected_writes:
            return False
        self.transactions.insert(0, Transaction(type="payout", date_time=timestamp, concluded=concluded))
        return True

    def seed_last_payout(self, when: datetime) -> None:
        self.transactions.insert(0, Transaction(type="payout", date_time=when))

    @property
    def write_names(self) -> List[str]:
        return [name for name, _ in self.writes]


@pytest.fixture
def user_id() -> UserId:
    return UserId(USER_ID)


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def ledger(clock: Clock) -> InMemoryLedger:
    """Active account with no rate, balance or payout history"""
    return InMemoryLedger(clock=clock)


@pytest.fixture
def make_ledger() -> Callable[..., InMemoryLedger]:
    """Build additional ledgers, e.g. for a second user"""
    return InMemoryLedger


@pytest.fixture
def session(user_id: UserId, ledger: InMemoryLedger, clock: Clock) -> AccountSession:
    return AccountSession(user_id, ledger, clock=clock)


@pytest.fixture
def client(ledger: InMemoryLedger) -> TestClient:
    """Create FastAPI test client wired to the in-memory ledger"""
    # Sessions built by the API use the wall clock
    ledger.clock = utcnow
    app = create_app()

    def override_get_ledger_factory():
        return lambda uid: ledger

    app.dependency_overrides[get_ledger_factory] = override_get_ledger_factory
    return TestClient(app)
