"""Contract of the external ledger service the account core depends on"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Protocol

from interest_account.domain.models import AccountInfo, Transaction


class LedgerClient(Protocol):
    """
    Ledger operations, all scoped to a single user.

    Read methods return defaults when the ledger cannot be reached
    (inactive account, 0 rate, 0 balance, 0 skipped payout, empty statement).
    Callers must treat those as unknown values, not confirmed zeros.
    """

    user_id: str

    def fetch_account(self) -> AccountInfo: ...

    def get_interest_rate(self) -> Decimal: ...

    def set_interest_rate(self, rate: Decimal) -> bool: ...

    def get_balance(self) -> int: ...

    def deposit_into_account(self, amount: int) -> Optional[int]: ...

    def get_skipped_payout(self) -> Decimal: ...

    def set_skipped_payout(self, amount: Decimal) -> bool: ...

    def reset_skipped_payout(self) -> bool: ...

    def get_last_payout_date(self) -> datetime: ...

    def get_statement(self) -> List[Transaction]: ...

    def record_transaction(self, timestamp: datetime, concluded: bool = True) -> bool: ...
