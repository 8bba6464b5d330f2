"""Domain models - pure Python dataclasses representing business entities"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union

from interest_account.domain.exceptions import InvalidUserIdError

UUID_V4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Sentinel rate reported by the ledger for accounts without an assigned rate
UNSET_RATE = Decimal("0.0")


@dataclass(frozen=True)
class UserId:
    """User identifier validated against the UUID version 4 layout"""

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not UUID_V4_PATTERN.match(self.value):
            raise InvalidUserIdError(
                "The user ID that has been provided does not match the UUIDv4 Standard."
            )

    def __str__(self) -> str:
        return self.value


@dataclass
class AccountInfo:
    """Account existence and metadata as reported by the ledger"""

    active: bool
    monthly_income: int = 0  # pennies, 0 means unknown


@dataclass
class AccountSnapshot:
    """Point-in-time view of an account, rebuilt for every operation"""

    user_id: UserId
    monthly_income: int = 0
    active: bool = False
    interest_rate: Decimal = UNSET_RATE  # percent per year
    total_balance: int = 0  # pennies
    last_payout_date: Optional[datetime] = None
    skipped_payout: Decimal = Decimal("0")  # fractional pennies carried forward

    @property
    def has_rate(self) -> bool:
        return self.interest_rate != UNSET_RATE


@dataclass(frozen=True)
class RateTier:
    """Income range mapped to a yearly interest rate"""

    annual_rate: Decimal
    min_income: int
    max_income: int  # 0 means no upper bound

    @property
    def is_default(self) -> bool:
        """Zero-floor tier reserved for accounts with unknown income"""
        return self.min_income == 0 and self.max_income == 0

    def matches(self, monthly_income: int) -> bool:
        if self.is_default or monthly_income < self.min_income:
            return False
        return self.max_income == 0 or monthly_income <= self.max_income


@dataclass
class Transaction:
    """Statement entry from the ledger"""

    type: str  # "payout" or "deposit"
    date_time: datetime
    concluded: bool = True
    amount: Optional[int] = None


class SettlementOutcome(str, Enum):
    NO_PAYOUT_DUE = "no_payout_due"
    ZERO_INTEREST = "zero_interest"
    BELOW_MINIMUM_UNIT = "below_minimum_unit"
    SETTLED = "settled"
    ERROR = "error"


@dataclass(frozen=True)
class NoPayoutDue:
    outcome: SettlementOutcome = field(default=SettlementOutcome.NO_PAYOUT_DUE, init=False)


@dataclass(frozen=True)
class ZeroInterestAccrued:
    outcome: SettlementOutcome = field(default=SettlementOutcome.ZERO_INTEREST, init=False)


@dataclass(frozen=True)
class BelowMinimumUnit:
    """Interest was stored as a remainder, nothing deposited"""

    carried: Decimal
    outcome: SettlementOutcome = field(default=SettlementOutcome.BELOW_MINIMUM_UNIT, init=False)


@dataclass(frozen=True)
class Settled:
    """Whole pennies deposited, fraction carried to the next payout"""

    new_balance: int
    amount_paid: Decimal  # interest plus carried remainder
    new_remainder: Decimal
    deposited: int
    outcome: SettlementOutcome = field(default=SettlementOutcome.SETTLED, init=False)


@dataclass(frozen=True)
class SettlementError:
    kind: str
    outcome: SettlementOutcome = field(default=SettlementOutcome.ERROR, init=False)


SettlementResult = Union[NoPayoutDue, ZeroInterestAccrued, BelowMinimumUnit, Settled, SettlementError]


class ErrorCode(IntEnum):
    """Result error codes shared with existing callers"""

    NONE = 0
    DEFAULT = 1
    ACCOUNT_NOT_ACTIVE = 2
    INTEREST_CALCULATION = 3
    INVALID_DEPOSIT_AMOUNT = 4


@dataclass
class Result:
    """Uniform outcome returned by every account operation"""

    success: bool
    error_code: ErrorCode = ErrorCode.NONE
    message: str = ""
    data: Dict[str, Any] = field(default_factory=dict)
