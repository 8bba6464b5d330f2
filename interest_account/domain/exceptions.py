"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidUserIdError(DomainException):
    """User identifier does not match the UUIDv4 format"""

    pass


class NoApplicableRateError(DomainException):
    """No interest rate tier matches the given monthly income"""

    pass


class TooManyMissedIntervalsError(DomainException):
    """More than one payout interval elapsed since the last settlement"""

    pass


class AccountAlreadyActiveError(DomainException):
    """User already has an active interest account"""

    pass


class FeatureNotAvailableError(DomainException, NotImplementedError):
    """Operation exists for callers but is not offered"""

    pass


class LedgerAPIError(DomainException):
    """Ledger API returned an error or is unavailable"""

    pass


class LedgerWriteError(LedgerAPIError):
    """A money-moving ledger write failed; never swallowed"""

    def __init__(self, message: str, deposited: int | None = None, remainder=None):
        super().__init__(message)
        # Pennies already moved and the remainder still to store, for manual recovery
        self.deposited = deposited
        self.remainder = remainder


class RateAlreadySetError(LedgerAPIError):
    """Interest rate can only be assigned once per account"""

    pass
