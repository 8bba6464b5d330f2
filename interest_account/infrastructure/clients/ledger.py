"""Ledger API HTTP client for balances, rates, skipped payouts and statements"""

import logging
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

import httpx

from interest_account.config import settings
from interest_account.domain.exceptions import LedgerAPIError, RateAlreadySetError
from interest_account.domain.models import UNSET_RATE, AccountInfo, Transaction, UserId
from interest_account.infrastructure.observability.metrics import ledger_failure_counter, ledger_latency_histogram
from interest_account.utils.date_utils import ensure_utc, utcnow

PAYOUT_TRANSACTION = "payout"

# Malformed payloads are handled like unreachable ledgers on read paths
PAYLOAD_ERRORS = (KeyError, ValueError, TypeError, InvalidOperation, AttributeError)


class HttpLedgerClient:
    """
    Client for the external ledger API, scoped to one user.

    Read methods degrade to default values on failure, write methods report
    failure to the caller. There is no retry layer.
    """

    def __init__(
        self,
        user_id: UserId | str,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ):
        self.user_id = str(user_id)
        self.base_url = (base_url or settings.ledger_api_base).rstrip("/")
        self.timeout = timeout or settings.http_timeout_seconds
        self.client = client

    def _request(self, operation: str, method: str, path: str = "", **kwargs: Any) -> httpx.Response:
        """
        Send a request to the user's ledger resource.

        Raises:
            LedgerAPIError: On timeout, network errors, or non-2xx responses
        """
        url = f"{self.base_url}/users/{self.user_id}{path}"
        try:
            with ledger_latency_histogram.labels(operation=operation).time():
                if self.client is not None:
                    response = self.client.request(method, url, timeout=self.timeout, **kwargs)
                else:
                    with httpx.Client(timeout=self.timeout) as client:
                        response = client.request(method, url, **kwargs)
                response.raise_for_status()
                return response

        except httpx.TimeoutException as e:
            ledger_failure_counter.labels(operation=operation).inc()
            raise LedgerAPIError(f"Ledger API timeout after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            ledger_failure_counter.labels(operation=operation).inc()
            raise LedgerAPIError(f"Ledger API error: {e.response.status_code}") from e
        except httpx.RequestError as e:
            ledger_failure_counter.labels(operation=operation).inc()
            raise LedgerAPIError(f"Ledger API unreachable: {e}") from e

    def _degraded(self, operation: str, error: Exception) -> None:
        logging.warning(
            f"Ledger read failed, using default: {error}",
            extra={"user_id": self.user_id, "operation": operation},
        )

    def fetch_account(self) -> AccountInfo:
        """Account exists and is usable only when the ledger echoes our user id"""
        try:
            data = self._request("fetch_account", "GET").json()
            return AccountInfo(
                active=data["id"] == self.user_id,
                monthly_income=int(data.get("income") or 0),
            )
        except (LedgerAPIError, *PAYLOAD_ERRORS) as e:
            self._degraded("fetch_account", e)
            return AccountInfo(active=False, monthly_income=0)

    def get_interest_rate(self) -> Decimal:
        """Yearly rate in percent, UNSET_RATE when none is assigned"""
        try:
            data = self._request("get_interest_rate", "GET", "/rate").json()
            return Decimal(str(data["yearly_interest_rate"]))
        except (LedgerAPIError, *PAYLOAD_ERRORS) as e:
            self._degraded("get_interest_rate", e)
            return UNSET_RATE

    def set_interest_rate(self, rate: Decimal) -> bool:
        """
        Assign the account's rate. Only allowed while no rate is set.

        Raises:
            RateAlreadySetError: Ledger already holds a rate for this account
        """
        if self.get_interest_rate() > 0:
            raise RateAlreadySetError("Interest rate already is set for active user interest account")

        try:
            self._request("set_interest_rate", "POST", "/rate", json={"rate": str(rate)})
            return True
        except LedgerAPIError as e:
            if isinstance(e.__cause__, httpx.HTTPStatusError) and e.__cause__.response.status_code == 409:
                raise RateAlreadySetError("Interest rate already is set for active user interest account") from e
            logging.error(f"Setting interest rate failed: {e}", extra={"user_id": self.user_id})
            return False

    def get_balance(self) -> int:
        """Total balance in pennies"""
        try:
            data = self._request("get_balance", "GET", "/balance").json()
            return int(data["balance"])
        except (LedgerAPIError, *PAYLOAD_ERRORS) as e:
            self._degraded("get_balance", e)
            return 0

    def deposit_into_account(self, amount: int) -> Optional[int]:
        """Add pennies to the balance; returns the new balance or None on failure"""
        try:
            response = self._request("deposit", "POST", "/deposit", json={"amount_in_pennies": amount})
        except LedgerAPIError as e:
            logging.error(f"Deposit failed: {e}", extra={"user_id": self.user_id, "amount_cents": amount})
            return None

        try:
            return int(response.json()["balance"])
        except PAYLOAD_ERRORS:
            return self.get_balance()

    def get_skipped_payout(self) -> Decimal:
        """Sum of all stored sub-penny remainder records"""
        try:
            data = self._request("get_skipped_payout", "GET", "/skipped_payout").json()
            return sum(
                (Decimal(str(record["amount_in_decimal"])) for record in data["skipped_payouts"]),
                Decimal("0"),
            )
        except (LedgerAPIError, *PAYLOAD_ERRORS) as e:
            self._degraded("get_skipped_payout", e)
            return Decimal("0.0")

    def set_skipped_payout(self, amount: Decimal) -> bool:
        """Store a sub-penny remainder record"""
        try:
            self._request("set_skipped_payout", "POST", "/skipped_payout", json={"amount_in_decimal": str(amount)})
            return True
        except LedgerAPIError as e:
            logging.error(
                f"Storing skipped payout failed: {e}",
                extra={"user_id": self.user_id, "skipped_payout": str(amount)},
            )
            return False

    def reset_skipped_payout(self) -> bool:
        """Clear stored remainder records after they were paid out"""
        try:
            self._request("reset_skipped_payout", "POST", "/skipped_payout", json={"reset": True})
            return True
        except LedgerAPIError as e:
            logging.error(f"Resetting skipped payout failed: {e}", extra={"user_id": self.user_id})
            return False

    def record_transaction(self, timestamp: datetime, concluded: bool = True) -> bool:
        """Log a payout transaction so the next settlement measures from it"""
        try:
            self._request(
                "record_transaction",
                "POST",
                "/transaction",
                json={
                    "date_time": ensure_utc(timestamp).isoformat(),
                    "concluded": concluded,
                    "uuid": self.user_id,
                    "type": PAYOUT_TRANSACTION,
                },
            )
            return True
        except LedgerAPIError as e:
            logging.error(f"Recording transaction failed: {e}", extra={"user_id": self.user_id})
            return False

    def get_statement(self) -> List[Transaction]:
        """Transactions, most recent first; unreadable records are skipped"""
        try:
            data = self._request("get_statement", "GET", "/transactions", params={"sort": "DESC"}).json()
            records = list(data["transactions"])
        except (LedgerAPIError, *PAYLOAD_ERRORS) as e:
            self._degraded("get_statement", e)
            return []

        transactions = []
        for txn in records:
            try:
                transactions.append(
                    Transaction(
                        type=txn["type"],
                        date_time=ensure_utc(datetime.fromisoformat(txn["date_time"])),
                        concluded=bool(txn.get("concluded", True)),
                        amount=txn.get("amount"),
                    )
                )
            except PAYLOAD_ERRORS as e:
                logging.warning(
                    f"Skipping unreadable statement record: {e}",
                    extra={"user_id": self.user_id, "record": repr(txn)},
                )
        return transactions

    def get_last_payout_date(self) -> datetime:
        """Date of the most recent payout; now when the account was never settled"""
        for txn in self.get_statement():
            if txn.type == PAYOUT_TRANSACTION:
                return txn.date_time
        return utcnow()
