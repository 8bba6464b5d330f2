"""Prometheus metrics for monitoring payouts, deposits, and ledger performance"""

from prometheus_client import Counter, Histogram

from interest_account.domain.models import Settled, SettlementResult

# Settlement metrics
settlement_counter = Counter(
    "interest_settlement_total",
    "Interest settlements attempted",
    ["outcome"],  # no_payout_due | zero_interest | below_minimum_unit | settled | error
)

interest_paid_counter = Counter(
    "interest_paid_cents_total",
    "Whole pennies deposited by interest payouts",
)

# Deposit metrics
deposit_counter = Counter(
    "interest_deposit_total",
    "Customer deposits",
    ["outcome"],  # accepted | rejected
)

# Ledger API metrics
ledger_latency_histogram = Histogram(
    "ledger_request_latency_seconds",
    "Ledger API response time",
    ["operation"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ledger_failure_counter = Counter(
    "ledger_failures_total",
    "Failed ledger API calls",
    ["operation"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_settlement(result: SettlementResult) -> None:
    """Record settlement outcome and the pennies it moved"""
    settlement_counter.labels(outcome=result.outcome.value).inc()

    if isinstance(result, Settled):
        interest_paid_counter.inc(result.deposited)


def record_deposit(accepted: bool) -> None:
    deposit_counter.labels(outcome="accepted" if accepted else "rejected").inc()
