"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

from interest_account.config import settings
from interest_account.domain.models import Settled, SettlementResult


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_settlement(user_id: str, result: SettlementResult, duration_ms: float) -> None:
    """Log structured settlement outcome; amounts as strings to keep precision"""
    extra: Dict[str, Any] = {
        "user_id": user_id,
        "step": "payout_complete",
        "settlement_outcome": result.outcome.value,
        "duration_ms": duration_ms,
    }
    if isinstance(result, Settled):
        extra["deposited_cents"] = result.deposited
        extra["amount_paid"] = str(result.amount_paid)
        extra["skipped_payout"] = str(result.new_remainder)
        extra["total_balance_cents"] = result.new_balance

    logging.info("Payout completed", extra=extra)


def log_deposit(user_id: str, amount_cents: int, total_balance_cents: int) -> None:
    logging.info(
        "Deposit completed",
        extra={
            "user_id": user_id,
            "step": "deposit_complete",
            "amount_cents": amount_cents,
            "total_balance_cents": total_balance_cents,
        },
    )
