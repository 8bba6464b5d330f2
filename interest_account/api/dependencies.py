"""Dependency injection for FastAPI endpoints"""

from typing import Callable

from fastapi import Request

from interest_account.domain.ledger import LedgerClient
from interest_account.domain.models import UserId
from interest_account.infrastructure.clients.ledger import HttpLedgerClient

LedgerFactory = Callable[[UserId], LedgerClient]


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ledger_factory() -> LedgerFactory:
    """Provide a builder for per-user Ledger API clients"""
    return HttpLedgerClient
