"""/v1/accounts/{user_id} - interest account operations"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request

from interest_account.account import AccountSession
from interest_account.api.dependencies import LedgerFactory, get_ledger_factory, get_request_id
from interest_account.api.v1.schemas import DepositRequest, ResultResponse
from interest_account.domain.exceptions import (
    AccountAlreadyActiveError,
    FeatureNotAvailableError,
    InvalidUserIdError,
    LedgerWriteError,
)
from interest_account.domain.models import Result, Transaction, UserId

router = APIRouter()


def get_session(
    user_id: str,
    ledger_factory: LedgerFactory = Depends(get_ledger_factory),
) -> AccountSession:
    """Build a fresh session for the user in the path"""
    try:
        uid = UserId(user_id)
    except InvalidUserIdError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return AccountSession(uid, ledger_factory(uid))


def _serialize(value: Any) -> Any:
    """Decimals as strings so no precision is lost on the wire"""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Transaction):
        return {
            "type": value.type,
            "date_time": value.date_time.isoformat(),
            "concluded": value.concluded,
            "amount": value.amount,
        }
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value


def to_response(result: Result) -> ResultResponse:
    return ResultResponse(
        success=result.success,
        error_code=int(result.error_code),
        message=result.message,
        data=_serialize(result.data),
    )


@router.post("/accounts/{user_id}", response_model=ResultResponse)
def create_account(request: Request, session: AccountSession = Depends(get_session)):
    """Account creation is not offered; reports an existing account as a conflict"""
    try:
        session.create_interest_account()
    except AccountAlreadyActiveError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except FeatureNotAvailableError as e:
        logging.info(f"Create account requested: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=501, detail=str(e))


@router.post("/accounts/{user_id}/open", response_model=ResultResponse)
def open_account(session: AccountSession = Depends(get_session)):
    """Activate the account and assign its interest rate on first open"""
    return to_response(session.open_interest_account())


@router.post("/accounts/{user_id}/deposit", response_model=ResultResponse)
def deposit(
    request_body: DepositRequest,
    request: Request,
    session: AccountSession = Depends(get_session),
):
    """Deposit pennies into the account"""
    try:
        return to_response(session.deposit_funds(request_body.amount_cents))
    except LedgerWriteError as e:
        logging.error(f"Deposit failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")


@router.post("/accounts/{user_id}/payout", response_model=ResultResponse)
def payout(request: Request, session: AccountSession = Depends(get_session)):
    """Settle accrued interest if a payout interval has elapsed"""
    try:
        return to_response(session.payout())
    except LedgerWriteError as e:
        logging.error(f"Payout failed: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=503, detail="Ledger service unavailable")


@router.get("/accounts/{user_id}/statement", response_model=ResultResponse)
def statement(session: AccountSession = Depends(get_session)):
    """List account transactions, most recent first"""
    return to_response(session.list_statement())
