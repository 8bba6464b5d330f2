from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

app = FastAPI(title="Mock Ledger Server", version="1.0.0")

# user_id -> account state; reset between test runs with reset_state()
ACCOUNTS: Dict[str, Dict[str, Any]] = {}


class SeedAccount(BaseModel):
    income: int = 0
    balance: int = 0
    rate: Optional[str] = None


class RateBody(BaseModel):
    rate: str


class DepositBody(BaseModel):
    amount_in_pennies: int


class SkippedPayoutBody(BaseModel):
    amount_in_decimal: Optional[str] = None
    reset: bool = False


class TransactionBody(BaseModel):
    date_time: str
    concluded: bool = True
    uuid: str
    type: str = "payout"


def reset_state() -> None:
    ACCOUNTS.clear()


def _account(user_id: str) -> Dict[str, Any]:
    if user_id not in ACCOUNTS:
        raise HTTPException(status_code=404, detail="user not found")
    return ACCOUNTS[user_id]


@app.get("/health")
def health(): return {"status": "ok"}


@app.put("/users/{user_id}")
def seed_account(user_id: str, body: SeedAccount):
    ACCOUNTS[user_id] = {
        "income": body.income,
        "balance": body.balance,
        "rate": body.rate,
        "skipped_payouts": [],
        "transactions": [],
    }
    return {"id": user_id}


@app.get("/users/{user_id}")
def get_user(user_id: str):
    return {"id": user_id, "income": _account(user_id)["income"]}


@app.get("/users/{user_id}/rate")
def get_rate(user_id: str):
    return {"yearly_interest_rate": _account(user_id)["rate"] or "0.0"}


@app.post("/users/{user_id}/rate")
def set_rate(user_id: str, body: RateBody):
    account = _account(user_id)
    if account["rate"] is not None:
        raise HTTPException(status_code=409, detail="rate already set")
    account["rate"] = body.rate
    return {"yearly_interest_rate": body.rate}


@app.get("/users/{user_id}/balance")
def get_balance(user_id: str):
    return {"balance": _account(user_id)["balance"]}


@app.post("/users/{user_id}/deposit")
def deposit(user_id: str, body: DepositBody):
    account = _account(user_id)
    account["balance"] += body.amount_in_pennies
    account["transactions"].append(
        {
            "type": "deposit",
            "date_time": datetime.now(timezone.utc).isoformat(),
            "concluded": True,
            "amount": body.amount_in_pennies,
        }
    )
    return {"balance": account["balance"]}


@app.get("/users/{user_id}/skipped_payout")
def get_skipped_payouts(user_id: str):
    return {"skipped_payouts": _account(user_id)["skipped_payouts"]}


@app.post("/users/{user_id}/skipped_payout")
def update_skipped_payouts(user_id: str, body: SkippedPayoutBody):
    account = _account(user_id)
    if body.reset:
        account["skipped_payouts"] = []
    elif body.amount_in_decimal is not None:
        account["skipped_payouts"].append({"amount_in_decimal": body.amount_in_decimal})
    return {"skipped_payouts": account["skipped_payouts"]}


@app.post("/users/{user_id}/transaction")
def store_transaction(user_id: str, body: TransactionBody):
    account = _account(user_id)
    account["transactions"].append(
        {"type": body.type, "date_time": body.date_time, "concluded": body.concluded}
    )
    return {"status": "ok"}


@app.get("/users/{user_id}/transactions")
def get_transactions(user_id: str, sort: str = "DESC"):
    transactions = sorted(
        _account(user_id)["transactions"],
        key=lambda t: datetime.fromisoformat(t["date_time"]),
        reverse=sort.upper() == "DESC",
    )
    return {"transactions": transactions}
