"""Pydantic schemas for API request/response validation"""

from typing import Any, Dict

from pydantic import BaseModel, Field


class DepositRequest(BaseModel):
    """Request body for POST /v1/accounts/{user_id}/deposit"""

    # Amounts below one penny are rejected by the account with a result, not a 422
    amount_cents: int = Field(..., description="Amount to deposit in pennies")


class ResultResponse(BaseModel):
    """Uniform response for every account operation"""

    success: bool
    error_code: int
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
