"""
Pydantic schemas for the banking API requests and responses
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as SchemaValidationError

from .errors import UnexpectedResponseError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CredentialsRequest(BaseModel):
    username: str
    password: str


class AmountRequest(CredentialsRequest):
    amount: float = Field(..., gt=0, allow_inf_nan=False)


class LoginResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    username: str
    balance: Decimal


class BalanceResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    balance: Decimal


class TransactionResult(BaseModel):
    """Response to deposit and withdraw"""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    new_balance: Decimal = Field(..., alias="newBalance")


class TransactionRecord(BaseModel):
    """One entry of the transaction history, owned by the API"""
    model_config = ConfigDict(extra="ignore", frozen=True)

    type: str
    amount: Decimal
    timestamp: str

    @field_validator("timestamp", mode="before")
    @classmethod
    def _stringify_timestamp(cls, value: Any) -> str:
        # LocalDateTime may arrive as [yyyy, MM, dd, HH, mm, ss, nanos]
        if isinstance(value, (list, tuple)) and len(value) >= 3:
            try:
                return datetime(*(int(part) for part in value[:6])).isoformat()
            except (TypeError, ValueError):
                return str(list(value))
        return value if isinstance(value, str) else str(value)


_transaction_list = TypeAdapter(List[TransactionRecord])


def parse_model(model: Type[ModelT], payload: Any, endpoint: str) -> ModelT:
    """Validate a success payload against the expected response model"""
    if payload is None:
        raise UnexpectedResponseError(f"Empty response from {endpoint}")
    try:
        return model.model_validate(payload)
    except SchemaValidationError as e:
        raise UnexpectedResponseError(f"Malformed response from {endpoint}: {e.error_count()} error(s)") from e


def parse_transactions(payload: Any) -> Optional[List[TransactionRecord]]:
    """Validate a transaction history payload.

    Returns None when the payload is not array-shaped at all.
    """
    if not isinstance(payload, list):
        return None
    try:
        return _transaction_list.validate_python(payload)
    except SchemaValidationError as e:
        raise UnexpectedResponseError(f"Malformed response from /transactions: {e.error_count()} error(s)") from e
