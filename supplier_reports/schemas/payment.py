"""Payment schemas and payment-method normalization."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, Field, field_validator, model_validator

from supplier_reports.schemas.common import APIBaseSchema
from supplier_reports.utils.dates import parse_payment_datetime


class PaymentMethod(str, Enum):
    """Payment methods known to the API."""

    ZELLE = "ZELLE"
    TRANSFER = "TRANSFER"
    CASH = "CASH"


# API codes and the labels older screens send back
_METHOD_ALIASES: dict[str, PaymentMethod] = {
    "ZELLE": PaymentMethod.ZELLE,
    "TRANSFER": PaymentMethod.TRANSFER,
    "TRANSFERENCIA": PaymentMethod.TRANSFER,
    "CASH": PaymentMethod.CASH,
    "EFECTIVO": PaymentMethod.CASH,
}


def normalize_payment_method(raw: Any) -> str:
    """Map a method code or label to its API code; unknown values pass through upper-cased."""

    text = str(raw or "").strip().upper()
    method = _METHOD_ALIASES.get(text)
    return method.value if method else text


class Payment(APIBaseSchema):
    """One payment applied against a debt."""

    id: int
    debt_id: Optional[int] = None
    supplier_id: Optional[int] = None
    amount: Decimal
    payment_method: str = ""
    sender_name: Optional[str] = None
    sender_email: Optional[str] = None
    confirmation_number: Optional[str] = None
    payment_date: Optional[datetime] = None
    receipt_file: Optional[str] = None
    verified: bool = False
    shared: bool = False
    shared_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    # Soft delete
    deleted: bool = False
    deleted_at: Optional[datetime] = None
    delete_reason: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("deleteReason", "deletionReason", "delete_reason"),
    )

    # Bolivar payments
    is_bolivares: bool = False
    exchange_rate: Optional[Decimal] = None
    amount_in_bolivares: Optional[Decimal] = None

    @field_validator("payment_method", mode="before")
    @classmethod
    def normalize_method(cls, value: Any) -> str:
        return normalize_payment_method(value)

    @field_validator("payment_date", mode="before")
    @classmethod
    def parse_payment_date(cls, value: Any) -> Optional[datetime]:
        # Unparseable dates are kept as missing; period filters exclude them
        return parse_payment_datetime(value)

    @field_validator("verified", "shared", "deleted", "is_bolivares", mode="before")
    @classmethod
    def null_as_false(cls, value: Any) -> Any:
        return False if value is None else value

    @model_validator(mode="after")
    def derive_flags(self) -> "Payment":
        """Backend sends ``deletedAt`` instead of a flag, and may omit ``isBolivares``."""

        if self.deleted_at is not None:
            self.deleted = True
        if self.exchange_rate or self.amount_in_bolivares:
            self.is_bolivares = True
        return self
