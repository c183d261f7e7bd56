"""Provider (supplier) and debt schemas."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator

from supplier_reports.schemas.common import APIBaseSchema
from supplier_reports.schemas.payment import Payment
from supplier_reports.utils.dates import parse_local_date


class DebtStatus(str, Enum):
    """Lifecycle status of a debt."""

    PENDING = "PENDING"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


def _calendar_day(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    parsed = parse_local_date(value)
    if parsed is None:
        raise ValueError(f"invalid calendar date: {value!r}")
    return parsed


class Provider(APIBaseSchema):
    """Supplier to whom debts and payments are attributed."""

    id: int
    company_name: Optional[str] = None
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    status: Optional[str] = None
    total_debt: Decimal = Decimal("0")
    last_payment_date: Optional[date] = None

    @field_validator("total_debt", mode="before")
    @classmethod
    def null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @field_validator("last_payment_date", mode="before")
    @classmethod
    def parse_day(cls, value: Any) -> Optional[date]:
        return _calendar_day(value)


class Debt(APIBaseSchema):
    """Amount owed to a provider, against which payments are applied."""

    id: int
    order_id: Optional[int] = None
    supplier_id: Optional[int] = None
    debt_number: Optional[int] = None
    initial_amount: Decimal = Decimal("0")
    remaining_amount: Decimal = Decimal("0")
    status: DebtStatus = DebtStatus.PENDING
    due_date: Optional[date] = None
    payments: list[Payment] = []

    @field_validator("initial_amount", "remaining_amount", mode="before")
    @classmethod
    def null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @field_validator("due_date", mode="before")
    @classmethod
    def parse_day(cls, value: Any) -> Optional[date]:
        return _calendar_day(value)

    @field_validator("payments", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value
