"""Report, cashier and KPI schemas."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import AliasChoices, ConfigDict, Field, field_validator

from supplier_reports.schemas.common import APIBaseSchema, Pagination
from supplier_reports.schemas.payment import Payment, PaymentMethod
from supplier_reports.schemas.provider import Debt, Provider
from supplier_reports.utils.dates import format_local_date


class PaymentStatistics(APIBaseSchema):
    """Server-side totals attached to a provider report or a debt payments page."""

    total_paid: Decimal = Decimal("0")
    payment_count: int = 0
    average_payment: Decimal = Decimal("0")

    @field_validator("total_paid", "average_payment", mode="before")
    @classmethod
    def null_as_zero(cls, value: Any) -> Any:
        return Decimal("0") if value is None else value

    @field_validator("payment_count", mode="before")
    @classmethod
    def null_count_as_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


class ProviderReport(PaymentStatistics):
    """Detailed report of one provider (payments are fetched per debt)."""

    supplier: Provider
    debts: list[Debt] = []

    @field_validator("debts", mode="before")
    @classmethod
    def null_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def provider(self) -> Provider:
        return self.supplier


class DebtPaymentsPage(APIBaseSchema):
    """One page of payments of a debt, soft-deleted ones included."""

    payments: list[Payment] = []
    pagination: Pagination = Pagination()
    statistics: PaymentStatistics = PaymentStatistics()


class CashierInfo(APIBaseSchema):
    """User who registered payments at the cash desk."""

    id: int
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("nombre", "name"))
    email: Optional[str] = None
    role: Optional[str] = Field(default=None, validation_alias=AliasChoices("rol", "role"))

    @property
    def display_name(self) -> str:
        return self.name or self.email or ""


class CashierPaymentsParams(APIBaseSchema):
    """Query of the cashier payments endpoint."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    include_deleted: bool = False

    def to_query(self) -> dict[str, str]:
        """Render as API query parameters, skipping unset filters."""

        query = {
            "page": str(self.page),
            "limit": str(self.limit),
            "includeDeleted": "true" if self.include_deleted else "false",
        }
        if self.start_date is not None:
            query["startDate"] = format_local_date(self.start_date)
        if self.end_date is not None:
            query["endDate"] = format_local_date(self.end_date)
        if self.payment_method is not None:
            query["paymentMethod"] = self.payment_method.value
        return query


class CashierPaymentsPage(APIBaseSchema):
    """Payments registered by one cashier, paginated."""

    cashier: Optional[CashierInfo] = None
    payments: list[Payment] = []
    pagination: Pagination = Pagination()


class SharePaymentResult(APIBaseSchema):
    """Updated payment plus the link used to share its receipt."""

    payment: Payment
    share_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("whatsappUrl", "shareUrl", "share_url"))


class MethodBreakdown(APIBaseSchema):
    model_config = ConfigDict(frozen=True)

    count: int = 0
    total_amount: Decimal = Decimal("0")


class StatusCounts(APIBaseSchema):
    model_config = ConfigDict(frozen=True)

    verified: int = 0
    unverified: int = 0
    shared: int = 0
    deleted: int = 0


class KPIDateRange(APIBaseSchema):
    model_config = ConfigDict(frozen=True)

    first: Optional[datetime] = None
    last: Optional[datetime] = None


class KPISummary(APIBaseSchema):
    """Summary statistics derived from a payment collection. Never persisted."""

    model_config = ConfigDict(frozen=True)

    total_payments: int = 0
    total_amount: Decimal = Decimal("0")
    total_amount_in_bolivares: Decimal = Decimal("0")
    average_payment_amount: Decimal = Decimal("0")
    by_payment_method: dict[PaymentMethod, MethodBreakdown]
    by_status: StatusCounts = StatusCounts()
    date_range: KPIDateRange = KPIDateRange()
    suppliers_served: int = 0
