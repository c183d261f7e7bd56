"""Schema package exports."""

from supplier_reports.schemas.common import APIBaseSchema, DateRange, Pagination
from supplier_reports.schemas.payment import Payment, PaymentMethod
from supplier_reports.schemas.provider import Debt, DebtStatus, Provider
from supplier_reports.schemas.report import (
    CashierInfo,
    CashierPaymentsPage,
    CashierPaymentsParams,
    DebtPaymentsPage,
    KPIDateRange,
    KPISummary,
    MethodBreakdown,
    PaymentStatistics,
    ProviderReport,
    SharePaymentResult,
    StatusCounts,
)
from supplier_reports.schemas.state import DeleteFilter, Notification, Period, ReportQuery, ReportState

__all__ = [
    "APIBaseSchema",
    "CashierInfo",
    "CashierPaymentsPage",
    "CashierPaymentsParams",
    "DateRange",
    "Debt",
    "DebtPaymentsPage",
    "DebtStatus",
    "DeleteFilter",
    "KPIDateRange",
    "KPISummary",
    "MethodBreakdown",
    "Notification",
    "Pagination",
    "Payment",
    "PaymentMethod",
    "PaymentStatistics",
    "Period",
    "Provider",
    "ProviderReport",
    "ReportQuery",
    "ReportState",
    "SharePaymentResult",
    "StatusCounts",
]
