from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError as SchemaValidationError

from supplier_reports.schemas.payment import Payment, normalize_payment_method
from supplier_reports.schemas.provider import Debt, DebtStatus, Provider
from supplier_reports.schemas.report import CashierInfo, CashierPaymentsParams, ProviderReport
from supplier_reports.schemas.state import Period, parse_period


def test_payment_from_api_payload() -> None:
    payment = Payment.model_validate(
        {
            "id": 7,
            "debtId": 10,
            "supplierId": 1,
            "amount": "125.40",
            "paymentMethod": "Transferencia",
            "paymentDate": "2024-03-15",
            "verified": None,
            "deletedAt": "2024-03-16T13:00:00.000Z",
            "deletionReason": "duplicated",
            "exchangeRate": "36.50",
        }
    )

    assert payment.amount == Decimal("125.40")
    assert payment.payment_method == "TRANSFER"
    assert payment.payment_date == datetime(2024, 3, 15)
    assert payment.verified is False
    assert payment.deleted is True
    assert payment.delete_reason == "duplicated"
    assert payment.is_bolivares is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("zelle", "ZELLE"), ("Efectivo", "CASH"), (" transfer ", "TRANSFER"), ("crypto", "CRYPTO"), (None, "")],
)
def test_normalize_payment_method(raw: object, expected: str) -> None:
    assert normalize_payment_method(raw) == expected


def test_malformed_amount_is_rejected() -> None:
    with pytest.raises(SchemaValidationError):
        Payment.model_validate({"id": 1, "amount": "ten"})


def test_provider_report_tolerates_nulls() -> None:
    report = ProviderReport.model_validate(
        {
            "supplier": {"id": 1, "companyName": "Acme", "totalDebt": None, "lastPaymentDate": "2024-03-01T00:00:00.000Z"},
            "debts": [{"id": 10, "remainingAmount": None, "payments": None, "dueDate": "2024-04-01", "status": "PARTIALLY_PAID"}],
            "totalPaid": None,
            "paymentCount": None,
        }
    )

    assert report.provider.company_name == "Acme"
    assert report.provider.total_debt == Decimal("0")
    assert report.provider.last_payment_date == date(2024, 3, 1)
    assert report.debts[0].payments == []
    assert report.debts[0].remaining_amount == Decimal("0")
    assert report.debts[0].status is DebtStatus.PARTIALLY_PAID
    assert report.total_paid == Decimal("0")


def test_malformed_calendar_date_is_rejected() -> None:
    with pytest.raises(SchemaValidationError):
        Provider.model_validate({"id": 1, "lastPaymentDate": "yesterday"})
    with pytest.raises(SchemaValidationError):
        Debt.model_validate({"id": 1, "dueDate": "2024-02-30"})


def test_cashier_info_spanish_fields() -> None:
    cashier = CashierInfo.model_validate({"id": 3, "nombre": "Maria", "rol": "CASHIER"})

    assert cashier.display_name == "Maria"
    assert cashier.role == "CASHIER"
    assert CashierInfo(id=4, email="caja@example.com").display_name == "caja@example.com"


def test_cashier_params_query() -> None:
    params = CashierPaymentsParams(page=2, limit=50, start_date=date(2024, 3, 1), payment_method="CASH")

    assert params.to_query() == {
        "page": "2",
        "limit": "50",
        "includeDeleted": "false",
        "startDate": "2024-03-01",
        "paymentMethod": "CASH",
    }


def test_parse_period() -> None:
    assert parse_period("LAST7") is Period.WEEK
    assert parse_period(Period.MONTH) is Period.MONTH
    assert parse_period("yearly") is None
    assert parse_period(None) is None
