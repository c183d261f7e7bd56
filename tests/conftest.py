from __future__ import annotations

import asyncio
import math
from collections import deque
from datetime import date, datetime
from decimal import Decimal
from typing import Mapping, Optional, Union

import httpx
import pytest
import pytest_asyncio

from supplier_reports.api.client import ApiClient
from supplier_reports.api.errors import AppError, CollaboratorError, NavigationError
from supplier_reports.config import get_settings
from supplier_reports.reports.navigation import InMemoryNavigator
from supplier_reports.reports.reconciliation import ReconciliationLoop
from supplier_reports.reports.store import ReportStateStore
from supplier_reports.schemas.common import Pagination
from supplier_reports.schemas.payment import Payment
from supplier_reports.schemas.provider import Provider
from supplier_reports.schemas.report import (
    CashierInfo,
    CashierPaymentsPage,
    CashierPaymentsParams,
    DebtPaymentsPage,
    PaymentStatistics,
    ProviderReport,
    SharePaymentResult,
)
from supplier_reports.services.gateway import BaseReportGateway
from tests.factories import make_debt, make_payment, make_provider, make_report

TODAY = date(2024, 3, 15)


@pytest.fixture(autouse=True)
def _settings_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set deterministic test env and reset cached Settings."""

    monkeypatch.setenv("TIMEZONE", "America/Caracas")
    monkeypatch.setenv("API_BASE_URL", "http://testserver/api")
    monkeypatch.setenv("API_TOKEN", "test-token")
    monkeypatch.setenv("REPORT_PAGE_SIZE", "10")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeGateway(BaseReportGateway):
    """In-memory backend.

    Provider 1 owns debts 10 (12 payments) and 11 (2 payments, one deleted);
    provider 2 owns debt 20. Queue an ``asyncio.Event`` in ``report_gates`` or
    ``payments_gates`` to hold the next call until it is set.
    """

    def __init__(self) -> None:
        self.providers: list[Provider] = [make_provider(1, "Acme"), make_provider(2, "Globex")]
        self.reports: dict[int, ProviderReport] = {
            1: make_report(1, [make_debt(10, 1), make_debt(11, 1, remaining="250.00")], total_paid="1200.00"),
            2: make_report(2, [make_debt(20, 2)], total_paid="75.00"),
        }
        self.payments: dict[int, list[Payment]] = {
            10: [
                make_payment(index, paid_at=datetime(2024, 3, index), debt_id=10, supplier_id=1)
                for index in range(1, 13)
            ],
            11: [
                make_payment(101, "50.00", "CASH", datetime(2024, 3, 1), debt_id=11, supplier_id=1),
                make_payment(
                    102,
                    "25.00",
                    "TRANSFER",
                    datetime(2024, 3, 2),
                    debt_id=11,
                    supplier_id=1,
                    deleted_at=datetime(2024, 3, 3),
                ),
            ],
            20: [make_payment(201, "75.00", "ZELLE", datetime(2024, 3, 10), debt_id=20, supplier_id=2)],
        }
        self.cashier_payments: list[Payment] = [
            make_payment(300 + index, "10.00", "CASH", datetime(2024, 3, 15), supplier_id=index % 3 + 1)
            for index in range(25)
        ]

        self.calls: list[tuple] = []
        self.deleted: list[tuple[int, Optional[str]]] = []
        self.report_gates: deque[asyncio.Event] = deque()
        self.payments_gates: deque[asyncio.Event] = deque()
        self.failures: dict[str, AppError] = {}

    def calls_of(self, kind: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == kind]

    def _maybe_fail(self, kind: str) -> None:
        error = self.failures.pop(kind, None)
        if error is not None:
            raise error

    async def list_providers(self) -> list[Provider]:
        self.calls.append(("providers",))
        self._maybe_fail("providers")
        return list(self.providers)

    async def get_provider_detailed_report(
        self, provider_id: int, start: Optional[date] = None, end: Optional[date] = None
    ) -> ProviderReport:
        self.calls.append(("report", provider_id, start, end))
        report = self.reports.get(provider_id)
        if self.report_gates:
            await self.report_gates.popleft().wait()
        self._maybe_fail("report")
        if report is None:
            raise CollaboratorError(f"Supplier {provider_id} not found", status_code=404)
        return report

    async def get_debt_payments(
        self,
        debt_id: int,
        page: int,
        page_size: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> DebtPaymentsPage:
        self.calls.append(("payments", debt_id, page, page_size, start, end))
        items = list(self.payments.get(debt_id, []))
        if self.payments_gates:
            await self.payments_gates.popleft().wait()
        self._maybe_fail("payments")
        offset = (page - 1) * page_size
        return DebtPaymentsPage(
            payments=items[offset : offset + page_size],
            pagination=Pagination(
                page=page,
                limit=page_size,
                total=len(items),
                total_pages=math.ceil(len(items) / page_size),
            ),
            statistics=PaymentStatistics(
                total_paid=sum((item.amount for item in items if not item.deleted), Decimal("0")),
                payment_count=len(items),
            ),
        )

    async def get_payments_by_cashier(self, cashier_id: int, params: CashierPaymentsParams) -> CashierPaymentsPage:
        self.calls.append(("cashier", cashier_id, params.page, params.limit))
        self._maybe_fail("cashier")
        items = self.cashier_payments
        offset = (params.page - 1) * params.limit
        return CashierPaymentsPage(
            cashier=CashierInfo(id=cashier_id, name="Maria"),
            payments=items[offset : offset + params.limit],
            pagination=Pagination(
                page=params.page,
                limit=params.limit,
                total=len(items),
                total_pages=math.ceil(len(items) / params.limit),
            ),
        )

    async def export_provider_report(self, provider_id: int) -> bytes:
        self.calls.append(("export", provider_id))
        self._maybe_fail("export")
        return f"report-{provider_id}".encode()

    async def delete_payment(self, payment_id: int, reason: Optional[str] = None) -> None:
        self.calls.append(("delete", payment_id))
        self._maybe_fail("delete")
        self.deleted.append((payment_id, reason))
        for debt_id, items in self.payments.items():
            self.payments[debt_id] = [
                item.model_copy(update={"deleted": True, "deleted_at": datetime(2024, 3, 15), "delete_reason": reason})
                if item.id == payment_id
                else item
                for item in items
            ]

    async def share_payment(self, payment_id: int) -> SharePaymentResult:
        self.calls.append(("share", payment_id))
        self._maybe_fail("share")
        payment = next(item for items in self.payments.values() for item in items if item.id == payment_id)
        return SharePaymentResult(
            payment=payment.model_copy(update={"shared": True, "shared_at": datetime(2024, 3, 15, 9, 30)}),
            share_url=f"https://wa.me/?text=receipt-{payment_id}",
        )


class RecordingNavigator(InMemoryNavigator):
    """In-memory navigator that records URL writes and can be made to fail."""

    def __init__(self, query: Optional[Mapping[str, str]] = None) -> None:
        super().__init__(query=query)
        self.writes: list[tuple[dict[str, str], bool]] = []
        self.fail_next = False

    async def navigate(self, query: Mapping[str, str], *, replace: bool = True) -> None:
        self.writes.append((dict(query), replace))
        if self.fail_next:
            self.fail_next = False
            raise NavigationError("history write rejected")
        await super().navigate(query, replace=replace)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def store() -> ReportStateStore:
    return ReportStateStore(page_size=10)


@pytest.fixture
def loop(store: ReportStateStore, gateway: FakeGateway, navigator: RecordingNavigator) -> ReconciliationLoop:
    return ReconciliationLoop(store, gateway, navigator, today=lambda: TODAY)


@pytest_asyncio.fixture
async def api_client() -> ApiClient:
    """API client over a mock transport; tests register responses in ``client.routes``."""

    routes: dict[tuple[str, str], Union[httpx.Response, Exception]] = {}
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        response = routes.get((request.method, request.url.path))
        if response is None:
            return httpx.Response(404, json={"success": False, "message": f"No route {request.url.path}"})
        if isinstance(response, Exception):
            raise response
        return response

    client = ApiClient.from_settings(get_settings(), transport=httpx.MockTransport(handler))
    client.routes = routes
    client.requests = seen
    try:
        yield client
    finally:
        await client.close()
