"""Report screen state store.

State cells live in an immutable ``ReportState`` that is replaced on every
named mutation. Mutations that change what should be on screen return a
``ReloadPlan`` telling the caller which collaborator loads to issue.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from supplier_reports.reports.filters import filter_active_or_deleted, period_date_range
from supplier_reports.reports.kpi import aggregate
from supplier_reports.reports.selector import select_debt
from supplier_reports.schemas.common import DateRange, Pagination
from supplier_reports.schemas.payment import Payment
from supplier_reports.schemas.provider import Debt, Provider
from supplier_reports.schemas.report import DebtPaymentsPage, KPISummary, PaymentStatistics, ProviderReport
from supplier_reports.schemas.state import DeleteFilter, Notification, Period, ReportQuery, ReportState

logger = logging.getLogger(__name__)

StateListener = Callable[[ReportState], None]


@dataclass(frozen=True)
class ReloadPlan:
    """Loads a mutation requires."""

    report: bool = False
    payments: bool = False
    preferred_debt_id: Optional[int] = None
    rewrite_url: bool = False

    @property
    def is_empty(self) -> bool:
        return not (self.report or self.payments)


NO_RELOAD = ReloadPlan()


class ReportStateStore:
    """Owns report state cells, loaded data and derived projections."""

    def __init__(self, page_size: int = 10) -> None:
        self._state = ReportState(page_size=page_size)
        self._listeners: list[StateListener] = []

        self.providers: list[Provider] = []
        self.report: Optional[ProviderReport] = None
        self._payments: list[Payment] = []
        self._kpis: Optional[KPISummary] = None
        self.payments_total = 0
        self.payments_statistics: Optional[PaymentStatistics] = None

        self.loading = False
        self.loading_payments = False
        self.notifications: list[Notification] = []

    # -- state cells -------------------------------------------------------

    @property
    def state(self) -> ReportState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Call ``listener`` with the new state after each change."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _update(self, **changes: Any) -> None:
        new_state = self._state.model_copy(update=changes)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    # -- derived values ----------------------------------------------------

    @property
    def payments(self) -> list[Payment]:
        return list(self._payments)

    @property
    def debts(self) -> list[Debt]:
        return list(self.report.debts) if self.report is not None else []

    @property
    def selected_provider(self) -> Optional[Provider]:
        provider_id = self._state.provider_id
        if provider_id is None:
            return None
        if self.report is not None and self.report.supplier.id == provider_id:
            return self.report.supplier
        return next((provider for provider in self.providers if provider.id == provider_id), None)

    @property
    def active_debt(self) -> Optional[Debt]:
        debt_id = self._state.debt_id
        if debt_id is None:
            return None
        return next((debt for debt in self.debts if debt.id == debt_id), None)

    @property
    def displayed_payments(self) -> list[Payment]:
        return filter_active_or_deleted(self._payments, self._state.delete_filter)

    @property
    def deleted_payments(self) -> list[Payment]:
        return filter_active_or_deleted(self._payments, DeleteFilter.DELETED)

    @property
    def total_debt_across_debts(self) -> Decimal:
        """Sum of remaining balances; the provider's own total when no debts are loaded."""

        debts = self.debts
        provider = self.selected_provider
        if not debts and provider is not None:
            return provider.total_debt
        return sum((debt.remaining_amount for debt in debts), Decimal("0"))

    @property
    def payments_pagination(self) -> Pagination:
        page_size = self._state.page_size
        return Pagination(
            page=self._state.page,
            limit=page_size,
            total=self.payments_total,
            total_pages=math.ceil(self.payments_total / page_size),
        )

    @property
    def stats(self) -> PaymentStatistics:
        if self.report is None:
            return PaymentStatistics()
        return PaymentStatistics(
            total_paid=self.report.total_paid,
            payment_count=self.report.payment_count,
            average_payment=self.report.average_payment,
        )

    @property
    def kpis(self) -> KPISummary:
        """KPI summary of the loaded payments; recomputed when the collection is replaced."""

        if self._kpis is None:
            self._kpis = aggregate(self._payments)
        return self._kpis

    # -- named mutations ---------------------------------------------------

    def change_provider(self, provider_id: Optional[int]) -> ReloadPlan:
        self._update(provider_id=provider_id, debt_id=None, page=1)
        self._clear_payments()
        if provider_id is None:
            self.report = None
            return NO_RELOAD
        return ReloadPlan(report=True)

    def change_debt(self, debt_id: int) -> ReloadPlan:
        if self._state.debt_id == debt_id:
            return NO_RELOAD
        self._update(debt_id=debt_id, page=1)
        self._clear_payments()
        return ReloadPlan(payments=True)

    def change_page(self, page: int) -> ReloadPlan:
        page = max(page, 1)
        if page == self._state.page:
            return NO_RELOAD
        self._update(page=page)
        return ReloadPlan(payments=self._state.debt_id is not None)

    def change_page_size(self, page_size: int) -> ReloadPlan:
        if page_size < 1 or page_size == self._state.page_size:
            return NO_RELOAD
        self._update(page_size=page_size, page=1)
        return ReloadPlan(payments=self._state.debt_id is not None)

    def change_date_range(self, date_range: DateRange) -> ReloadPlan:
        self._update(date_range=date_range)
        return self._date_filter_plan()

    def change_period(self, period: Period, today: Union[date, datetime]) -> ReloadPlan:
        """Select a quick period; it recomputes the date range."""

        self._update(period=period, date_range=period_date_range(period, today))
        return self._date_filter_plan()

    def change_delete_filter(self, delete_filter: DeleteFilter) -> ReloadPlan:
        # Both sides of the split are already loaded
        self._update(delete_filter=delete_filter)
        return NO_RELOAD

    def clear_filters(self) -> ReloadPlan:
        self._update(period=Period.ALL, date_range=DateRange(), delete_filter=DeleteFilter.ACTIVE)
        return self._date_filter_plan()

    def apply_query(self, query: ReportQuery) -> ReloadPlan:
        """Apply state decoded from the URL.

        Without a provider the current session is left untouched. A new
        provider (or no report yet) needs a fresh report load with the URL's
        debt as one-shot preference; otherwise only the debt/page/filters
        change and the resolved debt's payments reload. A URL naming a debt
        that is not in the report asks for the URL to be rewritten.
        """

        self._update(
            delete_filter=query.delete_filter,
            period=query.period,
            date_range=query.date_range,
            page=query.page,
        )

        if query.provider_id is None:
            return NO_RELOAD

        if query.provider_id != self._state.provider_id or self.report is None:
            self._update(provider_id=query.provider_id, debt_id=None)
            self._clear_payments()
            return ReloadPlan(report=True, preferred_debt_id=query.debt_id)

        resolved = select_debt(self.debts, query.debt_id, self._state.debt_id)
        stale_url = query.debt_id is not None and query.debt_id != resolved
        if resolved is None:
            return ReloadPlan(rewrite_url=stale_url)
        if resolved != self._state.debt_id:
            self._update(debt_id=resolved)
            self._clear_payments()
        return ReloadPlan(payments=True, rewrite_url=stale_url)

    def _date_filter_plan(self) -> ReloadPlan:
        if self._state.provider_id is None:
            return NO_RELOAD
        has_debt = self._state.debt_id is not None
        if has_debt:
            self._update(page=1)
        return ReloadPlan(report=True, payments=has_debt)

    # -- data setters used when loads complete -----------------------------

    def set_providers(self, providers: list[Provider]) -> None:
        self.providers = list(providers)

    def set_report(self, report: ProviderReport, preferred_debt_id: Optional[int]) -> Optional[int]:
        """Store a loaded report and resolve the active debt."""

        self.report = report
        selected = select_debt(report.debts, preferred_debt_id, self._state.debt_id)
        self._update(debt_id=selected)
        return selected

    def set_payments_page(self, page: DebtPaymentsPage) -> None:
        self._set_payments(page.payments)
        self.payments_total = page.pagination.total
        self.payments_statistics = page.statistics

    def replace_payment(self, payment: Payment) -> None:
        self._set_payments([payment if item.id == payment.id else item for item in self._payments])

    def notify(self, severity: str, summary: str, detail: str = "") -> Notification:
        notification = Notification(severity=severity, summary=summary, detail=detail)
        self.notifications.append(notification)
        return notification

    def dismiss_notifications(self) -> list[Notification]:
        dismissed, self.notifications = self.notifications, []
        return dismissed

    def _set_payments(self, payments: list[Payment]) -> None:
        self._payments = list(payments)
        self._kpis = None

    def _clear_payments(self) -> None:
        self._set_payments([])
        self.payments_total = 0
        self.payments_statistics = None
