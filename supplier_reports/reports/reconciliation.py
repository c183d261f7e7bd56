"""Two-way reconciliation between the report state store and the URL.

Navigation events are decoded and applied to the store (``APPLYING_URL``);
user operations mutate the store and write the URL back (``SYNCING_URL``).
While the loop writes the URL a guard suppresses the navigation event that
write produces. Collaborator loads run as tasks and carry request tokens so
that only the most recently issued load of each kind is applied.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime
from enum import Enum
from typing import Callable, Coroutine, Optional

from supplier_reports.api.errors import AppError
from supplier_reports.reports import url_codec
from supplier_reports.reports.navigation import BaseNavigator, NavigationEvent
from supplier_reports.reports.store import ReloadPlan, ReportStateStore
from supplier_reports.schemas.common import DateRange
from supplier_reports.schemas.payment import Payment
from supplier_reports.schemas.state import DeleteFilter, Period
from supplier_reports.services.gateway import BaseReportGateway
from supplier_reports.utils.dates import local_timezone

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    IDLE = "idle"
    APPLYING_URL = "applying_url"
    SYNCING_URL = "syncing_url"


def _local_today() -> date:
    return datetime.now(local_timezone()).date()


class ReconciliationLoop:
    """Controller keeping report state, URL and loaded data consistent."""

    def __init__(
        self,
        store: ReportStateStore,
        gateway: BaseReportGateway,
        navigator: BaseNavigator,
        *,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        self.store = store
        self._gateway = gateway
        self._navigator = navigator
        self._today = today or _local_today

        self.state = LoopState.IDLE
        self._sync_guard = 0
        # Debt id from the URL, consumed by the next completed report load
        self._preferred_debt_id: Optional[int] = None
        self._report_token = 0
        self._payments_token = 0
        self._tasks: set[asyncio.Task] = set()
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def syncing(self) -> bool:
        return self._sync_guard > 0

    async def start(self, *, load_providers: bool = True) -> None:
        """Subscribe to navigation and apply the URL the screen was opened with."""

        self._unsubscribe = self._navigator.subscribe(self.handle_navigation)
        if load_providers:
            self._spawn(self._load_providers())
        await self.handle_navigation(NavigationEvent(query=self._navigator.current_query, trigger="direct"))

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    async def wait_idle(self) -> None:
        """Wait until every issued load, including follow-up loads, has finished."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # -- URL -> state ------------------------------------------------------

    async def handle_navigation(self, event: NavigationEvent) -> None:
        if self._sync_guard:
            logger.debug("Ignoring navigation produced by own URL write: %s", event.query)
            return

        self.state = LoopState.APPLYING_URL
        try:
            query = url_codec.decode(event.query)
            plan = self.store.apply_query(query)
            if plan.report:
                self._preferred_debt_id = plan.preferred_debt_id
            logger.debug("Applied %s navigation %s -> %s", event.trigger, event.query, plan)
            self._execute(plan)
        finally:
            self.state = LoopState.IDLE

        if plan.rewrite_url:
            await self._sync_url()

    # -- state -> URL ------------------------------------------------------

    async def _sync_url(self) -> None:
        """Write the current state into the URL without adding a history entry."""

        self._sync_guard += 1
        self.state = LoopState.SYNCING_URL
        query = url_codec.encode(self.store.state)
        try:
            await self._navigator.navigate(query, replace=True)
            logger.info("URL synced: %s", query)
        except Exception as exc:  # noqa: BLE001
            logger.warning("URL write failed, keeping state: %s", exc)
        finally:
            self._sync_guard -= 1
            self.state = LoopState.IDLE

    # -- user operations ---------------------------------------------------

    async def change_provider(self, provider_id: Optional[int]) -> None:
        self._preferred_debt_id = None
        plan = self.store.change_provider(provider_id)
        if provider_id is None:
            self._invalidate_loads()
        self._execute(plan)
        await self._sync_url()

    async def change_debt(self, debt_id: int) -> None:
        plan = self.store.change_debt(debt_id)
        if plan.is_empty:
            return
        self._execute(plan)
        await self._sync_url()

    async def change_page(self, page: int) -> None:
        previous = self.store.state.page
        self._execute(self.store.change_page(page))
        if self.store.state.page != previous:
            await self._sync_url()

    async def change_page_size(self, page_size: int) -> None:
        plan = self.store.change_page_size(page_size)
        if plan.is_empty:
            return
        self._execute(plan)
        await self._sync_url()

    async def change_date_range(self, date_range: DateRange) -> None:
        self._execute(self.store.change_date_range(date_range))
        await self._sync_url()

    async def change_period(self, period: Period) -> None:
        self._execute(self.store.change_period(period, self._today()))
        await self._sync_url()

    async def change_delete_filter(self, delete_filter: DeleteFilter) -> None:
        self._execute(self.store.change_delete_filter(delete_filter))
        await self._sync_url()

    async def clear_filters(self) -> None:
        self._execute(self.store.clear_filters())
        await self._sync_url()

    # -- payment and report actions ----------------------------------------

    async def delete_payment(self, payment: Payment, reason: Optional[str] = None) -> bool:
        if payment.deleted:
            self.store.notify("warn", "Payment already deleted", "This payment was deleted earlier")
            return False

        try:
            await self._gateway.delete_payment(payment.id, reason)
        except AppError as exc:
            logger.warning("Deleting payment %s failed: %s", payment.id, exc.message)
            self.store.notify("error", "Could not delete payment", exc.message)
            return False

        self.store.notify("success", "Payment deleted")
        # Remaining balances change, so the report is reloaded along with the payments
        state = self.store.state
        if state.provider_id is not None:
            self._spawn(self._load_report(state.provider_id))
        elif state.debt_id is not None:
            self._spawn(self._load_payments(state.debt_id))
        return True

    async def share_payment(self, payment: Payment) -> Optional[str]:
        """Share a payment's receipt; returns the share link."""

        if payment.deleted:
            self.store.notify("warn", "Payment deleted", "A deleted payment cannot be shared")
            return None

        try:
            result = await self._gateway.share_payment(payment.id)
        except AppError as exc:
            logger.warning("Sharing payment %s failed: %s", payment.id, exc.message)
            self.store.notify("error", "Could not share payment", exc.message)
            return None

        self.store.replace_payment(result.payment)
        self.store.notify("success", "Payment shared")
        return result.share_url

    async def export_report(self) -> Optional[bytes]:
        provider_id = self.store.state.provider_id
        if provider_id is None:
            self.store.notify("warn", "No provider selected", "Select a provider to export")
            return None

        try:
            return await self._gateway.export_provider_report(provider_id)
        except AppError as exc:
            logger.warning("Exporting report of provider %s failed: %s", provider_id, exc.message)
            self.store.notify("error", "Could not export report", exc.message)
            return None

    async def delete_debt(self, debt_id: int) -> bool:
        try:
            await self._gateway.delete_debt(debt_id)
        except AppError as exc:
            self.store.notify("info", "Debt not deleted", exc.message)
            return False
        return True

    def payment_detail_url(self, payment: Payment) -> str:
        """Link to a payment that carries the report state for the way back."""

        return url_codec.build_url(f"/payments/{payment.id}", self.store.state)

    # -- loads -------------------------------------------------------------

    def _execute(self, plan: ReloadPlan) -> None:
        state = self.store.state
        if plan.report and state.provider_id is not None:
            # Report completion reloads the resolved debt's payments
            self._spawn(self._load_report(state.provider_id))
        elif plan.payments and state.debt_id is not None:
            self._spawn(self._load_payments(state.debt_id))

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _invalidate_loads(self) -> None:
        self._report_token += 1
        self._payments_token += 1
        self.store.loading = False
        self.store.loading_payments = False

    async def _load_providers(self) -> None:
        try:
            providers = await self._gateway.list_providers()
        except AppError as exc:
            logger.warning("Loading providers failed: %s", exc.message)
            self.store.notify("error", "Could not load providers", exc.message)
            return
        self.store.set_providers(providers)

    async def _load_report(self, provider_id: int) -> None:
        self._report_token += 1
        token = self._report_token
        date_range = self.store.state.date_range
        self.store.loading = True
        logger.info("Loading report of provider %s", provider_id)

        try:
            report = await self._gateway.get_provider_detailed_report(provider_id, date_range.start, date_range.end)
        except AppError as exc:
            if token != self._report_token:
                return
            logger.warning("Loading report of provider %s failed: %s", provider_id, exc.message)
            self.store.notify("error", "Could not load report", exc.message)
            self.store.loading = False
            return

        if token != self._report_token:
            logger.debug("Dropping superseded report of provider %s", provider_id)
            return
        if self.store.state.provider_id != provider_id:
            self.store.loading = False
            return

        selected = self.store.set_report(report, self._preferred_debt_id)
        self._preferred_debt_id = None
        if selected is not None:
            self._spawn(self._load_payments(selected))
        self.store.loading = False
        await self._sync_url()

    async def _load_payments(self, debt_id: int) -> None:
        self._payments_token += 1
        token = self._payments_token
        state = self.store.state
        self.store.loading_payments = True
        logger.info("Loading payments of debt %s, page %s", debt_id, state.page)

        try:
            page = await self._gateway.get_debt_payments(
                debt_id,
                state.page,
                state.page_size,
                state.date_range.start,
                state.date_range.end,
            )
        except AppError as exc:
            if token != self._payments_token:
                return
            logger.warning("Loading payments of debt %s failed: %s", debt_id, exc.message)
            self.store.notify("error", "Could not load payments", exc.message)
            self.store.loading_payments = False
            return

        if token != self._payments_token:
            logger.debug("Dropping superseded payments of debt %s", debt_id)
            return
        if self.store.state.debt_id != debt_id:
            self.store.loading_payments = False
            return

        self.store.set_payments_page(page)
        self.store.loading_payments = False
