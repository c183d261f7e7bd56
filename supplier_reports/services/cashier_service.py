"""Cashier close-out KPIs."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from supplier_reports.config import Settings, get_settings
from supplier_reports.reports.kpi import aggregate
from supplier_reports.schemas.common import Pagination
from supplier_reports.schemas.payment import Payment
from supplier_reports.schemas.report import CashierInfo, CashierPaymentsParams, KPISummary
from supplier_reports.services.gateway import BaseReportGateway

logger = logging.getLogger(__name__)


class AggregationScope(str, Enum):
    PAGE = "page"
    ALL = "all"


@dataclass
class CashierReport:
    cashier: Optional[CashierInfo]
    payments: list[Payment]
    pagination: Pagination
    kpis: KPISummary
    scope: AggregationScope


class CashierReportService:
    """Load a cashier's payments and summarize them."""

    def __init__(self, gateway: BaseReportGateway, settings: Optional[Settings] = None) -> None:
        self.gateway = gateway
        self.settings = settings or get_settings()

    async def load(
        self,
        cashier_id: int,
        params: Optional[CashierPaymentsParams] = None,
        scope: AggregationScope = AggregationScope.PAGE,
    ) -> CashierReport:
        """Return KPIs over the requested page, or over every page when ``scope`` is ALL."""

        params = params or CashierPaymentsParams(limit=self.settings.cashier_page_size)
        first = await self.gateway.get_payments_by_cashier(cashier_id, params)
        payments = list(first.payments)
        pagination = first.pagination

        if scope == AggregationScope.ALL:
            last_page = min(pagination.total_pages, params.page + self.settings.cashier_max_pages - 1)
            if pagination.total_pages > last_page:
                logger.warning(
                    "Cashier %s has %s pages, aggregating only up to page %s",
                    cashier_id,
                    pagination.total_pages,
                    last_page,
                )
            for page in range(params.page + 1, last_page + 1):
                batch = await self.gateway.get_payments_by_cashier(
                    cashier_id, params.model_copy(update={"page": page})
                )
                if not batch.payments:
                    break
                payments.extend(batch.payments)

        return CashierReport(
            cashier=first.cashier,
            payments=payments,
            pagination=pagination,
            kpis=aggregate(payments),
            scope=scope,
        )
