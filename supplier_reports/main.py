"""Entry point wiring a report session together."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping, Optional

import httpx

from supplier_reports.api.client import ApiClient
from supplier_reports.config import Settings, get_settings
from supplier_reports.logging_config import setup_logging
from supplier_reports.reports.navigation import InMemoryNavigator
from supplier_reports.reports.reconciliation import ReconciliationLoop
from supplier_reports.reports.store import ReportStateStore
from supplier_reports.services.gateway import HttpReportGateway

logger = logging.getLogger(__name__)


@asynccontextmanager
async def report_session(
    settings: Optional[Settings] = None,
    *,
    query: Optional[Mapping[str, str]] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[ReconciliationLoop]:
    """
    Start a report screen session opened at ``query`` and release the HTTP
    client on exit.
    """

    settings = settings or get_settings()
    setup_logging(settings.log_level)

    api = ApiClient.from_settings(settings, transport=transport)
    gateway = HttpReportGateway(api)
    store = ReportStateStore(page_size=settings.report_page_size)
    navigator = InMemoryNavigator(path=settings.report_path, query=query)
    loop = ReconciliationLoop(store, gateway, navigator)
    logger.info("Starting %s session at %s", settings.app_name, settings.api_base_url)

    try:
        await loop.start()
        yield loop
    finally:
        loop.stop()
        await loop.wait_idle()
        await api.close()
