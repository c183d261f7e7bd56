"""Report engine exports."""

from supplier_reports.reports.filters import filter_active_or_deleted, filter_by_period, period_date_range
from supplier_reports.reports.kpi import aggregate, format_kpi_lines
from supplier_reports.reports.navigation import BaseNavigator, InMemoryNavigator, NavigationEvent
from supplier_reports.reports.reconciliation import LoopState, ReconciliationLoop
from supplier_reports.reports.selector import select_debt
from supplier_reports.reports.store import NO_RELOAD, ReloadPlan, ReportStateStore

__all__ = [
    "aggregate",
    "format_kpi_lines",
    "filter_active_or_deleted",
    "filter_by_period",
    "period_date_range",
    "select_debt",
    "BaseNavigator",
    "InMemoryNavigator",
    "NavigationEvent",
    "LoopState",
    "ReconciliationLoop",
    "NO_RELOAD",
    "ReloadPlan",
    "ReportStateStore",
]
