from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from supplier_reports.reports.store import NO_RELOAD, ReloadPlan, ReportStateStore
from supplier_reports.schemas.common import DateRange, Pagination
from supplier_reports.schemas.report import DebtPaymentsPage
from supplier_reports.schemas.state import DeleteFilter, Period, ReportQuery
from tests.factories import make_debt, make_payment, make_provider, make_report


def _loaded_store() -> ReportStateStore:
    store = ReportStateStore(page_size=10)
    store.change_provider(1)
    store.set_report(make_report(1, [make_debt(10, 1, remaining="300.00"), make_debt(11, 1, remaining="200.50")]), None)
    return store


def test_change_provider_resets_debt_and_page() -> None:
    store = _loaded_store()
    store.change_page(3)

    plan = store.change_provider(2)

    assert plan == ReloadPlan(report=True)
    assert store.state.provider_id == 2
    assert store.state.debt_id is None
    assert store.state.page == 1


def test_clearing_provider_drops_report() -> None:
    store = _loaded_store()

    assert store.change_provider(None) is NO_RELOAD
    assert store.report is None
    assert store.debts == []


def test_change_debt_is_no_op_for_current_debt() -> None:
    store = _loaded_store()

    assert store.change_debt(10).is_empty
    assert store.change_debt(11) == ReloadPlan(payments=True)
    assert store.state.debt_id == 11


def test_change_page_clamps_to_first_page() -> None:
    store = _loaded_store()
    store.change_page(3)

    plan = store.change_page(0)

    assert store.state.page == 1
    assert plan == ReloadPlan(payments=True)


def test_change_page_to_current_page_is_no_op() -> None:
    store = _loaded_store()
    store.change_page(2)

    assert store.change_page(2) is NO_RELOAD
    assert store.change_page(0) == ReloadPlan(payments=True)
    assert store.change_page(-5) is NO_RELOAD
    assert store.state.page == 1


def test_change_page_without_debt_plans_nothing() -> None:
    store = ReportStateStore()

    assert store.change_page(2).is_empty
    assert store.state.page == 2


def test_change_period_recomputes_range_and_resets_page() -> None:
    store = _loaded_store()
    store.change_page(4)

    plan = store.change_period(Period.WEEK, date(2024, 3, 15))

    assert store.state.period is Period.WEEK
    assert store.state.date_range == DateRange(start=date(2024, 3, 9), end=date(2024, 3, 15))
    assert store.state.page == 1
    assert plan == ReloadPlan(report=True, payments=True)


def test_delete_filter_needs_no_reload() -> None:
    store = _loaded_store()
    store.set_payments_page(
        DebtPaymentsPage(
            payments=[make_payment(1), make_payment(2, deleted=True)],
            pagination=Pagination(total=2),
        )
    )

    assert store.change_delete_filter(DeleteFilter.DELETED) is NO_RELOAD
    assert [payment.id for payment in store.displayed_payments] == [2]
    assert [payment.id for payment in store.deleted_payments] == [2]


def test_apply_query_without_provider_keeps_session() -> None:
    store = _loaded_store()

    plan = store.apply_query(ReportQuery(period=Period.MONTH))

    assert plan is NO_RELOAD
    assert store.state.provider_id == 1
    assert store.state.period is Period.MONTH


def test_apply_query_for_new_provider_plans_report_with_preferred_debt() -> None:
    store = _loaded_store()

    plan = store.apply_query(ReportQuery(provider_id=2, debt_id=20, page=3))

    assert plan == ReloadPlan(report=True, preferred_debt_id=20)
    assert store.state.provider_id == 2
    assert store.state.debt_id is None
    assert store.state.page == 3


def test_apply_query_for_same_provider_resolves_debt() -> None:
    store = _loaded_store()

    assert store.apply_query(ReportQuery(provider_id=1, debt_id=11)) == ReloadPlan(payments=True)
    assert store.state.debt_id == 11

    # Unknown id keeps the current debt and asks for the URL to be corrected
    plan = store.apply_query(ReportQuery(provider_id=1, debt_id=404))
    assert plan == ReloadPlan(payments=True, rewrite_url=True)
    assert store.state.debt_id == 11


def test_apply_query_with_stale_debt_on_empty_report_rewrites_url() -> None:
    store = ReportStateStore()
    store.change_provider(1)
    store.set_report(make_report(1, []), None)

    plan = store.apply_query(ReportQuery(provider_id=1, debt_id=404))

    assert plan.is_empty
    assert plan.rewrite_url is True
    assert store.state.debt_id is None


def test_set_report_prefers_url_debt_then_current() -> None:
    store = ReportStateStore()
    store.change_provider(1)
    report = make_report(1, [make_debt(10, 1), make_debt(11, 1)])

    assert store.set_report(report, 11) == 11
    assert store.set_report(report, None) == 11
    assert store.set_report(make_report(1, []), None) is None


def test_total_debt_sums_remaining_or_falls_back_to_provider_total() -> None:
    store = _loaded_store()
    assert store.total_debt_across_debts == Decimal("500.50")

    empty = ReportStateStore()
    empty.providers = [make_provider(5, total_debt="80.00")]
    empty.change_provider(5)
    assert empty.total_debt_across_debts == Decimal("80.00")


def test_payments_pagination_rounds_up() -> None:
    store = _loaded_store()
    store.set_payments_page(DebtPaymentsPage(payments=[make_payment(1)], pagination=Pagination(total=21)))

    assert store.payments_pagination.total_pages == 3


def test_kpis_follow_payment_collection() -> None:
    store = _loaded_store()
    store.set_payments_page(
        DebtPaymentsPage(payments=[make_payment(1, "10.00", paid_at=datetime(2024, 3, 1))], pagination=Pagination(total=1))
    )
    assert store.kpis.total_amount == Decimal("10.00")

    store.replace_payment(make_payment(1, "15.00", paid_at=datetime(2024, 3, 1)))
    assert store.kpis.total_amount == Decimal("15.00")


def test_listeners_only_see_real_changes() -> None:
    store = ReportStateStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    store.change_delete_filter(DeleteFilter.ACTIVE)
    store.change_delete_filter(DeleteFilter.DELETED)
    unsubscribe()
    store.change_delete_filter(DeleteFilter.ACTIVE)

    assert [state.delete_filter for state in seen] == [DeleteFilter.DELETED]


def test_notifications_are_dismissed_together() -> None:
    store = ReportStateStore()
    store.notify("error", "Could not load report", "Error Code: 500")

    dismissed = store.dismiss_notifications()

    assert [item.summary for item in dismissed] == ["Could not load report"]
    assert store.notifications == []
