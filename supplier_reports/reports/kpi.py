"""Client-side KPI aggregation over a payment collection."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from supplier_reports.schemas.payment import Payment, PaymentMethod
from supplier_reports.schemas.report import KPIDateRange, KPISummary, MethodBreakdown, StatusCounts
from supplier_reports.utils.dates import local_timezone
from supplier_reports.utils.formatters import format_currency, format_number

logger = logging.getLogger(__name__)


def aggregate(payments: Iterable[Payment]) -> KPISummary:
    """Reduce payments into a KPI summary.

    Totals, method breakdown, verification counts, date span and supplier
    count cover active payments only; ``by_status.deleted`` counts every
    soft-deleted payment handed in. Methods outside ``PaymentMethod`` still
    count in the totals but are left out of the breakdown.
    """

    collection = list(payments)
    active = [payment for payment in collection if not payment.deleted]

    total_payments = len(active)
    total_amount = sum((payment.amount for payment in active), Decimal("0"))
    total_in_bolivares = sum(
        (
            payment.amount_in_bolivares
            for payment in active
            if payment.is_bolivares and payment.amount_in_bolivares is not None
        ),
        Decimal("0"),
    )
    average = total_amount / total_payments if total_payments else Decimal("0")

    counts = {method: 0 for method in PaymentMethod}
    sums = {method: Decimal("0") for method in PaymentMethod}
    for payment in active:
        try:
            method = PaymentMethod(payment.payment_method)
        except ValueError:
            logger.debug("Payment %s has unknown method %r; left out of breakdown", payment.id, payment.payment_method)
            continue
        counts[method] += 1
        sums[method] += payment.amount

    verified = sum(1 for payment in active if payment.verified)
    dates = sorted((payment.payment_date for payment in active if payment.payment_date is not None), key=_sort_key)

    return KPISummary(
        total_payments=total_payments,
        total_amount=total_amount,
        total_amount_in_bolivares=total_in_bolivares,
        average_payment_amount=average,
        by_payment_method={
            method: MethodBreakdown(count=counts[method], total_amount=sums[method]) for method in PaymentMethod
        },
        by_status=StatusCounts(
            verified=verified,
            unverified=total_payments - verified,
            shared=sum(1 for payment in active if payment.shared),
            deleted=sum(1 for payment in collection if payment.deleted),
        ),
        date_range=KPIDateRange(first=dates[0], last=dates[-1]) if dates else KPIDateRange(),
        suppliers_served=len({payment.supplier_id for payment in active if payment.supplier_id is not None}),
    )


def _sort_key(value: datetime) -> datetime:
    # Naive values are local already; aware ones must not be compared against them directly
    if value.tzinfo is not None:
        return value.astimezone(local_timezone()).replace(tzinfo=None)
    return value


def format_kpi_lines(summary: KPISummary) -> list[str]:
    """Render a summary as display lines for the cash-desk close screen."""

    lines = [
        f"Payments: {format_number(summary.total_payments)}",
        f"Total: {format_currency(summary.total_amount)}",
        f"Total in bolivares: {format_currency(summary.total_amount_in_bolivares, 'VES')}",
        f"Average payment: {format_currency(summary.average_payment_amount)}",
    ]
    for method, breakdown in summary.by_payment_method.items():
        lines.append(f"{method.value}: {format_number(breakdown.count)} / {format_currency(breakdown.total_amount)}")
    status = summary.by_status
    lines.append(
        f"Verified: {status.verified}, unverified: {status.unverified}, "
        f"shared: {status.shared}, deleted: {status.deleted}"
    )
    lines.append(f"Suppliers served: {format_number(summary.suppliers_served)}")
    return lines
