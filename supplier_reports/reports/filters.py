"""Pure payment filters: soft-delete split and quick date periods."""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union
from zoneinfo import ZoneInfo

from supplier_reports.api.errors import ValidationError
from supplier_reports.schemas.common import DateRange
from supplier_reports.schemas.payment import Payment
from supplier_reports.schemas.state import DeleteFilter, Period, parse_period
from supplier_reports.utils.dates import to_local_date

# Inclusive window length of the "week" period, reference day included
WEEK_DAYS = 7


def filter_active_or_deleted(payments: Iterable[Payment], mode: Union[DeleteFilter, str]) -> list[Payment]:
    """Return payments on the requested side of the soft-delete split."""

    want_deleted = DeleteFilter(mode) == DeleteFilter.DELETED
    return [payment for payment in payments if payment.deleted == want_deleted]


def period_date_range(period: Union[Period, str], reference_date: Union[date, datetime]) -> DateRange:
    """Date range a quick period selects, relative to ``reference_date``."""

    resolved = _resolve(period)
    today = to_local_date(reference_date)

    if resolved is Period.TODAY:
        return DateRange(start=today, end=today)
    if resolved is Period.WEEK:
        return DateRange(start=today - timedelta(days=WEEK_DAYS - 1), end=today)
    if resolved is Period.MONTH:
        last_day = calendar.monthrange(today.year, today.month)[1]
        return DateRange(start=today.replace(day=1), end=today.replace(day=last_day))
    return DateRange()


def filter_by_period(
    payments: Iterable[Payment],
    period: Union[Period, str],
    reference_date: Union[date, datetime],
    tz: Optional[ZoneInfo] = None,
) -> list[Payment]:
    """Return payments whose local calendar day falls in the period.

    Payments without a usable date only survive the ``all`` period.
    """

    resolved = _resolve(period)
    if resolved is Period.ALL:
        return list(payments)

    bounds = period_date_range(resolved, to_local_date(reference_date, tz))
    selected: list[Payment] = []
    for payment in payments:
        day = to_local_date(payment.payment_date, tz)
        if day is None:
            continue
        if bounds.start <= day <= bounds.end:
            selected.append(payment)
    return selected


def _resolve(period: Union[Period, str]) -> Period:
    resolved = parse_period(period)
    if resolved is None:
        raise ValidationError(f"Unknown period: {period!r}")
    return resolved
