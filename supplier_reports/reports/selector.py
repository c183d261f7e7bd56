"""Active debt selection and debt card helpers."""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional, Sequence

from supplier_reports.schemas.provider import Debt

DueDateStatus = Literal["safe", "warning", "danger"]


def select_debt(debts: Sequence[Debt], url_debt_id: Optional[int], current_debt_id: Optional[int]) -> Optional[int]:
    """Pick the debt to show after a provider report loads.

    Priority: the id carried by the URL, then the current selection, then the
    first debt in list order. Ids not present in ``debts`` are skipped.
    """

    known_ids = {debt.id for debt in debts}
    if url_debt_id is not None and url_debt_id in known_ids:
        return url_debt_id
    if current_debt_id is not None and current_debt_id in known_ids:
        return current_debt_id
    if debts:
        return debts[0].id
    return None


def days_until_due(debt: Debt, today: date) -> int:
    """Whole days from ``today`` to the due date; negative when overdue."""

    if debt.due_date is None:
        return 0
    return (debt.due_date - today).days


def due_date_status(debt: Debt, today: date) -> DueDateStatus:
    """Traffic-light status of a due date: under a week is ``danger``, up to 30 days ``warning``."""

    if debt.due_date is None:
        return "safe"
    days = days_until_due(debt, today)
    if days < 7:
        return "danger"
    if days <= 30:
        return "warning"
    return "safe"


def active_payment_count(debt: Debt) -> int:
    return sum(1 for payment in debt.payments if not payment.deleted)
