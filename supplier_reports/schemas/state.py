"""Report screen state, its URL-visible projection and user notifications."""

from __future__ import annotations

from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from supplier_reports.schemas.common import DateRange


class Period(str, Enum):
    """Quick date-range shortcut."""

    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


PERIOD_ALIASES: dict[str, Period] = {"last7": Period.WEEK}


def parse_period(raw: object) -> Optional[Period]:
    """Return the period named by ``raw`` or None when unrecognized."""

    if isinstance(raw, Period):
        return raw
    if not isinstance(raw, str):
        return None
    text = raw.strip().lower()
    if text in PERIOD_ALIASES:
        return PERIOD_ALIASES[text]
    try:
        return Period(text)
    except ValueError:
        return None


class DeleteFilter(str, Enum):
    """Which side of the soft-delete split is shown."""

    ACTIVE = "active"
    DELETED = "deleted"


class ReportState(BaseModel):
    """Canonical in-memory state of the payment report screen."""

    model_config = ConfigDict(frozen=True)

    provider_id: Optional[int] = None
    debt_id: Optional[int] = None
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, gt=0)
    period: Period = Period.ALL
    date_range: DateRange = DateRange()
    delete_filter: DeleteFilter = DeleteFilter.ACTIVE


class ReportQuery(BaseModel):
    """Partial report state as carried in the URL."""

    model_config = ConfigDict(frozen=True)

    provider_id: Optional[int] = None
    debt_id: Optional[int] = None
    page: int = Field(default=1, ge=1)
    period: Period = Period.ALL
    date_range: DateRange = DateRange()
    delete_filter: DeleteFilter = DeleteFilter.ACTIVE


class Notification(BaseModel):
    """Transient user-facing message."""

    model_config = ConfigDict(frozen=True)

    severity: Literal["info", "success", "warn", "error"]
    summary: str
    detail: str = ""
