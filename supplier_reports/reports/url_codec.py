"""Bidirectional mapping between report state and URL query parameters.

Encoding omits every field that equals its default so bookmarked URLs stay
short and stable. Decoding never raises: missing or malformed values fall
back to the same defaults, which keeps ``decode(encode(s)) == normalize(s)``.
"""

from __future__ import annotations

import re
from typing import Mapping, Optional, Sequence, Union
from urllib.parse import parse_qsl, urlencode, urlsplit

from supplier_reports.schemas.common import DateRange
from supplier_reports.schemas.state import DeleteFilter, Period, ReportQuery, ReportState, parse_period
from supplier_reports.utils.dates import format_local_date, parse_local_date

PROVIDER_PARAM = "providerId"
DEBT_PARAM = "debtId"
PAGE_PARAM = "page"
FILTER_PARAM = "filter"
PERIOD_PARAM = "period"
START_PARAM = "start"
END_PARAM = "end"

QueryValue = Union[str, int, Sequence[str], None]

# Ids fit in a signed 64-bit integer.
_POSITIVE_INT = re.compile(r"^\d{1,18}$", re.ASCII)


def encode(state: Union[ReportState, ReportQuery]) -> dict[str, str]:
    """Serialize the URL-visible part of ``state`` into query parameters."""

    normalized = normalize(state)
    query: dict[str, str] = {}

    if normalized.provider_id is not None:
        query[PROVIDER_PARAM] = str(normalized.provider_id)
    if normalized.debt_id is not None:
        query[DEBT_PARAM] = str(normalized.debt_id)
    if normalized.page != 1:
        query[PAGE_PARAM] = str(normalized.page)
    if normalized.delete_filter is not DeleteFilter.ACTIVE:
        query[FILTER_PARAM] = normalized.delete_filter.value
    if normalized.period is not Period.ALL:
        query[PERIOD_PARAM] = normalized.period.value
    if normalized.date_range.start is not None:
        query[START_PARAM] = format_local_date(normalized.date_range.start)
    if normalized.date_range.end is not None:
        query[END_PARAM] = format_local_date(normalized.date_range.end)
    return query


def decode(query: Mapping[str, QueryValue]) -> ReportQuery:
    """Parse query parameters into a partial report state; never raises."""

    filter_raw = _first(query, FILTER_PARAM)
    delete_filter = (
        DeleteFilter.DELETED if filter_raw is not None and filter_raw.strip().lower() == "deleted" else DeleteFilter.ACTIVE
    )

    return ReportQuery(
        provider_id=_parse_id(_first(query, PROVIDER_PARAM)),
        debt_id=_parse_id(_first(query, DEBT_PARAM)),
        page=_parse_id(_first(query, PAGE_PARAM)) or 1,
        period=parse_period(_first(query, PERIOD_PARAM)) or Period.ALL,
        date_range=DateRange(
            start=parse_local_date(_first(query, START_PARAM)),
            end=parse_local_date(_first(query, END_PARAM)),
        ),
        delete_filter=delete_filter,
    )


def normalize(state: Union[ReportState, ReportQuery]) -> ReportQuery:
    """Project a state onto its URL-visible fields with decode's defaulting."""

    return ReportQuery(
        provider_id=_positive(state.provider_id),
        debt_id=_positive(state.debt_id),
        page=max(state.page, 1),
        period=state.period,
        date_range=state.date_range,
        delete_filter=state.delete_filter,
    )


def to_query_string(query: Mapping[str, str]) -> str:
    return urlencode(query)


def from_query_string(text: str) -> dict[str, str]:
    """Parse a raw query string; the first occurrence of a repeated key wins."""

    result: dict[str, str] = {}
    for key, value in parse_qsl(text.lstrip("?")):
        result.setdefault(key, value)
    return result


def split_url(url: str) -> tuple[str, dict[str, str]]:
    """Split ``/path?query`` into its path and parsed query."""

    parts = urlsplit(url)
    return parts.path, from_query_string(parts.query)


def build_url(path: str, state: Union[ReportState, ReportQuery]) -> str:
    """Deep link to ``path`` carrying the report state."""

    query_string = to_query_string(encode(state))
    return f"{path}?{query_string}" if query_string else path


def _first(query: Mapping[str, QueryValue], key: str) -> Optional[str]:
    value = query.get(key)
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return None


def _parse_id(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    text = raw.strip()
    if not _POSITIVE_INT.match(text):
        return None
    return _positive(int(text))


def _positive(value: Optional[int]) -> Optional[int]:
    if value is None or value < 1:
        return None
    return value
