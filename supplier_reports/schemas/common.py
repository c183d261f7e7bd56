"""Common schema helpers."""

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class APIBaseSchema(BaseModel):
    """Base schema for camelCase payloads of the REST API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class DateRange(BaseModel):
    """Inclusive calendar-day range; either end may be open."""

    model_config = ConfigDict(frozen=True)

    start: Optional[date] = None
    end: Optional[date] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None


class Pagination(APIBaseSchema):
    """Pagination block returned next to list payloads."""

    page: int = 1
    limit: int = 10
    total: int = 0
    total_pages: int = 0
