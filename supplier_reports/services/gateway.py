"""Collaborator gateway: the REST operations the report engine consumes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from supplier_reports.api.client import ApiClient
from supplier_reports.api.errors import PayloadError, UnsupportedOperationError
from supplier_reports.schemas.provider import Provider
from supplier_reports.schemas.report import (
    CashierPaymentsPage,
    CashierPaymentsParams,
    DebtPaymentsPage,
    ProviderReport,
    SharePaymentResult,
)
from supplier_reports.utils.dates import format_local_date

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseReportGateway(ABC):
    """Interface for the supplier/debt/payment backend."""

    @abstractmethod
    async def list_providers(self) -> list[Provider]:
        """Return every provider."""

    @abstractmethod
    async def get_provider_detailed_report(
        self, provider_id: int, start: Optional[date] = None, end: Optional[date] = None
    ) -> ProviderReport:
        """Return the provider with its debts and payment totals."""

    @abstractmethod
    async def get_debt_payments(
        self,
        debt_id: int,
        page: int,
        page_size: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> DebtPaymentsPage:
        """Return one page of a debt's payments, soft-deleted ones included."""

    @abstractmethod
    async def get_payments_by_cashier(self, cashier_id: int, params: CashierPaymentsParams) -> CashierPaymentsPage:
        """Return one page of payments registered by a cashier."""

    @abstractmethod
    async def export_provider_report(self, provider_id: int) -> bytes:
        """Return the exported report as an opaque blob."""

    @abstractmethod
    async def delete_payment(self, payment_id: int, reason: Optional[str] = None) -> None:
        """Soft-delete a payment."""

    @abstractmethod
    async def share_payment(self, payment_id: int) -> SharePaymentResult:
        """Mark a payment as shared and return its share link."""

    async def delete_debt(self, debt_id: int) -> None:
        """Debt deletion has a confirmation step on screen but no backend operation."""

        raise UnsupportedOperationError(f"Deleting debt {debt_id} is not supported")


def _parse(model: type[ModelT], payload: Any, what: str) -> ModelT:
    """Validate a payload at the collaborator boundary."""

    try:
        return model.model_validate(payload)
    except SchemaValidationError as exc:
        raise PayloadError(f"Malformed {what} payload: {exc}") from exc


def _date_params(start: Optional[date], end: Optional[date]) -> dict[str, Optional[str]]:
    return {
        "startDate": format_local_date(start) if start is not None else None,
        "endDate": format_local_date(end) if end is not None else None,
    }


class HttpReportGateway(BaseReportGateway):
    """REST implementation over ``ApiClient``."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def list_providers(self) -> list[Provider]:
        envelope = await self._api.get("/suppliers")
        if not isinstance(envelope.data, list):
            raise PayloadError("Provider list payload must be a JSON array")
        return [_parse(Provider, item, "provider") for item in envelope.data]

    async def get_provider_detailed_report(
        self, provider_id: int, start: Optional[date] = None, end: Optional[date] = None
    ) -> ProviderReport:
        envelope = await self._api.get(f"/reports/supplier/{provider_id}/detailed", params=_date_params(start, end))
        return _parse(ProviderReport, envelope.data, "provider report")

    async def get_debt_payments(
        self,
        debt_id: int,
        page: int,
        page_size: int,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> DebtPaymentsPage:
        params = {"page": page, "limit": page_size, "includeDeleted": "true", **_date_params(start, end)}
        envelope = await self._api.get(f"/debts/{debt_id}/payments", params=params)
        payload = {
            "payments": envelope.data or [],
            "pagination": envelope.pagination or {"page": page, "limit": page_size},
            "statistics": envelope.statistics or {},
        }
        return _parse(DebtPaymentsPage, payload, "debt payments")

    async def get_payments_by_cashier(self, cashier_id: int, params: CashierPaymentsParams) -> CashierPaymentsPage:
        envelope = await self._api.get(f"/payments/cashier/{cashier_id}", params=params.to_query())
        if not isinstance(envelope.data, dict):
            raise PayloadError("Cashier payments payload must be a JSON object")
        payload = dict(envelope.data)
        if "pagination" not in payload:
            payload["pagination"] = envelope.pagination or {"page": params.page, "limit": params.limit}
        return _parse(CashierPaymentsPage, payload, "cashier payments")

    async def export_provider_report(self, provider_id: int) -> bytes:
        return await self._api.get_raw(f"/reports/export/{provider_id}")

    async def delete_payment(self, payment_id: int, reason: Optional[str] = None) -> None:
        await self._api.delete(f"/payments/{payment_id}", json={"reason": reason} if reason else None)

    async def share_payment(self, payment_id: int) -> SharePaymentResult:
        envelope = await self._api.post(f"/payments/{payment_id}/share", json={})
        return _parse(SharePaymentResult, envelope.data, "shared payment")
