"""Async HTTP client for the debts/payments REST API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import httpx

from supplier_reports.api.errors import CollaboratorError, PayloadError
from supplier_reports.config import Settings

logger = logging.getLogger(__name__)


@dataclass
class ApiEnvelope:
    """Unwrapped ``{success, message, data, pagination, statistics}`` response."""

    data: Any = None
    message: Optional[str] = None
    pagination: Optional[dict] = None
    statistics: Optional[dict] = None


def _clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None and value != ""}


def _error_message(response: httpx.Response) -> str:
    """Prefer the API's own message over the bare status line."""

    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Error Code: {response.status_code}"


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` that unwraps API envelopes."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> "ApiClient":
        return cls(
            base_url=settings.api_base_url,
            token=settings.api_token,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> ApiEnvelope:
        response = await self._request("GET", path, params=_clean_params(params))
        return self._unwrap(response)

    async def post(self, path: str, json: Optional[Any] = None) -> ApiEnvelope:
        response = await self._request("POST", path, json=json)
        return self._unwrap(response)

    async def delete(self, path: str, json: Optional[Any] = None) -> ApiEnvelope:
        response = await self._request("DELETE", path, json=json)
        return self._unwrap(response)

    async def get_raw(self, path: str, params: Optional[Mapping[str, Any]] = None) -> bytes:
        """Fetch a non-envelope body such as an exported file."""

        response = await self._request("GET", path, params=_clean_params(params))
        return response.content

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise CollaboratorError(f"Request {method} {path} failed: {exc}") from exc

        if response.is_error:
            logger.warning("API %s %s answered %s", method, path, response.status_code)
            raise CollaboratorError(_error_message(response), status_code=response.status_code)
        return response

    @staticmethod
    def _unwrap(response: httpx.Response) -> ApiEnvelope:
        try:
            body = response.json()
        except ValueError as exc:
            raise PayloadError("API response is not valid JSON") from exc

        if not isinstance(body, dict):
            raise PayloadError("API response JSON must be an object")
        if not body.get("success"):
            raise CollaboratorError(body.get("message") or "API request was not successful")

        return ApiEnvelope(
            data=body.get("data"),
            message=body.get("message"),
            pagination=body.get("pagination"),
            statistics=body.get("statistics"),
        )
