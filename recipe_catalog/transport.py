"""HTTP transport adapter returning structured :class:`ApiResponse` envelopes.

The rest of the package depends only on the :class:`Transport` protocol, so
tests substitute an in-memory double and production code uses
:class:`HttpxTransport`.

Response classification:

* network failures, 5xx statuses and undecodable 2xx bodies raise
  :class:`~recipe_catalog.errors.TransportError`;
* 4xx statuses become ``ApiResponse(success=False, message=...)``;
* 2xx JSON bodies carrying a ``success`` key are parsed as the envelope,
  anything else is wrapped as ``ApiResponse(success=True, data=body)``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from recipe_catalog.errors import TransportError
from recipe_catalog.schemas.api import ApiResponse

logger = logging.getLogger(__name__)

_USER_AGENT = "recipe-catalog-client/0.1"


class Transport(Protocol):
    """Opaque request capability consumed by the service layer."""

    async def get(
        self, path: str, *, params: Mapping[str, Any] | None = None
    ) -> ApiResponse: ...

    async def post(self, path: str, body: Any) -> ApiResponse: ...

    async def put(self, path: str, body: Any) -> ApiResponse: ...

    async def patch(self, path: str, body: Any) -> ApiResponse: ...

    async def delete(self, path: str) -> ApiResponse: ...


def _error_message(payload: Any, status_code: int) -> str:
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value
    return f"HTTP {status_code}"


def decode_response(
    response: httpx.Response, *, method: str = "GET", target: str = ""
) -> ApiResponse:
    """Translate an ``httpx`` response into an :class:`ApiResponse`."""

    status_code = response.status_code

    if status_code >= 500:
        raise TransportError(
            f"{method} {target} returned HTTP {status_code}", status_code=status_code
        )

    is_error = status_code >= 400
    if not response.content:
        if is_error:
            return ApiResponse.failure(f"HTTP {status_code}")
        return ApiResponse(success=True)

    try:
        payload = response.json()
    except ValueError as exc:
        if is_error:
            return ApiResponse.failure(f"HTTP {status_code}")
        raise TransportError(
            f"{method} {target} returned a non-JSON body", status_code=status_code
        ) from exc

    if isinstance(payload, dict) and "success" in payload:
        try:
            envelope = ApiResponse.model_validate(payload)
        except ValidationError as exc:
            raise TransportError(
                f"{method} {target} returned an invalid envelope: {exc.error_count()} errors",
                status_code=status_code,
            ) from exc
        if is_error and envelope.success:
            return envelope.model_copy(
                update={"success": False, "message": envelope.message or f"HTTP {status_code}"}
            )
        return envelope

    if is_error:
        return ApiResponse.failure(_error_message(payload, status_code))
    return ApiResponse(success=True, data=payload)


class HttpxTransport:
    """:class:`Transport` implementation backed by :class:`httpx.AsyncClient`."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout,
            headers={"User-Agent": _USER_AGENT, "Accept": "application/json"},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> ApiResponse:
        query = {key: value for key, value in (params or {}).items() if value is not None}
        try:
            response = await self._client.request(
                method,
                path,
                params=query or None,
                json=body,
            )
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", method, path, exc)
            raise TransportError(f"{method} {path} failed: {exc}") from exc
        return decode_response(response, method=method, target=path)

    async def get(
        self, path: str, *, params: Mapping[str, Any] | None = None
    ) -> ApiResponse:
        return await self._request("GET", path, params=params)

    async def post(self, path: str, body: Any) -> ApiResponse:
        return await self._request("POST", path, body=body)

    async def put(self, path: str, body: Any) -> ApiResponse:
        return await self._request("PUT", path, body=body)

    async def patch(self, path: str, body: Any) -> ApiResponse:
        return await self._request("PATCH", path, body=body)

    async def delete(self, path: str) -> ApiResponse:
        return await self._request("DELETE", path)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


__all__ = ["HttpxTransport", "Transport", "decode_response"]
