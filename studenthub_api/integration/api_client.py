"""Envelope-aware HTTP client for the StudentHub API.

Calls an endpoint, unwraps ``data`` from success envelopes and raises
``ApiClientError`` for error envelopes, so callers work with payloads and
typed failures instead of raw envelopes.

SECURITY: Never logs bearer tokens.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from studenthub_api.models.error_codes import ErrorCode

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """Error envelope (or unusable response) returned by the API."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int,
        details: Any = None,
        request_id: str | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        self.request_id = request_id
        super().__init__(f"{code} ({status_code}): {message}")


class ApiClient:
    """Async client for envelope-speaking APIs.

    Parameters
    ----------
    base_url:
        API root, e.g. ``"http://localhost:3000/api"``.
    token:
        Bearer token sent as ``Authorization`` when set.
    timeout:
        Per-request timeout in seconds.
    transport:
        Optional httpx transport (``httpx.ASGITransport`` or
        ``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def set_token(self, token: str | None) -> None:
        self._token = token

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        request_id: str | None = None,
    ) -> Any:
        """Send a request and return the unwrapped ``data`` of the envelope.

        Raises
        ------
        ApiClientError
            If the API answers with an error envelope or a body that is not
            an envelope at all.
        httpx.TransportError
            If the API cannot be reached.
        """
        headers: dict[str, str] = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        if request_id:
            headers["X-Request-ID"] = request_id

        response = await self._client.request(
            method, path, params=params, json=json, headers=headers
        )
        return self._unwrap(response)

    @staticmethod
    def _unwrap(response: httpx.Response) -> Any:
        request_id = response.headers.get("x-request-id")

        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict) or "success" not in body:
            logger.warning(
                "Non-envelope response from %s %s (status %d)",
                response.request.method,
                response.request.url.path,
                response.status_code,
            )
            raise ApiClientError(
                ErrorCode.INTERNAL_SERVER_ERROR.value,
                "Unexpected response format",
                response.status_code,
                request_id=request_id,
            )

        meta = body.get("meta") or {}
        request_id = meta.get("requestId") or request_id

        if body["success"]:
            return body.get("data")

        error = body.get("error") or {}
        raise ApiClientError(
            error.get("code", ErrorCode.INTERNAL_SERVER_ERROR.value),
            error.get("message", ""),
            error.get("statusCode", response.status_code),
            details=error.get("details"),
            request_id=request_id,
        )

    async def get(self, path: str, **kwargs: Any) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> Any:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", path, **kwargs)
