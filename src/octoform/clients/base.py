from __future__ import annotations

from typing import Any

import httpx
import structlog

from octoform.core.errors import RemoteNotFound, RemoteRejected, RemoteTransient

logger = structlog.get_logger()

NOT_FOUND_STATUSES = frozenset({404, 410})


def is_transient_status(status_code: int) -> bool:
    """Determine if an HTTP status code signals a temporary failure."""
    return status_code in (408, 429) or status_code >= 500


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"HTTP {response.status_code}: {body['message']}"
    return f"HTTP {response.status_code}: {response.reason_phrase}"


class BaseHTTPClient:
    """
    Base HTTP client mapping responses onto the remote error taxonomy.

    The client never retries; transient failures are raised as
    ``RemoteTransient`` for the caller's own retry policy.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 30.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        """Override to provide custom headers."""
        return {"Content-Type": "application/json"}

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        url = f"{self._base_url}{path}"
        req_headers = self._headers()
        if headers:
            req_headers.update(headers)

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=req_headers,
                )
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            logger.warning("http_network_error", method=method, url=url, error=str(exc))
            raise RemoteTransient(str(exc)) from exc

        if response.is_success:
            return response

        status = response.status_code
        message = _error_message(response)
        if status in NOT_FOUND_STATUSES:
            raise RemoteNotFound(message, status_code=status)
        if is_transient_status(status):
            logger.warning("http_transient_error", status=status, method=method, url=url)
            raise RemoteTransient(message, status_code=status)
        logger.error(
            "http_permanent_error",
            status=status,
            method=method,
            url=url,
            error=message,
        )
        raise RemoteRejected(message, status_code=status)

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        response = await self._send(method, path, **kwargs)
        return response.json() if response.content else {}

    async def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute GET request."""
        return await self._request("GET", path, params=params, headers=headers)

    async def post(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute POST request."""
        return await self._request("POST", path, json=json, headers=headers)

    async def put(
        self,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute PUT request."""
        return await self._request("PUT", path, json=json, headers=headers)

    async def delete(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Execute DELETE request."""
        return await self._request("DELETE", path, headers=headers)
