from __future__ import annotations

from typing import Any

from octoform.clients.base import BaseHTTPClient

DEFAULT_BASE_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "octoform/0.1.0"
API_VERSION = "2022-11-28"


class GitHubClient(BaseHTTPClient):
    """GitHub REST API client."""

    def __init__(
        self,
        token: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        super().__init__(base_url, timeout=timeout)
        self._token = token
        self._user_agent = user_agent

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
            "X-GitHub-Api-Version": API_VERSION,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def get_entity(self, path: str) -> tuple[dict[str, Any], str | None]:
        """GET returning the body together with the response ETag."""
        response = await self._send("GET", path)
        body = response.json() if response.content else {}
        return body, response.headers.get("ETag")
