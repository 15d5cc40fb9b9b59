"""Shared HTTP plumbing for the KMA API Hub feeds."""

import logging
from datetime import timedelta, timezone
from typing import Any

import httpx

from nightscope.core.exceptions import FeedParseError, WeatherAPIError

logger = logging.getLogger(__name__)

# Feed timestamps are Korea Standard Time
KST = timezone(timedelta(hours=9), name="KST")


class KmaClient:
    """Base for KMA API Hub clients (one API key across all products)."""

    SOURCE = "kma"
    TIMEOUT = 30.0

    def __init__(
        self,
        auth_key: str,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        """Initialize the client.

        Args:
            auth_key: KMA API Hub key
            client: Optional httpx client (for testing/reuse)
            timeout: Request timeout in seconds (default: TIMEOUT)
        """
        self.auth_key = auth_key
        self.timeout = timeout or self.TIMEOUT
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get(self, url: str, params: dict[str, Any]) -> httpx.Response:
        """GET with the auth key, translating transport failures."""
        client = await self._get_client()
        try:
            response = await client.get(url, params={**params, "authKey": self.auth_key})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise WeatherAPIError(
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                source=self.SOURCE,
            ) from e
        except httpx.RequestError as e:
            raise WeatherAPIError(
                f"Request failed: {e!r}",
                source=self.SOURCE,
            ) from e
        return response

    async def _get_json(self, url: str, params: dict[str, Any]) -> dict:
        """GET and decode a JSON body carrying a KMA result header."""
        response = await self._get(url, params)
        try:
            data = response.json()
        except ValueError as e:
            raise FeedParseError(
                f"Non-JSON response: {response.text[:200]}", source=self.SOURCE
            ) from e
        if not isinstance(data, dict):
            raise FeedParseError("Unexpected JSON payload", source=self.SOURCE)

        body = data.get("response")
        header = body.get("header") if isinstance(body, dict) else None
        if not isinstance(header, dict):
            raise FeedParseError("Response has no result header", source=self.SOURCE)
        if header.get("resultCode") != "00":
            raise WeatherAPIError(
                f"API error {header.get('resultCode')}: {header.get('resultMsg')}",
                source=self.SOURCE,
            )
        return data


def response_items(data: dict, source: str = KmaClient.SOURCE) -> list[dict]:
    """Extract response.body.items.item as a list (it may be a lone object).

    Raises:
        FeedParseError: If the items are not JSON objects
    """
    node: Any = data
    for key in ("response", "body", "items"):
        node = node.get(key) if isinstance(node, dict) else None
        if not node:
            return []

    items = node.get("item") if isinstance(node, dict) else node
    if not items:
        return []
    if isinstance(items, dict):
        return [items]
    if not isinstance(items, list) or not all(isinstance(it, dict) for it in items):
        raise FeedParseError("Malformed items in response body", source=source)
    return items
