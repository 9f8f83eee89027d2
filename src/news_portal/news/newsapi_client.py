"""Async NewsAPI.org client for the portal's fixed categories."""

from __future__ import annotations

import logging
import os

import httpx

from news_portal.models import DEFAULT_CATEGORY, ArticleRecord

logger = logging.getLogger(__name__)

_BASE_URL = "https://newsapi.org"
_HEADLINES_QUERY = "india"
_TIMEOUT = 30.0


class NewsAPIError(Exception):
    """Error fetching articles from NewsAPI."""

    pass


class NetworkFailure(NewsAPIError):
    """Transport-level failure (DNS, refused connection, timeout)."""

    pass


class UpstreamFailure(NewsAPIError):
    """NewsAPI answered with something other than a successful result."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(UpstreamFailure):
    """Rate limit exceeded."""

    pass


class MalformedResponse(UpstreamFailure):
    """Successful status but the payload lacks the article list."""

    pass


class NewsAPIClient:
    """Client for the two NewsAPI endpoints the portal uses.

    Credentials and endpoint settings come from the constructor arguments,
    falling back to ``NEWSAPI_KEY``, ``NEWSAPI_BASE_URL``,
    ``NEWS_PORTAL_HEADLINES_QUERY`` and ``NEWS_PORTAL_TIMEOUT``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        headlines_query: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key or os.environ.get("NEWSAPI_KEY")
        if not self._api_key:
            raise ValueError("NEWSAPI_KEY environment variable or api_key parameter required")
        self._base_url = (base_url or os.environ.get("NEWSAPI_BASE_URL", _BASE_URL)).rstrip("/")
        self._headlines_query = headlines_query or os.environ.get(
            "NEWS_PORTAL_HEADLINES_QUERY", _HEADLINES_QUERY
        )
        if timeout is None:
            raw_timeout = os.environ.get("NEWS_PORTAL_TIMEOUT", _TIMEOUT)
            try:
                timeout = float(raw_timeout)
            except ValueError:
                raise ValueError(
                    f"NEWS_PORTAL_TIMEOUT must be a number of seconds, got {raw_timeout!r}"
                ) from None
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def headlines_query(self) -> str:
        return self._headlines_query

    def build_request(self, category_id: str) -> tuple[str, dict[str, str]]:
        """Return the URL and query parameters for a category.

        Headlines use a broad ``everything`` search; every other category
        uses ``top-headlines`` filtered by category.
        """
        if category_id == DEFAULT_CATEGORY:
            endpoint = "everything"
            params = {"q": self._headlines_query}
        else:
            endpoint = "top-headlines"
            params = {"category": category_id}
        params["apiKey"] = self._api_key
        return f"{self._base_url}/v2/{endpoint}", params

    async def _get(self, url: str, params: dict[str, str]) -> dict:
        """GET a NewsAPI endpoint and return the decoded JSON object."""
        try:
            resp = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise NetworkFailure(f"Request to NewsAPI timed out: {e}") from e
        except httpx.TransportError as e:
            raise NetworkFailure(f"Could not reach NewsAPI: {e}") from e

        if resp.status_code != 200:
            message = _error_message(resp)
            if resp.status_code == 429:
                raise RateLimitError(message, status_code=429)
            raise UpstreamFailure(message, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise MalformedResponse("NewsAPI returned a body that is not JSON", 200) from e

        if not isinstance(data, dict):
            raise MalformedResponse("NewsAPI returned an unexpected payload", 200)

        if data.get("status") == "error":
            code = data.get("code", "unknown")
            message = data.get("message", "Unknown error")
            if code == "rateLimited":
                raise RateLimitError(message, status_code=200)
            raise UpstreamFailure(f"{code}: {message}", status_code=200)

        return data

    async def fetch_category(self, category_id: str) -> list[ArticleRecord]:
        """Fetch and normalize the articles for one category.

        Args:
            category_id: One of the fixed category ids.

        Returns:
            Records in response order, ordinals starting at 1.

        Raises:
            NetworkFailure: The request never got a response.
            UpstreamFailure: Non-200 status or a NewsAPI error body.
            MalformedResponse: The payload has no usable article list.
        """
        url, params = self.build_request(category_id)
        logger.debug("Fetching %s for category %s", url, category_id)

        data = await self._get(url, params)
        return parse_articles(data)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> NewsAPIClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()


def parse_articles(data: dict) -> list[ArticleRecord]:
    """Map a NewsAPI payload to records, preserving response order."""
    items = data.get("articles")
    if not isinstance(items, list):
        raise MalformedResponse("NewsAPI response has no article list", 200)

    records: list[ArticleRecord] = []
    for ordinal, item in enumerate(items, start=1):
        if not isinstance(item, dict):
            raise MalformedResponse(f"Article {ordinal} is not an object", 200)
        records.append(ArticleRecord.from_upstream(ordinal, item))
    return records


def _error_message(resp: httpx.Response) -> str:
    """Human-readable message for a non-200 NewsAPI response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return f"NewsAPI returned HTTP {resp.status_code}: {body['message']}"
    return f"NewsAPI returned HTTP {resp.status_code}"
