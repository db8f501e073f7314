"""Exa search client used for candidate discovery.

This module wraps the Exa ``/search`` endpoint (search + text contents in a
single call) over aiohttp. It is a thin transport: query building and
conversion into DiscoveryCandidate objects live in collector.py.

Error Handling:
    - Not configured (no API key): callers check ``is_configured`` and skip
    - HTTP 401/403: SearchError(retryable=False), a credential problem
    - HTTP 429/5xx, network errors, timeouts: retryable
    - Other non-200 responses: SearchError(retryable=False)
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from config import Config
from tools.utils import USER_AGENT, create_ssl_context

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Raised when the search API fails.

    Attributes:
        retryable: Whether the same request may succeed if repeated
    """

    def __init__(self, message: str, retryable: bool = True):
        super().__init__(message)
        self.retryable = retryable


@dataclass
class SearchHit:
    """One search result (subset of the fields Exa returns)."""

    url: str
    title: str | None = None
    text: str | None = None
    published_date: str | None = None
    author: str | None = None
    score: float | None = None

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "SearchHit":
        return cls(
            url=item.get("url", ""),
            title=item.get("title"),
            text=item.get("text"),
            published_date=item.get("publishedDate"),
            author=item.get("author"),
            score=item.get("score"),
        )


@dataclass
class SearchQuery:
    """Parameters of a single search request.

    Attributes:
        query: Search query string
        category: Exa content category ('tweet' or 'news')
        start_published_date: ISO 8601 lower bound on publication date
        num_results: Maximum number of results
        include_domains: Restrict results to these domains (empty = no restriction)
    """

    query: str
    category: str
    start_published_date: str
    num_results: int = 50
    include_domains: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "query": self.query,
            "category": self.category,
            "startPublishedDate": self.start_published_date,
            "numResults": self.num_results,
            "contents": {"text": True},
        }
        if self.include_domains:
            payload["includeDomains"] = list(self.include_domains)
        return payload


class ExaSearchClient:
    """Async client for the Exa search API.

    Constructed once per service and passed to the collector.

    Example:
        >>> client = ExaSearchClient(config)
        >>> hits = await client.search(SearchQuery(query="...", category="news",
        ...                                        start_published_date="2025-01-01T00:00:00Z"))
    """

    def __init__(self, config: Config):
        self._api_key = config.exa_api_key
        self._base_url = config.exa_base_url.rstrip("/")
        self._timeout = config.request_timeout

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def search(self, query: SearchQuery) -> list[SearchHit]:
        """Execute one search request.

        Raises:
            SearchError: On API errors (see module docstring for retryability)
        """
        if not self.is_configured:
            raise SearchError("Exa API key not configured", retryable=False)

        headers = {
            "x-api-key": self._api_key,
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session:
            async with session.post(
                f"{self._base_url}/search",
                json=query.to_payload(),
                headers=headers,
                ssl=create_ssl_context(),
            ) as resp:
                if resp.status in (401, 403):
                    raise SearchError("Exa API key invalid or not permitted", retryable=False)
                if resp.status == 429:
                    raise SearchError("Exa rate limit exceeded")
                if resp.status >= 500:
                    raise SearchError(f"Exa server error: HTTP {resp.status}")
                if resp.status != 200:
                    raise SearchError(f"Exa API error: HTTP {resp.status}", retryable=False)
                data = await resp.json()

        if "error" in data:
            raise SearchError(f"Exa error: {data['error']}", retryable=False)

        hits = [SearchHit.from_api(item) for item in data.get("results", []) if item.get("url")]
        logger.debug("Search complete | category=%s results=%d", query.category, len(hits))
        return hits
