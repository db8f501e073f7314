"""Discovery collector: finds raw candidate claims since a timestamp.

This module queries two independent sources concurrently and converts the
results into DiscoveryCandidate objects for the rest of the pipeline.

Sources:
    - Tweets: short-form posts matching the doom keywords
    - News: articles from whitelisted publication domains

Error Handling Strategy:
    - Each source is its own fault domain: an expected failure (missing
      credentials, network error, API error) yields an empty list for that
      source while the other source's results are still returned
    - Transient failures are retried with exponential backoff per request
    - Anything else (a programming error) propagates to the orchestrator,
      which treats it as a systemic failure of the run
"""

import asyncio
import logging
import re
from datetime import datetime, timezone
from typing import Protocol

import aiohttp
from pydantic import ValidationError

from config import Config
from models.candidate import AuthorMetadata, DiscoveryCandidate, SourceType
from models.run import utc_now_iso
from sources import AI_DOOM_KEYWORDS, ALL_WHITELISTED_DOMAINS, QUERY_KEYWORD_LIMIT
from tools.search import SearchError, SearchHit, SearchQuery
from tools.utils import retry_async

logger = logging.getLogger(__name__)

_HANDLE_PATTERN = re.compile(r"(?:^|[/.])(?:twitter|x)\.com/([^/?#]+)", re.IGNORECASE)

# Failures that mean "this source has nothing for us right now"
EXPECTED_SOURCE_ERRORS = (SearchError, aiohttp.ClientError, asyncio.TimeoutError, ValueError)


class SearchClient(Protocol):
    """What the collector needs from a search backend."""

    @property
    def is_configured(self) -> bool: ...

    async def search(self, query: SearchQuery) -> list[SearchHit]: ...


def build_search_query() -> str:
    """Combine the leading doom keywords into one OR query."""
    return " OR ".join(AI_DOOM_KEYWORDS[:QUERY_KEYWORD_LIMIT])


def extract_handle_from_url(url: str) -> str | None:
    """Extract the account handle from a tweet URL.

    Example:
        >>> extract_handle_from_url("https://twitter.com/GaryMarcus/status/123")
        'GaryMarcus'
    """
    match = _HANDLE_PATTERN.search(url)
    return match.group(1) if match else None


def to_candidate(hit: SearchHit, source_type: SourceType) -> DiscoveryCandidate:
    """Convert a search hit into a DiscoveryCandidate.

    Missing publication dates default to the discovery time; the handle of a
    tweet author is taken from the tweet URL.
    """
    author = None
    if hit.author:
        author = AuthorMetadata(
            name=hit.author,
            handle=extract_handle_from_url(hit.url) if source_type is SourceType.TWEET else None,
        )
    return DiscoveryCandidate(
        url=hit.url,
        title=hit.title or "",
        text=hit.text or "",
        published_date=hit.published_date or utc_now_iso(),
        author=author,
        source_type=source_type,
        score=hit.score,
    )


def _iso(since: datetime) -> str:
    if since.tzinfo is None:
        since = since.replace(tzinfo=timezone.utc)
    return since.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


async def _search_source(
    client: SearchClient,
    query: SearchQuery,
    source_type: SourceType,
    config: Config,
) -> list[DiscoveryCandidate]:
    """Run one source query in its own fault domain.

    Returns:
        Candidates from this source, or an empty list on expected failures
    """
    if not client.is_configured:
        logger.warning("Search not configured, skipping %s search", source_type.value)
        return []

    try:
        hits = await retry_async(
            lambda: client.search(query),
            max_retries=config.max_retries,
            base_delay=config.retry_base_delay,
            label=f"{source_type.value} search",
        )
    except EXPECTED_SOURCE_ERRORS as e:
        logger.error("%s search failed | error=%s: %s", source_type.value.capitalize(), type(e).__name__, e)
        return []

    candidates = []
    for hit in hits:
        try:
            candidates.append(to_candidate(hit, source_type))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed %s hit | url=%s errors=%d",
                source_type.value, hit.url, e.error_count(),
            )
    logger.debug("%s search | candidates=%d", source_type.value.capitalize(), len(candidates))
    return candidates


async def search_tweets(client: SearchClient, since: datetime, config: Config) -> list[DiscoveryCandidate]:
    """Search for AI doom claims in tweets published after ``since``."""
    query = SearchQuery(
        query=build_search_query(),
        category="tweet",
        start_published_date=_iso(since),
        num_results=config.search_results,
    )
    return await _search_source(client, query, SourceType.TWEET, config)


async def search_news(client: SearchClient, since: datetime, config: Config) -> list[DiscoveryCandidate]:
    """Search whitelisted publications for AI doom claims published after ``since``."""
    query = SearchQuery(
        query=build_search_query(),
        category="news",
        start_published_date=_iso(since),
        num_results=config.search_results,
        include_domains=list(ALL_WHITELISTED_DOMAINS),
    )
    return await _search_source(client, query, SourceType.NEWS, config)


async def discover_candidates(
    client: SearchClient,
    since: datetime,
    config: Config,
) -> list[DiscoveryCandidate]:
    """Discover candidates from tweets and news concurrently.

    Both searches run in parallel and the collector waits for both. Tweets
    come first in the combined list, followed by news.

    Args:
        client: Search backend
        since: Only content published after this moment
        config: Application configuration (result limits, retry policy)

    Returns:
        Combined list of candidates (possibly empty)
    """
    tweets, news = await asyncio.gather(
        search_tweets(client, since, config),
        search_news(client, since, config),
    )
    logger.info("Discovery complete | tweets=%d news=%d", len(tweets), len(news))
    return [*tweets, *news]
