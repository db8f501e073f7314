"""Transport tools shared by the discovery pipeline.

ExaSearchClient:
    Search + text contents from the Exa API, used by the collector.
    Raises SearchError (with a retryable flag) on upstream failures.

retry_async:
    Bounded exponential backoff applied at per-call boundaries
    (one search request, one classification call).

Example:
    >>> from tools import ExaSearchClient, SearchQuery
    >>> client = ExaSearchClient(config)
    >>> hits = await client.search(SearchQuery(query="...", category="tweet",
    ...                                        start_published_date="2025-01-01T00:00:00Z"))
"""

from tools.utils import create_ssl_context, retry_async, USER_AGENT
from tools.search import ExaSearchClient, SearchError, SearchHit, SearchQuery

__all__ = [
    "ExaSearchClient",
    "SearchError",
    "SearchHit",
    "SearchQuery",
    "retry_async",
    "create_ssl_context",
    "USER_AGENT",
]
