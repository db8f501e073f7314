"""Sanity HTTP API content store.

Writes draft obituaries through the Sanity mutate endpoint and performs the
sourceUrl dedup and slug collision checks with GROQ count queries. Writes
always go direct to the API, never through the CDN.

Endpoints:
    GET  https://<project>.api.sanity.io/v<version>/data/query/<dataset>
    POST https://<project>.api.sanity.io/v<version>/data/mutate/<dataset>

Error Handling:
    - Not configured: exists_by_url and exists_by_slug return False
      (nothing to compare against), create raises StoreNotConfigured
    - Any HTTP or transport failure raises StoreError
"""

import json
import logging
from typing import Any

import aiohttp

from config import Config
from database import ContentStore, StoreError, StoreNotConfigured
from models.draft import DOCUMENT_TYPE, ObituaryDraft
from tools.utils import USER_AGENT, create_ssl_context

logger = logging.getLogger(__name__)

EXISTS_BY_URL_QUERY = f'count(*[_type == "{DOCUMENT_TYPE}" && sourceUrl == $url])'
EXISTS_BY_SLUG_QUERY = f'count(*[_type == "{DOCUMENT_TYPE}" && slug.current == $slug])'


class SanityStore(ContentStore):
    """Content store backed by the Sanity HTTP API.

    Example:
        >>> store = SanityStore(config)
        >>> if not await store.exists_by_url(draft.source_url):
        ...     doc_id = await store.create(draft)
    """

    def __init__(self, config: Config, base_url: str | None = None):
        """Initialize the store.

        Args:
            config: Application configuration (project, dataset, token)
            base_url: Data API root override; defaults to the project's
                      ``/v<version>/data`` endpoint
        """
        self._configured = config.sanity_configured
        self._token = config.sanity_write_token
        self._timeout = config.request_timeout
        self._base_url = (base_url or (
            f"https://{config.sanity_project_id}.api.sanity.io"
            f"/v{config.sanity_api_version}/data"
        )).rstrip("/")
        self._dataset = config.sanity_dataset

    @property
    def is_configured(self) -> bool:
        return self._configured

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    async def _request(self, method: str, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self._timeout)) as session:
                async with session.request(
                    method, url, headers=self._headers(), ssl=create_ssl_context(), **kwargs
                ) as resp:
                    if resp.status != 200:
                        body = await resp.text()
                        raise StoreError(f"Sanity HTTP {resp.status}: {body[:200]}")
                    return await resp.json()
        except aiohttp.ClientError as e:
            raise StoreError(f"Sanity request failed: {type(e).__name__}: {e}") from e
        except TimeoutError as e:
            raise StoreError("Sanity request timed out") from e

    async def exists_by_url(self, source_url: str) -> bool:
        if not self._configured:
            logger.warning("Sanity not configured, skipping duplicate check")
            return False

        return await self._count(EXISTS_BY_URL_QUERY, url=source_url) > 0

    async def exists_by_slug(self, slug: str) -> bool:
        if not self._configured:
            return False
        return await self._count(EXISTS_BY_SLUG_QUERY, slug=slug) > 0

    async def _count(self, query: str, **variables: str) -> int:
        # GROQ variables travel as $name query params holding JSON values
        params = {"query": query, **{f"${name}": json.dumps(value) for name, value in variables.items()}}
        data = await self._request("GET", f"{self._base_url}/query/{self._dataset}", params=params)
        return int(data.get("result") or 0)

    async def create(self, draft: ObituaryDraft) -> str:
        if not self._configured:
            raise StoreNotConfigured("Sanity write client not configured")

        payload = {"mutations": [{"create": draft.to_document()}]}
        data = await self._request(
            "POST",
            f"{self._base_url}/mutate/{self._dataset}",
            params={"returnIds": "true"},
            json=payload,
        )
        results = data.get("results") or []
        if not results or not results[0].get("id"):
            raise StoreError("Sanity create returned no document id")

        doc_id = results[0]["id"]
        logger.debug("Draft created | id=%s slug=%s", doc_id, draft.slug)
        return doc_id
