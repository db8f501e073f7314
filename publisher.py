"""Draft publisher: the pipeline's idempotency boundary.

filter_new_drafts drops repeated sourceUrls within the batch and drafts
whose sourceUrl is already in the store, so re-running discovery over an
overlapping window never creates duplicates. assign_unique_slugs resolves
slug collisions against the store and the rest of the batch.
create_obituary_drafts writes the rest one by one; a failed write is
recorded by index and never stops the remaining writes.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from database import ContentStore
from enricher import disambiguate_slug
from models.draft import ObituaryDraft

logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    """Outcome of a publish batch.

    Attributes:
        created_ids: Store ids of written drafts, in input order
        failed_indices: Indices (into the input list) of drafts that failed
    """

    created_ids: list[str] = field(default_factory=list)
    failed_indices: list[int] = field(default_factory=list)


def unique_by_url(drafts: list[ObituaryDraft]) -> list[ObituaryDraft]:
    """Keep the first draft for each sourceUrl, preserving order."""
    seen: set[str] = set()
    unique = []
    for draft in drafts:
        if draft.source_url in seen:
            continue
        seen.add(draft.source_url)
        unique.append(draft)
    return unique


async def filter_new_drafts(store: ContentStore, drafts: list[ObituaryDraft]) -> list[ObituaryDraft]:
    """Return the drafts whose sourceUrl is neither repeated nor stored.

    Lookups run concurrently. A failing lookup propagates: without it the
    batch cannot be published safely.
    """
    if not drafts:
        return []
    unique = unique_by_url(drafts)
    if len(unique) < len(drafts):
        logger.info("Dropped repeated URLs in batch | repeated=%d", len(drafts) - len(unique))

    exists = await asyncio.gather(*(store.exists_by_url(d.source_url) for d in unique))
    new = [draft for draft, found in zip(unique, exists) if not found]
    logger.info("Dedup complete | drafts=%d new=%d", len(drafts), len(new))
    return new


async def assign_unique_slugs(store: ContentStore, drafts: list[ObituaryDraft]) -> list[ObituaryDraft]:
    """Give every draft a slug unused in the store and in the batch.

    Drafts are checked in order, so earlier drafts keep their natural slug.
    A taken slug gets a suffix derived from the draft's sourceUrl. Lookup
    failures propagate like those of filter_new_drafts.
    """
    taken: set[str] = set()
    result = []
    for draft in drafts:
        slug, attempt = draft.slug, 0
        while slug in taken or await store.exists_by_slug(slug):
            slug = disambiguate_slug(draft.slug, draft.source_url, attempt)
            attempt += 1
        taken.add(slug)
        if slug != draft.slug:
            logger.info("Slug collision resolved | url=%s slug=%s", draft.source_url, slug)
            draft = draft.model_copy(update={"slug": slug})
        result.append(draft)
    return result


async def create_obituary_drafts(store: ContentStore, drafts: list[ObituaryDraft]) -> PublishResult:
    """Persist drafts, isolating each write.

    Args:
        store: Target content store
        drafts: Drafts that passed filter_new_drafts and assign_unique_slugs

    Returns:
        PublishResult with created ids and failed indices
    """
    result = PublishResult()
    for index, draft in enumerate(drafts):
        try:
            doc_id = await store.create(draft)
        except Exception as e:
            logger.error(
                "Failed to create draft | index=%d url=%s error=%s: %s",
                index, draft.source_url, type(e).__name__, e,
            )
            result.failed_indices.append(index)
            continue
        result.created_ids.append(doc_id)

    logger.info("Publish complete | created=%d failed=%d", len(result.created_ids), len(result.failed_indices))
    return result
