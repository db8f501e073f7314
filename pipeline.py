"""Discovery pipeline orchestration.

This module coordinates one discovery run from search to stored drafts:

Pipeline Flow:
    1. COLLECT: Search tweets and news published in the discovery window
    2. FILTER: Quality gate (content quality + source trust), no network
    3. CLASSIFY: Claim classifier on survivors, keep 'approve' only
    4. ENRICH: Historical context + slug for each approved claim
    5. DEDUP: Drop repeated or already stored sourceUrls, make slugs unique
    6. PUBLISH: Create the remaining drafts, each write isolated

Each stage that produces nothing ends the run early with zero downstream
counts; later stages are never invoked.

Failure Model:
    - Per-item failures (one classification call, one draft write) are
      recorded in the run report and the run continues
    - Anything else escaping a stage is systemic: the run fails as a whole
      with PipelineError and no partial report is returned. Nothing is
      half-written in a way that a retry could duplicate, because the
      dedup step runs before every write.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from agents.classifier import ClaimClassifier, filter_classified
from collector import SearchClient, discover_candidates
from config import Config
from database import ContentStore, SQLiteStore
from enricher import to_draft
from models.candidate import SourceType
from models.classification import ClassifiedCandidate
from models.draft import ObituaryDraft
from models.run import DiscoveryRunResult, utc_now_iso
from observability.logging import clear_context, set_run_context
from observability.tracing import PipelineTracer, setup_tracing, trace_operation
from publisher import assign_unique_slugs, create_obituary_drafts, filter_new_drafts
from quality import filter_candidates
from sanity import SanityStore
from tools.search import ExaSearchClient

logger = logging.getLogger(__name__)

DUPLICATES_MESSAGE = "All candidates were duplicates"


class PipelineError(Exception):
    """A discovery run failed as a whole.

    The message is safe to return to the trigger caller as ``details``.
    """


def build_store(config: Config) -> ContentStore:
    """Create the content store selected by STORE_BACKEND."""
    if config.store_backend == "sqlite":
        return SQLiteStore(config.db_path)
    return SanityStore(config)


class DiscoveryPipeline:
    """Async discovery pipeline.

    Components are created from the configuration unless injected, which is
    how tests substitute fakes for the external capabilities.

    Components:
        - Search client: Exa search over aiohttp
        - ClaimClassifier: PydanticAI agent with structured output
        - Content store: Sanity (production) or SQLite (local)

    Example:
        >>> pipeline = DiscoveryPipeline(Config.load())
        >>> result = await pipeline.run_once()
        >>> print(result.to_dict())
    """

    def __init__(
        self,
        config: Config,
        search_client: SearchClient | None = None,
        classifier: ClaimClassifier | None = None,
        store: ContentStore | None = None,
    ):
        """Initialize pipeline with all components.

        Args:
            config: Application configuration
            search_client: Search backend (defaults to ExaSearchClient)
            classifier: Claim classifier (defaults to one built from config)
            store: Content store (defaults to build_store(config))
        """
        self.config = config
        self.search_client = search_client or ExaSearchClient(config)
        self.classifier = classifier or ClaimClassifier(config)
        self.store = store or build_store(config)

        # Optional: Distributed tracing
        if config.enable_logfire:
            setup_tracing(config)

    def capability_status(self) -> dict[str, bool]:
        """Report which upstream capabilities are configured.

        Runs no pipeline stage and makes no network call.
        """
        return {
            "search": self.search_client.is_configured,
            "classification": self.classifier.is_configured,
            "persistence": self.store.is_configured,
        }

    async def run_once(self, now: datetime | None = None) -> DiscoveryRunResult:
        """Execute one complete discovery run.

        Args:
            now: Reference time for the discovery window (defaults to now, UTC)

        Returns:
            DiscoveryRunResult with counts from each stage

        Raises:
            PipelineError: On any systemic failure; no partial report
        """
        run_id = uuid.uuid4().hex[:8]
        set_run_context(run_id)
        tracer = PipelineTracer()
        now = now or datetime.now(timezone.utc)
        since = now - timedelta(hours=self.config.discovery_window_hours)

        logger.info("Discovery started | since=%s", since.isoformat())

        try:
            with tracer.trace_run(run_id):
                result = await self._run_stages(since, tracer)
        except asyncio.CancelledError:
            logger.info("Discovery run cancelled")
            raise
        except Exception as e:
            logger.error("Pipeline failed | type=%s error=%s", type(e).__name__, e, exc_info=True)
            raise PipelineError(str(e) or type(e).__name__) from e
        finally:
            logger.debug("Run stats | %s", " ".join(f"{k}={v}" for k, v in tracer.get_summary().items()))
            clear_context()

        return result

    async def _run_stages(self, since: datetime, tracer: PipelineTracer) -> DiscoveryRunResult:
        result = DiscoveryRunResult()

        # Collect
        with trace_operation("discover_candidates") as attrs:
            candidates = await discover_candidates(self.search_client, since, self.config)
            attrs["candidates"] = len(candidates)
        result.discovered = len(candidates)
        tracer.record_discovery(
            tweets=sum(1 for c in candidates if c.source_type is SourceType.TWEET),
            news=sum(1 for c in candidates if c.source_type is SourceType.NEWS),
        )

        if not candidates:
            return self._finish(result)

        # Filter
        filtered = filter_candidates(candidates)
        result.filtered = len(filtered)
        tracer.record_filter(passed=len(filtered))
        logger.info("Quality filter complete | passed=%d dropped=%d", len(filtered), len(candidates) - len(filtered))

        if not filtered:
            return self._finish(result)

        # Classify
        with trace_operation("classify_candidates", {"count": len(filtered)}):
            batch = await self.classifier.classify_batch(filtered)
        result.errors.extend(batch.errors)
        approved = filter_classified(batch.classified)
        result.classified = len(approved)
        tracer.record_classification(
            total=len(batch.classified), approved=len(approved), errors=len(batch.errors),
        )
        logger.info("Classification complete | classified=%d approved=%d", len(batch.classified), len(approved))

        if not approved:
            return self._finish(result)

        # Enrich
        drafts = self._to_drafts(approved, result)

        # Dedup + publish
        with trace_operation("publish_drafts", {"count": len(drafts)}) as attrs:
            new_drafts = await filter_new_drafts(self.store, drafts)
            if drafts and not new_drafts:
                result.errors.append(DUPLICATES_MESSAGE)
                tracer.record_publish(new=0, created=0, failed=0)
                return self._finish(result)

            new_drafts = await assign_unique_slugs(self.store, new_drafts)
            published = await create_obituary_drafts(self.store, new_drafts)
            attrs["created"] = len(published.created_ids)

        result.created = len(published.created_ids)
        result.created_ids = published.created_ids
        if published.failed_indices:
            result.errors.append(f"Failed to create {len(published.failed_indices)} drafts")
        tracer.record_publish(
            new=len(new_drafts), created=result.created, failed=len(published.failed_indices),
        )

        return self._finish(result)

    def _to_drafts(self, approved: list[ClassifiedCandidate], result: DiscoveryRunResult) -> list[ObituaryDraft]:
        discovered_at = utc_now_iso()
        drafts = []
        for classified in approved:
            try:
                drafts.append(to_draft(classified, discovered_at))
            except ValueError as e:
                logger.error("Enrichment failed | url=%s error=%s", classified.candidate.url, e)
                result.errors.append(f"Enrichment failed for {classified.candidate.url}: {type(e).__name__}: {e}")
        return drafts

    def _finish(self, result: DiscoveryRunResult) -> DiscoveryRunResult:
        result.timestamp = utc_now_iso()
        logger.info(
            "Discovery done | discovered=%d filtered=%d classified=%d created=%d errors=%d",
            result.discovered, result.filtered, result.classified, result.created, len(result.errors),
        )
        return result

    async def close(self) -> None:
        """Clean up resources."""
        await self.store.close()


def status_message(status: dict[str, Any]) -> str:
    """One-line readiness summary for the status endpoint and CLI."""
    missing = [name for name, ok in status.items() if not ok]
    if not missing:
        return "Discovery pipeline ready. Use POST to trigger."
    return f"Discovery pipeline ready (unconfigured: {', '.join(missing)}). Use POST to trigger."
