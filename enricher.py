"""Context enrichment: turn approved claims into persistable drafts.

For each approved claim this module computes what the AI landscape looked
like at the claim date (frontier model, benchmark snapshot, training
compute) and a URL-safe slug, then assembles an ObituaryDraft.

Everything here is a pure transformation. A malformed claim date never
aborts the batch; the claim is enriched as of the discovery time instead.
"""

import hashlib
import logging
import math
import re
import time
from datetime import date, datetime, timezone

from models.candidate import SourceType
from models.classification import ClassifiedCandidate
from models.draft import ContextMetadata, DiscoveryMetadata, ObituaryDraft
from quality import extract_domain
from timeline import (
    MMLU_FRONTIER,
    TRAINING_COMPUTE_FRONTIER,
    get_frontier_model_at_date,
    get_metric_value_at_date,
)

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 80

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def parse_claim_date(value: str | None) -> date | None:
    """Parse an ISO 8601 date or timestamp into a UTC calendar date.

    Returns:
        The date, or None when the value is empty or malformed
    """
    if not value:
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def get_model_at_date(when: date) -> str:
    """Name of the frontier model at a date (never empty)."""
    return get_frontier_model_at_date(when).model


def enrich_context(published_date: str, today: date | None = None) -> ContextMetadata:
    """Build the historical context for a claim date.

    Args:
        published_date: ISO 8601 publication date of the claim
        today: Fallback date for malformed input (defaults to the current UTC date)

    Returns:
        ContextMetadata with the frontier model always set; benchmark and
        compute fields only when the curated series cover the date
    """
    when = parse_claim_date(published_date)
    if when is None:
        when = today or datetime.now(timezone.utc).date()
        logger.warning("Malformed claim date, using %s | value=%r", when.isoformat(), published_date)

    context = ContextMetadata(current_model=get_model_at_date(when))

    mmlu = get_metric_value_at_date(MMLU_FRONTIER, when)
    if mmlu is not None and 0 < mmlu <= 100:
        context.benchmark_name = MMLU_FRONTIER.name
        context.benchmark_score = round(mmlu, 1)

    compute = get_metric_value_at_date(TRAINING_COMPUTE_FRONTIER, when)
    if compute is not None and compute > 0:
        context.note = f"Frontier training compute: 10^{math.floor(compute)} FLOP"

    return context


def _slugify(text: str, max_length: int) -> str:
    return _NON_SLUG_CHARS.sub("-", text.lower())[:max_length].strip("-")


def generate_slug(claim: str, claim_date: str | None = None) -> str:
    """Generate a URL-safe slug from claim text.

    The slug is lowercase ``[a-z0-9-]`` with single separators, no leading
    or trailing dash, and at most MAX_SLUG_LENGTH characters. When a date is
    given, its YYYYMMDD form is appended to keep identical claims from
    different days apart.

    Example:
        >>> generate_slug("AI Will Never Work!", "2025-01-02")
        'ai-will-never-work-20250102'
        >>> generate_slug("!!!", "2025-01-02")
        'claim-20250102'
    """
    suffix = re.sub(r"\D", "", claim_date or "")[:8]

    if not suffix:
        base = _slugify(claim, MAX_SLUG_LENGTH)
        return base or f"claim-{int(time.time())}"

    base = _slugify(claim, MAX_SLUG_LENGTH - len(suffix) - 1)
    if not base:
        return f"claim-{suffix}"
    return f"{base}-{suffix}"


def disambiguate_slug(slug: str, source_url: str, attempt: int = 0) -> str:
    """Derive an alternative slug for a draft whose slug is already taken.

    Appends a short hash of the source URL (plus the attempt number after
    the first try), trimming the base so the result stays within
    MAX_SLUG_LENGTH. Deterministic for a given URL and attempt.

    Example:
        >>> disambiguate_slug("ai-is-a-bubble-20250102", url)  # 'ai-is-a-bubble-20250102-<6 hex>'
    """
    token = hashlib.sha1(source_url.encode("utf-8")).hexdigest()[:6]
    if attempt:
        token = f"{token}{attempt}"
    base = slug[:MAX_SLUG_LENGTH - len(token) - 1].strip("-")
    return f"{base}-{token}" if base else f"claim-{token}"


def _source_name(classified: ClassifiedCandidate) -> str:
    candidate = classified.candidate
    if candidate.source_type is SourceType.TWEET:
        return (candidate.author.name if candidate.author else "") or "Twitter"
    return extract_domain(candidate.url) or "Unknown"


def to_draft(classified: ClassifiedCandidate, discovered_at: str) -> ObituaryDraft:
    """Convert an approved, classified candidate into an ObituaryDraft.

    Args:
        classified: Candidate with an 'approve' classification
        discovered_at: ISO 8601 timestamp of the pipeline run

    Returns:
        Draft ready for the publisher
    """
    candidate, result = classified.candidate, classified.result

    when = parse_claim_date(candidate.published_date)
    if when is None:
        when = parse_claim_date(discovered_at) or datetime.now(timezone.utc).date()
    claim_date = when.isoformat()

    return ObituaryDraft(
        claim=result.extracted_claim,
        source=_source_name(classified),
        source_url=candidate.url,
        date=claim_date,
        categories=[result.suggested_category],
        context=enrich_context(candidate.published_date, today=when),
        slug=generate_slug(result.extracted_claim, claim_date),
        discovery_metadata=DiscoveryMetadata(
            discovered_at=discovered_at,
            confidence=result.claim_confidence,
            notability_reason=result.notability_reason,
            source_type=candidate.source_type,
        ),
    )
