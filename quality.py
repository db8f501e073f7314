"""Quality gate: cheap deterministic filtering before classification.

Every check here is pure (no network, no randomness) so the gate can run on
the full discovery batch before any paid classification call.

Gates:
    1. Content quality: body (or title when the body is empty) must be longer
       than MIN_CONTENT_LENGTH and free of spam/promotional markers
    2. Source trust:
       - news passes only from a whitelisted publication domain
       - tweets pass from a whitelisted handle, or from an author who meets
         the notability heuristic

Dropped candidates are not reported anywhere; only the survivor count
leaves this module.
"""

from urllib.parse import urlparse

from models.candidate import AuthorMetadata, DiscoveryCandidate, SourceType
from sources import (
    ALL_NOTABLE_HANDLES,
    ALL_WHITELISTED_DOMAINS,
    BIO_KEYWORDS,
    EXCLUSION_PATTERNS,
    MIN_CONTENT_LENGTH,
    MIN_FOLLOWERS,
    VERIFIED_MIN_FOLLOWERS,
)

# Precomputed once for O(1) case-insensitive lookups
_LOWERCASE_HANDLES = frozenset(h.lower() for h in ALL_NOTABLE_HANDLES)
_LOWERCASE_DOMAINS = tuple(d.lower() for d in ALL_WHITELISTED_DOMAINS)


def extract_domain(url: str) -> str | None:
    """Extract the host of a URL without a leading 'www.'.

    Returns:
        Lowercase domain, or None when the URL has no host
    """
    try:
        host = urlparse(url.strip()).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host.removeprefix("www.")


def is_whitelisted_handle(handle: str) -> bool:
    """Check a handle against the curated list (case- and '@'-insensitive)."""
    return handle.strip().removeprefix("@").lower() in _LOWERCASE_HANDLES


def is_whitelisted_publication(url: str) -> bool:
    """Check whether a URL belongs to a whitelisted publication or a subdomain of one."""
    domain = extract_domain(url)
    if not domain:
        return False
    return any(domain == d or domain.endswith(f".{d}") for d in _LOWERCASE_DOMAINS)


def passes_notability_heuristics(author: AuthorMetadata) -> bool:
    """Judge whether an unlisted author is notable enough to track.

    Passes when any of:
        - verified and followers >= VERIFIED_MIN_FOLLOWERS
        - followers >= MIN_FOLLOWERS
        - bio mentions a relevant role/field and followers >= VERIFIED_MIN_FOLLOWERS
    """
    followers = author.followers or 0

    if author.verified and followers >= VERIFIED_MIN_FOLLOWERS:
        return True
    if followers >= MIN_FOLLOWERS:
        return True
    if author.bio and BIO_KEYWORDS.search(author.bio) and followers >= VERIFIED_MIN_FOLLOWERS:
        return True
    return False


def passes_content_quality(candidate: DiscoveryCandidate) -> bool:
    """Reject content that is too short or looks like spam/promotion."""
    text = (candidate.text or candidate.title).strip()
    if len(text) <= MIN_CONTENT_LENGTH:
        return False
    return not any(pattern.search(text) for pattern in EXCLUSION_PATTERNS)


def passes_source_trust(candidate: DiscoveryCandidate) -> bool:
    """Whitelisted source, or (for tweets) a notable author."""
    if candidate.source_type is SourceType.NEWS:
        return is_whitelisted_publication(candidate.url)

    author = candidate.author
    if author is None:
        return False
    if author.handle and is_whitelisted_handle(author.handle):
        return True
    return passes_notability_heuristics(author)


def passes_quality_gates(candidate: DiscoveryCandidate) -> bool:
    """Check a single candidate against all gates."""
    return passes_content_quality(candidate) and passes_source_trust(candidate)


def filter_candidates(candidates: list[DiscoveryCandidate]) -> list[DiscoveryCandidate]:
    """Keep candidates that pass every gate, preserving order."""
    return [c for c in candidates if passes_quality_gates(c)]
