"""Pydantic models for the AI obituaries discovery pipeline.

This package contains all data models used throughout the pipeline:

DiscoveryCandidate / AuthorMetadata / SourceType:
    Raw content found by the collector, with optional author details.

ClassificationResult / ClaimCategory / Recommendation:
    Output of the classifier agent for one candidate.

ClassifiedCandidate:
    A candidate paired with its classification.

ObituaryDraft / ContextMetadata / DiscoveryMetadata:
    Enriched, persistable record and its stored document layout.

DiscoveryRunResult:
    Per-run report returned to the trigger caller.

Example:
    >>> from models import DiscoveryCandidate, SourceType
    >>> candidate = DiscoveryCandidate(
    ...     url="https://x.com/GaryMarcus/status/1",
    ...     published_date="2025-01-02T00:00:00Z",
    ...     source_type=SourceType.TWEET,
    ... )
"""

from models.candidate import AuthorMetadata, DiscoveryCandidate, SourceType
from models.classification import (
    ClaimCategory,
    ClassificationResult,
    ClassifiedCandidate,
    Recommendation,
)
from models.draft import ContextMetadata, DiscoveryMetadata, ObituaryDraft
from models.run import DiscoveryRunResult

__all__ = [
    "AuthorMetadata",
    "DiscoveryCandidate",
    "SourceType",
    "ClaimCategory",
    "ClassificationResult",
    "ClassifiedCandidate",
    "Recommendation",
    "ContextMetadata",
    "DiscoveryMetadata",
    "ObituaryDraft",
    "DiscoveryRunResult",
]
