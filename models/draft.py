"""Draft obituary models and the stored document layout.

An ObituaryDraft is the unit of persistence: one accepted claim, enriched
with historical context, waiting for human review in the content store.

Document Layout:
    to_document() produces the exact shape written to the store:

        {
            "_type": "obituary",
            "claim": ..., "source": ..., "sourceUrl": ..., "date": "YYYY-MM-DD",
            "categories": ["capability"],
            "context": {"currentModel": ..., ...},          # no null fields
            "slug": {"_type": "slug", "current": "..."},
            "discoveryMetadata": {"discoveredAt": ..., "confidence": ...,
                                  "notabilityReason": ..., "sourceType": ...}
        }
"""

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from models.candidate import SourceType
from models.classification import ClaimCategory

DOCUMENT_TYPE = "obituary"

_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class ContextMetadata(BaseModel):
    """Historical AI landscape at the time a claim was made.

    Every field is optional: values are computed from curated data and are
    left unset when the data does not cover the claim date.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    current_model: str | None = None
    benchmark_name: str | None = None
    benchmark_score: float | None = None
    nvda_price: float | None = None
    msft_price: float | None = None
    goog_price: float | None = None
    milestone: str | None = None
    note: str | None = None

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class DiscoveryMetadata(BaseModel):
    """How and when the pipeline found a claim."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    discovered_at: str
    confidence: float = Field(ge=0.0, le=1.0)
    notability_reason: str
    source_type: SourceType

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


class ObituaryDraft(BaseModel):
    """A pipeline-produced record pending insertion into the content store.

    Attributes:
        claim: The extracted claim text
        source: Publication domain (news) or author name (tweets)
        source_url: URL of the original content, the cross-run dedup key
        date: Claim date as YYYY-MM-DD
        categories: Suggested categories
        context: Historical context at the claim date
        slug: URL-safe identifier, non-empty
        discovery_metadata: Discovery provenance
    """

    claim: str
    source: str
    source_url: str
    date: str
    categories: list[ClaimCategory]
    context: ContextMetadata
    slug: str
    discovery_metadata: DiscoveryMetadata

    @field_validator("slug")
    @classmethod
    def _check_slug(cls, value: str) -> str:
        if not _SLUG_PATTERN.match(value):
            raise ValueError(f"slug must be non-empty and URL-safe: {value!r}")
        return value

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document layout."""
        return {
            "_type": DOCUMENT_TYPE,
            "claim": self.claim,
            "source": self.source,
            "sourceUrl": self.source_url,
            "date": self.date,
            "categories": [c.value for c in self.categories],
            "context": self.context.to_document(),
            "slug": {"_type": "slug", "current": self.slug},
            "discoveryMetadata": self.discovery_metadata.to_document(),
        }

    def __str__(self) -> str:
        return f"Draft({self.slug}, {self.source_url})"
