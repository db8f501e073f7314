"""Run report returned by each pipeline invocation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string with a trailing 'Z'."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class DiscoveryRunResult:
    """Counts and outcomes from a single pipeline run.

    Counts never increase stage over stage:
    discovered >= filtered >= classified >= created.

    Attributes:
        discovered: Raw candidates returned by the collector
        filtered: Candidates that passed the quality gate
        classified: Candidates classified with an 'approve' recommendation
        created: Drafts written to the content store
        created_ids: Store ids of the created drafts
        errors: Per-item failure descriptors (never candidate full text)
        timestamp: When the report was assembled (ISO 8601, UTC)
    """

    discovered: int = 0
    filtered: int = 0
    classified: int = 0
    created: int = 0
    created_ids: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    timestamp: str = field(default_factory=utc_now_iso)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON response shape."""
        return {
            "discovered": self.discovered,
            "filtered": self.filtered,
            "classified": self.classified,
            "created": self.created,
            "createdIds": list(self.created_ids),
            "errors": list(self.errors),
            "timestamp": self.timestamp,
        }
