"""Classification result models for AI doom claims.

This module defines the claim categories, the classifier's recommendation,
and the structured result the classifier agent must return for each
candidate.

Category Design:
    MARKET: AI stocks/investment will crash, AI is overvalued, bubble talk
    CAPABILITY: "AI can't do X", fundamental limitations, "AI will never..."
    AGI: AGI is impossible, won't happen, or is decades away
    DISMISSIVE: AI is just hype, not real intelligence, "just autocomplete"

    Model output is normalized on validation: unknown categories become
    DISMISSIVE, unknown recommendations become REVIEW, confidence is clamped
    into [0, 1] and the extracted claim is capped at MAX_CLAIM_LENGTH.
"""

import logging
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from models.candidate import DiscoveryCandidate

logger = logging.getLogger(__name__)

MAX_CLAIM_LENGTH = 200


class ClaimCategory(str, Enum):
    """Taxonomy of AI skepticism claims."""

    MARKET = "market"           # Bubble, overvaluation, crash predictions
    CAPABILITY = "capability"   # "AI cannot ..." limitations
    AGI = "agi"                 # AGI impossible or far away
    DISMISSIVE = "dismissive"   # Hype, "just pattern matching"


class Recommendation(str, Enum):
    """What the pipeline should do with a classified candidate."""

    APPROVE = "approve"  # High confidence and notable: create a draft
    REVIEW = "review"    # Needs human judgment: not handled automatically
    REJECT = "reject"    # Not a doom claim or not notable


# Map common alias strings from LLM output to supported categories.
_CATEGORY_ALIASES: dict[str, ClaimCategory] = {
    "bubble": ClaimCategory.MARKET,
    "markets": ClaimCategory.MARKET,
    "investment": ClaimCategory.MARKET,
    "financial": ClaimCategory.MARKET,
    "capabilities": ClaimCategory.CAPABILITY,
    "limitation": ClaimCategory.CAPABILITY,
    "limitations": ClaimCategory.CAPABILITY,
    "agi_skepticism": ClaimCategory.AGI,
    "hype": ClaimCategory.DISMISSIVE,
    "dismissal": ClaimCategory.DISMISSIVE,
}


def normalize_category(value: str | ClaimCategory | None) -> ClaimCategory:
    """Normalize a raw category value into a supported ClaimCategory."""
    if isinstance(value, ClaimCategory):
        return value
    if value is None:
        return ClaimCategory.DISMISSIVE
    raw = str(value).strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return ClaimCategory(raw)
    except ValueError:
        mapped = _CATEGORY_ALIASES.get(raw)
        if mapped is not None:
            return mapped
        logger.warning("Unknown claim category; defaulting to dismissive | value=%s", value)
        return ClaimCategory.DISMISSIVE


def normalize_recommendation(value: str | Recommendation | None) -> Recommendation:
    """Normalize a raw recommendation; anything unrecognized needs review."""
    if isinstance(value, Recommendation):
        return value
    raw = str(value or "").strip().lower()
    try:
        return Recommendation(raw)
    except ValueError:
        logger.warning("Unknown recommendation; defaulting to review | value=%s", value)
        return Recommendation.REVIEW


class ClassificationResult(BaseModel):
    """Result of classifying one discovery candidate.

    This model is the structured output of the classifier agent.

    Attributes:
        is_ai_doom_claim: Whether the text asserts AI failure/death/bubble
        claim_confidence: Confidence that this is a valid doom claim (0.0 to 1.0)
        is_notable: Whether the author is notable enough to track
        notability_reason: Why the author was judged notable (or not)
        extracted_claim: The core claim, quoted or paraphrased
        suggested_category: Best-fitting ClaimCategory
        recommendation: approve, review or reject

    Example:
        >>> result = ClassificationResult(
        ...     is_ai_doom_claim=True,
        ...     claim_confidence=1.4,
        ...     extracted_claim="LLMs will never reason",
        ...     suggested_category="capability",
        ...     recommendation="approve",
        ... )
        >>> result.claim_confidence
        1.0
    """

    is_ai_doom_claim: bool = Field(description="Whether the content is an AI doom/skepticism claim")
    claim_confidence: float = Field(ge=0.0, le=1.0, description="Confidence this is a valid doom claim (0-1)")
    is_notable: bool = Field(default=True, description="Whether the author is notable enough to track")
    notability_reason: str = Field(default="Unknown", description="Why the author is (or is not) notable")
    extracted_claim: str = Field(description="Core claim as a concise quote or paraphrase (max 200 chars)")
    suggested_category: ClaimCategory = Field(description="One of: market, capability, agi, dismissive")
    recommendation: Recommendation = Field(
        default=Recommendation.REVIEW,
        description="approve (confident and notable), review (medium confidence), or reject",
    )

    @field_validator("claim_confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value):
        try:
            return max(0.0, min(1.0, float(value)))
        except (TypeError, ValueError):
            return value

    @field_validator("notability_reason", mode="before")
    @classmethod
    def _default_reason(cls, value):
        return value or "Unknown"

    @field_validator("extracted_claim", mode="after")
    @classmethod
    def _cap_claim(cls, value: str) -> str:
        return value.strip()[:MAX_CLAIM_LENGTH]

    @field_validator("suggested_category", mode="before")
    @classmethod
    def _normalize_category(cls, value):
        return normalize_category(value)

    @field_validator("recommendation", mode="before")
    @classmethod
    def _normalize_recommendation(cls, value):
        return normalize_recommendation(value)

    @property
    def is_approved(self) -> bool:
        return self.recommendation is Recommendation.APPROVE

    def __str__(self) -> str:
        """Human-readable representation for logging."""
        return (
            f"Classification({self.recommendation.value}, "
            f"{self.suggested_category.value}, {self.claim_confidence:.2f})"
        )


class ClassifiedCandidate(BaseModel):
    """A candidate paired with its classification result."""

    candidate: DiscoveryCandidate
    result: ClassificationResult
