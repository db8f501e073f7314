"""Discovery candidate models.

A DiscoveryCandidate is raw, unverified content returned by a search source.
It is created by the collector and never modified afterwards; every later
stage either keeps it, drops it, or pairs it with derived data.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SourceType(str, Enum):
    """Where a candidate was discovered."""

    TWEET = "tweet"  # Short-form social post (X/Twitter)
    NEWS = "news"    # Article from a whitelisted publication


class AuthorMetadata(BaseModel):
    """Author information attached to a candidate.

    Only tweet candidates normally carry handle/bio/followers/verified; the
    quality gate uses them for its notability heuristic.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Display name")
    handle: str | None = Field(default=None, description="X/Twitter handle without '@'")
    bio: str | None = Field(default=None, description="Profile bio")
    followers: int | None = Field(default=None, ge=0, description="Follower count")
    verified: bool | None = Field(default=None, description="Verified account flag")


class DiscoveryCandidate(BaseModel):
    """A piece of content that might contain an AI doom claim.

    Attributes:
        url: Link to the original content (the dedup key downstream)
        title: Title or first line of the content
        text: Full text content (may be empty)
        published_date: ISO 8601 publication timestamp as returned by the source
        author: Author information, when the source provides one
        source_type: tweet or news
        score: Search relevance score, when the source provides one
    """

    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    text: str = ""
    published_date: str
    author: AuthorMetadata | None = None
    source_type: SourceType
    score: float | None = None

    def __str__(self) -> str:
        return f"Candidate({self.source_type.value}, {self.url})"
