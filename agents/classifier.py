"""Classifier agent for AI doom claims.

This module implements the ClaimClassifier, which asks a language model
whether each quality-gated candidate asserts that AI is failing, dead,
overhyped or doomed, and extracts a normalized claim from it.

Design Philosophy:
    - Structured output: the model must return a ClassificationResult
    - Isolated failures: one failing call never aborts the batch; the
      candidate is dropped and an error line (URL + message, no text) is
      recorded for the run report
    - Bounded concurrency: a semaphore caps in-flight calls at MAX_WORKERS
    - Retries: each call is retried with exponential backoff before it is
      counted as failed

Only candidates whose recommendation is 'approve' continue past
filter_classified; 'review' and 'reject' leave the automated pipeline.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from pydantic_ai import Agent
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.providers.anthropic import AnthropicProvider

from config import Config
from models.candidate import DiscoveryCandidate
from models.classification import ClassificationResult, ClassifiedCandidate
from tools.utils import retry_async

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 2000

CLASSIFIER_PROMPT = """You are an AI claim classifier for a project tracking "AI obituaries" - predictions that AI will fail, is overhyped, or has fundamental limitations.

## Your Task
For the content you receive, determine:
1. Is this an AI doom/skepticism claim? (predictions AI will fail, is overhyped, the bubble will burst, has fundamental limits)
2. Extract the core claim as a concise quote or paraphrase (max 200 chars)
3. Which category best fits the claim:
   - "market": AI stocks/investment will crash, AI is overvalued, bubble predictions
   - "capability": AI can't do X, fundamental limitations, "AI will never..."
   - "agi": AGI is impossible, won't happen, or is decades away
   - "dismissive": AI is just hype, not real intelligence, "just" pattern matching
4. How confident you are that this is a valid AI doom claim (0.0-1.0)
5. Whether the author is notable enough to track, and why

## Recommendation
- "approve": high confidence AND notable author
- "review": medium confidence, or notability unclear
- "reject": not a doom claim, or author not notable

## Confidence Calibration
- 0.9-1.0: Explicit, unambiguous claim that AI will fail or is overhyped
- 0.7-0.9: Clear skepticism with minor ambiguity
- 0.5-0.7: Hedged or indirect skepticism
- Below 0.5: Mostly neutral or positive about AI"""


class AgentLike(Protocol):
    """The part of a pydantic-ai Agent the classifier relies on."""

    async def run(self, user_prompt: str, **kwargs: Any) -> Any: ...


def _create_model(config: Config):
    """Create the model for the classifier agent.

    Anthropic models get an explicit provider carrying the configured key;
    any other provider:model string is passed through to pydantic-ai.
    """
    provider, _, model_name = config.classifier_model.partition(":")
    if provider == "anthropic" and model_name:
        return AnthropicModel(
            model_name,
            provider=AnthropicProvider(api_key=config.anthropic_api_key),
        )
    return config.classifier_model


def create_agent(config: Config) -> Agent[None, ClassificationResult]:
    """Create the underlying PydanticAI agent for claim classification.

    The agent uses:
    - Structured output: ClassificationResult Pydantic model
    - Output validation retries: the model is asked again on malformed output
    """
    return Agent(
        _create_model(config),
        output_type=ClassificationResult,
        system_prompt=CLASSIFIER_PROMPT,
        retries=2,
    )


def build_prompt(candidate: DiscoveryCandidate) -> str:
    """Render the per-candidate user message (text capped at MAX_TEXT_CHARS)."""
    author = candidate.author.name if candidate.author else "Unknown"
    return f"""Content to analyze:
---
Title: {candidate.title}
Author: {author}
Source: {candidate.source_type.value}
URL: {candidate.url}
Date: {candidate.published_date}

Text:
{candidate.text[:MAX_TEXT_CHARS]}
---"""


def describe_failure(candidate: DiscoveryCandidate, error: BaseException) -> str:
    """Error line for the run report: URL and error only, never content."""
    return f"Classification failed for {candidate.url}: {type(error).__name__}: {error}"


@dataclass
class ClassificationBatch:
    """Outcome of classifying a batch.

    Attributes:
        classified: Successfully classified candidates, in input order
        errors: One descriptor per failed candidate
    """

    classified: list[ClassifiedCandidate] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class ClaimClassifier:
    """Classifies discovery candidates as AI doom claims using an LLM.

    The agent is created once from the configuration, or injected directly
    (tests pass a stub or a pydantic-ai TestModel-backed agent).

    Example:
        >>> classifier = ClaimClassifier(config)
        >>> batch = await classifier.classify_batch(candidates)
        >>> approved = filter_classified(batch.classified)
    """

    def __init__(self, config: Config, agent: AgentLike | None = None):
        """Initialize the classifier.

        Args:
            config: Application configuration (model, key, concurrency, retries)
            agent: Pre-built agent; when omitted one is created if the
                   classification capability is configured
        """
        self.config = config
        if agent is not None:
            self._agent: AgentLike | None = agent
        elif config.classification_configured:
            self._agent = create_agent(config)
        else:
            self._agent = None

    @property
    def is_configured(self) -> bool:
        return self._agent is not None

    async def classify(self, candidate: DiscoveryCandidate) -> ClassificationResult:
        """Classify a single candidate.

        Raises:
            RuntimeError: If no agent is configured
            Exception: Whatever the final failed attempt raised
        """
        if self._agent is None:
            raise RuntimeError("Classifier not configured")

        prompt = build_prompt(candidate)
        result = await retry_async(
            lambda: self._agent.run(prompt),
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            label=f"classification of {candidate.url}",
        )
        output: ClassificationResult = result.output
        logger.debug("Classified | url=%s -> %s", candidate.url, output)
        return output

    async def classify_batch(
        self,
        candidates: list[DiscoveryCandidate],
        max_concurrent: int | None = None,
    ) -> ClassificationBatch:
        """Classify candidates with bounded concurrency.

        Args:
            candidates: Candidates to classify
            max_concurrent: Max in-flight calls (defaults to config.max_workers)

        Returns:
            ClassificationBatch with successes (input order) and error lines
        """
        batch = ClassificationBatch()
        if not candidates:
            return batch
        if self._agent is None:
            logger.warning("Classifier not configured, skipping %d candidates", len(candidates))
            return batch

        limit = max_concurrent or self.config.max_workers
        total = len(candidates)
        completed = 0
        semaphore = asyncio.Semaphore(limit)

        logger.info("Batch classification started | total=%d max_concurrent=%d", total, limit)

        async def classify_one(candidate: DiscoveryCandidate) -> ClassificationResult:
            nonlocal completed
            async with semaphore:
                try:
                    return await self.classify(candidate)
                finally:
                    completed += 1
                    if completed % 10 == 0 or completed == total:
                        logger.info("Classification progress: %d/%d (%.0f%%)", completed, total, completed / total * 100)

        results = await asyncio.gather(*(classify_one(c) for c in candidates), return_exceptions=True)

        for candidate, result in zip(candidates, results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, Exception):
                logger.error("Classification failed | url=%s error=%s: %s", candidate.url, type(result).__name__, result)
                batch.errors.append(describe_failure(candidate, result))
            else:
                batch.classified.append(ClassifiedCandidate(candidate=candidate, result=result))

        logger.info("Batch classification complete | total=%d errors=%d", total, len(batch.errors))
        return batch


def filter_classified(classified: list[ClassifiedCandidate]) -> list[ClassifiedCandidate]:
    """Keep only candidates the classifier recommended for approval."""
    return [c for c in classified if c.result.is_approved]
