"""PydanticAI agents for the AI obituaries discovery pipeline.

ClaimClassifier:
    Structured classification of quality-gated candidates as AI doom
    claims, with bounded concurrency and per-call retries.

Example:
    >>> from agents import ClaimClassifier, filter_classified
    >>> classifier = ClaimClassifier(config)
    >>> batch = await classifier.classify_batch(candidates)
    >>> approved = filter_classified(batch.classified)
"""

from agents.classifier import ClaimClassifier, ClassificationBatch, filter_classified

__all__ = [
    "ClaimClassifier",
    "ClassificationBatch",
    "filter_classified",
]
