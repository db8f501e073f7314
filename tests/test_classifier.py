"""Tests for the claim classifier and its result model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.models.test import TestModel as ScriptedModel

from agents.classifier import (
    CLASSIFIER_PROMPT,
    MAX_TEXT_CHARS,
    ClaimClassifier,
    build_prompt,
    filter_classified,
)
from models.classification import (
    ClaimCategory,
    ClassificationResult,
    ClassifiedCandidate,
    Recommendation,
)
from tests.fakes import StubAgent, make_candidate, make_result


class TestClassificationResult:

    def test_confidence_is_clamped(self) -> None:
        assert make_result(confidence=1.7).claim_confidence == 1.0
        assert make_result(confidence=-0.3).claim_confidence == 0.0

    def test_unknown_category_defaults_to_dismissive(self) -> None:
        assert make_result(category="vibes").suggested_category is ClaimCategory.DISMISSIVE

    def test_category_aliases(self) -> None:
        assert make_result(category="Bubble").suggested_category is ClaimCategory.MARKET
        assert make_result(category="AGI").suggested_category is ClaimCategory.AGI

    def test_unknown_recommendation_needs_review(self) -> None:
        assert make_result(recommendation="maybe").recommendation is Recommendation.REVIEW

    def test_claim_is_capped(self) -> None:
        assert len(make_result(claim="x" * 500).extracted_claim) == 200

    def test_missing_reason_defaults(self) -> None:
        result = ClassificationResult(
            is_ai_doom_claim=True,
            claim_confidence=0.8,
            notability_reason="",
            extracted_claim="AI is hype",
            suggested_category="dismissive",
        )
        assert result.notability_reason == "Unknown"
        assert result.recommendation is Recommendation.REVIEW

    def test_non_numeric_confidence_rejected(self) -> None:
        with pytest.raises(ValidationError):
            make_result(confidence="very")


class TestPrompt:

    def test_text_is_capped(self) -> None:
        candidate = make_candidate(text="y" * (MAX_TEXT_CHARS + 500))
        prompt = build_prompt(candidate)
        assert "y" * MAX_TEXT_CHARS in prompt
        assert "y" * (MAX_TEXT_CHARS + 1) not in prompt

    def test_system_prompt_lists_categories(self) -> None:
        for category in ClaimCategory:
            assert f'"{category.value}"' in CLASSIFIER_PROMPT


class TestClaimClassifier:

    async def test_classify_uses_agent_output(self, config) -> None:
        agent = StubAgent(lambda prompt: make_result())
        classifier = ClaimClassifier(config, agent=agent)

        result = await classifier.classify(make_candidate())

        assert result.recommendation is Recommendation.APPROVE
        assert agent.calls == 1

    async def test_transient_failure_is_retried(self, config) -> None:
        attempts = []

        def respond(prompt: str) -> ClassificationResult:
            attempts.append(prompt)
            if len(attempts) < 2:
                raise ConnectionError("overloaded")
            return make_result()

        classifier = ClaimClassifier(config, agent=StubAgent(respond))
        result = await classifier.classify(make_candidate())

        assert result.is_approved
        assert len(attempts) == 2

    async def test_batch_isolates_failures(self, config) -> None:
        def respond(prompt: str) -> ClassificationResult:
            if "status/2" in prompt:
                raise RuntimeError("model exploded")
            return make_result()

        agent = StubAgent(respond)
        classifier = ClaimClassifier(config, agent=agent)
        candidates = [make_candidate(f"https://x.com/GaryMarcus/status/{i}") for i in range(1, 4)]

        batch = await classifier.classify_batch(candidates)

        assert [c.candidate.url for c in batch.classified] == [
            "https://x.com/GaryMarcus/status/1",
            "https://x.com/GaryMarcus/status/3",
        ]
        assert batch.errors == [
            "Classification failed for https://x.com/GaryMarcus/status/2: RuntimeError: model exploded"
        ]
        # failed candidate was retried max_retries times before giving up
        assert agent.calls == 2 + 1 + config.max_retries

    async def test_errors_do_not_leak_content(self, config) -> None:
        def respond(prompt: str) -> ClassificationResult:
            raise ValueError("bad output")

        classifier = ClaimClassifier(config, agent=StubAgent(respond))
        batch = await classifier.classify_batch([make_candidate()])

        assert batch.classified == []
        assert len(batch.errors) == 1
        assert "dead end" not in batch.errors[0]

    async def test_batch_respects_concurrency_limit(self, config) -> None:
        agent = StubAgent(lambda prompt: make_result(), delay=0.01)
        classifier = ClaimClassifier(config, agent=agent)
        candidates = [make_candidate(f"https://x.com/GaryMarcus/status/{i}") for i in range(8)]

        batch = await classifier.classify_batch(candidates)

        assert len(batch.classified) == 8
        assert agent.max_in_flight <= config.max_workers

    async def test_empty_batch(self, config) -> None:
        agent = StubAgent(lambda prompt: make_result())
        batch = await ClaimClassifier(config, agent=agent).classify_batch([])
        assert batch.classified == [] and batch.errors == []
        assert agent.calls == 0

    async def test_unconfigured_classifier_returns_nothing(self, bare_config) -> None:
        classifier = ClaimClassifier(bare_config)
        assert not classifier.is_configured
        batch = await classifier.classify_batch([make_candidate()])
        assert batch.classified == []

    async def test_structured_output_through_pydantic_ai(self, config) -> None:
        agent = Agent(
            ScriptedModel(custom_output_args={
                "is_ai_doom_claim": True,
                "claim_confidence": 1.4,
                "is_notable": True,
                "notability_reason": "Prominent critic",
                "extracted_claim": "  Scaling is over  ",
                "suggested_category": "limitations",
                "recommendation": "approve",
            }),
            output_type=ClassificationResult,
        )
        classifier = ClaimClassifier(config, agent=agent)

        result = await classifier.classify(make_candidate())

        assert result.claim_confidence == 1.0
        assert result.extracted_claim == "Scaling is over"
        assert result.suggested_category is ClaimCategory.CAPABILITY
        assert result.is_approved


def test_filter_classified_keeps_only_approved() -> None:
    classified = [
        ClassifiedCandidate(candidate=make_candidate(f"https://x.com/a/status/{rec}"), result=make_result(rec))
        for rec in ("approve", "review", "reject", "approve")
    ]
    kept = filter_classified(classified)
    assert [c.candidate.url for c in kept] == [
        "https://x.com/a/status/approve",
        "https://x.com/a/status/approve",
    ]
