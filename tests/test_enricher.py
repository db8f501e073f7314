"""Tests for the timeline data and the context enricher."""

from __future__ import annotations

import re
from datetime import date

import pytest

from enricher import (
    MAX_SLUG_LENGTH,
    disambiguate_slug,
    enrich_context,
    generate_slug,
    get_model_at_date,
    parse_claim_date,
    to_draft,
)
from models.candidate import AuthorMetadata, SourceType
from models.classification import ClaimCategory, ClassifiedCandidate
from timeline import (
    FRONTIER_MODELS,
    MMLU_FRONTIER,
    TRAINING_COMPUTE_FRONTIER,
    get_metric_value_at_date,
)
from tests.fakes import make_candidate, make_result

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


class TestTimeline:

    def test_models_sorted_by_date(self) -> None:
        dates = [m.released for m in FRONTIER_MODELS]
        assert dates == sorted(dates)

    @pytest.mark.parametrize(
        ("when", "model"),
        [
            (date(2023, 3, 15), "GPT-4"),
            (date(2023, 6, 15), "GPT-4"),
            (date(2023, 12, 6), "Gemini 1.0 Ultra"),
            (date(2022, 6, 1), "PaLM (540B)"),
        ],
    )
    def test_model_at_date(self, when: date, model: str) -> None:
        assert get_model_at_date(when) == model

    def test_before_first_model_returns_earliest(self) -> None:
        assert get_model_at_date(date(1900, 1, 1)) == FRONTIER_MODELS[0].model

    def test_after_last_model_returns_latest(self) -> None:
        assert get_model_at_date(date(2100, 1, 1)) == FRONTIER_MODELS[-1].model

    def test_model_lookup_is_monotonic(self) -> None:
        index = {m.model: i for i, m in enumerate(FRONTIER_MODELS)}
        days = [date(y, m, 1) for y in range(1940, 2030) for m in (1, 7)]
        positions = [index[get_model_at_date(d)] for d in days]
        assert positions == sorted(positions)

    def test_metric_interpolates_between_points(self) -> None:
        value = get_metric_value_at_date(MMLU_FRONTIER, date(2022, 9, 1))
        assert 70.0 < value < 86.4

    def test_metric_exact_point(self) -> None:
        assert get_metric_value_at_date(MMLU_FRONTIER, date(2023, 3, 1)) == pytest.approx(86.4)

    def test_metric_before_coverage_is_absent(self) -> None:
        assert get_metric_value_at_date(MMLU_FRONTIER, date(2020, 1, 1)) is None

    def test_metric_after_coverage_holds_last_value(self) -> None:
        assert get_metric_value_at_date(TRAINING_COMPUTE_FRONTIER, date(2030, 1, 1)) == pytest.approx(26.7)


class TestParseClaimDate:

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2024-06-15T12:00:00.000Z", date(2024, 6, 15)),
            ("2024-06-15", date(2024, 6, 15)),
            ("2024-06-15T23:30:00-05:00", date(2024, 6, 16)),
        ],
    )
    def test_valid(self, value: str, expected: date) -> None:
        assert parse_claim_date(value) == expected

    @pytest.mark.parametrize("value", ["", None, "yesterday", "2024-13-45"])
    def test_malformed(self, value) -> None:
        assert parse_claim_date(value) is None


class TestEnrichContext:

    def test_full_context_within_coverage(self) -> None:
        context = enrich_context("2023-06-15")
        assert context.current_model == "GPT-4"
        assert context.benchmark_name == "MMLU"
        assert context.benchmark_score == round(context.benchmark_score, 1)
        assert context.note == "Frontier training compute: 10^25 FLOP"

    def test_benchmark_absent_before_coverage(self) -> None:
        context = enrich_context("2019-01-01")
        assert context.current_model == "ResNeXt-101 32x48d"
        assert context.benchmark_name is None
        assert context.benchmark_score is None
        assert "benchmarkScore" not in context.to_document()
        assert context.note == "Frontier training compute: 10^22 FLOP"

    def test_very_old_date_still_has_model(self) -> None:
        context = enrich_context("1900-01-01")
        assert context.current_model == FRONTIER_MODELS[0].model
        assert context.note is None

    def test_malformed_date_uses_fallback(self) -> None:
        context = enrich_context("not-a-date", today=date(2023, 6, 15))
        assert context.current_model == "GPT-4"


class TestGenerateSlug:

    def test_basic(self) -> None:
        assert generate_slug("AI Will Never Work") == "ai-will-never-work"

    def test_special_characters_and_separators(self) -> None:
        assert generate_slug("AI won't achieve AGI!") == "ai-won-t-achieve-agi"
        assert generate_slug("AI --- is --- overhyped") == "ai-is-overhyped"
        assert generate_slug("---AI is doomed---") == "ai-is-doomed"

    def test_date_suffix(self) -> None:
        assert generate_slug("AI is a bubble", "2024-06-15") == "ai-is-a-bubble-20240615"

    def test_same_claim_different_days_differ(self) -> None:
        assert generate_slug("AI is a bubble", "2024-06-15") != generate_slug("AI is a bubble", "2024-06-16")

    def test_empty_claim_with_date(self) -> None:
        assert generate_slug("!@#$%", "2024-06-15") == "claim-20240615"

    def test_empty_claim_without_date(self) -> None:
        slug = generate_slug("")
        assert re.fullmatch(r"claim-\d+", slug)

    @pytest.mark.parametrize("claim_date", [None, "2024-06-15"])
    def test_long_claim_is_capped_and_url_safe(self, claim_date) -> None:
        claim = "A very long claim about AI that goes on and on " * 5
        slug = generate_slug(claim, claim_date)
        assert len(slug) <= MAX_SLUG_LENGTH
        assert SLUG_PATTERN.match(slug)

    def test_truncation_never_leaves_trailing_dash(self) -> None:
        claim = "a" * 70 + " " + "b" * 20
        slug = generate_slug(claim, "2024-06-15")
        assert SLUG_PATTERN.match(slug)
        assert slug.endswith("-20240615")

    @pytest.mark.parametrize("claim", ["Ünïcödé claims", "AI 🤖 is dead", "   ", "x"])
    def test_always_url_safe(self, claim: str) -> None:
        assert SLUG_PATTERN.match(generate_slug(claim, "2024-06-15"))


class TestDisambiguateSlug:

    def test_deterministic_per_url(self) -> None:
        url = "https://x.com/GaryMarcus/status/1"
        assert disambiguate_slug("ai-is-a-bubble-20240615", url) == disambiguate_slug("ai-is-a-bubble-20240615", url)

    def test_keeps_base_and_adds_suffix(self) -> None:
        slug = disambiguate_slug("ai-is-a-bubble-20240615", "https://x.com/a/status/1")
        assert re.fullmatch(r"ai-is-a-bubble-20240615-[0-9a-f]{6}", slug)

    def test_differs_by_url_and_attempt(self) -> None:
        base = "ai-is-a-bubble-20240615"
        first = disambiguate_slug(base, "https://x.com/a/status/1")
        assert first != disambiguate_slug(base, "https://x.com/b/status/2")
        assert first != disambiguate_slug(base, "https://x.com/a/status/1", attempt=1)

    def test_long_slug_trimmed_to_limit(self) -> None:
        slug = generate_slug("A very long claim about AI that goes on and on " * 5, "2024-06-15")
        for attempt in (0, 12):
            alternative = disambiguate_slug(slug, "https://x.com/a/status/1", attempt)
            assert len(alternative) <= MAX_SLUG_LENGTH
            assert SLUG_PATTERN.match(alternative)

    def test_empty_base(self) -> None:
        assert re.fullmatch(r"claim-[0-9a-f]{6}", disambiguate_slug("", "https://x.com/a/status/1"))


class TestToDraft:

    def test_tweet_draft(self) -> None:
        classified = ClassifiedCandidate(candidate=make_candidate(), result=make_result())
        draft = to_draft(classified, "2024-06-16T09:00:00.000Z")

        assert draft.source == "Gary Marcus"
        assert draft.source_url == "https://x.com/GaryMarcus/status/1"
        assert draft.date == "2024-06-15"
        assert draft.categories == [ClaimCategory.CAPABILITY]
        assert draft.slug == "llms-are-a-dead-end-20240615"
        assert draft.context.current_model == "Gemini 1.0 Ultra"
        assert draft.discovery_metadata.confidence == 0.9
        assert draft.discovery_metadata.source_type is SourceType.TWEET

    def test_news_source_is_domain(self) -> None:
        candidate = make_candidate("https://www.wsj.com/tech/ai-bubble", source_type=SourceType.NEWS)
        draft = to_draft(ClassifiedCandidate(candidate=candidate, result=make_result()), "2024-06-16T09:00:00Z")
        assert draft.source == "wsj.com"

    def test_tweet_without_author_name(self) -> None:
        candidate = make_candidate(author=AuthorMetadata(name="", handle="x"))
        draft = to_draft(ClassifiedCandidate(candidate=candidate, result=make_result()), "2024-06-16T09:00:00Z")
        assert draft.source == "Twitter"

    def test_malformed_published_date_falls_back_to_discovery(self) -> None:
        candidate = make_candidate(published_date="sometime last week")
        draft = to_draft(ClassifiedCandidate(candidate=candidate, result=make_result()), "2024-06-16T09:00:00Z")
        assert draft.date == "2024-06-16"
        assert draft.slug.endswith("-20240616")

    def test_document_layout(self) -> None:
        draft = to_draft(ClassifiedCandidate(candidate=make_candidate(), result=make_result()), "2024-06-16T09:00:00.000Z")
        doc = draft.to_document()

        assert doc["_type"] == "obituary"
        assert doc["sourceUrl"] == draft.source_url
        assert doc["slug"] == {"_type": "slug", "current": draft.slug}
        assert doc["categories"] == ["capability"]
        assert doc["context"]["currentModel"] == "Gemini 1.0 Ultra"
        assert None not in doc["context"].values()
        assert doc["discoveryMetadata"] == {
            "discoveredAt": "2024-06-16T09:00:00.000Z",
            "confidence": 0.9,
            "notabilityReason": "Well-known AI critic",
            "sourceType": "tweet",
        }
