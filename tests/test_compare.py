"""Tests for prompt comparison functionality"""

from __future__ import annotations

import pytest

from promptsmith.compare import PromptComparator, compare_prompts
from promptsmith.config import Settings
from promptsmith.errors import InvalidInputError
from promptsmith.models import ComparisonResult, MetricDirection
from promptsmith.registry import build_default_registry


def _fixed(values):
    """Sub-score function that looks the prompt up in ``values``."""

    def subscores(prompt, domain, analysis, validation):
        level = values[prompt]
        return {"clarity": level, "specificity": level, "structure": level, "completeness": level}

    return subscores


@pytest.fixture
def comparator(registry):
    return PromptComparator(registry=registry)


@pytest.mark.parametrize("variants", [[], ["only one"]])
def test_needs_two_variants(comparator, variants):
    with pytest.raises(InvalidInputError, match="at least 2 variants"):
        comparator.compare(variants)


def test_rejects_non_string_variant(comparator):
    with pytest.raises(InvalidInputError, match="variant 1"):
        comparator.compare(["fine", 42])


def test_rejects_bare_string(comparator):
    with pytest.raises(InvalidInputError):
        comparator.compare("not a list")


def test_identical_variants_tie_to_first_and_are_a_close_call(comparator):
    prompt = "Write a detailed technical guide about Python decorators."
    result = comparator.compare([prompt, prompt])

    assert result.winner == "variant_0"
    assert result.close_call is True
    assert result.summary.startswith("Close call: variant_0")
    for metric in result.metrics:
        assert metric.winner == "variant_0"
        assert metric.significance == 0


def test_ids_follow_input_order(comparator):
    result = comparator.compare(["first prompt", "second prompt", "third prompt"])
    assert [v.id for v in result.variants] == ["variant_0", "variant_1", "variant_2"]
    assert [v.prompt for v in result.variants] == ["first prompt", "second prompt", "third prompt"]


def test_injected_subscores_pick_the_winner(registry):
    comparator = PromptComparator(registry=registry, subscore_fn=_fixed({"weak": 0.2, "strong": 0.9}))
    result = comparator.compare(["weak", "strong"])

    assert result.winner == "variant_1"
    assert result.close_call is False
    assert result.get_variant("variant_1").score.overall == pytest.approx(0.9)
    assert result.summary.startswith("variant_1 achieved the highest quality score of 90.0%")
    assert "(average: 55.0%)" in result.summary

    overall = result.metrics[0]
    assert overall.name == "Overall Quality"
    assert overall.winner == "variant_1"
    assert overall.significance == pytest.approx(0.7)


def test_close_call_margin_comes_from_settings():
    registry = build_default_registry(Settings(close_call_margin=0.5))
    comparator = PromptComparator(registry=registry, subscore_fn=_fixed({"a": 0.5, "b": 0.8}))
    result = comparator.compare(["a", "b"])
    assert result.winner == "variant_1"
    assert result.close_call is True
    assert "within 50% of each other" in result.summary


def test_test_input_fills_placeholder(comparator):
    result = comparator.compare(["Summarize {{input}}", "Translate {{ input }} to French"], test_input="the report")
    assert result.variants[0].prompt == "Summarize the report"
    assert result.variants[1].prompt == "Translate the report to French"


def test_placeholder_left_alone_without_test_input(comparator):
    result = comparator.compare(["Summarize {{input}}", "Summarize it"])
    assert result.variants[0].prompt == "Summarize {{input}}"


def test_metric_names_and_directions(comparator):
    result = comparator.compare(["Create a users table.", "Write a short poem about rain."])
    names = [m.name for m in result.metrics]
    assert names == [
        "Overall Quality",
        "Clarity",
        "Specificity",
        "Structure",
        "Completeness",
        "Length",
        "Complexity",
        "Readability",
        "Error Count",
        "Rules Applied",
    ]
    by_name = {m.name: m for m in result.metrics}
    assert by_name["Length"].better == MetricDirection.TARGET
    assert by_name["Error Count"].better == MetricDirection.LOWER
    assert set(by_name["Clarity"].values) == {"variant_0", "variant_1"}


def test_length_metric_prefers_closest_to_target(comparator):
    near = "x" * 190
    far = "y" * 20
    result = comparator.compare([far, near])
    length = next(m for m in result.metrics if m.name == "Length")
    assert length.winner == "variant_1"
    assert length.significance == pytest.approx(170)


def test_parallel_workers_match_sequential(registry):
    variants = [
        "Create a users table with an index on email.",
        "make it nice",
        "Deploy the service with docker and add monitoring.",
        "Write a thriller screenplay scene.",
    ]
    sequential = PromptComparator(registry=registry, workers=1).compare(variants)
    parallel = PromptComparator(registry=registry, workers=3).compare(variants)
    assert parallel.model_dump() == sequential.model_dump()


def test_each_variant_gets_its_own_domain(comparator):
    result = comparator.compare(
        [
            "Create a table schema with a foreign key and optimize the select query",
            "Automate the deployment pipeline and add monitoring for the docker container",
        ]
    )
    assert result.variants[0].domain.value == "sql"
    assert result.variants[1].domain.value == "devops"


def test_result_reloads_with_same_overall(comparator):
    result = comparator.compare(
        [
            "Create a table schema with a foreign key and optimize the select query",
            "Automate the deployment pipeline and add monitoring for the docker container",
        ]
    )
    reloaded = ComparisonResult.model_validate(result.model_dump())
    assert reloaded.winner == result.winner
    for before, after in zip(result.variants, reloaded.variants):
        assert after.score.domain == before.score.domain
        assert after.score.overall == before.score.overall


def test_compare_prompts_helper(registry):
    result = compare_prompts(["Explain recursion.", "Explain recursion with a Python example."], registry=registry)
    assert result.winner in {"variant_0", "variant_1"}
    assert len(result.variants) == 2


def test_more_detailed_variant_wins_with_injected_scoring(registry):
    short = "Short prompt"
    detailed = "This is a more detailed and comprehensive prompt with better specifications"
    comparator = PromptComparator(registry=registry, subscore_fn=_fixed({short: 0.4, detailed: 0.41}))
    result = comparator.compare([short, detailed])
    assert result.winner == "variant_1"
    # 0.01 apart is inside the default 0.05 margin
    assert result.close_call is True
