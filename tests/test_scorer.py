from __future__ import annotations

import math

import pytest

from promptsmith.errors import InvalidInputError
from promptsmith.models import AnalysisResult, Domain, QualityScore
from promptsmith.scorer import length_score
from promptsmith.validator import PromptValidator

HALF = {"clarity": 0.5, "specificity": 0.5, "structure": 0.5, "completeness": 0.5}


def test_overall_uses_domain_weights(scorer):
    subscores = {"clarity": 1.0, "specificity": 0.0, "structure": 0.0, "completeness": 0.0}
    assert scorer.score(subscores, Domain.SQL).overall == pytest.approx(0.3)
    assert scorer.score(subscores, Domain.CINE).overall == pytest.approx(0.2)
    assert scorer.score(subscores, Domain.GENERAL).overall == pytest.approx(0.25)


def test_equal_subscores_give_same_overall_everywhere(scorer):
    for domain in Domain:
        assert scorer.score(HALF, domain).overall == pytest.approx(0.5)


def test_unknown_domain_scores_with_uniform_weights(scorer):
    score = scorer.score({"clarity": 1.0, "specificity": 0, "structure": 0, "completeness": 0}, "unknown")
    assert score.domain == Domain.GENERAL
    assert score.overall == pytest.approx(0.25)


def test_bounds(scorer):
    ones = {k: 1.0 for k in HALF}
    zeros = {k: 0.0 for k in HALF}
    for domain in Domain:
        assert 0.0 <= scorer.score(ones, domain).overall <= 1.0
        assert scorer.score(zeros, domain).overall == 0.0


@pytest.mark.parametrize(
    "bad",
    [
        {**HALF, "clarity": 1.5},
        {**HALF, "structure": -0.1},
        {**HALF, "completeness": math.nan},
        {**HALF, "specificity": "high"},
        {**HALF, "clarity": True},
        {"clarity": 0.5, "specificity": 0.5, "structure": 0.5},
    ],
)
def test_invalid_subscores_raise(scorer, bad):
    with pytest.raises(InvalidInputError):
        scorer.score(bad, Domain.SQL)


def test_rescore_recomputes_overall(scorer):
    subscores = {"clarity": 0.9, "specificity": 0.1, "structure": 0.4, "completeness": 0.7}
    sql = scorer.score(subscores, Domain.SQL)
    devops = scorer.rescore(sql, Domain.DEVOPS)
    assert devops.subscores() == sql.subscores()
    assert devops.domain == Domain.DEVOPS
    expected = 0.9 * 0.2 + 0.1 * 0.4 + 0.4 * 0.25 + 0.7 * 0.15
    assert devops.overall == pytest.approx(expected)
    assert sql.overall != pytest.approx(devops.overall)


def test_quality_score_is_frozen_and_ignores_supplied_overall():
    score = QualityScore(clarity=0.2, specificity=0.2, structure=0.2, completeness=0.2, overall=0.99)
    assert score.overall == pytest.approx(0.2)
    with pytest.raises(Exception):
        score.clarity = 0.9  # type: ignore[misc]


def test_quality_score_built_directly_uses_domain_weights():
    score = QualityScore(clarity=1, specificity=0, structure=0, completeness=0, domain=Domain.SQL)
    assert score.overall == pytest.approx(0.3)
    assert QualityScore(clarity=1, specificity=0, structure=0, completeness=0, domain="devops").overall == pytest.approx(
        0.2
    )


def test_quality_score_survives_dump_and_reload(scorer):
    subscores = {"clarity": 0.9, "specificity": 0.1, "structure": 0.4, "completeness": 0.7}
    score = scorer.score(subscores, Domain.SQL)
    reloaded = QualityScore.model_validate(score.model_dump())
    assert reloaded.overall == score.overall
    assert reloaded.weights == score.weights
    assert QualityScore.model_validate(score.model_dump(mode="json")).overall == pytest.approx(score.overall)

    without_weights = score.model_dump(exclude={"weights"})
    assert QualityScore.model_validate(without_weights).overall == pytest.approx(score.overall)


def test_length_bands():
    assert length_score(150) == 1.0
    assert length_score(60) == 0.8
    assert length_score(700) == 0.6
    assert length_score(5) == 0.4
    assert length_score(2000) == 0.4


def test_evaluate_well_formed_prompt(scorer, analyzer):
    prompt = (
        "Create a PostgreSQL table for customer orders. The schema must include a primary key, "
        "foreign key constraints and an index on the order date. Then provide sample output "
        "with 5 example rows."
    )
    analysis = analyzer.analyze(prompt)
    validation = PromptValidator(analyzer).validate(prompt, analysis, Domain.SQL)
    calc = scorer.evaluate(prompt, Domain.SQL, analysis, validation)

    assert calc.score.domain == Domain.SQL
    for value in calc.score.subscores().values():
        assert 0.0 <= value <= 1.0
    assert 0.0 <= calc.score.overall <= 1.0
    assert 0.5 <= calc.confidence <= 1.0
    assert len(calc.factors) <= 8
    assert "Clear Objectives" in [f.name for f in calc.breakdown["completeness"]]
    assert calc.score.completeness > 0.8


def test_evaluate_vague_prompt_scores_lower(scorer, analyzer):
    vague = "make something nice"
    detailed = (
        "Create a REST API endpoint in Python that returns paginated user records as JSON. "
        "It must validate the page parameter and should respond within 200 ms."
    )
    low = scorer.evaluate(vague, analysis=analyzer.analyze(vague))
    high = scorer.evaluate(detailed, analysis=analyzer.analyze(detailed))
    assert high.score.overall > low.score.overall


def test_evaluate_without_domain_detects_it(scorer):
    calc = scorer.evaluate("Design a schema with foreign key relationships for the orders table")
    assert calc.score.domain == Domain.SQL


def test_factors_sorted_by_impact(scorer, analyzer):
    prompt = "do stuff with things, maybe something good"
    calc = scorer.evaluate(prompt, Domain.GENERAL, analyzer.analyze(prompt))
    impacts = [f.impact for f in calc.factors]
    assert impacts == sorted(impacts, reverse=True)


def test_improvement_against_original(scorer):
    assert scorer.improvement("abc") == 0.0
    assert scorer.improvement("a" * 10, "a" * 10) == pytest.approx(0.2)
    assert scorer.improvement("a" * 100, "a" * 10) == pytest.approx(0.5)
    assert scorer.improvement("a" * 5, "a" * 10) == pytest.approx(0.2)


def test_confidence_penalizes_extreme_lengths(scorer):
    assert scorer.confidence("short") == pytest.approx(0.7)
    assert scorer.confidence("a reasonably sized prompt text") == pytest.approx(0.8)
    rich = AnalysisResult(technical_terms=["SQL"], domain_hints=["sql"])
    assert scorer.confidence("a reasonably sized prompt text", rich) == pytest.approx(1.0)


def test_evaluate_rejects_non_string(scorer):
    with pytest.raises(InvalidInputError):
        scorer.evaluate(None)  # type: ignore[arg-type]
