"""
Prompt comparison

Runs analysis, detection, rule application and scoring over N prompt variants
and ranks them. Every metric reports its own winner; ties always go to the
variant with the lowest index.
"""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from promptsmith.analyzer import PromptAnalyzer
from promptsmith.errors import InvalidInputError
from promptsmith.models import (
    AnalysisResult,
    ComparisonMetric,
    ComparisonResult,
    Domain,
    MetricDirection,
    QualityScore,
    VariantMetric,
    VariantResult,
)
from promptsmith.registry import DomainRegistry, build_default_registry
from promptsmith.scorer import QualityScorer
from promptsmith.validator import PromptValidator, ValidationResult

logger = logging.getLogger("promptsmith.compare")

SubscoreFn = Callable[[str, Domain, AnalysisResult, ValidationResult], Mapping[str, float]]

INPUT_PLACEHOLDER = re.compile(r"\{\{\s*input\s*\}\}")

TARGET_LENGTH = 200.0
TARGET_COMPLEXITY = 0.5

SCORE_METRICS: Tuple[Tuple[str, str], ...] = (
    ("Overall Quality", "overall"),
    ("Clarity", "clarity"),
    ("Specificity", "specificity"),
    ("Structure", "structure"),
    ("Completeness", "completeness"),
)


@dataclass
class _Evaluated:
    index: int
    variant: VariantResult


def _rank(
    values: Sequence[Tuple[str, float]],
    better: MetricDirection,
    target: Optional[float] = None,
) -> List[Tuple[str, float]]:
    """Best first; sorted() is stable so equal values keep input order."""

    def key(item: Tuple[str, float]) -> float:
        if better == MetricDirection.LOWER:
            return item[1]
        if better == MetricDirection.TARGET:
            return abs(item[1] - (target if target is not None else 0.0))
        return -item[1]

    return sorted(values, key=key)


def _metric(
    name: str,
    values: List[Tuple[str, float]],
    better: MetricDirection,
    target: Optional[float] = None,
) -> ComparisonMetric:
    ranked = _rank(values, better, target)
    significance = abs(ranked[0][1] - ranked[1][1]) if len(ranked) > 1 else 0.0
    return ComparisonMetric(
        name=name,
        values=dict(values),
        winner=ranked[0][0],
        significance=significance,
        better=better,
    )


class PromptComparator:
    """Compares two or more prompt variants."""

    def __init__(
        self,
        registry: Optional[DomainRegistry] = None,
        scorer: Optional[QualityScorer] = None,
        analyzer: Optional[PromptAnalyzer] = None,
        validator: Optional[PromptValidator] = None,
        subscore_fn: Optional[SubscoreFn] = None,
        workers: Optional[int] = None,
    ):
        self.registry = registry or build_default_registry()
        self.scorer = scorer or QualityScorer(self.registry)
        self.analyzer = analyzer or PromptAnalyzer()
        self.validator = validator or PromptValidator(self.analyzer)
        self.subscore_fn = subscore_fn
        self.workers = workers if workers is not None else self.registry.settings.compare_workers

    def compare(self, variants: Sequence[str], test_input: Optional[str] = None) -> ComparisonResult:
        """
        Compare prompt variants.

        Args:
            variants: Prompt texts, at least two
            test_input: Substituted for ``{{input}}`` placeholders before evaluation

        Returns:
            ComparisonResult with ids ``variant_<index>`` in input order

        Raises:
            InvalidInputError: fewer than two variants or a non-string variant
        """
        if isinstance(variants, str) or not isinstance(variants, Sequence):
            raise InvalidInputError("variants must be a list of strings")
        if len(variants) < 2:
            raise InvalidInputError("at least 2 variants required")
        for index, variant in enumerate(variants):
            if not isinstance(variant, str):
                raise InvalidInputError(f"variant {index} must be a string, got {type(variant).__name__}")
        if test_input is not None and not isinstance(test_input, str):
            raise InvalidInputError("test_input must be a string")

        prompts = [
            INPUT_PLACEHOLDER.sub(lambda _m: test_input, v) if test_input is not None else v for v in variants
        ]
        jobs = list(enumerate(prompts))
        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                evaluated = list(pool.map(lambda job: self._evaluate(*job), jobs))
        else:
            evaluated = [self._evaluate(index, prompt) for index, prompt in jobs]
        # Order by index so ids and tie-breaks never depend on completion order
        evaluated.sort(key=lambda e: e.index)
        results = [e.variant for e in evaluated]

        winner = results[0]
        for candidate in results[1:]:
            if candidate.score.overall > winner.score.overall:
                winner = candidate

        metrics = self._comparison_metrics(results)
        close_call = self._is_close_call(results)
        summary = self._summary(results, winner, close_call)
        logger.debug("Compared %d variants, winner %s", len(results), winner.id)

        return ComparisonResult(
            variants=results,
            winner=winner.id,
            metrics=metrics,
            summary=summary,
            close_call=close_call,
        )

    def _evaluate(self, index: int, prompt: str) -> _Evaluated:
        analysis = self.analyzer.analyze(prompt)
        validation = self.validator.validate(prompt, analysis)
        domain = self.registry.detect_domain(prompt, analysis)
        rules = self.registry.apply_domain_rules(prompt, domain, analysis)

        if self.subscore_fn is not None:
            subscores = self.subscore_fn(prompt, domain, analysis, validation)
        else:
            subscores = self.scorer.subscores(prompt, domain, analysis, validation)
        score = self.scorer.score(subscores, domain)

        variant = VariantResult(
            id=f"variant_{index}",
            prompt=prompt,
            domain=domain,
            score=score,
            metrics=self._variant_metrics(prompt, analysis, validation, len(rules.rules_applied)),
        )
        return _Evaluated(index=index, variant=variant)

    def _variant_metrics(
        self,
        prompt: str,
        analysis: AnalysisResult,
        validation: ValidationResult,
        rules_applied: int,
    ) -> List[VariantMetric]:
        return [
            VariantMetric(
                name="Length",
                value=len(prompt),
                unit="characters",
                better=MetricDirection.TARGET,
                target=TARGET_LENGTH,
            ),
            VariantMetric(
                name="Complexity",
                value=analysis.complexity,
                better=MetricDirection.TARGET,
                target=TARGET_COMPLEXITY,
            ),
            VariantMetric(name="Readability", value=analysis.readability_score),
            VariantMetric(
                name="Error Count",
                value=len(validation.errors),
                unit="count",
                better=MetricDirection.LOWER,
            ),
            VariantMetric(
                name="Rules Applied",
                value=rules_applied,
                unit="count",
                better=MetricDirection.LOWER,
            ),
        ]

    def _comparison_metrics(self, variants: List[VariantResult]) -> List[ComparisonMetric]:
        metrics = []
        for name, attr in SCORE_METRICS:
            values = [(v.id, getattr(v.score, attr)) for v in variants]
            metrics.append(_metric(name, values, MetricDirection.HIGHER))

        # Per-variant metrics share names and order across variants
        for position, template in enumerate(variants[0].metrics):
            values = [(v.id, v.metrics[position].value) for v in variants]
            metrics.append(_metric(template.name, values, template.better, template.target))
        return metrics

    def _is_close_call(self, variants: List[VariantResult]) -> bool:
        overall = sorted((v.score.overall for v in variants), reverse=True)
        return overall[0] - overall[1] < self.registry.settings.close_call_margin

    def _summary(self, variants: List[VariantResult], winner: VariantResult, close_call: bool) -> str:
        winner_pct = winner.score.overall * 100
        average = sum(v.score.overall for v in variants) / len(variants) * 100
        if close_call:
            margin = self.registry.settings.close_call_margin * 100
            return (
                f"Close call: {winner.id} leads with {winner_pct:.1f}% (average: {average:.1f}%), "
                f"but the top two variants are within {margin:g}% of each other, "
                f"so the difference is marginal."
            )
        return (
            f"{winner.id} achieved the highest quality score of {winner_pct:.1f}% "
            f"(average: {average:.1f}%). Key advantages include better "
            f"{' and '.join(self._top_strengths(winner.score))}."
        )

    @staticmethod
    def _top_strengths(score: QualityScore) -> List[str]:
        ranked = sorted(score.subscores().items(), key=lambda item: -item[1])
        return [name for name, _value in ranked[:2]]


def compare_prompts(
    variants: Sequence[str],
    test_input: Optional[str] = None,
    registry: Optional[DomainRegistry] = None,
) -> ComparisonResult:
    """
    Helper for one-off comparisons

    Args:
        variants: Prompt texts, at least two
        test_input: Optional value for ``{{input}}`` placeholders
        registry: Registry to use; the built-in one when omitted

    Returns:
        ComparisonResult
    """
    comparator = PromptComparator(registry=registry)
    return comparator.compare(variants, test_input)


__all__ = ["PromptComparator", "SubscoreFn", "compare_prompts"]
