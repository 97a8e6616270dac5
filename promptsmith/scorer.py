"""Quality scoring.

``QualityScorer.score`` combines four caller-supplied sub-scores with the
domain weights. ``QualityScorer.evaluate`` derives those sub-scores from the
prompt text itself using regex heuristics, then goes through ``score``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Union

from promptsmith.errors import InvalidInputError, ensure_text
from promptsmith.models import (
    SUBSCORE_NAMES,
    AnalysisResult,
    Domain,
    QualityFactor,
    QualityScore,
    clamp01,
)
from promptsmith.registry import DomainRegistry, build_default_registry
from promptsmith.validator import ValidationResult

SubScores = Union[Mapping[str, float], QualityScore]

VAGUE_TERMS = [
    "good", "bad", "nice", "cool", "awesome", "great",
    "bonito", "bonita", "bueno", "malo",
    "stuff", "things", "something", "anything",
    "big", "small", "fast", "slow", "easy", "hard",
]

_DETAILS = re.compile(r"\b(\d+|specific|particular|exact|precise|#|\$|%)\b", re.IGNORECASE)
_REQUIREMENTS = re.compile(r"\b(must|should|require|need|constraint|requirement|specification)\b", re.IGNORECASE)
_EXAMPLES = re.compile(r"\b(example|sample|instance|demonstrate|illustrate|show)\b", re.IGNORECASE)
_GENERIC = re.compile(r"\b(generic|general|basic|simple|standard|normal)\b", re.IGNORECASE)
_FLOW = re.compile(
    r"\b(then|next|after|before|because|so|therefore|however|first|second|finally)\b", re.IGNORECASE
)
_ACTION_VERBS = re.compile(
    r"\b(create|build|make|develop|design|implement|analyze|review|evaluate|assess|examine|"
    r"optimize|improve|enhance|refactor|explain|describe|demonstrate|show)\b",
    re.IGNORECASE,
)
_OUTPUT = re.compile(r"\b(output|result|return|format|deliver|produce|generate|provide)\b", re.IGNORECASE)
_STRUCTURED = re.compile(r"[•\-\*]\s|^\d+\.\s|\n\s*\n", re.MULTILINE)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")

# Two keyword checks per domain, 0.05 each
DOMAIN_COMPLETENESS = {
    Domain.SQL: (r"table|schema|database", r"constraint|index|key"),
    Domain.BRANDING: (r"audience|target|brand", r"voice|tone|message"),
    Domain.CINE: (r"character|story|script", r"scene|dialogue|format"),
    Domain.SAAS: (r"user|feature|platform", r"scalable|integration|api"),
    Domain.DEVOPS: (r"deploy|infrastructure|pipeline", r"security|monitoring|automation"),
}

MAX_FACTORS = 8


def length_score(length: int) -> float:
    if 100 <= length <= 300:
        return 1.0
    if 50 <= length <= 500:
        return 0.8
    if 20 <= length <= 800:
        return 0.6
    return 0.4


def find_vague_terms(prompt: str) -> List[str]:
    words = prompt.lower().split()
    return [term for term in VAGUE_TERMS if term in words]


def has_good_grammar(prompt: str) -> bool:
    stripped = prompt.strip()
    return bool(re.match(r"[A-Z]", stripped)) and bool(re.search(r"[.!?]$", stripped))


def has_run_on_sentence(prompt: str, limit: int = 25) -> bool:
    return any(len(s.split()) > limit for s in _SENTENCE_SPLIT.split(prompt))


@dataclass
class ScoreCalculation:
    """Detailed heuristic evaluation of one prompt."""

    score: QualityScore
    breakdown: Dict[str, List[QualityFactor]] = field(default_factory=dict)
    factors: List[QualityFactor] = field(default_factory=list)
    improvement: float = 0.0
    confidence: float = 0.8

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score.model_dump(mode="json"),
            "breakdown": {
                name: [f.model_dump() for f in factors] for name, factors in self.breakdown.items()
            },
            "factors": [f.model_dump() for f in self.factors],
            "improvement": round(self.improvement, 3),
            "confidence": round(self.confidence, 3),
        }


class QualityScorer:
    def __init__(self, registry: Optional[DomainRegistry] = None):
        self.registry = registry or build_default_registry()

    # ------------------------------------------------------------------
    # Weighted combination
    # ------------------------------------------------------------------
    def score(self, subscores: SubScores, domain: Any = Domain.GENERAL) -> QualityScore:
        """Weight four sub-scores by the domain's weights.

        Raises:
            InvalidInputError: a sub-score is missing, not a number, NaN or outside [0, 1].
        """
        if isinstance(subscores, QualityScore):
            subscores = subscores.subscores()
        if not isinstance(subscores, Mapping):
            raise InvalidInputError("sub-scores must be a mapping of clarity/specificity/structure/completeness")

        values: Dict[str, float] = {}
        for name in SUBSCORE_NAMES:
            if name not in subscores:
                raise InvalidInputError(f"missing sub-score: {name}")
            value = subscores[name]
            if isinstance(value, bool) or not isinstance(value, Real):
                raise InvalidInputError(f"sub-score {name} must be a number, got {value!r}")
            value = float(value)
            if math.isnan(value) or not 0.0 <= value <= 1.0:
                raise InvalidInputError(f"sub-score {name}={value} outside [0, 1]")
            values[name] = value

        resolved = Domain.parse(domain)
        return QualityScore(
            **values,
            domain=resolved,
            weights=self.registry.get_quality_weights(resolved),
        )

    def rescore(self, score: QualityScore, domain: Any) -> QualityScore:
        """Same sub-scores under another domain's weights."""
        return self.score(score.subscores(), domain)

    # ------------------------------------------------------------------
    # Heuristic evaluation
    # ------------------------------------------------------------------
    def evaluate(
        self,
        prompt: str,
        domain: Any = None,
        analysis: Optional[AnalysisResult] = None,
        validation: Optional[ValidationResult] = None,
        original: Optional[str] = None,
    ) -> ScoreCalculation:
        ensure_text(prompt)
        resolved = Domain.parse(domain) if domain is not None else self.registry.detect_domain(prompt, analysis)
        score = self.score(self.subscores(prompt, resolved, analysis, validation), resolved)

        breakdown = {
            "clarity": self._clarity_factors(prompt, analysis),
            "specificity": self._specificity_factors(prompt, analysis),
            "structure": self._structure_factors(prompt),
            "completeness": self._completeness_factors(prompt),
        }
        every = [f for factors in breakdown.values() for f in factors]
        # sorted() is stable, so equal impacts keep breakdown order
        factors = sorted(every, key=lambda f: -f.impact)[:MAX_FACTORS]

        return ScoreCalculation(
            score=score,
            breakdown=breakdown,
            factors=factors,
            improvement=self.improvement(prompt, original),
            confidence=self.confidence(prompt, analysis, validation),
        )

    def subscores(
        self,
        prompt: str,
        domain: Domain,
        analysis: Optional[AnalysisResult] = None,
        validation: Optional[ValidationResult] = None,
    ) -> Dict[str, float]:
        """Heuristic sub-scores, each already clamped to [0, 1]."""
        return {
            "clarity": self.clarity(prompt, analysis),
            "specificity": self.specificity(prompt, analysis),
            "structure": self.structure(prompt),
            "completeness": self.completeness(prompt, domain, validation),
        }

    def clarity(self, prompt: str, analysis: Optional[AnalysisResult] = None) -> float:
        value = 1.0
        if analysis is not None:
            if analysis.ambiguity_score:
                value -= analysis.ambiguity_score * 0.4
            if analysis.readability_score:
                value -= (1 - analysis.readability_score) * 0.3
        words = len(prompt.split()) or 1
        value -= len(find_vague_terms(prompt)) / words * 0.3
        if has_good_grammar(prompt):
            value += 0.1
        if analysis is not None and analysis.technical_terms:
            value += min(0.1, len(analysis.technical_terms) * 0.02)
        return clamp01(value)

    def specificity(self, prompt: str, analysis: Optional[AnalysisResult] = None) -> float:
        value = 0.5
        if analysis is not None:
            words = len(prompt.split()) or 1
            value += len(analysis.technical_terms) / words * 0.3
        if _DETAILS.search(prompt):
            value += 0.2
        if _REQUIREMENTS.search(prompt):
            value += 0.2
        if analysis is not None and analysis.domain_hints:
            value += len(analysis.domain_hints) * 0.1
        if _GENERIC.search(prompt):
            value -= 0.3
        if _EXAMPLES.search(prompt):
            value += 0.15
        return clamp01(value)

    def structure(self, prompt: str) -> float:
        value = 0.5
        if has_good_grammar(prompt):
            value += 0.2
        if _FLOW.search(prompt):
            value += 0.2
        value += length_score(len(prompt)) * 0.15
        if _ACTION_VERBS.search(prompt):
            value += 0.15
        if has_run_on_sentence(prompt):
            value -= 0.2
        if _STRUCTURED.search(prompt):
            value += 0.1
        return clamp01(value)

    def completeness(
        self, prompt: str, domain: Domain, validation: Optional[ValidationResult] = None
    ) -> float:
        value = 0.3
        if _ACTION_VERBS.search(prompt):
            value += 0.3
        if len(prompt) > 100:
            value += 0.2
        if _REQUIREMENTS.search(prompt):
            value += 0.15
        if _OUTPUT.search(prompt):
            value += 0.15
        lower = prompt.lower()
        for pattern in DOMAIN_COMPLETENESS.get(domain, ()):
            if re.search(pattern, lower):
                value += 0.05
        if validation is not None:
            if not validation.errors:
                value += 0.1
            if not validation.warnings:
                value += 0.05
        return clamp01(value)

    def improvement(self, prompt: str, original: Optional[str] = None) -> float:
        """Length-based improvement estimate of ``prompt`` over ``original``."""
        if not original:
            return 0.0
        ratio = len(prompt) / len(original)
        return min(0.5, max(0.0, ratio - 1) * 0.3 + 0.2)

    def confidence(
        self,
        prompt: str,
        analysis: Optional[AnalysisResult] = None,
        validation: Optional[ValidationResult] = None,
    ) -> float:
        value = 0.8
        if analysis is not None:
            value += 0.1
            if analysis.technical_terms:
                value += 0.05
            if analysis.domain_hints:
                value += 0.05
        if validation is not None:
            value += 0.1
            if not validation.errors:
                value += 0.05
        if len(prompt) < 20 or len(prompt) > 1000:
            value -= 0.1
        return max(0.5, min(1.0, value))

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------
    def _clarity_factors(self, prompt: str, analysis: Optional[AnalysisResult]) -> List[QualityFactor]:
        factors = []
        if analysis is not None and analysis.ambiguity_score > 0.5:
            factors.append(
                QualityFactor(
                    name="Ambiguity",
                    weight=0.4,
                    score=clamp01(1 - analysis.ambiguity_score),
                    description="Contains ambiguous or vague terms that may lead to unclear results",
                )
            )
        if analysis is not None and 0 < analysis.readability_score < 0.6:
            factors.append(
                QualityFactor(
                    name="Readability",
                    weight=0.3,
                    score=analysis.readability_score,
                    description="Text complexity and readability level",
                )
            )
        vague = find_vague_terms(prompt)
        if vague:
            factors.append(
                QualityFactor(
                    name="Specific Language",
                    weight=0.3,
                    score=max(0.0, 1 - len(vague) / 10),
                    description=f"Contains {len(vague)} vague terms that could be more specific",
                )
            )
        return factors

    def _specificity_factors(self, prompt: str, analysis: Optional[AnalysisResult]) -> List[QualityFactor]:
        factors = []
        if analysis is not None:
            factors.append(
                QualityFactor(
                    name="Technical Terminology",
                    weight=0.3,
                    score=min(1.0, len(analysis.technical_terms) / 5),
                    description=f"Uses {len(analysis.technical_terms)} technical terms",
                )
            )
        if _DETAILS.search(prompt):
            factors.append(
                QualityFactor(
                    name="Specific Details",
                    weight=0.2,
                    score=1.0,
                    description="Includes specific numbers, formats, or constraints",
                )
            )
        if analysis is not None and analysis.domain_hints:
            factors.append(
                QualityFactor(
                    name="Domain Expertise",
                    weight=0.25,
                    score=min(1.0, len(analysis.domain_hints) / 3),
                    description=f"Shows knowledge of {len(analysis.domain_hints)} domain(s)",
                )
            )
        return factors

    def _structure_factors(self, prompt: str) -> List[QualityFactor]:
        factors = []
        if has_good_grammar(prompt):
            factors.append(
                QualityFactor(name="Grammar & Punctuation", weight=0.2, score=1.0, description="Proper grammar and punctuation")
            )
        if _FLOW.search(prompt):
            factors.append(
                QualityFactor(name="Logical Flow", weight=0.2, score=1.0, description="Well-organized with logical progression")
            )
        factors.append(
            QualityFactor(
                name="Appropriate Length",
                weight=0.15,
                score=length_score(len(prompt)),
                description=f"Length: {len(prompt)} characters",
            )
        )
        return factors

    def _completeness_factors(self, prompt: str) -> List[QualityFactor]:
        factors = []
        if _ACTION_VERBS.search(prompt):
            factors.append(
                QualityFactor(
                    name="Clear Objectives", weight=0.3, score=1.0, description="Contains clear action verbs and objectives"
                )
            )
        if _REQUIREMENTS.search(prompt):
            factors.append(
                QualityFactor(
                    name="Requirements Specified",
                    weight=0.2,
                    score=1.0,
                    description="Includes specific requirements or constraints",
                )
            )
        if _OUTPUT.search(prompt):
            factors.append(
                QualityFactor(
                    name="Expected Output", weight=0.2, score=1.0, description="Specifies what kind of output is expected"
                )
            )
        return factors


__all__ = ["QualityScorer", "ScoreCalculation", "SubScores", "length_score", "find_vague_terms"]
