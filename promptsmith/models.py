from __future__ import annotations

import math
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, computed_field, model_validator
from pydantic.config import ConfigDict


class Domain(str, Enum):
    """Working domains a prompt can be routed to."""

    SQL = "sql"
    BRANDING = "branding"
    CINE = "cine"
    SAAS = "saas"
    DEVOPS = "devops"
    GENERAL = "general"

    @classmethod
    def parse(cls, value: Any) -> "Domain":
        """Resolve a user supplied value, degrading unknown names to GENERAL."""
        if isinstance(value, Domain):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.GENERAL
        return cls.GENERAL


SUBSCORE_NAMES: Tuple[str, ...] = ("clarity", "specificity", "structure", "completeness")


class QualityWeights(BaseModel):
    """Relative importance of each quality dimension for a domain."""

    clarity: float
    specificity: float
    structure: float
    completeness: float

    model_config = ConfigDict(frozen=True)

    def total(self) -> float:
        return self.clarity + self.specificity + self.structure + self.completeness

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in SUBSCORE_NAMES}


UNIFORM_WEIGHTS = QualityWeights(clarity=0.25, specificity=0.25, structure=0.25, completeness=0.25)


def clamp01(value: float) -> float:
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


class QualityScore(BaseModel):
    """Four sub-scores plus their domain-weighted overall value.

    ``overall`` is derived, never stored: the model is frozen, so changing a
    sub-score or the weights means building a new score whose overall is
    recomputed. Any ``overall`` key in the input is ignored.

    ``weights`` are serialized with the score. When they are left out they
    come from the built-in config of ``domain``.
    """

    clarity: float = Field(ge=0.0, le=1.0)
    specificity: float = Field(ge=0.0, le=1.0)
    structure: float = Field(ge=0.0, le=1.0)
    completeness: float = Field(ge=0.0, le=1.0)
    domain: Domain = Domain.GENERAL
    weights: QualityWeights = UNIFORM_WEIGHTS

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def _domain_weights(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("weights") is None:
            # rules import models, so the table is looked up lazily
            from promptsmith.rules import builtin_weights

            data = {**data, "weights": builtin_weights(data.get("domain", Domain.GENERAL))}
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def overall(self) -> float:
        w = self.weights
        return clamp01(
            self.clarity * w.clarity
            + self.specificity * w.specificity
            + self.structure * w.structure
            + self.completeness * w.completeness
        )

    def subscores(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in SUBSCORE_NAMES}


class AnalysisResult(BaseModel):
    """Per-prompt language signals produced by an analyzer.

    Values are taken as-is; consumers clamp whatever they derive from them.
    """

    complexity: float = 0.0
    ambiguity_score: float = 0.0
    domain_hints: List[str] = Field(default_factory=list)
    technical_terms: List[str] = Field(default_factory=list)
    sentiment_score: float = 0.0
    readability_score: float = 0.0
    language: str = "unknown"
    has_variables: bool = False
    estimated_tokens: int = 0

    model_config = ConfigDict(frozen=True)


class RuleApplicationResult(BaseModel):
    """Refined text plus the provenance of every rule that fired."""

    refined: str
    rules_applied: Tuple[str, ...] = ()
    improvements: Tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


class MetricDirection(str, Enum):
    HIGHER = "higher"
    LOWER = "lower"
    TARGET = "target"  # closest to VariantMetric.target wins


class VariantMetric(BaseModel):
    name: str
    value: float
    unit: str = "score"
    better: MetricDirection = MetricDirection.HIGHER
    target: Optional[float] = None


class VariantResult(BaseModel):
    id: str
    prompt: str
    domain: Domain
    score: QualityScore
    metrics: List[VariantMetric] = Field(default_factory=list)


class ComparisonMetric(BaseModel):
    name: str
    values: Dict[str, float]
    winner: str
    significance: float
    better: MetricDirection = MetricDirection.HIGHER


class ComparisonResult(BaseModel):
    variants: List[VariantResult]
    winner: str
    metrics: List[ComparisonMetric] = Field(default_factory=list)
    summary: str
    close_call: bool = False

    @model_validator(mode="after")
    def _winner_is_a_variant(self) -> "ComparisonResult":
        if self.winner not in {v.id for v in self.variants}:
            raise ValueError(f"winner {self.winner!r} is not one of the compared variants")
        return self

    def get_variant(self, variant_id: str) -> VariantResult:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        raise KeyError(variant_id)


class QualityFactor(BaseModel):
    name: str
    weight: float
    score: float
    description: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def impact(self) -> float:
        return self.weight * (1 - self.score)
