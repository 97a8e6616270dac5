"""
Prompt orchestrator

Single entry point used by the CLI and the HTTP API. Wires the analyzer,
registry, validator, scorer, comparator and store together:

    raw prompt -> analyze -> detect domain -> apply rules -> [template]
               -> validate -> score refined text -> system prompt -> ProcessResult
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from promptsmith.analyzer import PromptAnalyzer
from promptsmith.compare import PromptComparator, SubscoreFn
from promptsmith.config import Settings
from promptsmith.errors import InvalidInputError, ensure_text
from promptsmith.models import (
    AnalysisResult,
    ComparisonResult,
    Domain,
    QualityFactor,
    QualityScore,
)
from promptsmith.registry import DomainRegistry, build_default_registry
from promptsmith.scorer import QualityScorer
from promptsmith.store import (
    InMemoryPromptStore,
    PromptStore,
    SavedPrompt,
    SaveMetadata,
    SearchCriteria,
)
from promptsmith.templates import (
    TemplateEngine,
    TemplateExample,
    TemplateResult,
    TemplateType,
    select_template_type,
    should_generate_template,
)
from promptsmith.validator import PromptValidator, ValidationResult

logger = logging.getLogger("promptsmith.orchestrator")

MAX_SUGGESTIONS = 5
LOW_SUBSCORE = 0.7

SUBSCORE_ADVICE = {
    "clarity": "Consider adding more specific details and reducing vague terms",
    "specificity": "Add more specific requirements and technical details",
    "structure": "Improve sentence structure and logical flow",
    "completeness": "Specify expected outputs and success criteria",
}


@dataclass
class ProcessResult:
    original: str
    refined: str
    system_prompt: str
    domain: Domain
    analysis: AnalysisResult
    score: QualityScore
    validation: ValidationResult
    rules_applied: List[str] = field(default_factory=list)
    improvements: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    improvement: float = 0.0
    template_used: Optional[TemplateType] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "refined": self.refined,
            "system_prompt": self.system_prompt,
            "domain": self.domain.value,
            "analysis": self.analysis.model_dump(),
            "score": self.score.model_dump(mode="json"),
            "validation": self.validation.to_dict(),
            "rules_applied": list(self.rules_applied),
            "improvements": list(self.improvements),
            "suggestions": list(self.suggestions),
            "improvement": round(self.improvement, 3),
            "template_used": self.template_used.value if self.template_used else None,
        }


@dataclass
class EvaluationResult:
    score: QualityScore
    domain: Domain
    breakdown: Dict[str, List[QualityFactor]]
    factors: List[QualityFactor]
    recommendations: List[Dict[str, str]]
    validation: ValidationResult
    confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score.model_dump(mode="json"),
            "domain": self.domain.value,
            "breakdown": {
                name: {
                    "score": getattr(self.score, name),
                    "factors": [f.model_dump() for f in factors],
                }
                for name, factors in self.breakdown.items()
            },
            "factors": [f.model_dump() for f in self.factors],
            "recommendations": list(self.recommendations),
            "validation": self.validation.to_dict(),
            "confidence": round(self.confidence, 3),
        }


class PromptOrchestrator:
    """Coordinates the engine components for one process/evaluate/compare call."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        registry: Optional[DomainRegistry] = None,
        store: Optional[PromptStore] = None,
        analyzer: Optional[PromptAnalyzer] = None,
        subscore_fn: Optional[SubscoreFn] = None,
        templates: Optional[TemplateEngine] = None,
    ):
        self.registry = registry or build_default_registry(settings)
        self.settings = self.registry.settings
        self.analyzer = analyzer or PromptAnalyzer()
        self.templates = templates or TemplateEngine()
        self.validator = PromptValidator(self.analyzer)
        self.scorer = QualityScorer(self.registry)
        self.comparator = PromptComparator(
            registry=self.registry,
            scorer=self.scorer,
            analyzer=self.analyzer,
            validator=self.validator,
            subscore_fn=subscore_fn,
        )
        self.store: PromptStore = store if store is not None else InMemoryPromptStore()

    def resolve_domain(self, prompt: str, domain: Optional[Any], analysis: AnalysisResult) -> Domain:
        if domain is None or (isinstance(domain, str) and not domain.strip()):
            return self.registry.detect_domain(prompt, analysis)
        return Domain.parse(domain)

    def process(
        self,
        raw: str,
        domain: Optional[Any] = None,
        context: Optional[str] = None,
        variables: Optional[Dict[str, Any]] = None,
        template: Optional[Any] = None,
    ) -> ProcessResult:
        """Refine ``raw`` and score the result.

        The refined text is wrapped in a template when ``template`` or
        ``variables`` are given, or when the prompt looks reusable (complex,
        spanning several domains, or naming the same kind of entity twice).
        """
        ensure_text(raw)
        if variables is not None and not isinstance(variables, dict):
            raise InvalidInputError("variables must be a mapping")
        analysis = self.analyzer.analyze(raw)
        resolved = self.resolve_domain(raw, domain, analysis)

        rules = self.registry.apply_domain_rules(raw, resolved, analysis)
        refined = rules.refined
        rendered: Optional[TemplateResult] = None
        if (
            template is not None
            or variables
            or should_generate_template(raw, analysis, self.settings.complexity_threshold)
        ):
            rendered = self.generate_template(refined, resolved, template, variables, context, raw=raw)
            refined = rendered.prompt

        refined_analysis = self.analyzer.analyze(refined)
        validation = self.validator.validate(refined, refined_analysis, resolved)
        calculation = self.scorer.evaluate(refined, resolved, refined_analysis, validation, original=raw)
        system_prompt = self.registry.generate_system_prompt(resolved, analysis, context)

        logger.info(
            "Processed prompt: domain=%s rules=%d template=%s overall=%.3f",
            resolved.value,
            len(rules.rules_applied),
            rendered.type.value if rendered else "none",
            calculation.score.overall,
        )
        return ProcessResult(
            original=raw,
            refined=refined,
            system_prompt=system_prompt,
            domain=resolved,
            analysis=analysis,
            score=calculation.score,
            validation=validation,
            rules_applied=list(rules.rules_applied),
            improvements=list(rules.improvements),
            suggestions=self._suggestions(validation, calculation.score),
            improvement=calculation.improvement,
            template_used=rendered.type if rendered else None,
        )

    def generate_template(
        self,
        prompt: str,
        domain: Any,
        template: Optional[Any] = None,
        variables: Optional[Dict[str, Any]] = None,
        context: Optional[str] = None,
        raw: Optional[str] = None,
    ) -> TemplateResult:
        """Wrap ``prompt`` in a template.

        Without an explicit ``template`` the type is picked from the wording of
        ``raw`` (or ``prompt``). Few-shot templates fall back to the domain's
        built-in examples when no examples are supplied.
        """
        ensure_text(prompt)
        resolved = Domain.parse(domain)
        kind = TemplateType.parse(template) if template is not None else select_template_type(raw or prompt, variables)
        examples = None
        if kind == TemplateType.FEW_SHOT and not (variables or {}).get("examples"):
            examples = [
                TemplateExample(input=ex.before, output=ex.after, explanation=ex.explanation)
                for ex in self.registry.get_domain_examples(resolved)[:2]
            ]
        return self.templates.generate(prompt, resolved, kind, variables, examples, user_context=context)

    def evaluate(self, prompt: str, domain: Optional[Any] = None) -> EvaluationResult:
        ensure_text(prompt)
        analysis = self.analyzer.analyze(prompt)
        resolved = self.resolve_domain(prompt, domain, analysis)
        validation = self.validator.validate(prompt, analysis, resolved)
        calculation = self.scorer.evaluate(prompt, resolved, analysis, validation)
        return EvaluationResult(
            score=calculation.score,
            domain=resolved,
            breakdown=calculation.breakdown,
            factors=calculation.factors,
            recommendations=self._recommendations(validation, calculation.score),
            validation=validation,
            confidence=calculation.confidence,
        )

    def compare(self, variants: Sequence[str], test_input: Optional[str] = None) -> ComparisonResult:
        return self.comparator.compare(variants, test_input)

    def save(self, prompt: str, metadata: SaveMetadata) -> SavedPrompt:
        """Score ``prompt`` under the metadata's domain and store it."""
        ensure_text(prompt)
        analysis = self.analyzer.analyze(prompt)
        validation = self.validator.validate(prompt, analysis, metadata.domain)
        calculation = self.scorer.evaluate(prompt, metadata.domain, analysis, validation)
        system_prompt = self.registry.generate_system_prompt(metadata.domain, analysis)
        saved = self.store.save(prompt, metadata, calculation.score, system_prompt)
        logger.info("Saved prompt %s (%s)", saved.id, metadata.domain.value)
        return saved

    def get(self, prompt_id: str) -> Optional[SavedPrompt]:
        return self.store.get_by_id(prompt_id)

    def search(self, criteria: Optional[SearchCriteria] = None) -> List[SavedPrompt]:
        return self.store.search(criteria or SearchCriteria())

    def _suggestions(self, validation: ValidationResult, score: QualityScore) -> List[str]:
        suggestions = [issue.message for issue in validation.suggestions]
        for name, advice in SUBSCORE_ADVICE.items():
            if getattr(score, name) < LOW_SUBSCORE:
                suggestions.append(advice)
        # Keep first occurrence order
        return list(dict.fromkeys(suggestions))[:MAX_SUGGESTIONS]

    def _recommendations(self, validation: ValidationResult, score: QualityScore) -> List[Dict[str, str]]:
        recommendations = [
            {
                "type": "critical",
                "title": issue.message,
                "description": f"This issue must be addressed: {issue.message}",
                "impact": "high",
            }
            for issue in validation.errors
        ]
        if score.clarity < 0.6:
            recommendations.append(
                {
                    "type": "important",
                    "title": "Improve Clarity",
                    "description": "The prompt contains ambiguous language that may lead to unclear results. "
                    "Consider replacing vague terms with more specific language.",
                    "impact": "high",
                }
            )
        if score.specificity < 0.6:
            recommendations.append(
                {
                    "type": "important",
                    "title": "Add Specificity",
                    "description": "The prompt would benefit from more specific requirements, constraints, "
                    "or technical details.",
                    "impact": "medium",
                }
            )
        for issue in validation.suggestions:
            recommendations.append(
                {
                    "type": "suggestion",
                    "title": issue.message,
                    "description": issue.suggestion or issue.message,
                    "impact": "low",
                }
            )
        return recommendations


__all__ = ["PromptOrchestrator", "ProcessResult", "EvaluationResult"]
