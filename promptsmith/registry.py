"""Domain registry: one rule engine per domain plus domain detection.

The registry is built once (``build_default_registry``) and treated as
read-only afterwards, so it can be shared between threads without locking.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Pattern, Tuple

from promptsmith.config import Settings
from promptsmith.errors import ConfigurationError, ensure_text
from promptsmith.models import (
    SUBSCORE_NAMES,
    UNIFORM_WEIGHTS,
    AnalysisResult,
    Domain,
    QualityWeights,
    RuleApplicationResult,
)
from promptsmith.rules import BUILTIN_CONFIGS
from promptsmith.rules.base import (
    DetectionPattern,
    DomainConfig,
    DomainExample,
    GeneralRuleEngine,
    PatternRule,
    RuleEngine,
    compile_pattern,
)

logger = logging.getLogger("promptsmith.registry")

# Analyzer hint -> domain. Hints outside this table never influence detection.
HINT_DOMAINS: Dict[str, Domain] = {
    "sql": Domain.SQL,
    "branding": Domain.BRANDING,
    "cine": Domain.CINE,
    "saas": Domain.SAAS,
    "devops": Domain.DEVOPS,
}

WEIGHT_TOLERANCE = 1e-9


def validate_weights(domain: Domain, weights: QualityWeights) -> None:
    for name in SUBSCORE_NAMES:
        value = getattr(weights, name)
        if math.isnan(value) or not 0.0 <= value <= 1.0:
            raise ConfigurationError(f"{domain.value}: weight {name}={value} outside [0, 1]")
    total = weights.total()
    if abs(total - 1.0) > WEIGHT_TOLERANCE:
        raise ConfigurationError(f"{domain.value}: quality weights sum to {total}, expected 1.0")


class DomainRegistry:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self._order: List[Domain] = []
        self._configs: Dict[Domain, DomainConfig] = {}
        self._engines: Dict[Domain, RuleEngine] = {}
        self._detectors: Dict[Domain, List[Tuple[DetectionPattern, Pattern[str]]]] = {}
        self._fallback: Optional[RuleEngine] = None

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, config: DomainConfig) -> None:
        """Validate and register a domain; re-registering keeps its order slot.

        Raises:
            ConfigurationError: bad weights or a pattern that does not compile.
        """
        validate_weights(config.domain, config.quality_weights)
        detectors = [
            (p, compile_pattern(p.pattern, f"{config.domain.value}.{p.name}"))
            for p in config.detection_patterns
        ]
        engine_cls = GeneralRuleEngine if config.domain == Domain.GENERAL else RuleEngine
        engine = engine_cls(config)

        if config.domain not in self._configs:
            self._order.append(config.domain)
        self._configs[config.domain] = config
        self._engines[config.domain] = engine
        self._detectors[config.domain] = detectors
        logger.debug(
            "Registered domain %s (%d rules, %d detection patterns)",
            config.domain.value,
            len(config.library.rules),
            len(detectors),
        )

    def get(self, domain: Any) -> Optional[DomainConfig]:
        return self._configs.get(Domain.parse(domain))

    def list(self) -> List[Domain]:
        return list(self._order)

    def get_patterns(self, domain: Any) -> List[DetectionPattern]:
        config = self.get(domain)
        return list(config.detection_patterns) if config else []

    def get_rules(self, domain: Any) -> List[PatternRule]:
        config = self.get(domain)
        return list(config.library.rules) if config else []

    def engine_for(self, domain: Any) -> RuleEngine:
        engine = self._engines.get(Domain.parse(domain))
        if engine is not None:
            return engine
        general = self._engines.get(Domain.GENERAL)
        if general is not None:
            return general
        if self._fallback is None:
            from promptsmith.rules.general import build_general_config

            self._fallback = GeneralRuleEngine(build_general_config())
        return self._fallback

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------
    def detect_domain_scores(
        self, prompt: str, analysis: Optional[AnalysisResult] = None
    ) -> Dict[Domain, int]:
        """Aggregate detection score per registered domain, in registration order."""
        ensure_text(prompt)
        scores: Dict[Domain, int] = {domain: 0 for domain in self._order}
        for domain in self._order:
            for _pattern, regex in self._detectors[domain]:
                matches = sum(1 for _ in regex.finditer(prompt))
                scores[domain] += matches * self.settings.match_weight

        if analysis is not None:
            for hint in analysis.domain_hints:
                mapped = HINT_DOMAINS.get(str(hint).strip().lower())
                if mapped is not None and mapped in scores:
                    scores[mapped] += self.settings.hint_bonus
        return scores

    def detect_domain(self, prompt: str, analysis: Optional[AnalysisResult] = None) -> Domain:
        scores = self.detect_domain_scores(prompt, analysis)
        best: Optional[Domain] = None
        best_score = 0
        for domain, score in scores.items():
            # Strictly greater: ties go to the earliest registered domain
            if best is None or score > best_score:
                best, best_score = domain, score

        if best is None or best_score < self.settings.detection_floor:
            logger.debug("No domain above floor %d, using general", self.settings.detection_floor)
            return Domain.GENERAL
        logger.debug("Detected domain %s (score %d)", best.value, best_score)
        return best

    # ------------------------------------------------------------------
    # Rules and prompts
    # ------------------------------------------------------------------
    def apply_domain_rules(
        self, prompt: str, domain: Any, analysis: Optional[AnalysisResult] = None
    ) -> RuleApplicationResult:
        return self.engine_for(domain).apply(prompt, analysis)

    def generate_system_prompt(
        self,
        domain: Any,
        analysis: Optional[AnalysisResult] = None,
        context: Optional[str] = None,
    ) -> str:
        return self.engine_for(domain).generate_system_prompt(
            analysis, context, self.settings.complexity_threshold
        )

    def get_quality_weights(self, domain: Any) -> QualityWeights:
        config = self.get(domain)
        return config.quality_weights if config else UNIFORM_WEIGHTS

    def get_domain_examples(self, domain: Any) -> List[DomainExample]:
        config = self.get(domain)
        return list(config.examples) if config else []

    def get_domain_statistics(self) -> Dict[str, Dict[str, Any]]:
        stats: Dict[str, Dict[str, Any]] = {}
        for domain in self._order:
            config = self._configs[domain]
            stats[domain.value] = {
                "description": config.description,
                "rules": len(config.library.rules),
                "enhancements": sum(len(g.enhancements) for g in config.library.groups),
                "patterns": len(config.detection_patterns),
                "examples": len(config.examples),
            }
        return stats


def build_default_registry(settings: Optional[Settings] = None) -> DomainRegistry:
    """Registry with the built-in domains: sql, branding, cine, saas, devops, general."""
    registry = DomainRegistry(settings)
    for build in BUILTIN_CONFIGS:
        registry.register(build())
    logger.info("Domain registry ready: %s", ", ".join(d.value for d in registry.list()))
    return registry


__all__ = ["DomainRegistry", "HINT_DOMAINS", "build_default_registry", "validate_weights"]
