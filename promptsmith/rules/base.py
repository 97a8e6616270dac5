"""Rule engine primitives shared by every domain.

A domain is described by plain data (``PatternLibrary`` + ``DomainConfig``);
``RuleEngine`` compiles that data once and applies it to prompts in a fixed
order:

    vague_terms -> structure -> terminology -> contextual_enhancement -> best_practices

Substitution stages rewrite the text in place, rule by rule. Enhancement
stages append guidance paragraphs when a trigger matches and the guidance is
not already covered.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Mapping, Optional, Pattern, Tuple, Union

from promptsmith.errors import ConfigurationError, ensure_text
from promptsmith.models import AnalysisResult, Domain, QualityWeights, RuleApplicationResult

logger = logging.getLogger("promptsmith.rules")


# ==============================================================================
# DATA STRUCTURES
# ==============================================================================


class RuleCategory(str, Enum):
    VAGUE_TERMS = "vague_terms"
    STRUCTURE = "structure"
    TERMINOLOGY = "terminology"
    CONTEXTUAL_ENHANCEMENT = "contextual_enhancement"
    BEST_PRACTICES = "best_practices"


SUBSTITUTION_ORDER: Tuple[RuleCategory, ...] = (
    RuleCategory.VAGUE_TERMS,
    RuleCategory.STRUCTURE,
    RuleCategory.TERMINOLOGY,
)
ENHANCEMENT_ORDER: Tuple[RuleCategory, ...] = (
    RuleCategory.CONTEXTUAL_ENHANCEMENT,
    RuleCategory.BEST_PRACTICES,
)

PROVENANCE_PREFIX: Dict[RuleCategory, str] = {
    RuleCategory.VAGUE_TERMS: "vague",
    RuleCategory.STRUCTURE: "structure",
    RuleCategory.TERMINOLOGY: "technical",
}

DEFAULT_NOTES: Dict[RuleCategory, str] = {
    RuleCategory.VAGUE_TERMS: 'Replaced vague terminology: "{pattern}" → "{replacement}"',
    RuleCategory.STRUCTURE: "Improved structure: {description}",
    RuleCategory.TERMINOLOGY: "Standardized terminology: {description}",
}


def compile_pattern(source: str, owner: str) -> Pattern[str]:
    """Compile a case-insensitive rule pattern, turning regex errors into ConfigurationError."""
    try:
        return re.compile(source, re.IGNORECASE)
    except re.error as exc:
        raise ConfigurationError(f"{owner}: invalid pattern {source!r}: {exc}") from exc


@dataclass(frozen=True)
class StaticReplacement:
    """Replace every match with fixed text (no group references)."""

    text: str

    def render(self, match: "re.Match[str]") -> str:
        return self.text

    def describe(self) -> str:
        return self.text


@dataclass(frozen=True)
class DynamicReplacement:
    """Replace every match with ``fn(match)``."""

    fn: Callable[["re.Match[str]"], str]
    label: str

    def render(self, match: "re.Match[str]") -> str:
        return self.fn(match)

    def describe(self) -> str:
        return self.label


Replacement = Union[StaticReplacement, DynamicReplacement]


@dataclass(frozen=True)
class PatternRule:
    """A single match/replace rule.

    Rules run in declaration order. ``priority`` only reorders them when the
    owning library sets ``sort_by_priority``.
    """

    id: str
    pattern: str
    replacement: Replacement
    category: RuleCategory
    description: str
    priority: int = 5


@dataclass(frozen=True)
class Enhancement:
    """Append ``text`` when ``trigger`` matches and ``unless`` (if set) does not."""

    id: str
    trigger: str
    text: str
    note: str
    unless: Optional[str] = None


@dataclass(frozen=True)
class EnhancementGroup:
    name: str
    category: RuleCategory
    enhancements: Tuple[Enhancement, ...]


@dataclass(frozen=True)
class PatternLibrary:
    domain: Domain
    rules: Tuple[PatternRule, ...] = ()
    groups: Tuple[EnhancementGroup, ...] = ()
    notes: Mapping[RuleCategory, str] = field(default_factory=lambda: dict(DEFAULT_NOTES))
    sort_by_priority: bool = False

    def rules_for(self, category: RuleCategory) -> List[PatternRule]:
        ordered = [r for r in self.rules if r.category == category]
        if self.sort_by_priority:
            # stable, so equal priorities keep declaration order
            ordered.sort(key=lambda r: -r.priority)
        return ordered

    def note_for(self, rule: PatternRule) -> str:
        template = self.notes.get(rule.category) or DEFAULT_NOTES[rule.category]
        return template.format(
            pattern=rule.pattern,
            replacement=rule.replacement.describe(),
            description=rule.description,
        )


@dataclass(frozen=True)
class DetectionPattern:
    name: str
    pattern: str
    description: str


@dataclass(frozen=True)
class FocusAddendum:
    """Domain-conditional system prompt note keyed on analyzer output."""

    source: str  # "technical_terms" | "domain_hints"
    keywords: FrozenSet[str]
    text: str

    def matches(self, analysis: AnalysisResult) -> bool:
        values = analysis.domain_hints if self.source == "domain_hints" else analysis.technical_terms
        return any(v.lower() in self.keywords for v in values)


@dataclass(frozen=True)
class SystemPromptTemplate:
    base: str
    complexity_note: Optional[str] = None
    focus: Optional[FocusAddendum] = None

    def render(
        self,
        analysis: Optional[AnalysisResult] = None,
        context: Optional[str] = None,
        complexity_threshold: float = 0.7,
    ) -> str:
        # First applicable addendum wins; an explicit context suppresses the others
        if context:
            return f"{self.base}\n\nAdditional Context: {context}"
        if analysis is not None:
            if self.complexity_note and analysis.complexity > complexity_threshold:
                return f"{self.base}\n\n{self.complexity_note}"
            if self.focus and self.focus.matches(analysis):
                return f"{self.base}\n\n{self.focus.text}"
        return self.base


@dataclass(frozen=True)
class DomainExample:
    title: str
    before: str
    after: str
    explanation: str
    score_improvement: float


@dataclass(frozen=True)
class DomainConfig:
    domain: Domain
    description: str
    library: PatternLibrary
    detection_patterns: Tuple[DetectionPattern, ...]
    quality_weights: QualityWeights
    system_prompt: SystemPromptTemplate
    examples: Tuple[DomainExample, ...] = ()


# ==============================================================================
# ENGINES
# ==============================================================================


class RuleEngine:
    """Applies one domain's pattern library to prompts.

    All patterns are compiled in the constructor, so a malformed library fails
    when the registry is built rather than on the first request.
    """

    def __init__(self, config: DomainConfig):
        self.config = config
        self.domain = config.domain
        self.library = config.library
        self._stages: List[Tuple[PatternRule, Pattern[str]]] = []
        for category in SUBSTITUTION_ORDER:
            for rule in self.library.rules_for(category):
                self._stages.append((rule, compile_pattern(rule.pattern, rule.id)))

        self._groups: List[Tuple[EnhancementGroup, List[Tuple[Enhancement, Pattern[str], Optional[Pattern[str]]]]]] = []
        for category in ENHANCEMENT_ORDER:
            for group in self.library.groups:
                if group.category != category:
                    continue
                compiled = [
                    (
                        enh,
                        compile_pattern(enh.trigger, enh.id),
                        compile_pattern(enh.unless, enh.id) if enh.unless else None,
                    )
                    for enh in group.enhancements
                ]
                self._groups.append((group, compiled))

        unknown = [
            g.name for g in self.library.groups if g.category not in ENHANCEMENT_ORDER
        ] + [r.id for r in self.library.rules if r.category not in SUBSTITUTION_ORDER]
        if unknown:
            raise ConfigurationError(
                f"{self.domain.value}: rules or groups in the wrong category: {', '.join(unknown)}"
            )

    def apply(
        self, prompt: str, analysis: Optional[AnalysisResult] = None
    ) -> RuleApplicationResult:
        ensure_text(prompt)
        rules_applied: List[str] = []
        improvements: List[str] = []

        refined = self._run_substitutions(prompt, rules_applied, improvements)
        refined = self._run_enhancements(refined, rules_applied, improvements)

        return RuleApplicationResult(
            refined=refined.strip(),
            rules_applied=tuple(rules_applied),
            improvements=tuple(improvements),
        )

    def generate_system_prompt(
        self,
        analysis: Optional[AnalysisResult] = None,
        context: Optional[str] = None,
        complexity_threshold: float = 0.7,
    ) -> str:
        return self.config.system_prompt.render(analysis, context, complexity_threshold)

    def provenance(self, rule: PatternRule) -> str:
        return f"{PROVENANCE_PREFIX[rule.category]}_{rule.description}"

    def _run_substitutions(
        self, text: str, rules_applied: List[str], improvements: List[str]
    ) -> str:
        for rule, regex in self._stages:
            try:
                updated, count = regex.subn(rule.replacement.render, text)
            except Exception as exc:
                logger.warning(
                    "Skipping rule %s in domain %s: replacement failed: %s",
                    rule.id,
                    self.domain.value,
                    exc,
                )
                continue
            if count:
                text = updated
                rules_applied.append(self.provenance(rule))
                improvements.append(self.library.note_for(rule))
        return text

    def _run_enhancements(
        self, text: str, rules_applied: List[str], improvements: List[str]
    ) -> str:
        for _group, compiled in self._groups:
            # Triggers inside a group see the text as it was when the group started
            snapshot = text
            for enh, trigger, unless in compiled:
                if not trigger.search(snapshot):
                    continue
                if unless is not None and unless.search(snapshot):
                    continue
                text = f"{text}\n\n{enh.text}"
                rules_applied.append(enh.id)
                improvements.append(enh.note)
        return text


_LEADING_UPPER = re.compile(r"^[A-Z]")
_TERMINAL_PUNCT = re.compile(r"[.!?]$")


class GeneralRuleEngine(RuleEngine):
    """Fallback engine: casual-term dictionary, capitalization, terminal punctuation."""

    def apply(
        self, prompt: str, analysis: Optional[AnalysisResult] = None
    ) -> RuleApplicationResult:
        ensure_text(prompt)
        rules_applied: List[str] = []
        improvements: List[str] = []

        refined = self._run_substitutions(prompt.strip(), rules_applied, improvements)
        if refined:
            if not _LEADING_UPPER.match(refined) and refined[0].upper() != refined[0]:
                refined = refined[0].upper() + refined[1:]
                rules_applied.append("general_capitalization")
                improvements.append("Capitalized first letter")
            if not _TERMINAL_PUNCT.search(refined):
                refined = f"{refined.rstrip()}."
                rules_applied.append("general_punctuation")
                improvements.append("Added proper ending punctuation")

        return RuleApplicationResult(
            refined=refined.strip(),
            rules_applied=tuple(rules_applied),
            improvements=tuple(improvements),
        )

    def provenance(self, rule: PatternRule) -> str:
        return f"general_{rule.description}"


# ==============================================================================
# BUILDERS
# ==============================================================================


def static_rules(
    domain: Domain,
    category: RuleCategory,
    entries: List[Tuple[str, str, str]],
    priority: int,
) -> Tuple[PatternRule, ...]:
    """Build static rules from ``(pattern, replacement, description)`` triples.

    Ids follow ``<domain>_<category>_<index>``.
    """
    return tuple(
        PatternRule(
            id=f"{domain.value}_{category.value}_{index}",
            pattern=pattern,
            replacement=StaticReplacement(replacement),
            category=category,
            description=description,
            priority=priority,
        )
        for index, (pattern, replacement, description) in enumerate(entries)
    )


def bullet_block(heading: str, items: List[str] | Tuple[str, ...]) -> str:
    """Render ``heading`` followed by one ``- item`` line per entry."""
    return "\n".join([heading] + [f"- {item}" for item in items])


__all__ = [
    "RuleCategory",
    "StaticReplacement",
    "DynamicReplacement",
    "Replacement",
    "PatternRule",
    "Enhancement",
    "EnhancementGroup",
    "PatternLibrary",
    "DetectionPattern",
    "FocusAddendum",
    "SystemPromptTemplate",
    "DomainExample",
    "DomainConfig",
    "RuleEngine",
    "GeneralRuleEngine",
    "compile_pattern",
    "static_rules",
    "bullet_block",
]
