"""Structural prompt validation.

Flags problems that make a prompt hard to act on: length limits, missing
structure, ambiguity, readability, mixed languages and a few domain-specific
gaps (including unsafe SQL such as ``DELETE`` without ``WHERE``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from promptsmith.analyzer import PromptAnalyzer
from promptsmith.errors import ensure_text
from promptsmith.models import AnalysisResult, Domain


@dataclass
class ValidationIssue:
    """A single validation finding."""

    severity: str  # "error", "warning", "suggestion"
    code: str
    message: str
    suggestion: str = ""


@dataclass
class ValidationResult:
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def suggestions(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "suggestion"]

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def codes(self) -> List[str]:
        return [i.code for i in self.issues]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "is_valid": self.is_valid,
            "issues": [
                {
                    "severity": issue.severity,
                    "code": issue.code,
                    "message": issue.message,
                    "suggestion": issue.suggestion,
                }
                for issue in self.issues
            ],
            "summary": {
                "errors": len(self.errors),
                "warnings": len(self.warnings),
                "suggestions": len(self.suggestions),
            },
        }


_MIXED_ES = re.compile(r"\b(el|la|los|las|de|en|con|que|bonit[oa]|bueno|malo|necesito|quiero)\b", re.IGNORECASE)
_MIXED_EN = re.compile(
    r"\b(the|a|an|and|or|but|in|on|at|to|for|of|with|good|bad|nice|need|want)\b", re.IGNORECASE
)
_ACTION_VERB = re.compile(
    r"\b(create|generate|make|build|write|develop|design|analyze|review|evaluate|check|examine|"
    r"update|modify|change|improve|optimize|explain|describe|show|demonstrate)\b",
    re.IGNORECASE,
)
_SELECT_STAR = re.compile(r"\bselect\s+\*", re.IGNORECASE)
_MUTATION = re.compile(r"\b(delete\s+from|update\s+\w+\s+set)\b", re.IGNORECASE)
_WHERE = re.compile(r"\bwhere\b", re.IGNORECASE)


class PromptValidator:
    """Validates raw prompts and reports errors, warnings and suggestions."""

    MIN_LENGTH = 10
    MAX_LENGTH = 5000
    MAX_AMBIGUITY = 0.7
    MIN_READABILITY = 0.3
    MAX_COMPLEXITY = 0.8

    VAGUE_TERMS = ["bonito", "bonita", "bueno", "malo", "good", "bad", "nice", "thing", "stuff", "some", "many"]
    REPLACEMENTS = {
        "bonito": "well-formatted",
        "bonita": "professional",
        "bueno": "high-quality",
        "malo": "problematic",
        "good": "effective",
        "bad": "ineffective",
        "nice": "well-designed",
        "thing": "element",
        "stuff": "components",
        "some": "specific",
        "many": "multiple",
    }

    def __init__(self, analyzer: Optional[PromptAnalyzer] = None):
        self.analyzer = analyzer or PromptAnalyzer()

    def validate(
        self,
        prompt: str,
        analysis: Optional[AnalysisResult] = None,
        domain: Optional[Any] = None,
    ) -> ValidationResult:
        ensure_text(prompt)
        analysis = analysis or self.analyzer.analyze(prompt)
        resolved = Domain.parse(domain) if domain is not None else None

        issues: List[ValidationIssue] = []
        issues.extend(self._check_errors(prompt))
        issues.extend(self._check_warnings(prompt, analysis))
        issues.extend(self._check_domain(prompt, analysis, resolved))
        issues.extend(self._suggestions(prompt, analysis))
        return ValidationResult(issues=issues)

    def _check_errors(self, prompt: str) -> List[ValidationIssue]:
        issues = []
        length = len(prompt)
        if length < self.MIN_LENGTH:
            issues.append(
                ValidationIssue(
                    "error",
                    "PROMPT_TOO_SHORT",
                    f"Prompt is too short ({length} characters). Minimum is {self.MIN_LENGTH} characters.",
                )
            )
        if length > self.MAX_LENGTH:
            issues.append(
                ValidationIssue(
                    "error",
                    "PROMPT_TOO_LONG",
                    f"Prompt is too long ({length} characters). Maximum is {self.MAX_LENGTH} characters.",
                )
            )
        if not prompt.strip():
            issues.append(
                ValidationIssue("error", "EMPTY_PROMPT", "Prompt cannot be empty or contain only whitespace.")
            )
        if len(prompt.split()) < 3 or not re.search(r"[a-zA-Z]", prompt):
            issues.append(
                ValidationIssue(
                    "error",
                    "LACKS_STRUCTURE",
                    "Prompt lacks basic grammatical structure or contains only fragments.",
                )
            )
        return issues

    def _check_warnings(self, prompt: str, analysis: AnalysisResult) -> List[ValidationIssue]:
        issues = []
        if analysis.ambiguity_score > self.MAX_AMBIGUITY:
            issues.append(
                ValidationIssue(
                    "warning",
                    "HIGH_AMBIGUITY",
                    f"Prompt has high ambiguity score ({analysis.ambiguity_score * 100:.1f}%).",
                    "Consider replacing vague terms with more specific language.",
                )
            )
        if analysis.readability_score < self.MIN_READABILITY:
            issues.append(
                ValidationIssue(
                    "warning",
                    "LOW_READABILITY",
                    f"Prompt has low readability score ({analysis.readability_score * 100:.1f}%).",
                    "Simplify sentence structure and use clearer language.",
                )
            )
        if analysis.complexity > self.MAX_COMPLEXITY:
            issues.append(
                ValidationIssue(
                    "warning",
                    "HIGH_COMPLEXITY",
                    "Prompt has very high complexity.",
                    "Consider breaking complex requests into simpler, focused tasks.",
                )
            )
        if len(prompt) < 50 and analysis.ambiguity_score > 0.6 and not analysis.technical_terms:
            issues.append(
                ValidationIssue(
                    "warning",
                    "NEEDS_CONTEXT",
                    "Prompt may benefit from additional context or background information.",
                    "Add relevant context, constraints, or examples to clarify your request.",
                )
            )
        if self.has_mixed_languages(prompt):
            issues.append(
                ValidationIssue(
                    "warning",
                    "MIXED_LANGUAGES",
                    "Prompt contains mixed languages which may affect processing quality.",
                    "Consider using a single language throughout the prompt.",
                )
            )
        return issues

    def _check_domain(
        self, prompt: str, analysis: AnalysisResult, domain: Optional[Domain]
    ) -> List[ValidationIssue]:
        issues = []
        lower = prompt.lower()
        hints = {h.lower() for h in analysis.domain_hints}
        sql = domain == Domain.SQL or "sql" in hints

        if "sql" in hints and "table" not in lower and "query" not in lower:
            issues.append(
                ValidationIssue(
                    "warning",
                    "SQL_MISSING_SPECIFICS",
                    "SQL request may need more specific table or query details.",
                    "Specify table names, columns, or query requirements.",
                )
            )
        if "branding" in hints and "audience" not in lower and "brand" not in lower:
            issues.append(
                ValidationIssue(
                    "warning",
                    "BRANDING_MISSING_CONTEXT",
                    "Branding request may need target audience or brand context.",
                    "Specify target audience, brand voice, or campaign objectives.",
                )
            )
        if sql and _SELECT_STAR.search(prompt):
            issues.append(
                ValidationIssue(
                    "warning",
                    "SQL_SELECT_STAR",
                    "Query selects every column with SELECT *.",
                    "List the columns you need explicitly.",
                )
            )
        if sql and _MUTATION.search(prompt) and not _WHERE.search(prompt):
            issues.append(
                ValidationIssue(
                    "warning",
                    "SQL_MISSING_WHERE",
                    "DELETE or UPDATE statement without a WHERE clause affects every row.",
                    "Add a WHERE clause or state explicitly that all rows should change.",
                )
            )
        return issues

    def _suggestions(self, prompt: str, analysis: AnalysisResult) -> List[ValidationIssue]:
        issues = []
        if analysis.ambiguity_score > 0.5:
            vague = self.find_vague_terms(prompt)
            if vague:
                issues.append(
                    ValidationIssue(
                        "suggestion",
                        "REPLACE_VAGUE_TERMS",
                        f"Replace vague terms: {', '.join(vague)}",
                        f"'{vague[0]}' → '{self.REPLACEMENTS.get(vague[0], 'specific')}'",
                    )
                )
        if not _ACTION_VERB.search(prompt):
            issues.append(
                ValidationIssue(
                    "suggestion",
                    "ADD_ACTION_VERB",
                    "Add a clear action verb to specify what you want accomplished",
                    "Start with generate, create, analyze or explain",
                )
            )
        if analysis.complexity > 0.6 and "example" not in prompt.lower():
            issues.append(
                ValidationIssue(
                    "suggestion",
                    "REQUEST_EXAMPLES",
                    "Request examples for complex tasks",
                    "Please include examples to illustrate the solution.",
                )
            )
        return issues

    def find_vague_terms(self, prompt: str) -> List[str]:
        return [t for t in self.VAGUE_TERMS if re.search(rf"\b{t}\b", prompt, re.IGNORECASE)]

    @staticmethod
    def has_mixed_languages(prompt: str) -> bool:
        return bool(_MIXED_ES.search(prompt)) and bool(_MIXED_EN.search(prompt))


__all__ = ["PromptValidator", "ValidationIssue", "ValidationResult"]
