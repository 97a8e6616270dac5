"""Fallback rules used when no specific domain is detected."""

from __future__ import annotations

from promptsmith.models import UNIFORM_WEIGHTS, Domain
from promptsmith.rules.base import (
    DetectionPattern,
    DomainConfig,
    DomainExample,
    PatternLibrary,
    RuleCategory,
    SystemPromptTemplate,
    static_rules,
)

CASUAL_TERMS = [
    (r"\bbonit[oa]\b", "well-designed", "Replace vague aesthetic terms"),
    (r"\bbuen[oa]\b", "high-quality", "Replace vague quality terms"),
    (r"\bnice\b", "well-crafted", "Replace generic positive terms"),
    (r"\bcool\b", "impressive", "Replace casual terms with professional language"),
]

SYSTEM_PROMPT = """You are a professional assistant with expertise across multiple domains. You provide:

**Clear Communication:**
- Well-structured responses with logical flow
- Professional language appropriate for the context
- Specific, actionable recommendations and guidance

**Quality Focus:**
- Attention to detail and accuracy in all responses
- Best practices and industry standards
- Comprehensive solutions that address user needs

**Adaptability:**
- Appropriate tone and complexity for the audience
- Context-aware recommendations and suggestions
- Integration of relevant domain knowledge

Always strive for clarity, specificity, and professionalism in your responses."""


def build_general_config() -> DomainConfig:
    domain = Domain.GENERAL
    return DomainConfig(
        domain=domain,
        description="General purpose prompt optimization with universal improvements",
        library=PatternLibrary(
            domain=domain,
            rules=static_rules(domain, RuleCategory.VAGUE_TERMS, CASUAL_TERMS, priority=5),
            notes={RuleCategory.VAGUE_TERMS: "{description}"},
        ),
        detection_patterns=(
            DetectionPattern(
                "general_improvements",
                r"\b(improve|enhance|optimize|better|good|best)\b",
                "General improvement and optimization patterns",
            ),
        ),
        quality_weights=UNIFORM_WEIGHTS,
        system_prompt=SystemPromptTemplate(base=SYSTEM_PROMPT),
        examples=(
            DomainExample(
                title="Generic Improvement",
                before="make something good that works nice",
                after=(
                    "Create a well-designed solution that effectively addresses the specified "
                    "requirements with clear functionality and user benefits."
                ),
                explanation="Replaced vague terms with specific, actionable language",
                score_improvement=0.45,
            ),
        ),
    )
