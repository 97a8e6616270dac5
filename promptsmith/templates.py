"""Prompt templates wrapped around a refined prompt.

Five structural template types are built in (basic, chain of thought,
few-shot, role based, step by step). Each renders the refined prompt plus
optional context, requirements and examples, and carries a matching system
prompt with a per-domain focus line.

Templates are looked up by ``<type>_<domain>`` first, then
``<type>_general``, then ``basic_general``, so a domain-specific template can
be registered on top of the general ones.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from promptsmith.errors import InvalidInputError
from promptsmith.models import AnalysisResult, Domain
from promptsmith.rules.base import bullet_block

logger = logging.getLogger("promptsmith.templates")


class TemplateType(str, Enum):
    BASIC = "basic"
    CHAIN_OF_THOUGHT = "chain_of_thought"
    FEW_SHOT = "few_shot"
    ROLE_BASED = "role_based"
    STEP_BY_STEP = "step_by_step"

    @classmethod
    def parse(cls, value: Any) -> "TemplateType":
        """Resolve ``value`` (enum, name or hyphenated name); unknown values raise."""
        if isinstance(value, TemplateType):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower().replace("-", "_"))
            except ValueError:
                pass
        choices = ", ".join(t.value for t in cls)
        raise InvalidInputError(f"Unknown template type {value!r} (choose from: {choices})")


@dataclass(frozen=True)
class TemplateExample:
    input: str
    output: str
    explanation: Optional[str] = None


@dataclass
class TemplateContext:
    """Everything a template may read while rendering."""

    refined_prompt: str
    domain: Domain = Domain.GENERAL
    variables: Dict[str, Any] = field(default_factory=dict)
    examples: List[TemplateExample] = field(default_factory=list)
    user_context: Optional[str] = None

    def provided(self) -> set:
        names = {name for name, value in self.variables.items() if value is not None}
        names.add("refined_prompt")
        if self.user_context:
            names.add("user_context")
        return names


Renderer = Callable[[TemplateContext], str]


@dataclass(frozen=True)
class TemplateDefinition:
    id: str
    name: str
    type: TemplateType
    description: str
    render: Renderer
    system: Renderer
    domain: Optional[Domain] = None  # None means every domain
    required_variables: Tuple[str, ...] = ("refined_prompt",)
    optional_variables: Tuple[str, ...] = ()

    def applies_to(self, domain: Optional[Domain]) -> bool:
        return domain is None or self.domain is None or self.domain == domain

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "domain": self.domain.value if self.domain else "all",
            "description": self.description,
            "required_variables": list(self.required_variables),
            "optional_variables": list(self.optional_variables),
        }


class TemplateResult(BaseModel):
    prompt: str
    system: str
    variables: Dict[str, Any] = Field(default_factory=dict)
    type: TemplateType
    template_id: str


# ==============================================================================
# TEXT HELPERS
# ==============================================================================

_EXCESS_BLANK_LINES = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)+")
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)


def cleanup(text: str) -> str:
    """Collapse runs of blank lines, drop trailing spaces, trim the ends."""
    text = _TRAILING_SPACE.sub("", text)
    text = _EXCESS_BLANK_LINES.sub("\n\n", text)
    return text.strip()


def capitalize(text: str) -> str:
    return text[:1].upper() + text[1:]


def _lower_first(text: str) -> str:
    # Leave acronyms such as "SQL" or "API" alone
    if len(text) > 1 and text[1].isupper():
        return text
    return text[:1].lower() + text[1:]


def _items(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    return [str(item) for item in value if str(item).strip()]


def _numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, start=1))


def _indent(text: str, prefix: str = "   ") -> str:
    return "\n".join(prefix + line for line in text.splitlines())


def _join(parts: Sequence[Optional[str]]) -> str:
    return "\n\n".join(p for p in parts if p)


# ==============================================================================
# BUILT-IN TEMPLATES
# ==============================================================================

BASIC_FOCUS = {
    Domain.SQL: "Focus on database best practices and SQL standards.",
    Domain.BRANDING: "Focus on strategic marketing and brand development.",
    Domain.CINE: "Focus on professional screenwriting and storytelling.",
    Domain.SAAS: "Focus on user experience and scalable solutions.",
    Domain.DEVOPS: "Focus on reliable infrastructure and automation.",
}


def _basic(ctx: TemplateContext) -> str:
    requirements = _items(ctx.variables.get("requirements"))
    return _join(
        [
            capitalize(ctx.refined_prompt),
            f"Context: {ctx.user_context}" if ctx.user_context else None,
            bullet_block("Requirements:", requirements) if requirements else None,
        ]
    )


def _basic_system(ctx: TemplateContext) -> str:
    return _join(
        [
            "You are a professional assistant. Provide clear, accurate, and helpful responses "
            "to the user's request.",
            BASIC_FOCUS.get(ctx.domain),
        ]
    )


COT_FOCUS = {
    Domain.SQL: "Focus on database design principles and query optimization.",
    Domain.BRANDING: "Focus on brand strategy development and marketing best practices.",
    Domain.CINE: "Focus on story structure and character development.",
    Domain.SAAS: "Focus on user-centered design and technical scalability.",
    Domain.DEVOPS: "Focus on infrastructure reliability and automation best practices.",
}

COT_DEFAULT_REQUIREMENTS = ("Analyze the problem or task at hand", "Identify key constraints and objectives")


def _chain_of_thought(ctx: TemplateContext) -> str:
    requirements = _items(ctx.variables.get("requirements")) or list(COT_DEFAULT_REQUIREMENTS)
    return _join(
        [
            capitalize(ctx.refined_prompt),
            "Let's approach this step-by-step:",
            "1. First, let's understand the core requirements:\n"
            + _indent("\n".join(f"- {item}" for item in requirements)),
            "2. Next, let's consider the approach:\n"
            "   - What are the best practices for this type of work?\n"
            "   - What potential challenges should we anticipate?\n"
            "   - What resources or tools will be most effective?",
            "3. Finally, let's plan the implementation:\n"
            "   - What are the logical steps to complete this task?\n"
            "   - How can we ensure quality and completeness?\n"
            "   - What validation or testing should be included?",
            f"Additional context to consider: {ctx.user_context}" if ctx.user_context else None,
        ]
    )


def _chain_of_thought_system(ctx: TemplateContext) -> str:
    return _join(
        [
            "You are an expert problem solver. Break down complex tasks into logical steps and "
            "provide clear reasoning for your approach.",
            "Think through problems systematically:\n"
            "1. Understand the requirements thoroughly\n"
            "2. Consider multiple approaches and their trade-offs\n"
            "3. Provide step-by-step implementation guidance\n"
            "4. Include validation and quality checks",
            COT_FOCUS.get(ctx.domain),
        ]
    )


FEW_SHOT_FOCUS = {
    Domain.SQL: "Focus on SQL formatting, naming conventions, and best practices shown in examples.",
    Domain.BRANDING: "Focus on brand voice, messaging style, and strategic approach from examples.",
    Domain.CINE: "Focus on storytelling structure, character development, and format from examples.",
    Domain.SAAS: "Focus on user experience patterns and technical approaches from examples.",
    Domain.DEVOPS: "Focus on infrastructure patterns and automation approaches from examples.",
}


def _example_block(index: int, example: TemplateExample) -> str:
    lines = [f"Example {index}:", f"Input: {example.input}", f"Output: {example.output}"]
    if example.explanation:
        lines.append(f"Explanation: {example.explanation}")
    return "\n".join(lines)


def _few_shot(ctx: TemplateContext) -> str:
    parts: List[Optional[str]] = [capitalize(ctx.refined_prompt)]
    if ctx.examples:
        parts.append("Here are some examples to guide your response:")
        parts.extend(_example_block(i, ex) for i, ex in enumerate(ctx.examples, start=1))
    if ctx.user_context:
        parts.append(f"Additional context: {ctx.user_context}")
    parts.append("Now, please provide a response following the pattern established in the examples above.")
    return _join(parts)


def _few_shot_system(ctx: TemplateContext) -> str:
    return _join(
        [
            "You are an expert in pattern recognition and example-based learning. Use the provided "
            "examples to understand the desired format, style, and approach for your response.",
            bullet_block(
                "Key principles:",
                [
                    "Study the examples carefully to understand the expected pattern",
                    "Maintain consistency with the style and structure shown",
                    "Apply the same level of detail and quality as demonstrated",
                    "Adapt the pattern to the specific request while staying true to the examples",
                ],
            ),
            FEW_SHOT_FOCUS.get(ctx.domain),
        ]
    )


ROLE_FOCUS = {
    Domain.SQL: "You are a senior database architect and SQL expert with deep knowledge of database "
    "design, query optimization, and best practices.",
    Domain.BRANDING: "You are a strategic brand consultant with expertise in marketing, positioning, "
    "and creative direction.",
    Domain.CINE: "You are a professional screenwriter and story consultant with industry experience.",
    Domain.SAAS: "You are a product manager and technical architect specializing in SaaS development.",
    Domain.DEVOPS: "You are a senior DevOps engineer and site reliability expert.",
}


def _role_based(ctx: TemplateContext) -> str:
    role = ctx.variables.get("role") or "professional expert"
    expertise = _items(ctx.variables.get("expertise"))
    constraints = _items(ctx.variables.get("constraints"))
    return _join(
        [
            f"As a {role}, {_lower_first(ctx.refined_prompt)}",
            bullet_block("Drawing from your expertise in:", expertise) if expertise else None,
            bullet_block("Please consider these constraints:", constraints) if constraints else None,
            f"Additional context for your expert assessment: {ctx.user_context}" if ctx.user_context else None,
            "Provide your professional recommendation with clear reasoning and industry best practices.",
        ]
    )


def _role_based_system(ctx: TemplateContext) -> str:
    role = ctx.variables.get("role") or "senior expert"
    return _join(
        [
            f"You are a {role} with extensive professional experience.",
            ROLE_FOCUS.get(ctx.domain),
            bullet_block(
                "Provide expert-level guidance that reflects:",
                [
                    "Deep industry knowledge and current best practices",
                    "Professional standards and quality expectations",
                    "Strategic thinking and long-term considerations",
                    "Practical implementation advice based on real-world experience",
                ],
            ),
        ]
    )


STEP_FOCUS = {
    Domain.SQL: "Focus on database development lifecycle: design, implementation, testing, and optimization.",
    Domain.BRANDING: "Focus on brand development process: research, strategy, creative development, "
    "and implementation.",
    Domain.CINE: "Focus on screenplay development: concept, structure, writing, and revision.",
    Domain.SAAS: "Focus on product development: planning, design, development, testing, and deployment.",
    Domain.DEVOPS: "Focus on infrastructure development: design, provisioning, configuration, and monitoring.",
}

PLANNING_CHECKLIST = (
    "Analyze requirements and constraints",
    "Gather necessary resources and tools",
    "Define success criteria and validation methods",
)
DEFAULT_IMPLEMENTATION = (
    "Begin with the foundational elements",
    "Build incrementally with testing at each stage",
    "Integrate components systematically",
    "Validate functionality throughout the process",
)
VALIDATION_CHECKLIST = (
    "Test all functionality thoroughly",
    "Review against original requirements",
    "Optimize for performance and usability",
    "Document the solution and process",
)


def _step_by_step(ctx: TemplateContext) -> str:
    planning = [f"- [ ] {item}" for item in PLANNING_CHECKLIST]
    planning += [f"- {item}" for item in _items(ctx.variables.get("planning_steps"))]
    implementation = _items(ctx.variables.get("implementation_steps")) or list(DEFAULT_IMPLEMENTATION)
    return _join(
        [
            capitalize(ctx.refined_prompt),
            "Please provide a detailed, step-by-step approach:",
            "## Phase 1: Planning & Preparation\n" + "\n".join(planning),
            "## Phase 2: Implementation\n" + _numbered(implementation),
            "## Phase 3: Validation & Quality Assurance\n"
            + "\n".join(f"- [ ] {item}" for item in VALIDATION_CHECKLIST),
            f"Special considerations: {ctx.user_context}" if ctx.user_context else None,
        ]
    )


def _step_by_step_system(ctx: TemplateContext) -> str:
    return _join(
        [
            "You are a methodical expert who excels at breaking down complex tasks into manageable, "
            "sequential steps.",
            "Approach every request with:\n"
            "1. Clear planning and preparation phase\n"
            "2. Logical implementation sequence\n"
            "3. Built-in quality checks and validation\n"
            "4. Comprehensive documentation",
            STEP_FOCUS.get(ctx.domain),
            bullet_block(
                "Ensure each step:",
                [
                    "Has clear deliverables and success criteria",
                    "Builds logically on previous steps",
                    "Includes quality validation",
                    "Can be executed independently when possible",
                ],
            ),
        ]
    )


BUILTIN_TEMPLATES = (
    TemplateDefinition(
        id="basic_general",
        name="Basic Template",
        type=TemplateType.BASIC,
        description="Simple, direct template for straightforward requests",
        render=_basic,
        system=_basic_system,
        optional_variables=("user_context", "requirements"),
    ),
    TemplateDefinition(
        id="chain_of_thought_general",
        name="Chain of Thought Template",
        type=TemplateType.CHAIN_OF_THOUGHT,
        description="Template that encourages step-by-step reasoning",
        render=_chain_of_thought,
        system=_chain_of_thought_system,
        optional_variables=("requirements", "user_context"),
    ),
    TemplateDefinition(
        id="few_shot_general",
        name="Few-Shot Learning Template",
        type=TemplateType.FEW_SHOT,
        description="Template that includes examples to guide the response",
        render=_few_shot,
        system=_few_shot_system,
        optional_variables=("examples", "user_context"),
    ),
    TemplateDefinition(
        id="role_based_general",
        name="Role-Based Template",
        type=TemplateType.ROLE_BASED,
        description="Template that assigns a specific expert role",
        render=_role_based,
        system=_role_based_system,
        optional_variables=("role", "expertise", "constraints", "user_context"),
    ),
    TemplateDefinition(
        id="step_by_step_general",
        name="Step-by-Step Template",
        type=TemplateType.STEP_BY_STEP,
        description="Template that breaks down tasks into sequential steps",
        render=_step_by_step,
        system=_step_by_step_system,
        optional_variables=("planning_steps", "implementation_steps", "user_context"),
    ),
)


# ==============================================================================
# SELECTION
# ==============================================================================

# Entity words that hint the prompt could be turned into a reusable template
VARIABLE_CANDIDATES = (
    re.compile(r"\b(table|database|schema)\b", re.IGNORECASE),
    re.compile(r"\b(user|customer|client)\b", re.IGNORECASE),
    re.compile(r"\b(component|module|function)\b", re.IGNORECASE),
)

STEP_WORDS = re.compile(r"\b(step|guide|how to|tutorial)", re.IGNORECASE)
ROLE_WORDS = re.compile(r"\b(as an? |you are|expert|professional)", re.IGNORECASE)
REASONING_WORDS = re.compile(r"\b(analy[sz]e|explain|reasoning|think through)", re.IGNORECASE)


def has_variable_candidates(prompt: str) -> bool:
    """True when one entity group is mentioned more than once."""
    return any(len(pattern.findall(prompt)) > 1 for pattern in VARIABLE_CANDIDATES)


def should_generate_template(prompt: str, analysis: AnalysisResult, complexity_threshold: float = 0.7) -> bool:
    return (
        analysis.complexity > complexity_threshold
        or len(analysis.domain_hints) > 1
        or has_variable_candidates(prompt)
    )


def select_template_type(prompt: str, variables: Optional[Dict[str, Any]] = None) -> TemplateType:
    """Pick a template type from wording cues; first match wins."""
    if STEP_WORDS.search(prompt):
        return TemplateType.STEP_BY_STEP
    if ROLE_WORDS.search(prompt):
        return TemplateType.ROLE_BASED
    if REASONING_WORDS.search(prompt):
        return TemplateType.CHAIN_OF_THOUGHT
    if variables and (variables.get("examples") or variables.get("samples")):
        return TemplateType.FEW_SHOT
    return TemplateType.BASIC


def coerce_examples(raw: Any) -> List[TemplateExample]:
    """Accept ``TemplateExample`` objects or ``{"input", "output", "explanation"}`` mappings."""
    examples: List[TemplateExample] = []
    for item in raw or ():
        if isinstance(item, TemplateExample):
            examples.append(item)
        elif isinstance(item, dict) and "input" in item and "output" in item:
            examples.append(
                TemplateExample(
                    input=str(item["input"]),
                    output=str(item["output"]),
                    explanation=item.get("explanation"),
                )
            )
        else:
            raise InvalidInputError("examples must be mappings with 'input' and 'output' keys")
    return examples


# ==============================================================================
# ENGINE
# ==============================================================================


class TemplateEngine:
    """Registry and renderer for prompt templates."""

    def __init__(self, templates: Optional[Sequence[TemplateDefinition]] = None):
        self._templates: Dict[str, TemplateDefinition] = {}
        for template in BUILTIN_TEMPLATES if templates is None else templates:
            self.register(template)

    def register(self, template: TemplateDefinition) -> None:
        if template.id in self._templates:
            logger.info("Replacing template %s", template.id)
        self._templates[template.id] = template

    def get(self, template_id: str) -> Optional[TemplateDefinition]:
        return self._templates.get(template_id)

    def list_templates(
        self, domain: Optional[Any] = None, template_type: Optional[Any] = None
    ) -> List[TemplateDefinition]:
        wanted_domain = Domain.parse(domain) if domain is not None else None
        wanted_type = TemplateType.parse(template_type) if template_type is not None else None
        return [
            t
            for t in self._templates.values()
            if t.applies_to(wanted_domain) and (wanted_type is None or t.type == wanted_type)
        ]

    def select_best_template(self, domain: Domain, template_type: TemplateType) -> str:
        for candidate in (f"{template_type.value}_{domain.value}", f"{template_type.value}_general"):
            if candidate in self._templates:
                return candidate
        return "basic_general"

    def render(self, template_id: str, context: TemplateContext) -> TemplateResult:
        template = self._templates.get(template_id)
        if template is None:
            raise InvalidInputError(f"Template not found: {template_id}")
        missing = [name for name in template.required_variables if name not in context.provided()]
        if missing:
            raise InvalidInputError(f"Missing required variables: {', '.join(missing)}")

        return TemplateResult(
            prompt=cleanup(template.render(context)),
            system=cleanup(template.system(context)),
            variables=dict(context.variables),
            type=template.type,
            template_id=template.id,
        )

    def generate(
        self,
        prompt: str,
        domain: Any = Domain.GENERAL,
        template_type: Any = TemplateType.BASIC,
        variables: Optional[Dict[str, Any]] = None,
        examples: Optional[Sequence[Any]] = None,
        user_context: Optional[str] = None,
    ) -> TemplateResult:
        """Wrap ``prompt`` in the best template for ``domain`` and ``template_type``."""
        resolved = Domain.parse(domain)
        kind = TemplateType.parse(template_type)
        variables = dict(variables or {})
        context = TemplateContext(
            refined_prompt=prompt,
            domain=resolved,
            variables=variables,
            examples=coerce_examples(examples if examples is not None else variables.get("examples")),
            user_context=user_context,
        )
        template_id = self.select_best_template(resolved, kind)
        logger.debug("Rendering template %s for domain %s", template_id, resolved.value)
        return self.render(template_id, context)


__all__ = [
    "TemplateType",
    "TemplateExample",
    "TemplateContext",
    "TemplateDefinition",
    "TemplateResult",
    "TemplateEngine",
    "BUILTIN_TEMPLATES",
    "cleanup",
    "should_generate_template",
    "select_template_type",
    "has_variable_candidates",
    "coerce_examples",
]
