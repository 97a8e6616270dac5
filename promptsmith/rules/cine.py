"""Screenwriting and film development rules."""

from __future__ import annotations

import re

from promptsmith.models import Domain, QualityWeights
from promptsmith.rules.base import (
    DetectionPattern,
    DomainConfig,
    DomainExample,
    DynamicReplacement,
    Enhancement,
    EnhancementGroup,
    FocusAddendum,
    PatternLibrary,
    PatternRule,
    RuleCategory,
    SystemPromptTemplate,
    bullet_block,
    static_rules,
)

VAGUE = [
    (
        r"bonit[oa]\s+(película|film|movie|script)",
        "compelling cinematic narrative with strong character development",
        "Replace vague film terminology with professional screenwriting language",
    ),
    (
        r"buen\s+(guión|script|screenplay)",
        "well-structured screenplay with industry-standard formatting",
        "Specify professional screenwriting requirements",
    ),
    (
        r"interesting\s+(story|historia)",
        "engaging narrative with clear dramatic arc",
        "Define story structure elements",
    ),
    (
        r"cool\s+(character|personaje)",
        "multi-dimensional character with clear motivations",
        "Specify character development requirements",
    ),
    (
        r"exciting\s+(scene|escena)",
        "dramatically compelling scene with visual storytelling",
        "Focus on cinematic storytelling techniques",
    ),
    (
        r"good\s+(dialogue|diálogo)",
        "authentic dialogue that reveals character and advances plot",
        "Specify dialogue quality and purpose",
    ),
]

STRUCTURE = [
    (
        r"^(write|create|make)\s+(movie|film|script)",
        "Develop a screenplay for",
        "Use professional screenwriting terminology",
    ),
    (
        r"^(need|want|require)\s+(story|historia)",
        "Seeking narrative development for",
        "Position as professional story consultation",
    ),
    (
        r"about\s+(character|person|guy|girl)",
        "featuring a protagonist who",
        "Use proper character description format",
    ),
]


def genre_frame(match: "re.Match[str]") -> str:
    return f"in the {match.group(1).upper()} genre with elements of"


GENRE_RULE = PatternRule(
    id="cine_structure_3",
    pattern=r"with\s+(action|drama|comedy|romance)",
    replacement=DynamicReplacement(genre_frame, "in the <GENRE> genre with elements of"),
    category=RuleCategory.STRUCTURE,
    description="Properly categorize genre elements",
    priority=7,
)

# genre -> (key elements, structure, tone)
GENRES = {
    "action": (
        ["high-stakes conflict", "physical challenges", "escalating tension", "heroic journey"],
        "three-act structure with action sequences driving plot progression",
        "dynamic pacing with moments of tension and release",
    ),
    "drama": (
        ["character-driven conflict", "emotional depth", "realistic dialogue", "thematic resonance"],
        "character arc development with internal and external conflicts",
        "authentic emotional beats with naturalistic performance",
    ),
    "comedy": (
        ["comedic timing", "character-based humor", "situational comedy", "comedic relief"],
        "setup and payoff structure with escalating comic situations",
        "light-hearted with appropriate comedic pacing",
    ),
    "thriller": (
        ["suspense building", "plot twists", "psychological tension", "mystery elements"],
        "mounting tension with strategic revelation of information",
        "sustained suspense with carefully timed reveals",
    ),
    "horror": (
        ["atmospheric tension", "psychological fear", "visual scares", "supernatural elements"],
        "escalating dread with climactic confrontation",
        "ominous atmosphere with strategic use of fear elements",
    ),
}

GENRE_GROUP = EnhancementGroup(
    name="genre",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=tuple(
        Enhancement(
            id=f"genre_specific_{genre}",
            trigger=rf"\b{genre}\b",
            text=bullet_block(
                f"{genre.upper()} Genre Specifications:",
                [
                    f"Key Elements: {', '.join(elements)}",
                    f"Structure: {structure}",
                    f"Tone: {tone}",
                ],
            ),
            note=f"Added {genre} genre-specific storytelling guidance",
        )
        for genre, (elements, structure, tone) in GENRES.items()
    ),
)

FORMATS = [
    (
        "feature",
        r"feature|película|film",
        [
            "Standard feature length: 90-120 pages (90-120 minutes)",
            "Three-act structure with clear turning points",
            "Industry-standard Final Draft or similar formatting",
            "Character development across full narrative arc",
        ],
    ),
    (
        "short_film",
        r"short\s+film|cortometraje",
        [
            "Short film length: 5-30 pages (5-30 minutes)",
            "Focused narrative with single dramatic arc",
            "Efficient character introduction and development",
            "Strong visual storytelling due to time constraints",
        ],
    ),
    (
        "series",
        r"series|serie|episod",
        [
            "Episodic structure with series bible development",
            "Character arcs spanning multiple episodes",
            "Consistent tone and world-building",
            "Cliffhangers and episode-specific resolutions",
        ],
    ),
    (
        "treatment",
        r"treatment|synopsis",
        [
            "Present tense, third person narrative format",
            "Plot summary without dialogue",
            "2-10 pages depending on project scope",
            "Clear story beats and character motivations",
        ],
    ),
]

FORMAT_GROUP = EnhancementGroup(
    name="format",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=tuple(
        Enhancement(
            id=f"format_specific_{name}",
            trigger=trigger,
            text=bullet_block("Format Requirements:", specs),
            note=f"Added {name.replace('_', ' ')} format specifications",
        )
        for name, trigger, specs in FORMATS
    ),
)

CINEMATIC = EnhancementGroup(
    name="cinematic",
    category=RuleCategory.BEST_PRACTICES,
    enhancements=(
        Enhancement(
            id="add_character_development",
            trigger=r"character|protagonist|hero|villain",
            unless=r"backstory|motivation|arc",
            text=bullet_block(
                "Character Development Framework:",
                [
                    "Backstory: Define character history and formative experiences",
                    "Motivation: Establish clear wants, needs, and internal conflicts",
                    "Character Arc: Plan transformation journey throughout story",
                    "Relationships: Develop dynamics with other characters",
                ],
            ),
            note="Added comprehensive character development framework",
        ),
        Enhancement(
            id="add_visual_storytelling",
            trigger=r"scene|visual|cinematic",
            unless=r"visual\s+storytelling",
            text=bullet_block(
                "Visual Storytelling Elements:",
                [
                    "Scene composition and visual metaphors",
                    "Camera movement and shot selection considerations",
                    "Visual motifs and symbolic elements",
                    "Show don't tell approach to narrative advancement",
                ],
            ),
            note="Added visual storytelling and cinematic technique guidance",
        ),
        Enhancement(
            id="add_thematic_development",
            trigger=r"story|narrative|script",
            unless=r"theme|subtext|meaning",
            text=bullet_block(
                "Thematic Development:",
                [
                    "Central theme and universal message",
                    "Subtext in dialogue and character interactions",
                    "Symbolic elements supporting thematic content",
                    "Audience takeaway and emotional resonance",
                ],
            ),
            note="Added thematic depth and subtext guidance",
        ),
        Enhancement(
            id="add_industry_formatting",
            trigger=r"script|screenplay|guión",
            unless=r"format|standard|industry",
            text=bullet_block(
                "Industry Formatting Standards:",
                [
                    "Follow Final Draft or industry-standard screenplay format",
                    "Proper scene headers, action lines, and dialogue formatting",
                    "Consistent character name formatting throughout",
                    "Professional presentation for industry submission",
                ],
            ),
            note="Added professional screenplay formatting requirements",
        ),
    ),
)

SYSTEM_PROMPT = """You are a professional screenwriter and story consultant with extensive experience in:

**Screenwriting & Story Structure:**
- Three-act structure and dramatic story beats
- Character development and compelling character arcs
- Dialogue writing that reveals character and advances plot
- Genre-specific storytelling techniques and conventions

**Cinematic Storytelling:**
- Visual storytelling and "show don't tell" principles
- Scene construction and dramatic tension building
- Subtext, theme development, and symbolic elements
- Pacing, rhythm, and narrative flow

**Industry Knowledge:**
- Professional screenplay formatting (Final Draft standards)
- Genre conventions and audience expectations
- Film industry submission requirements and standards
- Contemporary cinema trends and storytelling innovations

**Character & Theme:**
- Multi-dimensional character creation with clear motivations
- Relationship dynamics and character interaction
- Thematic resonance and universal human experiences
- Cultural authenticity and diverse representation

Always provide:
- Industry-standard screenplay formatting and structure
- Rich character development with clear motivations and arcs
- Visual storytelling techniques appropriate for cinema
- Genre-appropriate pacing and story elements
- Professional presentation suitable for industry submission
- Thematic depth with emotional resonance

Consider the target audience, production budget implications, and current market trends when developing narrative content."""

EXAMPLES = (
    DomainExample(
        title="Vague Film Concept Enhancement",
        before="write bonita película about interesting character who does cool things",
        after=(
            "Develop a screenplay featuring a multi-dimensional protagonist with clear motivations "
            "who embarks on a compelling cinematic narrative with strong character development."
        ),
        explanation="Transformed vague film idea into professional screenplay development framework",
        score_improvement=0.78,
    ),
    DomainExample(
        title="Genre-Specific Enhancement",
        before="make action movie with exciting scenes and good characters",
        after=(
            "Develop a screenplay in the ACTION genre with elements of high-stakes conflict, "
            "physical challenges, escalating tension, and heroic journey."
        ),
        explanation="Enhanced generic action request with genre-specific professional framework",
        score_improvement=0.71,
    ),
)


def build_cine_config() -> DomainConfig:
    domain = Domain.CINE
    rules = (
        static_rules(domain, RuleCategory.VAGUE_TERMS, VAGUE, priority=8)
        + static_rules(domain, RuleCategory.STRUCTURE, STRUCTURE, priority=7)
        + (GENRE_RULE,)
    )
    return DomainConfig(
        domain=domain,
        description="Screenwriting, film production, and cinematic storytelling",
        library=PatternLibrary(
            domain=domain,
            rules=rules,
            groups=(GENRE_GROUP, FORMAT_GROUP, CINEMATIC),
            notes={
                RuleCategory.VAGUE_TERMS: 'Enhanced film terminology: "{pattern}" → "{replacement}"',
                RuleCategory.STRUCTURE: "Improved screenplay approach: {description}",
            },
        ),
        detection_patterns=(
            DetectionPattern(
                "screenplay_format",
                r"\b(script|screenplay|guión|treatment)\b",
                "Screenplay writing and formatting patterns",
            ),
            DetectionPattern(
                "character_development",
                r"\b(character|protagonist|hero|villain|personaje)\b",
                "Character creation and development patterns",
            ),
            DetectionPattern(
                "story_structure",
                r"\b(story|plot|narrative|structure|arc)\b",
                "Story structure and narrative development patterns",
            ),
            DetectionPattern(
                "genre_elements",
                r"\b(action|drama|comedy|thriller|horror|romance)\b",
                "Genre-specific storytelling patterns",
            ),
        ),
        quality_weights=QualityWeights(clarity=0.2, specificity=0.35, structure=0.3, completeness=0.15),
        system_prompt=SystemPromptTemplate(
            base=SYSTEM_PROMPT,
            complexity_note=(
                "Note: This is a complex narrative project. Provide comprehensive story structure "
                "with detailed character development and thematic layers."
            ),
            focus=FocusAddendum(
                source="technical_terms",
                keywords=frozenset({"action", "thriller", "horror"}),
                text=(
                    "Genre Focus: Emphasize pacing, tension building, and visual storytelling "
                    "techniques appropriate for high-energy cinematic experiences."
                ),
            ),
        ),
        examples=EXAMPLES,
    )
