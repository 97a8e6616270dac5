"""Brand strategy, marketing campaign and copywriting rules."""

from __future__ import annotations

from promptsmith.models import Domain, QualityWeights
from promptsmith.rules.base import (
    DetectionPattern,
    DomainConfig,
    DomainExample,
    Enhancement,
    EnhancementGroup,
    FocusAddendum,
    PatternLibrary,
    RuleCategory,
    SystemPromptTemplate,
    bullet_block,
    static_rules,
)

VAGUE = [
    (
        r"bonit[oa]\s+(brand|marca|campaign|campaña)",
        "compelling and memorable brand identity",
        "Replace vague brand terminology with professional language",
    ),
    (
        r"buen[oa]\s+(copy|texto|content)",
        "engaging, conversion-focused copy",
        "Enhance vague copy requests with marketing objectives",
    ),
    (
        r"nice\s+(logo|design)",
        "professional, brand-aligned visual identity",
        "Specify design quality and brand consistency",
    ),
    (
        r"attract\s+(people|gente|customers)",
        "engage target audience and drive conversion",
        "Be specific about marketing objectives",
    ),
    (
        r"viral|popular",
        "shareable and engaging",
        "Use realistic marketing terms instead of unrealistic goals",
    ),
    (
        r"catchy\s+(slogan|tagline)",
        "memorable slogan that reinforces brand values",
        "Connect slogans to brand strategy",
    ),
]

STRUCTURE = [
    (
        r"^(make|create|design)\s+(brand|logo|campaign)",
        "Develop a comprehensive brand strategy for",
        "Focus on strategic approach rather than just creation",
    ),
    (
        r"^(need|want|require)\s+(marketing|branding)",
        "Seeking strategic marketing consultation for",
        "Position as professional consultation",
    ),
    (
        r"sell\s+(more|products|stuff)",
        "increase conversion rates and customer engagement",
        "Use professional marketing terminology",
    ),
    (
        r"get\s+(famous|known)",
        "build brand awareness and market recognition",
        "Use measurable marketing objectives",
    ),
]

AUDIENCE = EnhancementGroup(
    name="audience",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=(
        Enhancement(
            id="add_audience_guidance",
            trigger=r"brand|marketing|campaign",
            unless=r"audience|target|demographic",
            text=bullet_block(
                "Target Audience Considerations:",
                [
                    "Define primary demographic (age, income, lifestyle)",
                    "Identify key pain points and motivations",
                    "Specify preferred communication channels",
                    "Consider psychographic characteristics and values",
                ],
            ),
            note="Added comprehensive target audience framework",
        ),
        Enhancement(
            id="add_brand_voice_guidance",
            trigger=r"brand|messaging|copy",
            unless=r"voice|tone|personality",
            text=bullet_block(
                "Brand Voice Guidelines:",
                [
                    "Define brand personality traits (professional, friendly, innovative, etc.)",
                    "Specify emotional tone and communication style",
                    "Align voice with target audience preferences",
                    "Ensure consistency across all touchpoints",
                ],
            ),
            note="Added brand voice and personality framework",
        ),
        Enhancement(
            id="add_competitive_positioning",
            trigger=r"brand|product|launch",
            unless=r"competitor|differentiat|position",
            text=bullet_block(
                "Competitive Positioning:",
                [
                    "Identify key competitors and their messaging",
                    "Define unique value proposition and differentiators",
                    "Highlight competitive advantages",
                    "Position against market alternatives",
                ],
            ),
            note="Added competitive analysis and positioning",
        ),
    ),
)

STRATEGY = EnhancementGroup(
    name="strategy",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=(
        Enhancement(
            id="add_campaign_objectives",
            trigger=r"campaign|marketing",
            unless=r"objective|goal|metric|kpi",
            text=bullet_block(
                "Campaign Objectives:",
                [
                    "Define primary goals (awareness, conversion, retention)",
                    "Specify measurable KPIs and success metrics",
                    "Set realistic timelines and budget considerations",
                    "Plan measurement and optimization strategies",
                ],
            ),
            note="Added strategic objectives and measurement framework",
        ),
        Enhancement(
            id="add_channel_strategy",
            trigger=r"marketing|campaign|content",
            unless=r"channel|platform|distribution",
            text=bullet_block(
                "Channel Strategy:",
                [
                    "Select appropriate marketing channels (social, email, paid, organic)",
                    "Tailor content for each platform's best practices",
                    "Consider cross-channel integration and consistency",
                    "Plan content distribution and engagement tactics",
                ],
            ),
            note="Added multi-channel distribution strategy",
        ),
        Enhancement(
            id="add_brand_guidelines",
            trigger=r"brand|visual|design",
            unless=r"guideline|standard|consistency",
            text=bullet_block(
                "Brand Guidelines:",
                [
                    "Establish visual identity standards (colors, fonts, imagery)",
                    "Define logo usage and brand asset requirements",
                    "Ensure consistency across all marketing materials",
                    "Create scalable brand system for future growth",
                ],
            ),
            note="Added comprehensive brand guidelines framework",
        ),
    ),
)

# name -> (trigger, audience, tone, messaging)
INDUSTRIES = {
    "tech": (
        r"\b(tech|technology|software|app)\b",
        "tech-savvy early adopters and enterprise decision makers",
        "innovative, forward-thinking, and solution-oriented",
        "focus on efficiency, innovation, and technological advancement",
    ),
    "health": (
        r"\b(health|medical|wellness|fitness)\b",
        "health-conscious consumers and healthcare professionals",
        "trustworthy, empathetic, and science-backed",
        "emphasize safety, efficacy, and professional credibility",
    ),
    "luxury": (
        r"\b(luxury|premium|high.end)\b",
        "affluent consumers who value exclusivity and quality",
        "sophisticated, exclusive, and aspirational",
        "highlight craftsmanship, heritage, and exclusive benefits",
    ),
}

INDUSTRY = EnhancementGroup(
    name="industry",
    category=RuleCategory.BEST_PRACTICES,
    enhancements=tuple(
        Enhancement(
            id=f"industry_specific_{name}",
            trigger=trigger,
            text=bullet_block(
                f"{name.upper()} Industry Considerations:",
                [
                    f"Target Audience: {audience}",
                    f"Brand Tone: {tone}",
                    f"Key Messaging: {messaging}",
                ],
            ),
            note=f"Added {name} industry-specific branding guidance",
        )
        for name, (trigger, audience, tone, messaging) in INDUSTRIES.items()
    ),
)

SYSTEM_PROMPT = """You are a senior brand strategist and marketing expert with extensive experience in:

**Brand Strategy & Positioning:**
- Brand identity development and visual design systems
- Competitive analysis and market positioning
- Brand voice, personality, and messaging frameworks
- Customer journey mapping and touchpoint optimization

**Marketing & Communications:**
- Integrated marketing campaign development
- Content strategy across multiple channels and platforms
- Audience segmentation and persona development
- Conversion optimization and performance marketing

**Creative Direction:**
- Visual identity design and brand asset creation
- Copy writing and messaging that drives action
- Campaign creative development and execution
- Brand consistency and guideline enforcement

**Business Acumen:**
- Go-to-market strategy and product positioning
- Customer acquisition and retention strategies
- Brand metrics, KPIs, and ROI measurement
- Crisis communication and reputation management

Always provide:
- Strategic thinking that connects creative to business objectives
- Audience-first approach with clear demographic targeting
- Measurable goals and success metrics for all recommendations
- Brand consistency guidelines and implementation standards
- Competitive differentiation and unique positioning
- Scalable solutions that grow with the business

Consider industry-specific best practices, cultural sensitivities, and current market trends in all recommendations."""

EXAMPLES = (
    DomainExample(
        title="Vague Brand Request Enhancement",
        before="make nice brand for my business that attracts people",
        after=(
            "Develop a comprehensive brand strategy that:\n"
            "- Creates compelling brand identity aligned with target audience values\n"
            "- Engages specific demographic with measurable conversion goals\n"
            "- Differentiates from competitors through unique positioning\n"
            "- Includes brand voice guidelines and visual identity standards"
        ),
        explanation="Transformed generic brand request into strategic framework with audience focus",
        score_improvement=0.72,
    ),
    DomainExample(
        title="Campaign Strategy Enhancement",
        before="create viral marketing campaign for product launch",
        after=(
            "Develop a strategic product launch campaign that:\n"
            "- Creates shareable and engaging content with realistic growth targets\n"
            "- Builds brand awareness and drives measurable conversion\n"
            "- Targets specific audience segments with tailored messaging\n"
            "- Utilizes appropriate channels for maximum reach and impact"
        ),
        explanation="Enhanced unrealistic viral goal with strategic campaign framework",
        score_improvement=0.68,
    ),
)


def build_branding_config() -> DomainConfig:
    domain = Domain.BRANDING
    rules = static_rules(domain, RuleCategory.VAGUE_TERMS, VAGUE, priority=8) + static_rules(
        domain, RuleCategory.STRUCTURE, STRUCTURE, priority=7
    )
    return DomainConfig(
        domain=domain,
        description="Brand strategy, marketing campaigns, and creative communications",
        library=PatternLibrary(
            domain=domain,
            rules=rules,
            groups=(AUDIENCE, STRATEGY, INDUSTRY),
            notes={
                RuleCategory.VAGUE_TERMS: 'Enhanced terminology: "{pattern}" → "{replacement}"',
                RuleCategory.STRUCTURE: "Improved approach: {description}",
            },
        ),
        detection_patterns=(
            DetectionPattern(
                "brand_identity", r"\b(brand|identity|logo|visual)\b", "Brand identity and visual design patterns"
            ),
            DetectionPattern(
                "marketing_campaign",
                r"\b(campaign|marketing|promotion|advertising)\b",
                "Marketing campaign development patterns",
            ),
            DetectionPattern(
                "content_strategy",
                r"\b(content|copy|messaging|communication)\b",
                "Content and messaging strategy patterns",
            ),
            DetectionPattern(
                "audience_targeting",
                r"\b(audience|target|customer|demographic)\b",
                "Audience analysis and targeting patterns",
            ),
        ),
        quality_weights=QualityWeights(clarity=0.25, specificity=0.3, structure=0.25, completeness=0.2),
        system_prompt=SystemPromptTemplate(
            base=SYSTEM_PROMPT,
            complexity_note=(
                "Note: This is a complex branding challenge. Provide comprehensive strategic "
                "framework with phased implementation approach."
            ),
            focus=FocusAddendum(
                source="domain_hints",
                keywords=frozenset({"tech"}),
                text=(
                    "Tech Industry Focus: Emphasize innovation, efficiency, and forward-thinking "
                    "messaging that resonates with tech-savvy audiences."
                ),
            ),
        ),
        examples=EXAMPLES,
    )
