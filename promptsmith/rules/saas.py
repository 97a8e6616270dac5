"""SaaS product, architecture and business model rules."""

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
        r"bonit[oa]\s+(app|aplicación|application)",
        "user-friendly, scalable SaaS application",
        "Replace vague app terminology with professional SaaS language",
    ),
    (
        r"buen[oa]\s+(feature|función|característica)",
        "user-centric feature that solves specific pain points",
        "Focus features on user value and problem-solving",
    ),
    (
        r"cool\s+(dashboard|panel)",
        "intuitive dashboard with actionable insights",
        "Specify dashboard value and usability",
    ),
    (
        r"easy\s+(interface|ui|interfaz)",
        "intuitive user interface with minimal learning curve",
        "Specify usability characteristics",
    ),
    (
        r"simple\s+(workflow|proceso)",
        "streamlined workflow that reduces user friction",
        "Focus on efficiency and user experience",
    ),
    (
        r"powerful\s+(tool|herramienta)",
        "comprehensive solution with advanced capabilities",
        "Specify tool capabilities and scope",
    ),
]

# "{{target_users}}" is a placeholder left for the caller to fill
STRUCTURE = [
    (
        r"^(build|create|make)\s+(app|software|platform)",
        "Design and develop a SaaS platform that",
        "Frame as comprehensive SaaS development",
    ),
    (
        r"^(need|want|require)\s+(system|sistema)",
        "Seeking development of a scalable system that",
        "Emphasize scalability and system design",
    ),
    (
        r"for\s+(users|customers|clients)",
        "that empowers {{target_users}} to",
        "Focus on user empowerment and value creation",
    ),
    (
        r"manage\s+(data|información)",
        "efficiently organize and leverage business data",
        "Specify data value and business impact",
    ),
]


def _blocks(prefix: str, heading, note, entries, category, name, extra):
    enhancements = [
        Enhancement(
            id=f"{prefix}_{key}",
            trigger=trigger,
            text=bullet_block(heading(key), items),
            note=note(key),
        )
        for key, trigger, items in entries
    ]
    enhancements.append(extra)
    return EnhancementGroup(name=name, category=category, enhancements=tuple(enhancements))


UX = _blocks(
    "ux",
    lambda key: "User Experience Considerations:",
    lambda key: f"Added {key} user experience framework",
    [
        (
            "user_experience",
            r"ux|user\s+experience|interfaz",
            [
                "Conduct user research and persona development",
                "Design mobile-responsive interface",
                "Implement accessibility standards (WCAG 2.1)",
                "Create intuitive navigation and information architecture",
                "Plan user onboarding and feature discovery flow",
            ],
        ),
        (
            "dashboard",
            r"dashboard|panel|analytics",
            [
                "Design customizable dashboard layouts",
                "Implement real-time data visualization",
                "Provide actionable insights and KPI tracking",
                "Enable data export and reporting capabilities",
                "Create role-based access and permissions",
            ],
        ),
    ],
    RuleCategory.CONTEXTUAL_ENHANCEMENT,
    "user_experience",
    Enhancement(
        id="add_core_ux_principles",
        trigger=r"app|platform|software|interface",
        unless=r"user\s+experience|usability",
        text=bullet_block(
            "Core UX Principles:",
            [
                "Intuitive navigation with consistent design patterns",
                "Mobile-responsive design for cross-device compatibility",
                "Accessibility compliance (WCAG 2.1 standards)",
                "Performance optimization for fast loading times",
                "Clear visual hierarchy and information architecture",
            ],
        ),
        note="Added fundamental UX design principles",
    ),
)

ARCHITECTURE = _blocks(
    "architecture",
    lambda key: f"Technical Architecture - {key.upper()}:",
    lambda key: f"Added {key} technical architecture specifications",
    [
        (
            "scalability",
            r"scalable|scale|growth",
            [
                "Microservices architecture for independent scaling",
                "Auto-scaling infrastructure (AWS/GCP/Azure)",
                "Database optimization and caching strategies",
                "CDN integration for global performance",
                "Load balancing and redundancy planning",
            ],
        ),
        (
            "integration",
            r"integration|api|connect",
            [
                "RESTful API design with comprehensive documentation",
                "Webhook support for real-time notifications",
                "Third-party service integrations (payment, email, etc.)",
                "Data import/export capabilities",
                "Single Sign-On (SSO) implementation",
            ],
        ),
        (
            "security",
            r"security|secure|protection",
            [
                "End-to-end encryption for data at rest and in transit",
                "Multi-factor authentication (MFA)",
                "Role-based access control (RBAC)",
                "Security audit logging and monitoring",
                "Compliance with relevant standards (GDPR, HIPAA, etc.)",
            ],
        ),
    ],
    RuleCategory.CONTEXTUAL_ENHANCEMENT,
    "technical_architecture",
    Enhancement(
        id="add_technical_foundation",
        trigger=r"platform|system|software|saas",
        unless=r"architecture|infrastructure",
        text=bullet_block(
            "Technical Foundation:",
            [
                "Cloud-native architecture for scalability and reliability",
                "Microservices design for modular development and deployment",
                "Database design optimized for SaaS multi-tenancy",
                "API-first development for integration capabilities",
                "Monitoring and logging for operational excellence",
            ],
        ),
        note="Added comprehensive technical architecture framework",
    ),
)

BUSINESS = _blocks(
    "business",
    lambda key: f"Business Strategy - {key.upper()}:",
    lambda key: f"Added {key} business strategy considerations",
    [
        (
            "pricing",
            r"subscription|pricing|monetization",
            [
                "Tiered pricing strategy with clear value differentiation",
                "Freemium model considerations and conversion tactics",
                "Usage-based billing for scalable pricing",
                "Annual vs monthly subscription incentives",
                "Enterprise pricing and custom solutions",
            ],
        ),
        (
            "retention",
            r"customer|retention|churn",
            [
                "Customer lifecycle management and engagement",
                "Onboarding optimization and time-to-value",
                "In-app help and customer support integration",
                "Feature adoption tracking and user guidance",
                "Customer feedback loops and product iteration",
            ],
        ),
    ],
    RuleCategory.BEST_PRACTICES,
    "business_model",
    Enhancement(
        id="add_saas_business_model",
        trigger=r"saas|platform|subscription|business",
        unless=r"revenue|pricing|customer",
        text=bullet_block(
            "SaaS Business Model:",
            [
                "Value-based pricing strategy with clear tier differentiation",
                "Customer acquisition and retention optimization",
                "Product-led growth through freemium or trial experiences",
                "Metrics tracking for MRR, churn, and customer lifetime value",
                "Scalable customer support and success programs",
            ],
        ),
        note="Added comprehensive SaaS business strategy framework",
    ),
)

SYSTEM_PROMPT = """You are a senior product manager and SaaS architect with extensive experience in:

**Product Strategy & Development:**
- SaaS product development lifecycle and go-to-market strategies
- User research, persona development, and customer journey mapping
- Feature prioritization using frameworks like RICE, Kano, and Jobs-to-be-Done
- Product-market fit validation and growth optimization

**Technical Architecture:**
- Cloud-native, scalable SaaS architecture design
- Microservices, APIs, and integration best practices
- Database design for multi-tenant SaaS applications
- Security, compliance, and data privacy implementation

**User Experience & Design:**
- UX/UI design principles for SaaS applications
- Mobile-responsive and accessible interface design
- Dashboard design and data visualization best practices
- User onboarding optimization and feature adoption

**Business & Operations:**
- SaaS business models, pricing strategies, and revenue optimization
- Customer acquisition, retention, and expansion strategies
- SaaS metrics (MRR, churn, CAC, LTV) and KPI tracking
- Operational scaling and customer success programs

Always provide:
- User-centric solutions that solve real business problems
- Scalable technical architecture suitable for growth
- Clear business value propositions and success metrics
- Comprehensive UX considerations for optimal user adoption
- Security and compliance best practices
- Integration capabilities for ecosystem connectivity

Consider market positioning, competitive landscape, and long-term product strategy in all recommendations."""

EXAMPLES = (
    DomainExample(
        title="Vague App Request Enhancement",
        before="build bonita app for users to manage their stuff easily",
        after=(
            "Design and develop a user-friendly, scalable SaaS application that empowers "
            "{{target_users}} to efficiently organize and leverage business data through "
            "streamlined workflow that reduces user friction."
        ),
        explanation="Transformed vague app request into comprehensive SaaS development framework",
        score_improvement=0.75,
    ),
    DomainExample(
        title="Dashboard Enhancement",
        before="create cool dashboard with good features for data management",
        after=(
            "Design and develop an intuitive dashboard with actionable insights that empowers "
            "users to efficiently organize and leverage business data."
        ),
        explanation="Enhanced generic dashboard request with specific UX and technical requirements",
        score_improvement=0.69,
    ),
)


def build_saas_config() -> DomainConfig:
    domain = Domain.SAAS
    rules = static_rules(domain, RuleCategory.VAGUE_TERMS, VAGUE, priority=8) + static_rules(
        domain, RuleCategory.STRUCTURE, STRUCTURE, priority=7
    )
    return DomainConfig(
        domain=domain,
        description="Software as a Service development, product management, and business strategy",
        library=PatternLibrary(
            domain=domain,
            rules=rules,
            groups=(UX, ARCHITECTURE, BUSINESS),
            notes={
                RuleCategory.VAGUE_TERMS: 'Enhanced SaaS terminology: "{pattern}" → "{replacement}"',
                RuleCategory.STRUCTURE: "Improved SaaS approach: {description}",
            },
        ),
        detection_patterns=(
            DetectionPattern(
                "product_development",
                r"\b(product|feature|development|build|create)\b",
                "Product development and feature creation patterns",
            ),
            DetectionPattern(
                "user_experience",
                r"\b(user|ux|ui|interface|dashboard|experience)\b",
                "User experience and interface design patterns",
            ),
            DetectionPattern(
                "business_model",
                r"\b(business|revenue|pricing|subscription|customer)\b",
                "SaaS business model and strategy patterns",
            ),
            DetectionPattern(
                "technical_architecture",
                r"\b(architecture|scalable|api|integration|platform)\b",
                "Technical architecture and scalability patterns",
            ),
        ),
        quality_weights=QualityWeights(clarity=0.25, specificity=0.3, structure=0.25, completeness=0.2),
        system_prompt=SystemPromptTemplate(
            base=SYSTEM_PROMPT,
            complexity_note=(
                "Note: This is a complex SaaS development project. Provide comprehensive architecture "
                "planning with phased development approach and scalability considerations."
            ),
            focus=FocusAddendum(
                source="technical_terms",
                keywords=frozenset({"user", "customer", "client"}),
                text=(
                    "User Focus: Prioritize user experience, customer value, and adoption "
                    "optimization in all solution recommendations."
                ),
            ),
        ),
        examples=EXAMPLES,
    )
