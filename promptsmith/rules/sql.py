"""Database design and SQL query rules."""

from __future__ import annotations

from promptsmith.models import Domain, QualityWeights
from promptsmith.rules.base import (
    DetectionPattern,
    DomainConfig,
    DomainExample,
    Enhancement,
    EnhancementGroup,
    PatternLibrary,
    RuleCategory,
    SystemPromptTemplate,
    static_rules,
)

VAGUE = [
    (
        r"bonit[oa]s?\s+(tabla[s]?|table[s]?)",
        "well-structured, normalized database table",
        'Replace vague Spanish "bonita tabla" with professional SQL terminology',
    ),
    (
        r"buen[oa]s?\s+(query|consulta)",
        "optimized SQL query with proper indexing",
        'Enhance vague "buena query" with performance considerations',
    ),
    (
        r"mal[oa]\s+(query|consulta)",
        "inefficient query that needs optimization",
        "Clarify what makes a query problematic",
    ),
    (
        r"tabla[s]?\s+sql",
        "database table schema",
        'Remove redundant "SQL" when referring to tables',
    ),
    (
        r"bd|base\s+de\s+datos",
        "relational database",
        "Use proper English database terminology",
    ),
    (
        r"hacer\s+(query|consulta)",
        "execute SQL query",
        "Use proper SQL action verbs",
    ),
]

STRUCTURE = [
    (r"^(hazme|dame|necesito)", "Generate a database schema for", "Convert command to professional request"),
    (
        r"^(create|make|build)\s+table",
        "Design a database table",
        "Use design-oriented language for better results",
    ),
    (r"con\s+join", "including appropriate JOIN operations", "Clarify JOIN requirements"),
    (
        r"optimizad[oa]",
        "with performance optimizations including indexes",
        "Specify optimization techniques",
    ),
    (
        r"fast\s+query",
        "performance-optimized query with appropriate indexes",
        "Specify how to achieve query performance",
    ),
]

# Entity names are pluralized the way table names are written
TERMINOLOGY = [
    (r"\b(user|customer|client)\b", "users", "Standardize entity naming in table context"),
    (r"\b(product|item)\b", "products", "Use plural form for table names"),
    (r"\b(order|pedido)\b", "orders", "Handle Spanish/English order terminology"),
]

CONTEXTUAL = EnhancementGroup(
    name="contextual",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=(
        Enhancement(
            id="add_sample_data_request",
            trigger=r"\b(table|schema)\b",
            unless=r"sample|example",
            text="Please include sample data (5-10 rows) to illustrate the table structure.",
            note="Added request for sample data",
        ),
        Enhancement(
            id="add_index_considerations",
            trigger=r"\b(performance|fast|slow|optimize)\b",
            unless=r"index",
            text="Consider appropriate indexes for performance optimization.",
            note="Added indexing considerations",
        ),
        Enhancement(
            id="add_relationship_specs",
            trigger=r"\b(join|relationship|foreign|key)\b",
            unless=r"constraint",
            text="Include foreign key constraints and relationship definitions.",
            note="Added relationship specifications",
        ),
        Enhancement(
            id="add_data_type_specs",
            trigger=r"\b(create|table|schema)\b",
            unless=r"data\s+type",
            text="Specify appropriate data types for each column (VARCHAR, INTEGER, TIMESTAMP, etc.).",
            note="Added data type specifications",
        ),
    ),
)

BEST_PRACTICES = EnhancementGroup(
    name="best_practices",
    category=RuleCategory.BEST_PRACTICES,
    enhancements=(
        Enhancement(
            id="add_naming_conventions",
            trigger=r"\b(table|column|field)\b",
            unless=r"naming",
            text="Use snake_case naming convention for tables and columns.",
            note="Added naming convention guidance",
        ),
        Enhancement(
            id="add_comment_requirements",
            trigger=r"\b(complex|multiple|join|subquery)\b",
            text="Include explanatory comments for complex queries and table structures.",
            note="Added comment requirements",
        ),
        Enhancement(
            id="add_normalization_guidance",
            trigger=r"\b(database|schema|design|table)\b",
            unless=r"normal",
            text="Ensure proper database normalization (3NF) while considering performance trade-offs.",
            note="Added normalization considerations",
        ),
        Enhancement(
            id="add_migration_considerations",
            trigger=r"\b(production|deploy|migration|update)\b",
            text="Consider migration scripts and rollback procedures for production deployment.",
            note="Added migration and deployment considerations",
        ),
    ),
)

SYSTEM_PROMPT = """You are a senior database architect and SQL expert with extensive experience in:

**Database Design:**
- Relational database modeling and normalization (1NF, 2NF, 3NF, BCNF)
- Entity-relationship diagrams and schema design
- Data integrity, constraints, and referential integrity
- Performance optimization through proper indexing strategies

**SQL Expertise:**
- Advanced SQL query optimization and execution plans
- Complex joins, subqueries, window functions, and CTEs
- Database-specific features (PostgreSQL, MySQL, SQLite, SQL Server, Oracle)
- Query performance tuning and bottleneck identification

**Best Practices:**
- Secure coding practices and SQL injection prevention
- Database transaction management and ACID properties
- Backup strategies, disaster recovery, and high availability
- Code documentation and maintainable SQL structure

**Performance & Scalability:**
- Index design and query optimization
- Partitioning strategies for large datasets
- Caching mechanisms and materialized views
- Database monitoring and performance metrics

Always provide:
- Clean, well-formatted SQL with consistent indentation
- Descriptive comments explaining complex logic
- Proper naming conventions (snake_case for tables/columns)
- Appropriate data types and constraints
- Sample data when requested
- Performance considerations and optimization tips
- Security best practices

Consider the specific database engine when relevant, and explain trade-offs between different approaches."""

COMPLEXITY_NOTE = (
    "Note: This is a complex request. Break down the solution into logical components "
    "and provide step-by-step explanations."
)

EXAMPLES = (
    DomainExample(
        title="Vague Table Request Enhancement",
        before="hazme una bonita tabla para usuarios",
        after=(
            "Design a well-structured, normalized database table for users including:\n"
            "- Appropriate data types and constraints\n"
            "- Primary and foreign key relationships\n"
            "- Proper indexing for performance\n"
            "- Sample data (5-10 rows) to illustrate usage\n\n"
            "Use snake_case naming convention and include explanatory comments."
        ),
        explanation="Transformed vague Spanish request into specific technical requirements",
        score_improvement=0.65,
    ),
    DomainExample(
        title="Query Performance Enhancement",
        before="make fast query for sales data",
        after=(
            "Create a performance-optimized SQL query for sales data analysis including:\n"
            "- Appropriate JOIN operations for related tables\n"
            "- Proper indexing strategy for query performance\n"
            "- Query execution plan considerations\n"
            "- Sample output format\n\n"
            "Consider database-specific optimizations (PostgreSQL, MySQL, etc.) and include "
            "explanatory comments for complex logic."
        ),
        explanation="Enhanced generic performance request with specific optimization techniques",
        score_improvement=0.58,
    ),
)


def build_sql_config() -> DomainConfig:
    domain = Domain.SQL
    rules = (
        static_rules(domain, RuleCategory.VAGUE_TERMS, VAGUE, priority=8)
        + static_rules(domain, RuleCategory.STRUCTURE, STRUCTURE, priority=7)
        + static_rules(domain, RuleCategory.TERMINOLOGY, TERMINOLOGY, priority=6)
    )
    return DomainConfig(
        domain=domain,
        description="Database design, SQL queries, and database optimization",
        library=PatternLibrary(domain=domain, rules=rules, groups=(CONTEXTUAL, BEST_PRACTICES)),
        detection_patterns=(
            DetectionPattern("table_creation", r"\b(create|table|schema)\b", "Database table creation patterns"),
            DetectionPattern(
                "query_optimization",
                r"\b(select|query|performance|optimize)\b",
                "SQL query and performance patterns",
            ),
            DetectionPattern(
                "relationship_design",
                r"\b(join|foreign|key|relationship)\b",
                "Database relationship patterns",
            ),
        ),
        quality_weights=QualityWeights(clarity=0.3, specificity=0.35, structure=0.2, completeness=0.15),
        system_prompt=SystemPromptTemplate(base=SYSTEM_PROMPT, complexity_note=COMPLEXITY_NOTE),
        examples=EXAMPLES,
    )
