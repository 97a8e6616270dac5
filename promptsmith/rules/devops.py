"""Infrastructure, deployment and reliability engineering rules."""

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
        r"bonit[oa]\s+(deploy|deployment|despliegue)",
        "automated, reliable deployment pipeline",
        "Replace vague deployment terminology with professional DevOps language",
    ),
    (
        r"buen[oa]\s+(pipeline|flujo)",
        "efficient CI/CD pipeline with comprehensive testing",
        "Specify pipeline quality and testing requirements",
    ),
    (
        r"fast\s+(deploy|build|compilation)",
        "optimized deployment process with minimal downtime",
        "Focus on deployment efficiency and reliability",
    ),
    (
        r"secure\s+(server|servidor)",
        "hardened infrastructure with security best practices",
        "Specify security implementation approach",
    ),
    (
        r"scalable\s+(infrastructure|infraestructura)",
        "auto-scaling infrastructure with load balancing",
        "Define scalability mechanisms",
    ),
    (
        r"monitoring\s+(system|sistema)",
        "comprehensive observability stack with alerting",
        "Specify monitoring scope and capabilities",
    ),
]

STRUCTURE = [
    (
        r"^(setup|configure|create)\s+(server|infrastructure)",
        "Design and provision cloud infrastructure for",
        "Frame as comprehensive infrastructure design",
    ),
    (
        r"^(automate|automatizar)\s+(deploy|deployment)",
        "Implement automated deployment pipeline for",
        "Focus on automation and pipeline implementation",
    ),
    (
        r"^(monitor|monitoring)\s+(app|application)",
        "Establish comprehensive observability for",
        "Emphasize complete monitoring strategy",
    ),
    (
        r"docker\s+(container|contenedor)",
        "containerized application with Docker orchestration",
        "Specify containerization strategy",
    ),
]

# provider -> (core services, architecture patterns, monitoring)
CLOUD_PROVIDERS = {
    "aws": (
        ["EC2", "ECS/EKS", "RDS", "S3", "CloudWatch", "IAM", "VPC", "Route53"],
        ["Auto Scaling Groups", "Application Load Balancer", "CloudFormation/CDK"],
        "CloudWatch with custom metrics and dashboards",
    ),
    "gcp": (
        ["Compute Engine", "GKE", "Cloud SQL", "Cloud Storage", "Stackdriver"],
        ["Managed Instance Groups", "Cloud Load Balancing", "Deployment Manager"],
        "Google Cloud Monitoring with custom dashboards",
    ),
    "azure": (
        ["Virtual Machines", "AKS", "Azure SQL", "Blob Storage", "Azure Monitor"],
        ["Virtual Machine Scale Sets", "Application Gateway", "ARM Templates"],
        "Azure Monitor with Application Insights",
    ),
}

CLOUD = EnhancementGroup(
    name="cloud_providers",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=tuple(
        Enhancement(
            id=f"cloud_provider_{provider}",
            trigger=rf"\b{provider}\b",
            text=bullet_block(
                f"{provider.upper()} Cloud Services:",
                [
                    f"Core Services: {', '.join(services)}",
                    f"Architecture Patterns: {', '.join(patterns)}",
                    f"Monitoring: {monitoring}",
                ],
            ),
            note=f"Added {provider.upper()} cloud-specific service recommendations",
        )
        for provider, (services, patterns, monitoring) in CLOUD_PROVIDERS.items()
    ),
)

CONTAINERS = EnhancementGroup(
    name="container_orchestration",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=(
        Enhancement(
            id="container_kubernetes",
            trigger=r"kubernetes|k8s|container",
            text=bullet_block(
                "Container Orchestration - KUBERNETES:",
                [
                    "Kubernetes cluster configuration with proper resource limits",
                    "Pod security policies and network policies",
                    "Horizontal Pod Autoscaler (HPA) for scaling",
                    "Ingress controllers and service mesh configuration",
                    "Persistent volume management and backup strategies",
                ],
            ),
            note="Added kubernetes container orchestration specifications",
        ),
        Enhancement(
            id="container_docker",
            trigger=r"docker|containerize",
            text=bullet_block(
                "Container Orchestration - DOCKER:",
                [
                    "Multi-stage Dockerfiles for optimized image sizes",
                    "Container security scanning and vulnerability assessment",
                    "Docker Compose for local development environments",
                    "Container registry management and image versioning",
                    "Health checks and graceful shutdown handling",
                ],
            ),
            note="Added docker container orchestration specifications",
        ),
    ),
)

CICD = EnhancementGroup(
    name="cicd",
    category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
    enhancements=(
        Enhancement(
            id="cicd_pipeline",
            trigger=r"ci/cd|pipeline|jenkins|github\s+actions",
            text=bullet_block(
                "CI/CD Pipeline Requirements:",
                [
                    "Automated testing stages (unit, integration, security)",
                    "Code quality gates and static analysis",
                    "Environment-specific deployment strategies",
                    "Rollback mechanisms and blue-green deployments",
                    "Pipeline monitoring and failure notifications",
                ],
            ),
            note="Added CI/CD pipeline requirements and best practices",
        ),
        Enhancement(
            id="cicd_build",
            trigger=r"build|compilation|artifact",
            text=bullet_block(
                "CI/CD Pipeline Requirements:",
                [
                    "Dependency caching for faster build times",
                    "Artifact versioning and storage strategies",
                    "Build optimization and parallel execution",
                    "Security scanning for dependencies and code",
                    "Build environment consistency and reproducibility",
                ],
            ),
            note="Added CI/CD pipeline requirements and best practices",
        ),
        Enhancement(
            id="add_devops_best_practices",
            trigger=r"deploy|pipeline|automation|devops",
            unless=r"testing|quality|monitoring",
            text=bullet_block(
                "DevOps Best Practices:",
                [
                    "Infrastructure as Code (IaC) with version control",
                    "Automated testing and quality gates",
                    "Configuration management and drift detection",
                    "Observability with metrics, logs, and traces",
                    "Incident response and post-mortem procedures",
                ],
            ),
            note="Added comprehensive DevOps methodology framework",
        ),
    ),
)

SECURITY = EnhancementGroup(
    name="security_compliance",
    category=RuleCategory.BEST_PRACTICES,
    enhancements=(
        Enhancement(
            id="security_compliance",
            trigger=r"security|secure|compliance",
            text=bullet_block(
                "Security & Compliance - SECURITY:",
                [
                    "Infrastructure as Code (IaC) security scanning",
                    "Secrets management with HashiCorp Vault or cloud-native solutions",
                    "Network security with firewalls and VPN access",
                    "Identity and Access Management (IAM) with least privilege",
                    "Compliance frameworks (SOC2, GDPR, HIPAA) implementation",
                ],
            ),
            note="Added security and compliance requirements",
        ),
        Enhancement(
            id="security_recovery",
            trigger=r"backup|disaster|recovery",
            text=bullet_block(
                "Security & Compliance - RECOVERY:",
                [
                    "Automated backup strategies with point-in-time recovery",
                    "Disaster recovery planning with RTO/RPO objectives",
                    "Cross-region replication and failover mechanisms",
                    "Backup validation and restoration testing procedures",
                    "Business continuity planning and incident response",
                ],
            ),
            note="Added backup and disaster recovery requirements",
        ),
        Enhancement(
            id="add_security_considerations",
            trigger=r"infrastructure|server|deploy|production",
            unless=r"security|secure|compliance",
            text=bullet_block(
                "Security Considerations:",
                [
                    "Network security with proper firewall configurations",
                    "Identity and Access Management (IAM) with principle of least privilege",
                    "Encryption at rest and in transit",
                    "Regular security audits and vulnerability assessments",
                    "Compliance with relevant industry standards",
                ],
            ),
            note="Added comprehensive security and compliance framework",
        ),
    ),
)

SYSTEM_PROMPT = """You are a senior DevOps engineer and Site Reliability Engineer with extensive experience in:

**Infrastructure & Cloud:**
- Cloud-native architecture design (AWS, GCP, Azure)
- Infrastructure as Code (Terraform, CloudFormation, Pulumi)
- Container orchestration with Kubernetes and Docker
- Auto-scaling, load balancing, and high availability design

**CI/CD & Automation:**
- Continuous integration and deployment pipeline design
- Build automation, artifact management, and release strategies
- Configuration management (Ansible, Chef, Puppet)
- GitOps workflows and deployment automation

**Monitoring & Observability:**
- Comprehensive monitoring stack implementation (Prometheus, Grafana, ELK)
- Application Performance Monitoring (APM) and distributed tracing
- Log aggregation, analysis, and alerting strategies
- SLA/SLO definition and incident response procedures

**Security & Compliance:**
- Infrastructure security hardening and compliance frameworks
- Secrets management and identity access management
- Security scanning, vulnerability assessment, and remediation
- Disaster recovery planning and business continuity

Always provide:
- Scalable, resilient infrastructure designs
- Automated solutions that reduce manual intervention
- Security-first approach with defense in depth
- Comprehensive monitoring and alerting strategies
- Cost-optimized solutions with performance considerations
- Detailed implementation steps and best practices

Consider operational excellence, reliability, performance efficiency, security, and cost optimization in all recommendations."""

EXAMPLES = (
    DomainExample(
        title="Vague Deployment Request Enhancement",
        before="setup bonita deployment for my app that works fast",
        after=(
            "Design and provision cloud infrastructure for automated, reliable deployment pipeline "
            "with optimized deployment process and minimal downtime."
        ),
        explanation="Transformed vague deployment request into comprehensive DevOps implementation framework",
        score_improvement=0.82,
    ),
    DomainExample(
        title="Container Orchestration Enhancement",
        before="use docker and kubernetes for scalable infrastructure",
        after=(
            "Implement containerized application with Docker orchestration using comprehensive "
            "Kubernetes cluster configuration."
        ),
        explanation="Enhanced generic container request with specific Kubernetes and Docker implementation requirements",
        score_improvement=0.76,
    ),
)


def build_devops_config() -> DomainConfig:
    domain = Domain.DEVOPS
    rules = static_rules(domain, RuleCategory.VAGUE_TERMS, VAGUE, priority=8) + static_rules(
        domain, RuleCategory.STRUCTURE, STRUCTURE, priority=7
    )
    return DomainConfig(
        domain=domain,
        description="DevOps, infrastructure, deployment automation, and site reliability engineering",
        library=PatternLibrary(
            domain=domain,
            rules=rules,
            groups=(CLOUD, CONTAINERS, CICD, SECURITY),
            notes={
                RuleCategory.VAGUE_TERMS: 'Enhanced DevOps terminology: "{pattern}" → "{replacement}"',
                RuleCategory.STRUCTURE: "Improved DevOps approach: {description}",
            },
        ),
        detection_patterns=(
            DetectionPattern(
                "infrastructure_design",
                r"\b(infrastructure|server|cloud|architecture)\b",
                "Infrastructure design and architecture patterns",
            ),
            DetectionPattern(
                "deployment_automation",
                r"\b(deploy|deployment|pipeline|automation|ci/cd)\b",
                "Deployment and automation pipeline patterns",
            ),
            DetectionPattern(
                "container_orchestration",
                r"\b(docker|kubernetes|container|orchestration)\b",
                "Container and orchestration technology patterns",
            ),
            DetectionPattern(
                "monitoring_observability",
                r"\b(monitor|monitoring|observability|metrics|logging)\b",
                "Monitoring and observability implementation patterns",
            ),
        ),
        quality_weights=QualityWeights(clarity=0.2, specificity=0.4, structure=0.25, completeness=0.15),
        system_prompt=SystemPromptTemplate(
            base=SYSTEM_PROMPT,
            complexity_note=(
                "Note: This is a complex infrastructure project. Provide comprehensive architecture "
                "design with phased implementation approach and scalability planning."
            ),
            focus=FocusAddendum(
                source="technical_terms",
                keywords=frozenset({"aws", "azure", "gcp", "cloud"}),
                text=(
                    "Cloud Focus: Emphasize cloud-native best practices, managed services optimization, "
                    "and multi-region considerations for high availability."
                ),
            ),
        ),
        examples=EXAMPLES,
    )
