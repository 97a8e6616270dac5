"""Built-in domain rule libraries.

``BUILTIN_CONFIGS`` lists the builders in registration order, which is also the
tie-break order used by domain detection.
"""

from functools import lru_cache
from typing import Any, Dict

from promptsmith.models import UNIFORM_WEIGHTS, Domain, QualityWeights
from promptsmith.rules.base import (
    DomainConfig,
    DynamicReplacement,
    Enhancement,
    EnhancementGroup,
    GeneralRuleEngine,
    PatternLibrary,
    PatternRule,
    RuleCategory,
    RuleEngine,
    StaticReplacement,
)
from promptsmith.rules.branding import build_branding_config
from promptsmith.rules.cine import build_cine_config
from promptsmith.rules.devops import build_devops_config
from promptsmith.rules.general import build_general_config
from promptsmith.rules.saas import build_saas_config
from promptsmith.rules.sql import build_sql_config

BUILTIN_CONFIGS = (
    build_sql_config,
    build_branding_config,
    build_cine_config,
    build_saas_config,
    build_devops_config,
    build_general_config,
)


@lru_cache(maxsize=1)
def _weights_table() -> Dict[Domain, QualityWeights]:
    table: Dict[Domain, QualityWeights] = {}
    for builder in BUILTIN_CONFIGS:
        config = builder()
        table[config.domain] = config.quality_weights
    return table


def builtin_weights(domain: Any) -> QualityWeights:
    """Quality weights of the built-in config for ``domain``, uniform if unknown."""
    return _weights_table().get(Domain.parse(domain), UNIFORM_WEIGHTS)


__all__ = [
    "BUILTIN_CONFIGS",
    "DomainConfig",
    "DynamicReplacement",
    "Enhancement",
    "EnhancementGroup",
    "GeneralRuleEngine",
    "PatternLibrary",
    "PatternRule",
    "RuleCategory",
    "RuleEngine",
    "StaticReplacement",
    "builtin_weights",
]
