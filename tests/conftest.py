from __future__ import annotations

import pytest

from promptsmith.analyzer import PromptAnalyzer
from promptsmith.config import Settings
from promptsmith.registry import DomainRegistry, build_default_registry
from promptsmith.scorer import QualityScorer


@pytest.fixture(scope="session")
def registry() -> DomainRegistry:
    return build_default_registry(Settings())


@pytest.fixture(scope="session")
def analyzer() -> PromptAnalyzer:
    return PromptAnalyzer()


@pytest.fixture
def scorer(registry) -> QualityScorer:
    return QualityScorer(registry)
