"""Behaviour of the built-in domain rule libraries."""

from __future__ import annotations

import pytest

from promptsmith.models import AnalysisResult, Domain
from promptsmith.rules import BUILTIN_CONFIGS


def test_sql_vague_spanish_table_request(registry):
    result = registry.apply_domain_rules("hazme una bonita tabla para usuarios", Domain.SQL)

    assert result.refined.startswith("Generate a database schema for")
    assert "well-structured, normalized database table" in result.refined
    assert result.rules_applied
    assert result.rules_applied[0].startswith("vague_")
    assert "structure_Convert command to professional request" in result.rules_applied
    assert "add_sample_data_request" in result.rules_applied
    assert "add_data_type_specs" in result.rules_applied
    assert "add_naming_conventions" in result.rules_applied
    # "normalized" already covers normalization guidance
    assert "add_normalization_guidance" not in result.rules_applied


def test_enhancement_appends_once_per_application(registry):
    result = registry.apply_domain_rules("table table schema", Domain.SQL)
    assert result.rules_applied.count("add_sample_data_request") == 1
    assert result.rules_applied.count("add_data_type_specs") == 1
    assert result.refined.count("Please include sample data (5-10 rows)") == 1
    assert result.refined.count("Specify appropriate data types for each column") == 1


def test_sql_vague_note_quotes_pattern_and_replacement(registry):
    result = registry.apply_domain_rules("una buena query", Domain.SQL)
    assert any(
        note.startswith("Replaced vague terminology:") and "optimized SQL query with proper indexing" in note
        for note in result.improvements
    )


def test_sql_terminology_pluralizes_entities(registry):
    result = registry.apply_domain_rules("list every customer order", Domain.SQL)
    assert "customers" not in result.refined
    assert "list every users orders" in result.refined
    assert "technical_Standardize entity naming in table context" in result.rules_applied


def test_branding_viral_goal_is_made_realistic(registry):
    result = registry.apply_domain_rules("we want a viral campaign", Domain.BRANDING)
    assert "viral" not in result.refined.lower().split("\n\n")[0]
    assert "shareable and engaging" in result.refined
    assert "vague_Use realistic marketing terms instead of unrealistic goals" in result.rules_applied


def test_cine_genre_rule_uppercases_genre_and_adds_genre_block(registry):
    result = registry.apply_domain_rules("A story with action beats", Domain.CINE)
    assert "in the ACTION genre with elements of beats" in result.refined
    assert "structure_Properly categorize genre elements" in result.rules_applied
    assert "genre_specific_action" in result.rules_applied
    assert "ACTION Genre Specifications:" in result.refined


def test_devops_cloud_provider_block(registry):
    result = registry.apply_domain_rules("setup server on aws", Domain.DEVOPS)
    assert result.refined.startswith("Design and provision cloud infrastructure for")
    assert "cloud_provider_aws" in result.rules_applied
    assert "AWS Cloud Services:" in result.refined


def test_unknown_domain_uses_general_rules(registry):
    result = registry.apply_domain_rules("make it nice", "not-a-domain")
    assert result.refined == "Make it well-crafted."


@pytest.mark.parametrize("build", BUILTIN_CONFIGS)
def test_builtin_weights_sum_to_one(build):
    config = build()
    assert config.quality_weights.total() == pytest.approx(1.0, abs=1e-9)


@pytest.mark.parametrize("build", BUILTIN_CONFIGS)
def test_builtin_rule_ids_are_unique(build):
    config = build()
    ids = [r.id for r in config.library.rules]
    ids += [e.id for g in config.library.groups for e in g.enhancements]
    assert len(ids) == len(set(ids))


def test_system_prompt_variants(registry):
    base = registry.generate_system_prompt(Domain.SQL)
    assert "senior database architect" in base

    complex_prompt = registry.generate_system_prompt(Domain.SQL, AnalysisResult(complexity=0.9))
    assert complex_prompt.startswith(base)
    assert "complex request" in complex_prompt

    with_context = registry.generate_system_prompt(Domain.SQL, AnalysisResult(complexity=0.9), "PostgreSQL 16")
    assert with_context.endswith("Additional Context: PostgreSQL 16")
    assert "complex request" not in with_context


def test_unknown_domain_system_prompt_is_general(registry):
    assert registry.generate_system_prompt("???") == registry.generate_system_prompt(Domain.GENERAL)
