from __future__ import annotations

import logging

import pytest

from promptsmith.errors import ConfigurationError, InvalidInputError
from promptsmith.models import UNIFORM_WEIGHTS, Domain
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
    SystemPromptTemplate,
)
from promptsmith.rules.general import build_general_config


def _config(rules=(), groups=(), **library_kwargs) -> DomainConfig:
    return DomainConfig(
        domain=Domain.SAAS,
        description="test domain",
        library=PatternLibrary(domain=Domain.SAAS, rules=tuple(rules), groups=tuple(groups), **library_kwargs),
        detection_patterns=(),
        quality_weights=UNIFORM_WEIGHTS,
        system_prompt=SystemPromptTemplate(base="base prompt"),
    )


def _rule(rule_id, pattern, text, category=RuleCategory.VAGUE_TERMS, description="desc", priority=5):
    return PatternRule(
        id=rule_id,
        pattern=pattern,
        replacement=StaticReplacement(text),
        category=category,
        description=description,
        priority=priority,
    )


def _boom(match):
    raise RuntimeError("replacement exploded")


def test_substitution_replaces_every_match_case_insensitive():
    engine = RuleEngine(_config([_rule("r0", r"\bfoo\b", "bar", description="foo to bar")]))
    result = engine.apply("Foo and FOO and foo")
    assert result.refined == "bar and bar and bar"
    assert result.rules_applied == ("vague_foo to bar",)


def test_rule_not_recorded_when_nothing_matches():
    engine = RuleEngine(_config([_rule("r0", r"\bfoo\b", "bar")]))
    result = engine.apply("nothing to see here")
    assert result.refined == "nothing to see here"
    assert result.rules_applied == ()
    assert result.improvements == ()


def test_categories_run_in_fixed_order_regardless_of_declaration():
    rules = [
        _rule("t", r"beta", "gamma", RuleCategory.TERMINOLOGY, "beta to gamma"),
        _rule("s", r"alpha", "beta", RuleCategory.STRUCTURE, "alpha to beta"),
        _rule("v", r"start", "alpha", RuleCategory.VAGUE_TERMS, "start to alpha"),
    ]
    result = RuleEngine(_config(rules)).apply("start")
    assert result.refined == "gamma"
    assert result.rules_applied == (
        "vague_start to alpha",
        "structure_alpha to beta",
        "technical_beta to gamma",
    )


def test_declaration_order_wins_over_priority_by_default():
    rules = [
        _rule("low", r"cat", "dog", description="cat to dog", priority=1),
        _rule("high", r"cat", "cow", description="cat to cow", priority=9),
    ]
    result = RuleEngine(_config(rules)).apply("cat")
    assert result.refined == "dog"


def test_priority_sort_when_library_opts_in():
    rules = [
        _rule("low", r"cat", "dog", description="cat to dog", priority=1),
        _rule("high", r"cat", "cow", description="cat to cow", priority=9),
    ]
    result = RuleEngine(_config(rules, sort_by_priority=True)).apply("cat")
    assert result.refined == "cow"


def test_throwing_dynamic_replacement_is_skipped_and_logged(caplog):
    rules = [
        _rule("first", r"one", "uno", description="first"),
        PatternRule(
            id="broken",
            pattern=r"two",
            replacement=DynamicReplacement(_boom, "<boom>"),
            category=RuleCategory.VAGUE_TERMS,
            description="broken",
        ),
        _rule("third", r"three", "tres", RuleCategory.STRUCTURE, "third"),
    ]
    engine = RuleEngine(_config(rules))
    with caplog.at_level(logging.WARNING, logger="promptsmith.rules"):
        result = engine.apply("one two three")

    assert result.refined == "uno two tres"
    assert result.rules_applied == ("vague_first", "structure_third")
    assert any("broken" in record.getMessage() for record in caplog.records)


def test_dynamic_replacement_uses_match_groups():
    rule = PatternRule(
        id="genre",
        pattern=r"with\s+(action|drama)",
        replacement=DynamicReplacement(lambda m: f"in {m.group(1).upper()}", "in <GENRE>"),
        category=RuleCategory.STRUCTURE,
        description="genre",
    )
    result = RuleEngine(_config([rule])).apply("a film with drama")
    assert result.refined == "a film in DRAMA"


def test_enhancement_group_triggers_see_group_start_snapshot():
    group = EnhancementGroup(
        name="g",
        category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
        enhancements=(
            Enhancement(id="first", trigger=r"table", text="Mention index here.", note="n1"),
            # Only the appended text mentions "index", so this must not fire
            Enhancement(id="second", trigger=r"index", text="Second block.", note="n2"),
        ),
    )
    result = RuleEngine(_config(groups=[group])).apply("a table")
    assert result.refined == "a table\n\nMention index here."
    assert result.rules_applied == ("first",)
    assert result.improvements == ("n1",)


def test_later_group_sees_earlier_appends():
    first = EnhancementGroup(
        name="ctx",
        category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
        enhancements=(Enhancement(id="a", trigger=r"table", text="Add an index.", note="a"),),
    )
    second = EnhancementGroup(
        name="bp",
        category=RuleCategory.BEST_PRACTICES,
        enhancements=(Enhancement(id="b", trigger=r"index", text="Name it well.", note="b"),),
    )
    # Declared best-practices first; contextual still runs first
    result = RuleEngine(_config(groups=[second, first])).apply("table")
    assert result.rules_applied == ("a", "b")
    assert result.refined.endswith("Add an index.\n\nName it well.")


def test_unless_pattern_suppresses_enhancement():
    group = EnhancementGroup(
        name="g",
        category=RuleCategory.CONTEXTUAL_ENHANCEMENT,
        enhancements=(Enhancement(id="x", trigger=r"table", text="Sample data.", note="n", unless=r"sample"),),
    )
    result = RuleEngine(_config(groups=[group])).apply("table with sample rows")
    assert result.rules_applied == ()


def test_malformed_pattern_raises_at_construction():
    with pytest.raises(ConfigurationError):
        RuleEngine(_config([_rule("bad", r"(unclosed", "x")]))


def test_rule_in_enhancement_category_is_rejected():
    with pytest.raises(ConfigurationError):
        RuleEngine(_config([_rule("odd", r"x", "y", RuleCategory.BEST_PRACTICES)]))


def test_non_string_prompt_is_invalid_input():
    engine = RuleEngine(_config())
    with pytest.raises(InvalidInputError):
        engine.apply(None)  # type: ignore[arg-type]


def test_result_is_stripped():
    engine = RuleEngine(_config([_rule("r", r"x", "y")]))
    assert engine.apply("  x  ").refined == "y"


def test_substitution_stage_is_idempotent_once_sources_are_gone():
    engine = RuleEngine(_config([_rule("r", r"\bfoo\b", "bar")]))
    once = engine.apply("foo baz").refined
    twice = engine.apply(once)
    assert twice.refined == once
    assert twice.rules_applied == ()


# ----------------------------------------------------------------------------
# General engine
# ----------------------------------------------------------------------------


@pytest.fixture
def general():
    return GeneralRuleEngine(build_general_config())


def test_general_capitalizes_and_punctuates(general):
    result = general.apply("  make it nice  ")
    assert result.refined == "Make it well-crafted."
    assert result.rules_applied == (
        "general_Replace generic positive terms",
        "general_capitalization",
        "general_punctuation",
    )
    assert "Capitalized first letter" in result.improvements
    assert "Added proper ending punctuation" in result.improvements


def test_general_leaves_finished_sentence_alone(general):
    result = general.apply("Explain recursion with an example.")
    assert result.refined == "Explain recursion with an example."
    assert result.rules_applied == ()


def test_general_does_not_capitalize_non_letters(general):
    result = general.apply("42 reasons to refactor")
    assert result.refined == "42 reasons to refactor."
    assert "general_capitalization" not in result.rules_applied


def test_general_empty_input(general):
    result = general.apply("   ")
    assert result.refined == ""
    assert result.rules_applied == ()


def test_general_vague_note_uses_description(general):
    result = general.apply("a cool idea.")
    assert "Replace casual terms with professional language" in result.improvements


def test_system_prompt_context_wins_over_complexity():
    from promptsmith.models import AnalysisResult

    config = DomainConfig(
        domain=Domain.SQL,
        description="",
        library=PatternLibrary(domain=Domain.SQL),
        detection_patterns=(),
        quality_weights=UNIFORM_WEIGHTS,
        system_prompt=SystemPromptTemplate(base="BASE", complexity_note="COMPLEX"),
    )
    engine = RuleEngine(config)
    busy = AnalysisResult(complexity=0.95)
    assert engine.generate_system_prompt(busy, "ctx") == "BASE\n\nAdditional Context: ctx"
    assert engine.generate_system_prompt(busy) == "BASE\n\nCOMPLEX"
    assert engine.generate_system_prompt(AnalysisResult(complexity=0.2)) == "BASE"
    assert engine.generate_system_prompt() == "BASE"
