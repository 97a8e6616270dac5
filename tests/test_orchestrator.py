from __future__ import annotations

import pytest

from promptsmith.errors import InvalidInputError
from promptsmith.models import Domain
from promptsmith.orchestrator import PromptOrchestrator
from promptsmith.store import InMemoryPromptStore, SaveMetadata, SearchCriteria
from promptsmith.templates import TemplateType


@pytest.fixture
def orchestrator(registry):
    return PromptOrchestrator(registry=registry)


def test_process_sql_prompt(orchestrator):
    result = orchestrator.process("hazme una bonita tabla para usuarios", domain="sql")

    assert result.domain == Domain.SQL
    assert result.original == "hazme una bonita tabla para usuarios"
    assert result.refined.startswith("Generate a database schema for")
    assert "add_sample_data_request" in result.rules_applied
    assert "senior database architect" in result.system_prompt
    assert result.score.domain == Domain.SQL
    assert 0.0 <= result.score.overall <= 1.0
    # refined text is much longer than the raw prompt
    assert result.improvement == pytest.approx(0.5)
    assert len(result.suggestions) <= 5


def test_process_detects_domain_when_missing(orchestrator):
    result = orchestrator.process("Automate the deployment pipeline and add monitoring for the docker container")
    assert result.domain == Domain.DEVOPS


@pytest.mark.parametrize("domain", [None, "", "   "])
def test_blank_domain_means_detect(orchestrator, domain):
    result = orchestrator.process("Write a screenplay treatment where the protagonist faces a villain", domain=domain)
    assert result.domain == Domain.CINE


def test_unknown_domain_falls_back_to_general(orchestrator):
    result = orchestrator.process("make it nice", domain="astrology")
    assert result.domain == Domain.GENERAL
    assert result.refined == "Make it well-crafted."


def test_process_context_lands_in_system_prompt(orchestrator):
    result = orchestrator.process("create a table for invoices", domain=Domain.SQL, context="MySQL 8")
    assert result.system_prompt.endswith("Additional Context: MySQL 8")


def test_process_to_dict_is_plain_data(orchestrator):
    data = orchestrator.process("make it nice").to_dict()
    assert data["domain"] == "general"
    assert set(data["score"]) >= {"clarity", "specificity", "structure", "completeness", "overall", "domain"}
    assert data["validation"]["is_valid"] in (True, False)


def test_process_rejects_non_string(orchestrator):
    with pytest.raises(InvalidInputError):
        orchestrator.process(None)  # type: ignore[arg-type]


def test_evaluate_reports_breakdown_and_recommendations(orchestrator):
    result = orchestrator.evaluate("hi", domain="general")
    assert result.domain == Domain.GENERAL
    assert set(result.breakdown) == {"clarity", "specificity", "structure", "completeness"}
    critical = [r for r in result.recommendations if r["type"] == "critical"]
    assert critical, "a too-short prompt must produce a critical recommendation"
    data = result.to_dict()
    assert data["breakdown"]["clarity"]["score"] == result.score.clarity


def test_evaluate_uses_requested_domain(orchestrator):
    prompt = "Create a users table with an email index and a primary key."
    sql = orchestrator.evaluate(prompt, domain="sql").score
    cine = orchestrator.evaluate(prompt, domain="cine").score
    assert sql.domain == Domain.SQL
    assert cine.domain == Domain.CINE
    # table/index keywords only count towards sql completeness
    assert sql.completeness > cine.completeness


def test_compare_delegates(orchestrator):
    result = orchestrator.compare(["Explain recursion.", "Explain recursion."])
    assert result.winner == "variant_0"
    with pytest.raises(InvalidInputError):
        orchestrator.compare(["just one"])


def test_save_get_and_search(registry):
    store = InMemoryPromptStore()
    orchestrator = PromptOrchestrator(registry=registry, store=store)

    users = orchestrator.save(
        "Create a users table with an index on email.",
        SaveMetadata(name="Users table", domain="sql", tags=["schema", "Users"], category="db"),
    )
    trailer = orchestrator.save(
        "Write a one minute trailer script for a thriller film.",
        SaveMetadata(name="Trailer", domain=Domain.CINE, tags=["video"]),
    )

    assert len(store) == 2
    assert users.id != trailer.id
    assert len(users.id) == 12
    assert orchestrator.get(users.id) is users
    assert orchestrator.get("missing") is None
    assert users.score.domain == Domain.SQL
    assert "senior database architect" in users.system_prompt

    assert [p.id for p in orchestrator.search(SearchCriteria(domain="sql"))] == [users.id]
    assert [p.id for p in orchestrator.search(SearchCriteria(tags=["users"]))] == [users.id]
    assert [p.id for p in orchestrator.search(SearchCriteria(category="db"))] == [users.id]
    assert orchestrator.search(SearchCriteria(query="spaceship")) == []
    assert len(orchestrator.search()) == 2


def test_search_relevance_and_paging(registry):
    orchestrator = PromptOrchestrator(registry=registry)
    for i in range(5):
        orchestrator.save(f"Explain topic number {i} in detail.", SaveMetadata(name=f"topic {i}"))

    hits = orchestrator.search(SearchCriteria(query="topic 3", sort_by="relevance"))
    assert hits[0].name == "topic 3"
    assert hits[0].relevance == 1.0
    assert all(h.relevance == 0.5 for h in hits[1:])
    # The stored entry is untouched by the per-query relevance
    assert orchestrator.get(hits[1].id).relevance == 1.0

    page = orchestrator.search(SearchCriteria(limit=2, offset=1, sort_by="created", sort_order="asc"))
    assert len(page) == 2


def test_search_criteria_validation():
    with pytest.raises(ValueError):
        SearchCriteria(limit=0)
    with pytest.raises(ValueError):
        SearchCriteria(min_score=1.5)
    assert SearchCriteria(domain="nonsense").domain == Domain.GENERAL


def test_saved_prompt_to_dict(orchestrator):
    saved = orchestrator.save("Design a REST API for invoices.", SaveMetadata(name="api", domain="saas"))
    data = saved.to_dict()
    assert data["metadata"]["domain"] == "saas"
    assert data["score"]["domain"] == "saas"
    assert "overall" in data["score"]


def test_untemplated_prompt_reports_no_template(orchestrator):
    result = orchestrator.process("make it nice")
    assert result.template_used is None
    assert result.to_dict()["template_used"] is None


def test_cross_domain_prompt_is_wrapped_in_basic_template(orchestrator):
    # "table" hints sql and "users" hints saas
    result = orchestrator.process("Create a users table with an index on email.", domain="sql", context="PostgreSQL 16")
    assert result.template_used == TemplateType.BASIC
    assert result.refined.endswith("Context: PostgreSQL 16")
    assert result.system_prompt.endswith("Additional Context: PostgreSQL 16")
    assert result.to_dict()["template_used"] == "basic"


def test_repeated_entity_triggers_template(orchestrator):
    result = orchestrator.process("Link each user to a customer record", domain="general")
    assert result.template_used == TemplateType.BASIC


def test_explicit_template_type(orchestrator):
    result = orchestrator.process("make it nice", template="chain_of_thought")
    assert result.template_used == TemplateType.CHAIN_OF_THOUGHT
    assert result.refined.startswith("Make it well-crafted.\n\nLet's approach this step-by-step:")


def test_variables_force_a_template(orchestrator):
    result = orchestrator.process("make it nice", variables={"requirements": ["Use a warm tone"]})
    assert result.template_used == TemplateType.BASIC
    assert result.refined == "Make it well-crafted.\n\nRequirements:\n- Use a warm tone"


def test_few_shot_uses_domain_examples(orchestrator):
    result = orchestrator.process("create a table for invoices", domain="sql", template="few_shot")
    assert result.template_used == TemplateType.FEW_SHOT
    assert "Example 1:\nInput: hazme una bonita tabla para usuarios" in result.refined
    assert "Example 2:\nInput: make fast query for sales data" in result.refined
    assert "Example 3:" not in result.refined


def test_template_type_picked_from_wording(orchestrator):
    result = orchestrator.generate_template("Outline the rollout.", Domain.DEVOPS, raw="how to roll out the release")
    assert result.type == TemplateType.STEP_BY_STEP
    assert "Focus on infrastructure development" in result.system


@pytest.mark.parametrize("kwargs", [{"template": "fancy"}, {"variables": ["not", "a", "mapping"]}])
def test_bad_template_arguments(orchestrator, kwargs):
    with pytest.raises(InvalidInputError):
        orchestrator.process("make it nice", **kwargs)
