import json

from typer.testing import CliRunner

from cli.main import app as cli_app
from promptsmith import get_version

runner = CliRunner()


def test_version():
    result = runner.invoke(cli_app, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == get_version()


def test_no_command_shows_help():
    result = runner.invoke(cli_app, [])
    assert result.exit_code == 0
    assert "refine" in result.output
    assert "compare" in result.output


def test_refine_json_with_forced_domain():
    result = runner.invoke(cli_app, ["refine", "hazme una bonita tabla para usuarios", "--domain", "sql", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["domain"] == "sql"
    assert data["refined"].startswith("Generate a database schema for")
    assert "add_sample_data_request" in data["rules_applied"]
    assert 0.0 <= data["score"]["overall"] <= 1.0


def test_refine_from_file(tmp_path):
    source = tmp_path / "prompt.txt"
    source.write_text("make it nice", encoding="utf-8")
    result = runner.invoke(cli_app, ["refine", "--from-file", str(source), "--json"])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["refined"] == "Make it well-crafted."


def test_refine_pretty_output():
    result = runner.invoke(cli_app, ["refine", "make it nice", "--system"])
    assert result.exit_code == 0, result.output
    assert "Make it well-crafted." in result.output
    assert "Quality:" in result.output


def test_refine_without_text_is_usage_error():
    result = runner.invoke(cli_app, ["refine"])
    assert result.exit_code != 0


def test_detect_json():
    result = runner.invoke(
        cli_app, ["detect", "Automate the deployment pipeline and add monitoring for the docker container", "--json"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["domain"] == "devops"
    assert list(data["scores"]) == ["sql", "branding", "cine", "saas", "devops", "general"]


def test_score_json():
    result = runner.invoke(cli_app, ["score", "Create a users table with an index on email.", "-d", "sql", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["domain"] == "sql"
    assert set(data["breakdown"]) == {"clarity", "specificity", "structure", "completeness"}


def test_compare_json():
    result = runner.invoke(cli_app, ["compare", "Explain recursion.", "Explain recursion.", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["winner"] == "variant_0"
    assert data["close_call"] is True


def test_compare_reads_files(tmp_path):
    first = tmp_path / "a.txt"
    first.write_text("Summarize {{input}}", encoding="utf-8")
    result = runner.invoke(
        cli_app, ["compare", str(first), "Translate {{input}}", "--test-input", "the memo", "-j"]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["variants"][0]["prompt"] == "Summarize the memo"


def test_compare_single_variant_fails():
    result = runner.invoke(cli_app, ["compare", "only one"])
    assert result.exit_code == 1
    assert "at least 2 variants required" in result.output


def test_system_prompt():
    result = runner.invoke(cli_app, ["system-prompt", "sql", "--context", "PostgreSQL 16"])
    assert result.exit_code == 0
    assert "senior database architect" in result.output
    assert "Additional Context: PostgreSQL 16" in result.output


def test_domains_json():
    result = runner.invoke(cli_app, ["domains", "--json"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["sql"]["rules"] == 14
    assert "general" in data


def test_missing_config_file_fails(tmp_path):
    result = runner.invoke(cli_app, ["--config", str(tmp_path / "nope.yml"), "domains"])
    assert result.exit_code == 1
    assert "Settings file not found" in result.output


def test_refine_with_role_template():
    result = runner.invoke(cli_app, ["refine", "make it nice", "-t", "role_based", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["template_used"] == "role_based"
    assert data["refined"].startswith("As a professional expert, make it well-crafted.")


def test_refine_with_template_variables():
    result = runner.invoke(
        cli_app, ["refine", "make it nice", "--var", "role=copy editor", "-t", "role-based", "--json"]
    )
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["refined"].startswith("As a copy editor, make it well-crafted.")


def test_refine_rejects_malformed_variable():
    result = runner.invoke(cli_app, ["refine", "make it nice", "--var", "no-equals-sign"])
    assert result.exit_code != 0


def test_refine_pretty_output_shows_template():
    result = runner.invoke(cli_app, ["refine", "make it nice", "--template", "basic"])
    assert result.exit_code == 0, result.output
    assert "Template: basic" in result.output


def test_templates_json():
    result = runner.invoke(cli_app, ["templates", "--json"])
    assert result.exit_code == 0, result.output
    ids = [t["id"] for t in json.loads(result.output)]
    assert ids == [
        "basic_general",
        "chain_of_thought_general",
        "few_shot_general",
        "role_based_general",
        "step_by_step_general",
    ]
