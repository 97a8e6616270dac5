from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from promptsmith import get_version
from promptsmith.config import configure_logging, load_settings
from promptsmith.errors import PromptSmithError
from promptsmith.models import Domain
from promptsmith.orchestrator import PromptOrchestrator

app = typer.Typer(help="PromptSmith CLI: domain rules, quality scoring and prompt comparison")


def _fail(message: str) -> NoReturn:
    typer.secho(f"Error: {message}", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=1)


def _orchestrator(ctx: typer.Context) -> PromptOrchestrator:
    opts = ctx.obj or {}
    try:
        settings = load_settings(opts.get("config"))
    except PromptSmithError as e:
        _fail(str(e))
    configure_logging(opts.get("log_level") or settings.log_level)
    return PromptOrchestrator(settings)


def _read_text(text: Optional[List[str]], from_file: Optional[Path]) -> str:
    if from_file is not None:
        try:
            return from_file.read_text(encoding="utf-8")
        except OSError as e:
            raise typer.BadParameter(f"Cannot read file: {from_file} ({e})")
    if not text:
        raise typer.BadParameter("Provide TEXT or --from-file")
    return " ".join(text)


def _parse_vars(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
    if not pairs:
        return None
    variables: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected KEY=VALUE, got {pair!r}")
        variables[key.strip()] = value
    return variables


def _echo_json(data) -> None:
    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


def _pct(value: float) -> str:
    return f"{value * 100:.1f}%"


@app.callback(invoke_without_command=True)
def root(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Settings YAML (default: PROMPTSMITH_CONFIG)"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override the configured log level"),
):
    """Top-level CLI. Shows help when no subcommand is given."""
    ctx.obj = {"config": config, "log_level": log_level}
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def refine(
    ctx: typer.Context,
    text: List[str] = typer.Argument(None, help="Prompt text (wrap in quotes for multi-word)", show_default=False),
    from_file: Optional[Path] = typer.Option(None, "--from-file", help="Read prompt text from a file (UTF-8)"),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Force a domain instead of detecting it"),
    context: Optional[str] = typer.Option(None, "--context", help="Extra context for the system prompt"),
    template: Optional[str] = typer.Option(None, "--template", "-t", help="Wrap the result in this template type"),
    var: Optional[List[str]] = typer.Option(None, "--var", help="Template variable as KEY=VALUE (repeatable)"),
    system: bool = typer.Option(False, "--system", help="Also print the system prompt"),
    json_out: bool = typer.Option(False, "--json", help="Print JSON output"),
):
    """Apply the domain rules to a prompt and score the result.

    Examples:
        promptsmith refine "hazme una bonita tabla para usuarios" --domain sql
        promptsmith refine --from-file prompt.txt --json
        promptsmith refine "explain window functions" -t chain_of_thought
    """
    raw = _read_text(text, from_file)
    variables = _parse_vars(var)
    orchestrator = _orchestrator(ctx)
    try:
        result = orchestrator.process(raw, domain, context, variables, template)
    except PromptSmithError as e:
        _fail(str(e))

    if json_out:
        _echo_json(result.to_dict())
        return

    console = Console()
    console.print(Panel(escape(result.refined) or "[dim](empty)[/dim]", title=f"Refined prompt ({result.domain.value})"))
    if result.template_used:
        console.print(f"[bold]Template:[/bold] {result.template_used.value}")
    if result.improvements:
        console.print("[bold green]Improvements:[/bold green]")
        for note in result.improvements:
            console.print(f"  • {escape(note)}")
    console.print(
        f"[bold]Quality:[/bold] {_pct(result.score.overall)} "
        f"(clarity {_pct(result.score.clarity)}, specificity {_pct(result.score.specificity)}, "
        f"structure {_pct(result.score.structure)}, completeness {_pct(result.score.completeness)})"
    )
    if result.suggestions:
        console.print("[bold yellow]Suggestions:[/bold yellow]")
        for suggestion in result.suggestions:
            console.print(f"  • {escape(suggestion)}")
    if system:
        console.print(Panel(escape(result.system_prompt), title="System prompt"))


@app.command()
def detect(
    ctx: typer.Context,
    text: List[str] = typer.Argument(None, help="Prompt text", show_default=False),
    from_file: Optional[Path] = typer.Option(None, "--from-file", help="Read prompt text from a file (UTF-8)"),
    json_out: bool = typer.Option(False, "--json", help="Print JSON output"),
):
    """Show the detected domain and the per-domain detection scores."""
    raw = _read_text(text, from_file)
    orchestrator = _orchestrator(ctx)
    analysis = orchestrator.analyzer.analyze(raw)
    scores = orchestrator.registry.detect_domain_scores(raw, analysis)
    detected = orchestrator.registry.detect_domain(raw, analysis)

    if json_out:
        _echo_json({"domain": detected.value, "scores": {d.value: s for d, s in scores.items()}})
        return

    table = Table(title="Domain detection", show_header=True, header_style="bold magenta")
    table.add_column("Domain", style="cyan")
    table.add_column("Score", justify="right")
    for d, s in scores.items():
        marker = " [green]◄[/green]" if d == detected else ""
        table.add_row(d.value, f"{s}{marker}")
    console = Console()
    console.print(table)
    console.print(f"Detected domain: [bold]{detected.value}[/bold]")


@app.command()
def score(
    ctx: typer.Context,
    text: List[str] = typer.Argument(None, help="Prompt text", show_default=False),
    from_file: Optional[Path] = typer.Option(None, "--from-file", help="Read prompt text from a file (UTF-8)"),
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Score under this domain's weights"),
    json_out: bool = typer.Option(False, "--json", help="Print JSON output"),
):
    """Evaluate prompt quality without rewriting it."""
    raw = _read_text(text, from_file)
    orchestrator = _orchestrator(ctx)
    try:
        result = orchestrator.evaluate(raw, domain)
    except PromptSmithError as e:
        _fail(str(e))

    if json_out:
        _echo_json(result.to_dict())
        return

    console = Console()
    table = Table(title=f"Quality score ({result.domain.value})", show_header=True, header_style="bold magenta")
    table.add_column("Dimension", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right", style="dim")
    weights = result.score.weights.as_dict()
    for name, value in result.score.subscores().items():
        table.add_row(name.title(), _pct(value), f"{weights[name]:.2f}")
    table.add_section()
    table.add_row("[bold]Overall[/bold]", f"[bold]{_pct(result.score.overall)}[/bold]", "")
    console.print(table)
    console.print(f"Confidence: {_pct(result.confidence)}")

    if result.validation.issues:
        colors = {"error": "red", "warning": "yellow", "suggestion": "blue"}
        for issue in result.validation.issues:
            color = colors.get(issue.severity, "white")
            console.print(f"[{color}]{issue.severity.upper()}[/{color}] {issue.code}: {escape(issue.message)}")


@app.command("compare")
def compare_command(
    ctx: typer.Context,
    variants: List[str] = typer.Argument(..., help="Prompt variants (text or file path), at least two"),
    test_input: Optional[str] = typer.Option(None, "--test-input", help="Value substituted for {{input}}"),
    json_out: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """
    Compare prompt variants and pick a winner.

    Examples:
        promptsmith compare "Write a story" "Write a short story about dragons for children"
        promptsmith compare v1.txt v2.txt v3.txt --json
    """

    def load_prompt(text_or_file: str) -> str:
        p = Path(text_or_file)
        if p.exists() and p.is_file():
            return p.read_text(encoding="utf-8")
        return text_or_file

    orchestrator = _orchestrator(ctx)
    try:
        result = orchestrator.compare([load_prompt(v) for v in variants], test_input)
    except PromptSmithError as e:
        _fail(str(e))

    if json_out:
        _echo_json(result.model_dump(mode="json"))
        return

    console = Console()
    table = Table(title="Prompt comparison", show_header=True, header_style="bold magenta")
    table.add_column("Metric", style="cyan")
    for variant in result.variants:
        table.add_column(variant.id, justify="center")
    table.add_column("Winner", justify="center", style="green")
    for metric in result.metrics:
        cells = []
        for variant in result.variants:
            value = metric.values[variant.id]
            cells.append(f"{value:.2f}" if isinstance(value, float) and value <= 1 else f"{value:g}")
        table.add_row(metric.name, *cells, metric.winner)
    console.print(table)
    style = "yellow" if result.close_call else "bold green"
    console.print(f"[{style}]{escape(result.summary)}[/{style}]")


@app.command("system-prompt")
def system_prompt(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain name (unknown names fall back to general)"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="Prompt to analyze for the template variant"),
    context: Optional[str] = typer.Option(None, "--context", help="Extra context"),
):
    """Print the system prompt for a domain."""
    orchestrator = _orchestrator(ctx)
    analysis = orchestrator.analyzer.analyze(prompt) if prompt else None
    typer.echo(orchestrator.registry.generate_system_prompt(Domain.parse(domain), analysis, context))


@app.command()
def domains(
    ctx: typer.Context,
    json_out: bool = typer.Option(False, "--json", help="Print JSON output"),
):
    """List registered domains."""
    stats = _orchestrator(ctx).registry.get_domain_statistics()
    if json_out:
        _echo_json(stats)
        return
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Domain", style="cyan")
    table.add_column("Description")
    table.add_column("Rules", justify="right")
    table.add_column("Enhancements", justify="right")
    table.add_column("Patterns", justify="right")
    for name, info in stats.items():
        table.add_row(
            name,
            info["description"],
            str(info["rules"]),
            str(info["enhancements"]),
            str(info["patterns"]),
        )
    Console().print(table)


@app.command()
def templates(
    ctx: typer.Context,
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Only templates usable for this domain"),
    json_out: bool = typer.Option(False, "--json", help="Print JSON output"),
):
    """List prompt templates."""
    try:
        found = _orchestrator(ctx).templates.list_templates(domain)
    except PromptSmithError as e:
        _fail(str(e))
    if json_out:
        _echo_json([t.to_dict() for t in found])
        return
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Id", style="cyan")
    table.add_column("Type")
    table.add_column("Domain")
    table.add_column("Description")
    for t in found:
        table.add_row(t.id, t.type.value, t.domain.value if t.domain else "all", t.description)
    Console().print(table)


@app.command()
def version():
    """Print package version."""
    typer.echo(get_version())


if __name__ == "__main__":
    app()
