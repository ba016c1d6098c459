"""CLI entry point for TG Reporter."""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import Config, ConfigValidator, generate_sample_config

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="tg-reporter",
    help="Analyze regional chat messages and produce charts and LLM reports.",
)
console = Console()


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config: Optional[str]) -> Config:
    if not config:
        return Config.default()

    config_path = Path(config)
    if not config_path.exists():
        console.print(f"[red]Error:[/red] Config file not found: {config}")
        raise typer.Exit(1)

    try:
        return Config.load(config)
    except (ValueError, KeyError) as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)


def _service(config: Optional[str]):
    from .pipeline import ReporterService

    return ReporterService(_load_config(config))


ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config.json (defaults to the built-in sample config).",
)
RegionOption = typer.Option(
    ...,
    "--region",
    "-r",
    help="Region code, e.g. POL.",
)
VerboseOption = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


# ============================================================================
# ANALYZE COMMAND
# ============================================================================

@app.command()
def analyze(
    region: str = RegionOption,
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """
    Run the message analysis pipeline for one region.

    Reads raw/messages_{REGION}.csv and writes analyzed/analysis_{REGION}.json.
    """
    from .storage import NoAnalysisDataError, PersistenceError

    _setup_logging(verbose)
    service = _service(config)

    try:
        run = service.analyze(region)
    except (ValueError, NoAnalysisDataError, PersistenceError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    artifact = run.artifact
    console.print(f"[green]✓[/green] Analyzed {artifact.message_count} messages for {region}")
    console.print(
        f"[green]✓[/green] Sentiment: {artifact.sentiments.positive} positive, "
        f"{artifact.sentiments.negative} negative, {artifact.sentiments.neutral} neutral"
    )
    if run.stats.timestamp_fallbacks:
        console.print(
            f"[yellow]Warning:[/yellow] {run.stats.timestamp_fallbacks} records had "
            f"unparseable dates and were dated now"
        )
    if run.stats.malformed_rows:
        console.print(f"[yellow]Warning:[/yellow] {run.stats.malformed_rows} malformed rows salvaged")

    table = Table(title="Top phrases")
    table.add_column("Phrase")
    table.add_column("Count", justify="right")
    for entry in artifact.top_phrases[:10]:
        table.add_row(entry.phrase, str(entry.count))
    console.print(table)
    console.print(f"[green]✓[/green] Saved to: {run.artifact_path}")


# ============================================================================
# CHARTS COMMAND
# ============================================================================

@app.command()
def charts(
    region: str = RegionOption,
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Render sentiment, themes, needs and trends charts for a region."""
    from .charts import ChartError
    from .storage import NoAnalysisDataError

    _setup_logging(verbose)
    service = _service(config)

    try:
        rendered = service.render_charts(region)
    except (ValueError, NoAnalysisDataError, ChartError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    for chart_type, path in rendered.items():
        console.print(f"[green]✓[/green] {chart_type}: {path}")


# ============================================================================
# REPORT COMMAND
# ============================================================================

@app.command()
def report(
    region: str = RegionOption,
    config: Optional[str] = ConfigOption,
    force: bool = typer.Option(False, "--force", "-f", help="Ignore the cached report."),
    verbose: bool = VerboseOption,
):
    """Generate (or fetch the cached) LLM report for a region."""
    from .llm_client import LLMError
    from .sources import SourceNotFoundError
    from .storage import NoAnalysisDataError

    _setup_logging(verbose)
    service = _service(config)

    try:
        text = service.generate_report(region, force_new=force)
    except (ValueError, NoAnalysisDataError, SourceNotFoundError, LLMError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    console.print(text)


# ============================================================================
# CONTENT COMMAND - what the bot menu asks for
# ============================================================================

@app.command()
def content(
    region: str = RegionOption,
    content_type: str = typer.Option(
        "full",
        "--type",
        "-t",
        help="report, charts, full, new_report or new_charts.",
    ),
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """Produce a report, charts, or both, reusing cached output where allowed."""
    from .charts import ChartError
    from .llm_client import LLMError
    from .sources import SourceNotFoundError
    from .storage import NoAnalysisDataError

    _setup_logging(verbose)
    service = _service(config)

    try:
        result = service.generate_content(content_type, region)
    except (ValueError, NoAnalysisDataError, SourceNotFoundError, LLMError, ChartError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if result.report is not None:
        console.print(result.report)
    for chart_type, path in result.charts.items():
        console.print(f"[green]✓[/green] {chart_type} chart: {path}")


# ============================================================================
# REFRESH COMMAND - scheduled full run
# ============================================================================

@app.command()
def refresh(
    config: Optional[str] = ConfigOption,
    verbose: bool = VerboseOption,
):
    """
    Analyze, chart and report every active region.

    Meant to be run from a scheduler; exits 1 if any region failed.
    """
    _setup_logging(verbose)
    service = _service(config)

    results = service.refresh_all()
    for region, ok in results.items():
        mark = "[green]✓[/green]" if ok else "[red]✗[/red]"
        console.print(f"{mark} {region}")

    if not all(results.values()):
        raise typer.Exit(1)


# ============================================================================
# VALIDATE / SAMPLE-CONFIG COMMANDS
# ============================================================================

@app.command()
def validate(
    config: str = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to config.json to check.",
    ),
):
    """Validate a config file without running anything."""
    console.print(f"\n[bold]TG Reporter[/bold] - Validation\n")

    validator = ConfigValidator()
    is_valid, errors, warnings = validator.validate(config)

    if warnings:
        console.print("[yellow]Warnings:[/yellow]")
        for warning in warnings:
            console.print(f"  ⚠ {warning}")

    if not is_valid:
        console.print("\n[red]Validation failed:[/red]")
        for error in errors:
            console.print(f"  ✗ {error}")
        raise typer.Exit(1)

    cfg = Config.load(config)
    console.print(f"[green]✓[/green] Regions defined: {len(cfg.regions)} ({len(cfg.active_regions())} active)")
    console.print(f"[green]✓[/green] Themes: {len(cfg.themes)}, needs/pains: {len(cfg.needs_and_pains)}")
    console.print("\n[bold green]✓ Validation passed[/bold green]")


@app.command("sample-config")
def sample_config(
    output: str = typer.Option(
        "config.json",
        "--output",
        "-o",
        help="Where to write the sample config.",
    ),
):
    """Write the built-in sample config to a file."""
    path = generate_sample_config(output)
    console.print(f"[green]✓[/green] Sample config written to: {path}")


if __name__ == "__main__":
    app()
