"""Command line interface for dateline using Typer and Rich."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from dateline.config.logging import get_logger
from dateline.config.settings import settings
from dateline.data_management.schemas import CalendarDay, CandidateEvent
from dateline.pipeline.validation_pipeline import BatchReport, ValidationPipeline
from dateline.utils.logging import bind_run_context, configure_structured_logging
from dateline.validation.orchestrator import ValidationProfile

app = typer.Typer(
    help="dateline - multi-tier validation of 'event on this date' claims",
    add_completion=False,
)

console = Console()

logger = get_logger("cli")


def load_events(path: Path, day: CalendarDay) -> list[CandidateEvent]:
    """
    Load candidate events from a JSON array.

    Records may carry a full ``date`` (YYYY-MM-DD) or only a ``year``;
    in the latter case the target day is used.
    """
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError("events file must contain a JSON array")

    events = []
    for record in records:
        if "date" not in record:
            record = {**record, "date": f"{day.month:02d}-{day.day:02d}"}
        events.append(CandidateEvent.from_seed(record))
    return events


def _mark(ok: bool) -> str:
    return "[green]✓[/green]" if ok else "[red]✗[/red]"


def render_report(report: BatchReport) -> None:
    """Print the verdict table and the quality report."""
    table = Table(
        title=f"Validation results for {report.day}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("", width=2)
    table.add_column("Event", style="cyan")
    table.add_column("Year", justify="right")
    table.add_column("Method", style="yellow")
    table.add_column("Reason")

    for item in [*report.accepted, *report.rejected]:
        year = str(item.event.year)
        if item.verdict.correction is not None:
            year = f"{item.verdict.correction.old_year} → {item.verdict.correction.new_year}"
        table.add_row(
            _mark(item.verdict.accepted),
            item.event.title,
            year,
            item.verdict.method,
            item.verdict.reason_code,
        )
    console.print(table)

    metrics = report.metrics
    lines = [
        f"Events: {metrics.events_total}",
        f"Accepted: {metrics.accepted} ({metrics.acceptance_rate:.0%})",
        f"Rejected: {metrics.rejected}",
        f"Year corrections: {metrics.year_corrections}",
        f"External calls: {metrics.external_calls}  Cache hits: {metrics.cache_hits}",
    ]
    if metrics.accepted_by_method:
        methods = ", ".join(f"{k}={v}" for k, v in sorted(metrics.accepted_by_method.items()))
        lines.append(f"Accepted by: {methods}")
    if metrics.drop_reasons:
        reasons = ", ".join(f"{k}={v}" for k, v in metrics.top_drop_reasons())
        lines.append(f"Drop reasons: {reasons}")
    if metrics.error_reasons:
        errors = ", ".join(f"{k}={v}" for k, v in sorted(metrics.error_reasons.items()))
        lines.append(f"[red]Backend errors: {errors}[/red]")

    console.print(Panel("\n".join(lines), title="Quality report", border_style="green"))


async def _run_batch(
    events: list[CandidateEvent],
    day: CalendarDay,
    profile: ValidationProfile,
) -> BatchReport:
    pipeline = ValidationPipeline.from_settings(profile=profile)
    try:
        return await pipeline.run(events, day)
    finally:
        await pipeline.close()


@app.command()
def validate(
    events_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON array of candidate events"),
    date: str = typer.Option(..., "--date", "-d", help="Calendar day under test (MM-DD)"),
    strategy: Optional[str] = typer.Option(
        None,
        "--strategy",
        "-s",
        help="Tier 3 strategy: differential or trust_scored (default from settings)",
    ),
) -> None:
    """
    Validate candidate events against a calendar day.
    """
    configure_structured_logging()

    try:
        day = CalendarDay.parse(date)
    except (ValueError, ValidationError) as e:
        console.print(f"[red]✗[/red] Invalid date '{date}': expected MM-DD ({e})")
        raise typer.Exit(2)

    chosen = strategy or settings.search_strategy
    if chosen == "trust_scored":
        profile = ValidationProfile.trust_scored()
    elif chosen == "differential":
        profile = ValidationProfile.differential()
    else:
        console.print(f"[red]✗[/red] Unknown strategy '{chosen}'")
        raise typer.Exit(2)

    try:
        events = load_events(events_file, day)
    except (ValueError, ValidationError, KeyError) as e:
        console.print(f"[red]✗[/red] Could not load events: {e}")
        raise typer.Exit(1)

    bind_run_context(str(day), strategy=chosen)
    logger.info(f"Validating {len(events)} events for {day} ({chosen})")
    console.print(f"[bold cyan]Validating {len(events)} events for {day}[/bold cyan] ({chosen})")

    try:
        report = asyncio.run(_run_batch(events, day, profile))
    except ValueError as e:
        console.print(f"\n[red]✗[/red] Error: {e}")
        logger.error(f"Validation could not start: {e}")
        raise typer.Exit(1)

    render_report(report)


@app.command()
def status() -> None:
    """
    Display configuration and backend key status.
    """
    table = Table(title="dateline status", show_header=True, header_style="bold magenta")
    table.add_column("Component", style="cyan", width=20)
    table.add_column("Status", width=16)
    table.add_column("Details", style="yellow")

    python_version = f"Python {sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    table.add_row("Environment", "✓ Ready", python_version)

    backends = [
        ("Research oracle", settings.perplexity_api_key, settings.perplexity_model),
        ("Search", settings.exa_api_key, settings.exa_base_url),
        ("Excerpt judge", settings.gemini_api_key, settings.gemini_model),
    ]
    for name, key, details in backends:
        table.add_row(name, "✓ Configured" if key else "⚠ Not Configured", details)

    table.add_row("Encyclopedia", "✓ Public", settings.wikipedia_api_url)
    table.add_row(
        "Retries",
        "✓ Active",
        f"oracle={settings.oracle_max_attempts} (exponential), "
        f"search={settings.search_max_attempts} ({settings.search_retry_delay}s fixed)",
    )
    table.add_row("Tier 3 strategy", "✓ Active", settings.search_strategy)
    table.add_row("Logging", "✓ Active", f"Level: {settings.log_level}, Format: {settings.log_format}")

    console.print(table)


@app.command()
def version() -> None:
    """Display version information."""
    from dateline import __version__

    console.print("[bold]dateline[/bold]")
    console.print(f"Version: {__version__}")


if __name__ == "__main__":
    app()
