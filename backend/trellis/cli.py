"""Typer-based operator CLI for the planning service."""

from __future__ import annotations

import asyncio
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from trellis.core.config import get_settings
from trellis.core.db import dispose_engine, get_session_factory, init_models
from trellis.core.logging import setup_logging
from trellis.services import export, periods
from trellis.services.errors import EngagementNotFoundError
from trellis.services.repository import EngagementRepository

app = typer.Typer(help="Operator utilities for the Trellis planning service")
console = Console()


def _parse_date(value: Optional[str], option: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"{option} must be a date in YYYY-MM-DD form.") from exc


async def _init_db() -> None:
    try:
        await init_models()
    finally:
        await dispose_engine()


async def _export(engagement_id: str) -> tuple[str, str]:
    try:
        return await export.export_engagement(EngagementRepository(get_session_factory()), engagement_id)
    finally:
        await dispose_engine()


@app.command("init-db")
def init_db() -> None:
    """Create any missing tables in the configured database."""

    setup_logging(get_settings().log_level, json_output=False)
    asyncio.run(_init_db())
    typer.secho("Database schema is up to date.", fg=typer.colors.GREEN)


@app.command("periods")
def show_periods(
    fye: Optional[str] = typer.Option(None, "--fye", help="Financial year end (YYYY-MM-DD). Defaults to 31 Dec."),
    today: Optional[str] = typer.Option(None, "--today", help="Reference date (YYYY-MM-DD). Defaults to now."),
) -> None:
    """Print the reporting periods for a financial year end."""

    year_end = _parse_date(fye, "--fye")
    reference = _parse_date(today, "--today") or datetime.now()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Order")
    table.add_column("Key")
    table.add_column("Label")
    table.add_column("Type")
    table.add_column("End year")
    table.add_column("Description")

    for period in sorted(periods.build_financial_periods(reference, year_end), key=lambda p: p.order):
        table.add_row(
            str(period.order),
            period.key,
            period.label,
            period.type,
            str(period.end_year) if period.end_year is not None else "-",
            period.description,
        )

    console.print(table)


@app.command("export")
def export_csv(
    engagement_id: str = typer.Argument(..., help="Engagement identifier."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output file. Defaults to the company slug."),
) -> None:
    """Write the SSK and SWOT export for an engagement to a CSV file."""

    setup_logging(get_settings().log_level, json_output=False)
    try:
        csv_text, filename = asyncio.run(_export(engagement_id))
    except EngagementNotFoundError:
        typer.secho(f"Engagement {engagement_id} not found.", fg=typer.colors.RED)
        raise typer.Exit(code=1)

    target = output or Path(filename)
    target.write_text(csv_text, encoding="utf-8", newline="")
    typer.secho(f"Export written to {target}", fg=typer.colors.GREEN)


if __name__ == "__main__":  # pragma: no cover
    app()
