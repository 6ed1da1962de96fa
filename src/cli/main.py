"""CLI principal (Typer).

Por qué una capa fina:
- Los comandos solo traducen argumentos, llaman al Core y pintan con Rich.
- Los errores del dominio (`RsefError`) se muestran en rojo y salen con 1.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape

from adapters.codecs import open_listing_file
from adapters.json_exporter import export_entries_json
from adapters.rir_fetcher import HttpListingFetcher, date_from_timestamp, fetch_listings, today_utc
from cli.doctor import app as doctor_app
from cli.ui_components import (
    build_fetch_results_table,
    build_records_table,
    build_stats_table,
    build_version_panel,
)
from core.config import AppSettings
from core.domain.errors import RsefError
from core.domain.models import Entry, Record
from core.domain.registry import Registry
from core.log import configure_logging
from core.services.listing_stats import summarize_listing
from core.services.parser import parse

app = typer.Typer(
    no_args_is_help=True,
    help="Parse and download RIR Statistics Exchange Format (RSEF) listings.",
)
app.add_typer(doctor_app, name="doctor")

_console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _parse_registry(value: str) -> Registry:
    try:
        return Registry.parse(value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _resolve_day(day: Optional[str], timestamp: Optional[int]) -> date:
    """Fecha pedida: `--date`, `--timestamp` o, por defecto, ayer (UTC)."""

    if day and timestamp is not None:
        raise typer.BadParameter("Use either --date or --timestamp, not both")
    if timestamp is not None:
        return date_from_timestamp(timestamp)
    if day:
        for fmt in ("%Y-%m-%d", "%Y%m%d"):
            try:
                return datetime.strptime(day, fmt).date()
            except ValueError:
                continue
        raise typer.BadParameter(f"Invalid date {day!r} (expected YYYY-MM-DD or YYYYMMDD)")
    return today_utc() - timedelta(days=1)


def _show_listing(entries: Sequence[Entry], *, limit: int) -> None:
    stats = summarize_listing(entries)
    if stats.version is not None:
        _console.print(build_version_panel(stats.version))
    _console.print(build_stats_table(stats))

    if limit > 0:
        records = (entry for entry in entries if isinstance(entry, Record))
        _console.print(build_records_table(records, limit=limit))

    for mismatch in stats.mismatches:
        _console.print(f"[yellow]Warning:[/yellow] {escape(mismatch)}")


def _export(entries: Sequence[Entry], json_out: Optional[Path]) -> None:
    if json_out is None:
        return
    path = export_entries_json(entries=entries, output_path=json_out)
    _console.print(f"[green]Saved JSON to:[/green] {path}")


def _fail(exc: RsefError) -> typer.Exit:
    _console.print(f"[red]Error:[/red] {escape(str(exc))}")
    return typer.Exit(code=1)


@app.command("parse")
def parse_file(
    path: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Local RSEF listing (.gz / .bz2 are decompressed by suffix).",
    ),
    json_out: Optional[Path] = typer.Option(None, "--json", help="Write all entries as JSON."),
    limit: int = typer.Option(10, "--limit", "-n", min=0, help="Records to preview (0 = none)."),
) -> None:
    """Parse a local RSEF listing."""

    settings = AppSettings()
    try:
        with open_listing_file(path) as stream:
            entries = parse(stream, encoding=settings.text_encoding, errors=settings.decode_errors)
    except RsefError as exc:
        raise _fail(exc) from exc

    _show_listing(entries, limit=limit)
    _export(entries, json_out)


@app.command()
def fetch(
    registry: str = typer.Argument(..., help="afrinic | apnic | arin | lacnic | ripe"),
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Listing date (YYYY-MM-DD). Default: yesterday."),
    timestamp: Optional[int] = typer.Option(None, "--timestamp", help="UNIX epoch; only the UTC day is used."),
    json_out: Optional[Path] = typer.Option(None, "--json", help="Write all entries as JSON."),
    limit: int = typer.Option(10, "--limit", "-n", min=0, help="Records to preview (0 = none)."),
) -> None:
    """Download and parse one registry listing."""

    settings = AppSettings()
    target = _parse_registry(registry)
    requested = _resolve_day(day, timestamp)

    fetcher = HttpListingFetcher(settings)
    try:
        with fetcher.resolve(target, requested) as stream:
            entries = parse(stream, encoding=settings.text_encoding, errors=settings.decode_errors)
    except RsefError as exc:
        raise _fail(exc) from exc

    _show_listing(entries, limit=limit)
    _export(entries, json_out)


@app.command("fetch-all")
def fetch_all(
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Listing date (YYYY-MM-DD). Default: yesterday."),
    timestamp: Optional[int] = typer.Option(None, "--timestamp", help="UNIX epoch; only the UTC day is used."),
    registry: Optional[list[str]] = typer.Option(
        None,
        "--registry",
        "-r",
        help="Restrict to these registries (repeatable). Default: all five.",
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Write one <registry>-<date>.json per successful listing.",
    ),
) -> None:
    """Download and parse several registries concurrently."""

    settings = AppSettings()
    targets = [_parse_registry(r) for r in registry] if registry else list(Registry)
    requested = _resolve_day(day, timestamp)

    results = asyncio.run(fetch_listings(targets, requested, settings=settings))
    _console.print(build_fetch_results_table(results))

    if output_dir is not None:
        for result in results:
            if result.ok:
                _export(result.entries, output_dir / f"{result.registry.value}-{requested:%Y%m%d}.json")

    if not all(result.ok for result in results):
        raise typer.Exit(code=1)


def run() -> None:
    app()
