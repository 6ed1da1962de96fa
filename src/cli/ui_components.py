"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `parse`, `fetch` y `fetch-all`.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.rir_fetcher import ListingResult
from core.domain.models import Record, ResourceType, Version
from core.services.listing_stats import ListingStats


def build_version_panel(version: Version) -> Panel:
    """Panel con la cabecera del listado."""

    body = Text()
    body.append(f"Registry: {version.registry}\n")
    body.append(f"Format version: {version.version}\n")
    body.append(f"Serial: {version.serial}\n")
    body.append(f"Period: {version.start_date} - {version.end_date} (UTC {version.utc_offset})\n")
    body.append(f"Declared records: {version.records}")
    return Panel(body, title=Text("RSEF listing", style="bold cyan"), border_style="cyan")


def build_stats_table(stats: ListingStats) -> Table:
    """Declarado (líneas summary) frente a observado (líneas de registro)."""

    table = Table(title="Resource counts")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Declared", justify="right")
    table.add_column("Found", justify="right")

    types = [t for t in ResourceType if t in stats.declared or t in stats.observed]
    for res_type in types:
        declared = stats.declared.get(res_type)
        found = stats.observed.get(res_type, 0)
        style = "green" if declared is None or declared == found else "red"
        table.add_row(
            res_type.value,
            "-" if declared is None else str(declared),
            Text(str(found), style=style),
        )
    return table


def build_records_table(records: Iterable[Record], *, limit: int) -> Table:
    table = Table(title=f"Records (first {limit})")
    table.add_column("Registry", style="cyan", no_wrap=True)
    table.add_column("CC", no_wrap=True)
    table.add_column("Type", no_wrap=True)
    table.add_column("Start", style="magenta")
    table.add_column("Value", justify="right")
    table.add_column("Date")
    table.add_column("Status", style="green")
    table.add_column("Id", style="dim")

    for idx, record in enumerate(records):
        if idx >= limit:
            break
        table.add_row(
            record.registry,
            record.organization,
            record.res_type.value,
            record.start,
            str(record.value),
            record.date,
            record.status,
            record.id,
        )
    return table


def build_fetch_results_table(results: Sequence[ListingResult]) -> Table:
    table = Table(title="Registry listings")
    table.add_column("Registry", style="cyan", no_wrap=True)
    table.add_column("Entries", justify="right")
    table.add_column("URL", style="magenta")
    table.add_column("Error", style="red")

    for result in results:
        table.add_row(
            result.registry.label(),
            str(len(result.entries)) if result.ok else "-",
            result.url,
            result.error or "",
        )
    return table
