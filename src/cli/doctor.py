"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.http_client import build_async_client
from core.config import AppSettings, base_url_env_var, get_user_env_file, write_user_env_vars
from core.domain.registry import Registry

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and mirror configuration.")

_console = Console()


async def _check_http(client: httpx.AsyncClient, url: str) -> tuple[bool, str]:
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__
    return response.status_code < 400, f"HTTP {response.status_code}"


async def _check_registries(settings: AppSettings) -> list[tuple[Registry, bool, str]]:
    async with build_async_client(settings) as client:
        checks = [_check_http(client, settings.base_url_for(registry) + "/") for registry in Registry]
        outcomes = await asyncio.gather(*checks)
    return [(registry, ok, detail) for registry, (ok, detail) in zip(Registry, outcomes)]


@app.command()
def run() -> None:
    """Show the effective configuration and probe every registry mirror."""

    settings = AppSettings()

    table = Table(title="rsef-stats Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    env_file = get_user_env_file()
    table.add_row("User config", "OK" if env_file.exists() else "OPTIONAL", str(env_file))
    table.add_row("Text decoding", "OK", f"{settings.text_encoding} (errors={settings.decode_errors})")
    table.add_row("HTTP timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    # Connectivity (best-effort)
    for registry, ok, detail in asyncio.run(_check_registries(settings)):
        table.add_row(
            f"{registry.label()} mirror",
            "OK" if ok else "FAIL",
            f"{settings.base_url_for(registry)} -> {detail}",
        )

    _console.print(table)


@app.command(name="set-mirror")
def set_mirror(
    registry: str = typer.Argument(..., help="afrinic | apnic | arin | lacnic | ripe"),
    url: str = typer.Argument(..., help="Base URL that holds the delegated-*-extended files."),
) -> None:
    """Persist a base URL override in the user config .env."""

    try:
        target = Registry.parse(registry)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    url = url.strip().rstrip("/")
    if not url.startswith(("http://", "https://")):
        raise typer.BadParameter("url must start with http:// or https://")

    env_path = write_user_env_vars({base_url_env_var(target): url})
    _console.print(f"[green]Saved {target.label()} mirror to:[/green] {env_path}")
