"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP) y servicios (line source) lean config de
  forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.registry import Registry


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "rsef-stats"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "rsef-stats"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "rsef-stats"
    return Path.home() / ".config" / "rsef-stats"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        try:
            existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))
        except OSError:
            existing = {}

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# rsef-stats user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


def base_url_env_var(registry: Registry) -> str:
    """Nombre de la variable de entorno que sobreescribe la URL base."""

    return f"RSEF_STATS_{registry.name}_BASE_URL"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="RSEF_STATS_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout por request (segundos). Los listados pesan decenas de MB.",
    )
    user_agent: str = Field(
        default="rsef-stats/0.2 (+https://local)",
        min_length=1,
        description="User-Agent para las descargas.",
    )
    fetch_max_concurrency: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Descargas simultáneas máximas en `fetch-all`.",
    )

    text_encoding: str = Field(
        default="utf-8",
        min_length=1,
        description="Codificación de texto de los listados.",
    )
    decode_errors: Literal["strict", "replace", "ignore"] = Field(
        default="strict",
        description="Política ante bytes no decodificables (strict aborta el parseo).",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Nivel de logging de la CLI.",
    )

    # Mirrors: cada RIR publica en su propio FTP/HTTP.
    afrinic_base_url: str = Field(
        default="https://ftp.afrinic.net/pub/stats/afrinic",
        min_length=8,
    )
    apnic_base_url: str = Field(
        default="https://ftp.apnic.net/stats/apnic",
        min_length=8,
    )
    arin_base_url: str = Field(
        default="https://ftp.arin.net/pub/stats/arin",
        min_length=8,
    )
    lacnic_base_url: str = Field(
        default="https://ftp.lacnic.net/pub/stats/lacnic",
        min_length=8,
    )
    ripe_base_url: str = Field(
        default="https://ftp.ripe.net/pub/stats/ripencc",
        min_length=8,
    )

    def base_url_for(self, registry: Registry) -> str:
        return str(getattr(self, f"{registry.value}_base_url")).rstrip("/")
