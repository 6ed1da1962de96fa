"""Exportación JSON de un listado parseado.

Por qué JSON:
- Interoperabilidad con otras herramientas (jq, pipelines, bases de datos).
- Cada entrada conserva su discriminador `kind` (version/summary/record).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from core.domain.models import ENTRIES_ADAPTER, Entry


def export_entries_json(*, entries: Sequence[Entry], output_path: Path) -> Path:
    """Exporta las entradas a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = ENTRIES_ADAPTER.dump_python(list(entries), mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
