"""Entry point de desarrollo de rsef-stats (sin instalar el paquete).

Ejemplos:
- `python -m main parse delegated-ripencc-extended-20190101.bz2 --json out.json`
- `python -m main fetch arin --date 2019-02-01`
- `python -m main fetch apnic --timestamp 1549056168 --limit 0`
- `python -m main fetch-all --registry ripe --registry lacnic -o listings/`
- `python -m main doctor run`
- `python -m main doctor set-mirror ripe https://mirror.example.net/ripe`

Con el paquete instalado (`pip install -e .`) los mismos comandos están en el
script `rsef-stats`.

Motivo:
- El código vive en `src/` (`core`, `adapters`, `cli`), así que sin instalar
  Python no encuentra esos paquetes.
"""

from __future__ import annotations

import sys
from pathlib import Path

_SRC = Path(__file__).resolve().parent / "src"


def _ensure_src_on_path() -> None:
    if str(_SRC) not in sys.path:
        sys.path.insert(0, str(_SRC))


def main() -> None:
    _ensure_src_on_path()

    from cli.main import run  # noqa: PLC0415

    run()


if __name__ == "__main__":
    main()
