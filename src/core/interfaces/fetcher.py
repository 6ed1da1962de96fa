"""Contrato de obtención de listados.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- El parser no depende de HTTP: cualquier cosa que entregue un stream binario
  ya descomprimido (mirror local, caché, tests) es intercambiable.
"""

from __future__ import annotations

from datetime import date
from typing import BinaryIO, Protocol, runtime_checkable

from core.domain.registry import Registry


@runtime_checkable
class ListingFetcher(Protocol):
    """Contrato mínimo para una fuente de listados RSEF.

    Reglas de diseño:
    - `resolve` es síncrono: el stream se consume con `core.services.parser.parse`.
    - Devuelve un stream binario ya descomprimido; el llamador lo cierra.
    - Falla con `ListingFetchError` (o subclases) y un mensaje descriptivo.
    """

    def resolve(self, registry: Registry, day: date) -> BinaryIO:
        """Abre el listado de `registry` correspondiente a `day`."""

        ...
