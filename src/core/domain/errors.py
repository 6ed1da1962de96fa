"""Errores del dominio.

Por qué una jerarquía propia:
- La CLI y los consumidores capturan `RsefError` sin conocer httpx ni codecs.
- Los errores de parseo llevan la línea cruda, su número y la forma esperada
  para poder diagnosticar un listado corrupto o de otra versión.

Política:
- Todo error de parseo es fatal para la llamada: no hay resultados parciales.
"""

from __future__ import annotations

from datetime import date


class RsefError(Exception):
    """Base de todos los errores de rsef-stats."""


class ListingReadError(RsefError):
    """Fallo al leer el stream subyacente (I/O, conexión, decodificación)."""


class ListingParseError(RsefError):
    """Una línea no cumple la forma esperada para su tipo."""

    def __init__(self, *, line_no: int, line: str, expected: str, detail: str) -> None:
        self.line_no = line_no
        self.line = line
        self.expected = expected
        self.detail = detail
        super().__init__(f"line {line_no}: {detail}; expected {expected}: {line!r}")


class FieldCountError(ListingParseError):
    """La línea tiene menos campos de los que requiere su tipo."""

    def __init__(self, *, line_no: int, line: str, expected: str, found: int) -> None:
        self.found = found
        super().__init__(
            line_no=line_no,
            line=line,
            expected=expected,
            detail=f"found {found} field(s)",
        )


class NumericDecodeError(ListingParseError):
    """Un campo numérico no contiene un entero o decimal válido."""

    def __init__(self, *, line_no: int, line: str, expected: str, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(
            line_no=line_no,
            line=line,
            expected=expected,
            detail=f"field {field!r} is not numeric ({value!r})",
        )


class ListingFetchError(RsefError):
    """No se pudo obtener el listado de un registro."""


class FutureDateError(ListingFetchError):
    """La fecha pedida es posterior a hoy."""

    def __init__(self, requested: date, today: date) -> None:
        self.requested = requested
        self.today = today
        super().__init__(f"Requested date {requested.isoformat()} is after today ({today.isoformat()})")


class UnavailableListingError(ListingFetchError):
    """El registro no publica un listado para la fecha pedida."""
