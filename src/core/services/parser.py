"""Clasificación y decodificación de líneas RSEF.

Cada línea se clasifica por su forma, no por su posición en el fichero:

- Versión: el primer campo solo contiene dígitos y puntos (`2.3|...`).
- Resumen: el sexto campo es el literal `summary`.
- Registro: cualquier otra línea.

Política fail-fast:
- Los listados son salida generada por máquina; una línea corta o un número
  ilegible indica una versión distinta o una transferencia corrupta.
- El primer error aborta el parseo completo, sin resultados parciales.
"""

from __future__ import annotations

import re
from typing import BinaryIO, Iterable

from core.domain.errors import FieldCountError, NumericDecodeError
from core.domain.models import U32_MAX, Entry, Record, ResourceType, Summary, Version
from core.log import get_logger
from core.services.line_source import LineSource

log = get_logger(__name__)

DELIMITER = "|"

_VERSION_TOKEN = re.compile(r"[0-9.]+")
_UNSIGNED = re.compile(r"[0-9]+")

_VERSION_SHAPE = "version|registry|serial|records|startdate|enddate|UTCoffset"
_SUMMARY_SHAPE = "registry|*|type|*|count|summary"
_RECORD_SHAPE = "registry|cc|type|start|value|date|status[|opaque-id]"


def is_version_line(fields: list[str]) -> bool:
    return _VERSION_TOKEN.fullmatch(fields[0]) is not None


def is_summary_line(fields: list[str]) -> bool:
    return len(fields) > 5 and fields[5] == "summary"


def _require(fields: list[str], count: int, *, line_no: int, line: str, shape: str) -> None:
    if len(fields) < count:
        raise FieldCountError(line_no=line_no, line=line, expected=shape, found=len(fields))


def _unsigned(value: str, *, field: str, line_no: int, line: str, shape: str) -> int:
    # Leading zeros are legal; more than 10 significant digits cannot fit in 32 bits.
    digits = value.lstrip("0") or "0"
    if _UNSIGNED.fullmatch(value) is None or len(digits) > 10 or int(digits) > U32_MAX:
        raise NumericDecodeError(line_no=line_no, line=line, expected=shape, field=field, value=value)
    return int(digits)


def _decimal(value: str, *, field: str, line_no: int, line: str, shape: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise NumericDecodeError(
            line_no=line_no, line=line, expected=shape, field=field, value=value
        ) from None


def parse_line(line: str, line_no: int = 1) -> Entry | None:
    """Decodifica una línea; devuelve `None` para comentarios y líneas en blanco."""

    if line.startswith("#") or not line.strip():
        return None

    fields = line.split(DELIMITER)

    if is_version_line(fields):
        _require(fields, 7, line_no=line_no, line=line, shape=_VERSION_SHAPE)
        return Version(
            version=_decimal(fields[0], field="version", line_no=line_no, line=line, shape=_VERSION_SHAPE),
            registry=fields[1],
            serial=fields[2],
            records=_unsigned(fields[3], field="records", line_no=line_no, line=line, shape=_VERSION_SHAPE),
            start_date=fields[4],
            end_date=fields[5],
            utc_offset=fields[6],
        )

    if is_summary_line(fields):
        return Summary(
            registry=fields[0],
            res_type=ResourceType.from_token(fields[2]),
            count=_unsigned(fields[4], field="count", line_no=line_no, line=line, shape=_SUMMARY_SHAPE),
        )

    _require(fields, 7, line_no=line_no, line=line, shape=_RECORD_SHAPE)
    return Record(
        registry=fields[0],
        organization=fields[1],
        res_type=ResourceType.from_token(fields[2]),
        start=fields[3],
        value=_unsigned(fields[4], field="value", line_no=line_no, line=line, shape=_RECORD_SHAPE),
        date=fields[5],
        status=fields[6],
        id=fields[7] if len(fields) > 7 else "",
    )


def parse_lines(lines: Iterable[str]) -> list[Entry]:
    """Parsea texto ya decodificado, una línea por elemento (sin terminador)."""

    entries: list[Entry] = []
    for line_no, line in enumerate(lines, start=1):
        entry = parse_line(line, line_no)
        if entry is not None:
            entries.append(entry)
    return entries


def parse(stream: BinaryIO, *, encoding: str = "utf-8", errors: str = "strict") -> list[Entry]:
    """Lee un listado RSEF completo desde un stream binario.

    Devuelve las entradas en el orden del fichero. Lanza `ListingReadError`
    si falla la lectura y `FieldCountError` / `NumericDecodeError` ante la
    primera línea mal formada.
    """

    source = LineSource(stream, encoding=encoding, errors=errors)
    log.debug("Parsing RSEF listing (encoding=%s, errors=%s)", encoding, errors)

    entries = parse_lines(source)

    log.info("Parsed %d entries from %d lines", len(entries), source.line_no)
    return entries
