"""Fuente de líneas sobre un stream binario.

Por qué existe:
- El parser solo entiende texto línea a línea; quien lo alimenta puede ser un
  fichero local, una respuesta HTTP en streaming o un descompresor gzip/bz2.
- Lee exactamente una línea por llamada (no carga el listado entero).

Contrato:
- `read_line()` devuelve la línea sin terminador, o `None` al final.
- Cualquier fallo de I/O o de decodificación se re-lanza como
  `ListingReadError` y aborta el parseo.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Iterator

from core.domain.errors import ListingReadError


class _ReadAdapter(io.RawIOBase):
    """Expone un objeto que solo tiene `read(n)` como `RawIOBase`."""

    def __init__(self, source) -> None:  # type: ignore[no-untyped-def]
        self._source = source

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        chunk = self._source.read(len(buffer))
        if not chunk:
            return 0
        size = len(chunk)
        buffer[:size] = chunk
        return size


class LineSource:
    """Lector incremental de líneas de texto."""

    def __init__(
        self,
        stream: BinaryIO,
        *,
        encoding: str = "utf-8",
        errors: str = "strict",
    ) -> None:
        if not hasattr(stream, "readline"):
            if not hasattr(stream, "readinto"):
                stream = _ReadAdapter(stream)  # type: ignore[assignment]
            stream = io.BufferedReader(stream)  # type: ignore[arg-type]
        self._stream = stream
        self._encoding = encoding
        self._errors = errors
        self.line_no = 0

    def read_line(self) -> str | None:
        try:
            raw = self._stream.readline()
        except (OSError, EOFError) as exc:
            # EOFError: truncated gzip/bz2 payload.
            raise ListingReadError(f"Read failed after line {self.line_no}: {exc}") from exc

        if not raw:
            return None

        self.line_no += 1
        if raw.endswith(b"\n"):
            raw = raw[:-1]
            if raw.endswith(b"\r"):
                raw = raw[:-1]

        try:
            return raw.decode(self._encoding, self._errors)
        except UnicodeDecodeError as exc:
            raise ListingReadError(f"line {self.line_no}: cannot decode as {self._encoding}: {exc}") from exc

    def __iter__(self) -> Iterator[str]:
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line
