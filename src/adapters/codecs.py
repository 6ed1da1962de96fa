"""Descompresión de listados como transformaciones de stream.

APNIC publica `.gz`, RIPE NCC `.bz2` y el resto texto plano. Los codecs de
la stdlib (`gzip`, `bz2`) leen de forma incremental sobre cualquier objeto
con `read()`, así que la descarga nunca se carga entera en memoria.
"""

from __future__ import annotations

import bz2
import gzip
import io
from pathlib import Path
from typing import BinaryIO

from core.domain.registry import Codec


class _OwningStream(io.RawIOBase):
    """Stream descomprimido que al cerrarse cierra también el transporte.

    `GzipFile` y `BZ2File` no cierran el fichero que reciben.
    """

    def __init__(self, decoded: BinaryIO, transport: BinaryIO) -> None:
        self._decoded = decoded
        self._transport = transport

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        data = self._decoded.read(len(buffer))
        size = len(data)
        buffer[:size] = data
        return size

    def close(self) -> None:
        if not self.closed:
            try:
                self._decoded.close()
            finally:
                self._transport.close()
        super().close()


def open_decompressed(stream: BinaryIO, codec: Codec) -> BinaryIO:
    """Envuelve `stream` con el descompresor de `codec`."""

    if codec is Codec.NONE:
        return stream
    if codec is Codec.GZIP:
        decoded: BinaryIO = gzip.GzipFile(fileobj=stream, mode="rb")  # type: ignore[assignment]
    elif codec is Codec.BZIP2:
        decoded = bz2.BZ2File(stream, mode="rb")  # type: ignore[assignment]
    else:  # pragma: no cover
        raise ValueError(f"Unsupported codec: {codec}")
    return io.BufferedReader(_OwningStream(decoded, stream))


def codec_for_path(path: Path) -> Codec:
    suffix = path.suffix.lower()
    if suffix in (".gz", ".gzip"):
        return Codec.GZIP
    if suffix in (".bz2", ".bzip2"):
        return Codec.BZIP2
    return Codec.NONE


def open_listing_file(path: Path) -> BinaryIO:
    """Abre un listado local, descomprimiendo según la extensión."""

    return open_decompressed(path.open("rb"), codec_for_path(path))
