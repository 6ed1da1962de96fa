"""Descarga de listados `delegated-<rir>-extended-YYYYMMDD` por HTTP.

Reglas por registro:
- AFRINIC, APNIC y RIPE NCC archivan por año (`<base>/YYYY/...`) y solo
  publican listados históricos: el listado del día aún no existe.
- ARIN y LACNIC publican en un directorio plano, incluido el del día.
- APNIC comprime con gzip, RIPE NCC con bzip2.

Estos detalles viven en adapters porque son I/O puro (HTTP + codecs); el
Core solo recibe un stream binario ya descomprimido.
"""

from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import BinaryIO, Callable, Iterable

import httpx

from adapters.codecs import open_decompressed
from adapters.http_client import build_async_client, build_client
from core.config import AppSettings
from core.domain.errors import (
    FutureDateError,
    ListingFetchError,
    RsefError,
    UnavailableListingError,
)
from core.domain.models import Entry
from core.domain.registry import Codec, Registry
from core.interfaces.fetcher import ListingFetcher
from core.log import get_logger
from core.services.parser import parse

log = get_logger(__name__)

_CODEC_SUFFIX: dict[Codec, str] = {
    Codec.NONE: "",
    Codec.GZIP: ".gz",
    Codec.BZIP2: ".bz2",
}


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def date_from_timestamp(timestamp: int) -> date:
    """Fecha UTC de un epoch UNIX; solo se usan año, mes y día."""

    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


def listing_url(registry: Registry, day: date, settings: AppSettings | None = None) -> str:
    settings = settings or AppSettings()
    base = settings.base_url_for(registry)
    stamp = day.strftime("%Y%m%d")
    filename = f"delegated-{registry.listing_name}-extended-{stamp}{_CODEC_SUFFIX[registry.codec]}"
    if registry.archived_by_year:
        return f"{base}/{day.year:04d}/{filename}"
    return f"{base}/{filename}"


def check_availability(registry: Registry, day: date, today: date) -> None:
    """Valida la fecha antes de tocar la red."""

    if day > today:
        raise FutureDateError(day, today)
    if day == today and registry.archived_by_year:
        raise UnavailableListingError(
            f"{registry.label()} only publishes historical listings; "
            f"{day.isoformat()} is not available yet"
        )


def _raise_for_status(registry: Registry, url: str, status_code: int) -> None:
    if status_code == 404:
        raise UnavailableListingError(f"{registry.label()} has no listing at {url} (HTTP 404)")
    if status_code != 200:
        raise ListingFetchError(f"{registry.label()}: GET {url} returned HTTP {status_code}")


class _ResponseStream(io.RawIOBase):
    """Expone el cuerpo de una respuesta httpx en streaming como fichero binario."""

    def __init__(self, response: httpx.Response, on_close: Callable[[], None] | None = None) -> None:
        self._response = response
        self._chunks = response.iter_bytes()
        self._pending = b""
        self._on_close = on_close

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
            except httpx.HTTPError as exc:
                raise OSError(f"Transfer of {self._response.url} interrupted: {exc}") from exc

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        if not self.closed:
            try:
                self._response.close()
            finally:
                if self._on_close is not None:
                    self._on_close()
        super().close()


class HttpListingFetcher(ListingFetcher):
    """Abre listados RSEF directamente desde los servidores de cada RIR."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client: httpx.Client | None = None,
        clock: Callable[[], date] = today_utc,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client = client
        self._clock = clock

    def url_for(self, registry: Registry, day: date) -> str:
        return listing_url(registry, day, self._settings)

    def resolve(self, registry: Registry, day: date) -> BinaryIO:
        check_availability(registry, day, self._clock())
        url = self.url_for(registry, day)

        owns_client = self._client is None
        client = self._client or build_client(self._settings)
        log.info("Downloading %s listing for %s from %s", registry.label(), day.isoformat(), url)

        try:
            response = client.send(client.build_request("GET", url), stream=True)
        except httpx.HTTPError as exc:
            if owns_client:
                client.close()
            raise ListingFetchError(f"{registry.label()}: GET {url} failed: {exc}") from exc

        try:
            _raise_for_status(registry, url, response.status_code)
        except ListingFetchError:
            response.close()
            if owns_client:
                client.close()
            raise

        raw = io.BufferedReader(
            _ResponseStream(response, on_close=client.close if owns_client else None)
        )
        return open_decompressed(raw, registry.codec)


@dataclass
class ListingResult:
    """Resultado de descargar y parsear el listado de un registro."""

    registry: Registry
    url: str
    entries: list[Entry] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _decode_and_parse(payload: bytes, codec: Codec, settings: AppSettings) -> list[Entry]:
    # CPU-bound; runs in a worker thread so the other downloads keep going.
    with open_decompressed(io.BytesIO(payload), codec) as stream:
        return parse(stream, encoding=settings.text_encoding, errors=settings.decode_errors)


async def fetch_listings(
    registries: Iterable[Registry],
    day: date,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    clock: Callable[[], date] = today_utc,
) -> list[ListingResult]:
    """Descarga y parsea varios registros en paralelo.

    Cada registro es independiente: un fallo (fecha, HTTP, parseo) se
    registra en su `ListingResult.error` sin afectar al resto.
    La descompresión y el parseo corren en un hilo (`asyncio.to_thread`)
    para no bloquear el resto de descargas.
    """

    settings = settings or AppSettings()
    today = clock()
    semaphore = asyncio.Semaphore(settings.fetch_max_concurrency)

    async with build_async_client(settings, transport=transport) as client:

        async def fetch_one(registry: Registry) -> ListingResult:
            url = listing_url(registry, day, settings)
            result = ListingResult(registry=registry, url=url)
            try:
                check_availability(registry, day, today)
                async with semaphore:
                    log.info("Downloading %s", url)
                    try:
                        response = await client.get(url)
                    except httpx.HTTPError as exc:
                        raise ListingFetchError(f"{registry.label()}: GET {url} failed: {exc}") from exc
                _raise_for_status(registry, url, response.status_code)

                result.entries = await asyncio.to_thread(
                    _decode_and_parse, response.content, registry.codec, settings
                )
            except RsefError as exc:
                log.warning("%s: %s", registry.label(), exc)
                result.error = str(exc)
            return result

        return list(await asyncio.gather(*(fetch_one(registry) for registry in registries)))
