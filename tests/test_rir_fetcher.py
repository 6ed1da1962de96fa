from __future__ import annotations

import asyncio
import bz2
import gzip
import threading
from datetime import date
from typing import Iterator

import httpx
import pytest

from adapters.rir_fetcher import (
    HttpListingFetcher,
    check_availability,
    date_from_timestamp,
    fetch_listings,
    listing_url,
)
from core.config import AppSettings
from core.domain.errors import (
    FutureDateError,
    ListingFetchError,
    ListingReadError,
    UnavailableListingError,
)
from core.domain.registry import Registry
from core.interfaces.fetcher import ListingFetcher
from core.services.parser import parse

TODAY = date(2019, 2, 2)


def _clock() -> date:
    return TODAY


@pytest.mark.parametrize(
    ("registry", "url"),
    [
        (
            Registry.AFRINIC,
            "https://ftp.afrinic.net/pub/stats/afrinic/2019/delegated-afrinic-extended-20190201",
        ),
        (
            Registry.APNIC,
            "https://ftp.apnic.net/stats/apnic/2019/delegated-apnic-extended-20190201.gz",
        ),
        (Registry.ARIN, "https://ftp.arin.net/pub/stats/arin/delegated-arin-extended-20190201"),
        (Registry.LACNIC, "https://ftp.lacnic.net/pub/stats/lacnic/delegated-lacnic-extended-20190201"),
        (
            Registry.RIPE,
            "https://ftp.ripe.net/pub/stats/ripencc/2019/delegated-ripencc-extended-20190201.bz2",
        ),
    ],
)
def test_listing_url_templates(registry: Registry, url: str, settings: AppSettings) -> None:
    assert listing_url(registry, date(2019, 2, 1), settings) == url


def test_day_and_month_are_zero_padded(settings: AppSettings) -> None:
    assert listing_url(Registry.ARIN, date(2019, 10, 5), settings).endswith("-20191005")


def test_date_from_timestamp_uses_utc_day() -> None:
    # Friday 1 February 2019 21:22:48 UTC
    assert date_from_timestamp(1_549_056_168) == date(2019, 2, 1)


def test_future_date_is_rejected() -> None:
    with pytest.raises(FutureDateError):
        check_availability(Registry.ARIN, date(2019, 2, 3), TODAY)


def test_same_day_only_for_flat_registries() -> None:
    check_availability(Registry.ARIN, TODAY, TODAY)
    check_availability(Registry.LACNIC, TODAY, TODAY)
    with pytest.raises(UnavailableListingError):
        check_availability(Registry.RIPE, TODAY, TODAY)


def _fetcher(settings: AppSettings, handler) -> HttpListingFetcher:  # type: ignore[no-untyped-def]
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpListingFetcher(settings, client=client, clock=_clock)


def test_http_fetcher_satisfies_protocol(settings: AppSettings) -> None:
    assert isinstance(HttpListingFetcher(settings), ListingFetcher)


@pytest.mark.parametrize(
    ("registry", "encode"),
    [
        (Registry.ARIN, lambda body: body),
        (Registry.APNIC, gzip.compress),
        (Registry.RIPE, bz2.compress),
    ],
)
def test_resolve_streams_decompressed_listing(
    registry: Registry, encode, settings: AppSettings, sample_bytes: bytes
) -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(str(request.url))
        return httpx.Response(200, content=encode(sample_bytes))

    fetcher = _fetcher(settings, handler)
    with fetcher.resolve(registry, date(2019, 2, 1)) as stream:
        entries = parse(stream)

    assert requested == [listing_url(registry, date(2019, 2, 1), settings)]
    assert len(entries) == 8


def test_resolve_404_is_unavailable(settings: AppSettings) -> None:
    fetcher = _fetcher(settings, lambda request: httpx.Response(404))
    with pytest.raises(UnavailableListingError):
        fetcher.resolve(Registry.LACNIC, date(2019, 2, 1))


def test_resolve_server_error(settings: AppSettings) -> None:
    fetcher = _fetcher(settings, lambda request: httpx.Response(503))
    with pytest.raises(ListingFetchError, match="HTTP 503"):
        fetcher.resolve(Registry.ARIN, date(2019, 2, 1))


def test_resolve_connection_error(settings: AppSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route to host", request=request)

    fetcher = _fetcher(settings, handler)
    with pytest.raises(ListingFetchError, match="no route to host"):
        fetcher.resolve(Registry.ARIN, date(2019, 2, 1))


def test_resolve_checks_date_before_network(settings: AppSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("network must not be touched")

    fetcher = _fetcher(settings, handler)
    with pytest.raises(FutureDateError):
        fetcher.resolve(Registry.ARIN, date(2020, 1, 1))


class _ResetStream(httpx.SyncByteStream):
    def __init__(self, first_chunk: bytes) -> None:
        self._first_chunk = first_chunk

    def __iter__(self) -> Iterator[bytes]:
        yield self._first_chunk
        raise httpx.ReadError("connection reset by peer")


def test_interrupted_download_aborts_parse(settings: AppSettings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, stream=_ResetStream(b"2.3|arin|20190101|1|19700101|20190101|-0500\n"))

    fetcher = _fetcher(settings, handler)
    with fetcher.resolve(Registry.ARIN, date(2019, 2, 1)) as stream:
        with pytest.raises(ListingReadError, match="interrupted"):
            parse(stream)


def test_fetch_listings_collects_per_registry_results(settings: AppSettings, sample_bytes: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if "apnic" in request.url.path:
            return httpx.Response(200, content=gzip.compress(sample_bytes))
        if "lacnic" in request.url.path:
            return httpx.Response(404)
        return httpx.Response(200, content=b"arin|US|ipv4\n")

    results = asyncio.run(
        fetch_listings(
            [Registry.APNIC, Registry.LACNIC, Registry.ARIN, Registry.RIPE],
            TODAY,
            settings=settings,
            transport=httpx.MockTransport(handler),
            clock=_clock,
        )
    )

    by_registry = {result.registry: result for result in results}
    assert [result.registry for result in results] == [
        Registry.APNIC,
        Registry.LACNIC,
        Registry.ARIN,
        Registry.RIPE,
    ]
    assert "historical" in (by_registry[Registry.APNIC].error or "")
    assert "404" in (by_registry[Registry.LACNIC].error or "")
    assert "line 1" in (by_registry[Registry.ARIN].error or "")
    assert "historical" in (by_registry[Registry.RIPE].error or "")


def test_fetch_listings_parses_previous_day(settings: AppSettings, sample_bytes: bytes) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=bz2.compress(sample_bytes))

    (result,) = asyncio.run(
        fetch_listings(
            [Registry.RIPE],
            date(2019, 2, 1),
            settings=settings,
            transport=httpx.MockTransport(handler),
            clock=_clock,
        )
    )
    assert result.ok
    assert len(result.entries) == 8
    assert result.url.endswith("delegated-ripencc-extended-20190201.bz2")


def test_fetch_listings_parses_off_the_event_loop(
    settings: AppSettings, sample_bytes: bytes, monkeypatch: pytest.MonkeyPatch
) -> None:
    # Parsing a large listing must not stall the other downloads.
    parse_threads: list[int] = []

    def recording_parse(stream, **kwargs):  # type: ignore[no-untyped-def]
        parse_threads.append(threading.get_ident())
        return parse(stream, **kwargs)

    monkeypatch.setattr("adapters.rir_fetcher.parse", recording_parse)

    def handler(request: httpx.Request) -> httpx.Response:
        if "apnic" in request.url.path:
            return httpx.Response(200, content=gzip.compress(sample_bytes))
        return httpx.Response(200, content=bz2.compress(sample_bytes))

    async def run() -> tuple[int, list]:
        results = await fetch_listings(
            [Registry.APNIC, Registry.RIPE],
            date(2019, 2, 1),
            settings=settings,
            transport=httpx.MockTransport(handler),
            clock=_clock,
        )
        return threading.get_ident(), results

    loop_thread, results = asyncio.run(run())

    assert all(result.ok and len(result.entries) == 8 for result in results)
    assert len(parse_threads) == 2
    assert loop_thread not in parse_threads
