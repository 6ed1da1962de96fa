from __future__ import annotations

import io

import pytest

from core.domain.errors import ListingReadError
from core.services.line_source import LineSource
from core.services.parser import parse


class _FlakyStream(io.RawIOBase):
    # Serves `payload`, then fails like a connection reset mid-download.
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:  # type: ignore[no-untyped-def]
        if not self._payload:
            raise ConnectionResetError("connection reset by peer")
        size = min(len(buffer), len(self._payload))
        buffer[:size] = self._payload[:size]
        self._payload = self._payload[size:]
        return size


def test_read_line_strips_terminators_and_signals_end() -> None:
    source = LineSource(io.BytesIO(b"first\nsecond\r\nthird"))
    assert source.read_line() == "first"
    assert source.read_line() == "second"
    assert source.read_line() == "third"
    assert source.read_line() is None
    assert source.line_no == 3


def test_blank_lines_are_emitted() -> None:
    assert list(LineSource(io.BytesIO(b"a\n\nb\n"))) == ["a", "", "b"]


def test_reads_incrementally_from_raw_stream() -> None:
    raw = _FlakyStream(b"one\ntwo\n")
    source = LineSource(raw)  # type: ignore[arg-type]
    assert source.read_line() == "one"
    assert source.read_line() == "two"


def test_io_failure_is_a_read_error() -> None:
    source = LineSource(io.BufferedReader(_FlakyStream(b"one\nincomplete")))
    with pytest.raises(ListingReadError) as excinfo:
        list(source)
    assert isinstance(excinfo.value.__cause__, ConnectionResetError)


def test_io_failure_aborts_parse() -> None:
    stream = io.BufferedReader(_FlakyStream(b"ripencc|*|asn|*|1|summary\n"))
    with pytest.raises(ListingReadError):
        parse(stream)


def test_strict_decoding_fails_on_invalid_bytes() -> None:
    with pytest.raises(ListingReadError):
        LineSource(io.BytesIO(b"caf\xe9\n")).read_line()


def test_replace_policy_keeps_going() -> None:
    source = LineSource(io.BytesIO(b"caf\xe9\n"), errors="replace")
    assert source.read_line() == "caf�"


def test_alternative_encoding() -> None:
    source = LineSource(io.BytesIO(b"caf\xe9\n"), encoding="latin-1")
    assert source.read_line() == "café"


class _ReadOnly:
    # Only `read(n)`, like a minimal third-party file wrapper.
    def __init__(self, payload: bytes) -> None:
        self._payload = payload

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            size = len(self._payload)
        chunk, self._payload = self._payload[:size], self._payload[size:]
        return chunk


def test_parses_stream_with_only_read(sample_bytes: bytes) -> None:
    entries = parse(_ReadOnly(sample_bytes))  # type: ignore[arg-type]
    assert len(entries) == 8
