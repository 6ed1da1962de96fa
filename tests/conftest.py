from __future__ import annotations

import pytest

from core.config import AppSettings

# Trimmed RIPE NCC extended listing: header comment, version, 3 summaries, 4 records.
SAMPLE_LISTING = """\
# RIPE NCC extended allocation and assignment report
2.3|ripencc|20190101|4|19830705|20190101|+0100
ripencc|*|asn|*|1|summary
ripencc|*|ipv4|*|2|summary
ripencc|*|ipv6|*|1|summary
ripencc|NL|asn|1103|1|19930901|allocated|2a1b3c4d
ripencc|NL|ipv4|192.0.2.0|256|20190101|allocated|A12345
ripencc|DE|ipv4|198.51.100.0|1024|20030101|assigned
ripencc|FR|ipv6|2001:db8::|32|20050101|allocated|f00dbabe
"""


@pytest.fixture
def sample_listing() -> str:
    return SAMPLE_LISTING


@pytest.fixture
def sample_bytes() -> bytes:
    return SAMPLE_LISTING.encode("ascii")


@pytest.fixture
def settings() -> AppSettings:
    # Ignore .env files so local mirrors never leak into tests.
    return AppSettings(_env_file=None)
