"""Regional Internet Registries known to rsef-stats.

The registry set is closed: each member maps to exactly one listing URL
layout and compression codec, which the fetch adapters look up through
the helpers below. Keeping the enum in the domain layer lets the CLI,
the config and the adapters share it without importing each other.
"""

from __future__ import annotations

from enum import Enum


class Codec(str, Enum):
    """Compression applied by a registry to its published listings."""

    NONE = "none"
    GZIP = "gzip"
    BZIP2 = "bzip2"


class Registry(str, Enum):
    """The five Regional Internet Registries."""

    AFRINIC = "afrinic"
    APNIC = "apnic"
    ARIN = "arin"
    LACNIC = "lacnic"
    RIPE = "ripe"

    @classmethod
    def parse(cls, value: str) -> "Registry":
        """Resolve a registry from its name, case-insensitively.

        `ripencc` is accepted as an alias for RIPE because it is the token
        RIPE NCC writes into its own listings.
        """

        key = value.strip().lower()
        if key == "ripencc":
            return cls.RIPE
        try:
            return cls(key)
        except ValueError:
            names = ", ".join(member.value for member in cls)
            raise ValueError(f"Unknown registry {value!r} (expected one of: {names})") from None

    @property
    def listing_name(self) -> str:
        """Name used inside the published filenames."""

        return "ripencc" if self is Registry.RIPE else self.value

    @property
    def codec(self) -> Codec:
        return _CODECS[self]

    @property
    def archived_by_year(self) -> bool:
        """True when listings live under a `YYYY/` directory.

        These registries only publish historical listings there, so a
        same-day listing is never available.
        """

        return self in _YEAR_ARCHIVED

    def label(self) -> str:
        """Human readable label for tables and logging."""

        return "RIPE NCC" if self is Registry.RIPE else self.name


_CODECS: dict[Registry, Codec] = {
    Registry.AFRINIC: Codec.NONE,
    Registry.APNIC: Codec.GZIP,
    Registry.ARIN: Codec.NONE,
    Registry.LACNIC: Codec.NONE,
    Registry.RIPE: Codec.BZIP2,
}

_YEAR_ARCHIVED: frozenset[Registry] = frozenset(
    {Registry.AFRINIC, Registry.APNIC, Registry.RIPE}
)
