"""Cross-checks a parsed listing against the counts it declares.

The version line announces how many record lines follow and each summary
line announces the record count for one resource type. Consumers use these
to spot truncated downloads; this module only reports, it never raises.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from core.domain.models import Entry, Record, ResourceType, Summary, Version


@dataclass
class ListingStats:
    """Declared versus observed counts for one listing."""

    version: Version | None = None
    declared: dict[ResourceType, int] = field(default_factory=dict)
    observed: dict[ResourceType, int] = field(default_factory=dict)
    records: int = 0
    mismatches: list[str] = field(default_factory=list)

    @property
    def consistent(self) -> bool:
        return not self.mismatches


def summarize_listing(entries: Sequence[Entry]) -> ListingStats:
    stats = ListingStats()
    observed: Counter[ResourceType] = Counter()

    for entry in entries:
        if isinstance(entry, Version):
            if stats.version is None:
                stats.version = entry
        elif isinstance(entry, Summary):
            stats.declared[entry.res_type] = stats.declared.get(entry.res_type, 0) + entry.count
        elif isinstance(entry, Record):
            observed[entry.res_type] += 1

    stats.observed = dict(observed)
    stats.records = sum(observed.values())

    if stats.version is not None and stats.version.records != stats.records:
        stats.mismatches.append(
            f"version line declares {stats.version.records} records, found {stats.records}"
        )

    for res_type, count in stats.declared.items():
        found = stats.observed.get(res_type, 0)
        if found != count:
            stats.mismatches.append(f"summary declares {count} {res_type.value} records, found {found}")

    return stats
