"""Merge normalized source records into one master record per tag."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .model import DiffCategory, MasterRecord, SourceKind

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import MasterMapping, SourceRecord, TagKey

log = getLogger(__name__)


def reconcile(
    primary: SourceRecord | None = None,
    metadata: SourceRecord | None = None,
    catalog: SourceRecord | None = None,
) -> MasterMapping:
    """Return the master mapping for whichever sources are loaded.

    The result is keyed by the union of tags across the present sources, in
    first-seen order (Primary, then Metadata, then Catalog). Absent sources
    contribute neither entries nor presence; that is a provisional result, not
    an error.
    """

    sources = {
        SourceKind.PRIMARY: primary,
        SourceKind.METADATA: metadata,
        SourceKind.CATALOG: catalog,
    }
    for kind, record in sources.items():
        if record is not None and record.kind is not kind:
            raise ValueError(f"Expected a {kind} source record, got {record.kind}")

    union: dict[TagKey, None] = {}
    for record in sources.values():
        if record is not None:
            union.update(dict.fromkeys(record))

    master: MasterMapping = {
        tag: MasterRecord(
            tag=tag,
            primary=primary.get(tag) if primary is not None else None,
            metadata=metadata.get(tag) if metadata is not None else None,
            catalog=catalog.get(tag) if catalog is not None else None,
        )
        for tag in union
    }

    log.debug(
        "Reconciled %d tags (loaded: %s)",
        len(master),
        ", ".join(str(kind) for kind, record in sources.items() if record is not None) or "none",
    )
    return master


@dataclass(frozen=True, slots=True)
class ReconciliationSummary:
    """Tag counts per diff category and per source."""

    total: int
    both: int
    only_primary: int
    only_metadata: int
    neither: int
    catalog_total: int

    @property
    def primary_total(self) -> int:
        return self.both + self.only_primary

    @property
    def metadata_total(self) -> int:
        return self.both + self.only_metadata


def summarize(records: Iterable[MasterRecord]) -> ReconciliationSummary:
    """Count ``records`` by diff category; works on full or filtered sets alike."""

    categories: Counter[DiffCategory] = Counter()
    catalog_total = 0
    total = 0
    for record in records:
        total += 1
        categories[record.diff_category] += 1
        if record.catalog is not None:
            catalog_total += 1

    return ReconciliationSummary(
        total=total,
        both=categories[DiffCategory.BOTH],
        only_primary=categories[DiffCategory.ONLY_PRIMARY],
        only_metadata=categories[DiffCategory.ONLY_METADATA],
        neither=categories[DiffCategory.NEITHER],
        catalog_total=catalog_total,
    )
