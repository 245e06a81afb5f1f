from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from tagrecon.domain.model import DiffCategory, SourceKind, SourceRecord
from tagrecon.domain.reconcile import reconcile, summarize

if TYPE_CHECKING:
    from tagrecon.domain.model import AttributeBag


def _record(kind: SourceKind, *tags: str) -> SourceRecord:
    entries: dict[str, AttributeBag] = {tag: {"source": str(kind)} for tag in tags}
    return SourceRecord(kind=kind, entries=entries)


def test_union_order_follows_primary_then_metadata_then_catalog() -> None:
    master = reconcile(
        primary=_record(SourceKind.PRIMARY, "B", "A"),
        metadata=_record(SourceKind.METADATA, "C", "A"),
        catalog=_record(SourceKind.CATALOG, "D", "C"),
    )

    assert list(master) == ["B", "A", "C", "D"]


def test_presence_matches_defining_sources() -> None:
    master = reconcile(
        primary=_record(SourceKind.PRIMARY, "A", "B"),
        metadata=_record(SourceKind.METADATA, "B", "C"),
        catalog=_record(SourceKind.CATALOG, "C", "D"),
    )

    assert master["A"].presence == {SourceKind.PRIMARY}
    assert master["B"].presence == {SourceKind.PRIMARY, SourceKind.METADATA}
    assert master["C"].presence == {SourceKind.METADATA, SourceKind.CATALOG}
    assert master["D"].presence == {SourceKind.CATALOG}
    assert all(record.presence for record in master.values())
    assert all(tag == record.tag for tag, record in master.items())


def test_diff_category_ignores_catalog_presence() -> None:
    master = reconcile(
        primary=_record(SourceKind.PRIMARY, "A", "B"),
        metadata=_record(SourceKind.METADATA, "B", "C"),
        catalog=_record(SourceKind.CATALOG, "A", "B", "C", "D"),
    )

    assert master["A"].diff_category is DiffCategory.ONLY_PRIMARY
    assert master["B"].diff_category is DiffCategory.BOTH
    assert master["C"].diff_category is DiffCategory.ONLY_METADATA
    assert master["D"].diff_category is DiffCategory.NEITHER


def test_primary_only_tag_is_only_primary(primary_record: SourceRecord) -> None:
    master = reconcile(primary=primary_record, metadata=_record(SourceKind.METADATA))

    assert master["T001"].diff_category is DiffCategory.ONLY_PRIMARY
    assert master["T001"].metadata is None
    assert master["T001"].catalog is None


def test_records_reference_source_bags(
    primary_record: SourceRecord,
    metadata_record: SourceRecord,
    catalog_record: SourceRecord,
) -> None:
    master = reconcile(primary_record, metadata_record, catalog_record)

    assert master["T002"].primary is primary_record["T002"]
    assert master["T002"].metadata is metadata_record["T002"]
    assert master["T003"].catalog is catalog_record["T003"]


def test_absent_sources_contribute_nothing() -> None:
    assert reconcile() == {}

    master = reconcile(metadata=_record(SourceKind.METADATA, "A"))

    assert list(master) == ["A"]
    assert master["A"].presence == {SourceKind.METADATA}
    assert master["A"].diff_category is DiffCategory.ONLY_METADATA


def test_reconcile_is_idempotent(
    primary_record: SourceRecord,
    metadata_record: SourceRecord,
    catalog_record: SourceRecord,
) -> None:
    first = reconcile(primary_record, metadata_record, catalog_record)
    second = reconcile(primary_record, metadata_record, catalog_record)

    assert first == second
    assert list(first) == list(second)


def test_reconcile_rejects_records_in_the_wrong_slot() -> None:
    with pytest.raises(ValueError, match="Expected a primary source record"):
        reconcile(primary=_record(SourceKind.METADATA, "A"))


def test_summarize_counts_categories(
    primary_record: SourceRecord,
    metadata_record: SourceRecord,
    catalog_record: SourceRecord,
) -> None:
    master = reconcile(primary_record, metadata_record, catalog_record)

    summary = summarize(master.values())

    assert summary.total == 5
    assert summary.both == 1
    assert summary.only_primary == 2
    assert summary.only_metadata == 1
    assert summary.neither == 1
    assert summary.catalog_total == 2
    assert summary.primary_total == 3
    assert summary.metadata_total == 2
