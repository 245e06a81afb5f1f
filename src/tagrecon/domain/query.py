"""Filtering and export projections over a master mapping."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .fields import DESCRIPTION_FIELDS, UNIT_FIELDS, resolve_field, source_values
from .model import SourceKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from .model import ExportRow, FilterCriteria, MasterRecord, TagKey

type QueryMatch = tuple[TagKey, MasterRecord]


def matches(tag: TagKey, record: MasterRecord, criteria: FilterCriteria) -> bool:
    return (
        _matches_search(tag, record, criteria.search_text)
        and _matches_unit(record, criteria.unit)
        and (criteria.diff_category is None or record.diff_category == criteria.diff_category)
    )


def _matches_search(tag: TagKey, record: MasterRecord, search_text: str) -> bool:
    if not search_text:
        return True
    needle = search_text.casefold()
    if needle in tag.casefold():
        return True
    return any(
        isinstance(value, str) and needle in value.casefold()
        for value in source_values(record, DESCRIPTION_FIELDS)
    )


def _matches_unit(record: MasterRecord, unit: str | None) -> bool:
    if not unit:
        return True
    return unit in source_values(record, UNIT_FIELDS)


def query(master: Mapping[TagKey, MasterRecord], criteria: FilterCriteria) -> list[QueryMatch]:
    """Return every ``(tag, record)`` matching ``criteria`` in master-mapping order."""

    return [(tag, record) for tag, record in master.items() if matches(tag, record, criteria)]


def _cell(value: object) -> str:
    return "" if value is None else str(value)


def export_row(tag: TagKey, record: MasterRecord) -> ExportRow:
    value = resolve_field(record, "Value")
    status = resolve_field(record, "Status")
    return {
        "Tag": tag,
        "Description": _cell(resolve_field(record, "Description")),
        "Value": "" if value is None else value,
        "Status": "" if status is None else status,
        "Unit": _cell(resolve_field(record, "Unit")),
        "Created": _cell(resolve_field(record, "Created")),
        "DiffCategory": str(record.diff_category),
        "PresenceFlags": "+".join(str(kind) for kind in SourceKind if kind in record.presence),
        "Path": _cell(resolve_field(record, "Path")),
    }


def export_rows(matches: Iterable[QueryMatch]) -> list[ExportRow]:
    """Project query matches onto flat rows for spreadsheet/CSV writers."""

    return [export_row(tag, record) for tag, record in matches]


def unit_options(master: Mapping[TagKey, MasterRecord]) -> list[str]:
    """Distinct non-empty units across all sources, for building unit filters."""

    units: set[str] = set()
    for record in master.values():
        units.update(
            value
            for value in source_values(record, UNIT_FIELDS)
            if isinstance(value, str) and value
        )
    return sorted(units)
