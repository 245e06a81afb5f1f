"""Display-field resolution across sources.

Every exported field is looked up through a fixed precedence table: the Primary
getter first, then Metadata, then Catalog. ``None`` in the table means the
source has no equivalent field. The first non-empty value wins.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Final

from .model import SourceKind

if TYPE_CHECKING:
    from .model import AttributeBag, MasterRecord

type FieldGetter = Callable[[AttributeBag], object]


def _key(name: str) -> FieldGetter:
    def getter(bag: AttributeBag) -> object:
        return bag.get(name)

    return getter


def _nested(*path: str) -> FieldGetter:
    def getter(bag: AttributeBag) -> object:
        current: object = bag
        for name in path:
            if not isinstance(current, Mapping):
                return None
            current = current.get(name)
        return current

    return getter


def _first_of(*getters: FieldGetter) -> FieldGetter:
    def getter(bag: AttributeBag) -> object:
        for candidate in getters:
            value = candidate(bag)
            if not _is_empty(value):
                return value
        return None

    return getter


def _created(bag: AttributeBag) -> object:
    created = bag.get("CREATED")
    if isinstance(created, Mapping):
        return created.get("$date")
    return created


def _paths(bag: AttributeBag) -> object:
    paths = bag.get("paths")
    if not isinstance(paths, Sequence) or isinstance(paths, str):
        return paths
    rendered = [_render_path(entry) for entry in paths]
    return "; ".join(entry for entry in rendered if entry)


def _render_path(entry: object) -> str:
    if isinstance(entry, Mapping):
        value = entry.get("path")
        return "" if value is None else str(value)
    if isinstance(entry, Sequence) and not isinstance(entry, str):
        return "/".join(str(part) for part in entry)
    return "" if entry is None else str(entry)


FIELD_PRECEDENCE: Final[dict[str, dict[SourceKind, FieldGetter | None]]] = {
    "Description": {
        SourceKind.PRIMARY: _key("DESCR"),
        SourceKind.METADATA: _first_of(_key("description"), _key("name")),
        SourceKind.CATALOG: _key("description"),
    },
    "Value": {
        SourceKind.PRIMARY: _key("VALUE"),
        SourceKind.METADATA: None,
        SourceKind.CATALOG: _key("lastValue"),
    },
    "Status": {
        SourceKind.PRIMARY: _key("STATUS"),
        SourceKind.METADATA: None,
        SourceKind.CATALOG: None,
    },
    "Unit": {
        SourceKind.PRIMARY: _key("UNIT"),
        SourceKind.METADATA: _nested("unit", "unitSymbol"),
        SourceKind.CATALOG: _key("unitSymbol"),
    },
    "Created": {
        SourceKind.PRIMARY: _created,
        SourceKind.METADATA: None,
        SourceKind.CATALOG: _key("lastTimestamp"),
    },
    "Path": {
        SourceKind.PRIMARY: None,
        SourceKind.METADATA: None,
        SourceKind.CATALOG: _paths,
    },
}

# Per-source getters used by the search and unit predicates.
DESCRIPTION_FIELDS: Final[dict[SourceKind, FieldGetter]] = {
    SourceKind.PRIMARY: _key("DESCR"),
    SourceKind.METADATA: _key("description"),
    SourceKind.CATALOG: _key("description"),
}
UNIT_FIELDS: Final[dict[SourceKind, FieldGetter]] = {
    SourceKind.PRIMARY: _key("UNIT"),
    SourceKind.METADATA: _nested("unit", "unitSymbol"),
    SourceKind.CATALOG: _key("unitSymbol"),
}


def _is_empty(value: object) -> bool:
    return value is None or value == ""


def resolve_field(record: MasterRecord, name: str) -> object:
    """Return the first non-empty value for ``name`` in source precedence order."""

    table = FIELD_PRECEDENCE[name]
    for kind in SourceKind:
        getter = table.get(kind)
        bag = record.source(kind)
        if getter is None or bag is None:
            continue
        value = getter(bag)
        if not _is_empty(value):
            return value
    return None


def source_values(
    record: MasterRecord, getters: Mapping[SourceKind, FieldGetter]
) -> list[object]:
    """Return the value of each per-source getter for the sources present on ``record``."""

    values: list[object] = []
    for kind, getter in getters.items():
        bag = record.source(kind)
        if bag is not None:
            values.append(getter(bag))
    return values
