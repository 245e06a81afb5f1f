"""Value types shared by the normalizer, reconciliation engine and query layer."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TypedDict

type TagKey = str
type AttributeBag = Mapping[str, object]


class SourceKind(StrEnum):
    """Independent tag providers, declared in field-resolution precedence order."""

    PRIMARY = "primary"
    METADATA = "metadata"
    CATALOG = "catalog"


class DiffCategory(StrEnum):
    """Classification of a tag by Primary/Metadata membership."""

    BOTH = "both"
    ONLY_PRIMARY = "only_primary"
    ONLY_METADATA = "only_metadata"
    NEITHER = "neither"

    @classmethod
    def classify(cls, presence: frozenset[SourceKind]) -> DiffCategory:
        in_primary = SourceKind.PRIMARY in presence
        in_metadata = SourceKind.METADATA in presence
        if in_primary and in_metadata:
            return cls.BOTH
        if in_primary:
            return cls.ONLY_PRIMARY
        if in_metadata:
            return cls.ONLY_METADATA
        return cls.NEITHER


@dataclass(frozen=True, slots=True)
class SourceRecord(Mapping[TagKey, AttributeBag]):
    """Read-only tag -> attribute bag mapping produced by one source."""

    kind: SourceKind
    entries: Mapping[TagKey, AttributeBag] = field(default_factory=dict[TagKey, AttributeBag])

    def __post_init__(self) -> None:
        frozen = {tag: MappingProxyType(dict(bag)) for tag, bag in self.entries.items()}
        object.__setattr__(self, "entries", MappingProxyType(frozen))

    def __getitem__(self, tag: TagKey) -> AttributeBag:
        return self.entries[tag]

    def __iter__(self) -> Iterator[TagKey]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class MasterRecord:
    """Merged view of one tag across every loaded source."""

    tag: TagKey
    primary: AttributeBag | None = None
    metadata: AttributeBag | None = None
    catalog: AttributeBag | None = None

    def source(self, kind: SourceKind) -> AttributeBag | None:
        if kind is SourceKind.PRIMARY:
            return self.primary
        if kind is SourceKind.METADATA:
            return self.metadata
        return self.catalog

    @property
    def presence(self) -> frozenset[SourceKind]:
        return frozenset(kind for kind in SourceKind if self.source(kind) is not None)

    @property
    def diff_category(self) -> DiffCategory:
        return DiffCategory.classify(self.presence)


type MasterMapping = dict[TagKey, MasterRecord]


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Conjunctive filter over a master mapping.

    ``diff_category=None`` is the wildcard; an empty ``search_text`` or ``unit``
    matches every record.
    """

    search_text: str = ""
    unit: str | None = None
    diff_category: DiffCategory | None = None

    @classmethod
    def from_strings(
        cls,
        *,
        search_text: str = "",
        unit: str | None = None,
        diff_category: str = "all",
    ) -> FilterCriteria:
        category = None if diff_category in {"", "all"} else DiffCategory(diff_category)
        return cls(search_text=search_text, unit=unit or None, diff_category=category)


class ExportRow(TypedDict):
    """Flat projection of one master record handed to spreadsheet/CSV writers."""

    Tag: str
    Description: str
    Value: object
    Status: object
    Unit: str
    Created: str
    DiffCategory: str
    PresenceFlags: str
    Path: str
