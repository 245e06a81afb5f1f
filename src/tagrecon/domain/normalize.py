"""Turn raw per-source payloads into ``SourceRecord`` mappings.

Each source has its own shape:

- Primary: one document keyed by tag, sometimes wrapped in a one-element list.
  The document also carries bookkeeping keys about itself (ids, timestamps,
  age counters) which are dropped.
- Metadata: a list of ``{"tag": ..., "metadata": {...}}`` pairs.
- Catalog: a list of flat items keyed by ``sourceTag``.

No cross-source knowledge enters this step. Any shape violation raises
``MalformedSourceError`` before a record is built, so callers never see a
partially populated source.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from logging import getLogger
from typing import Final

from .errors import MalformedSourceError
from .model import AttributeBag, SourceKind, SourceRecord, TagKey

log = getLogger(__name__)

PRIMARY_DOCUMENT_DENYLIST: Final[frozenset[str]] = frozenset(
    {
        "_id",
        "__v",
        "id",
        "createdAt",
        "updatedAt",
        "created_at",
        "updated_at",
        "modifiedAt",
        "lastModified",
        "age",
        "updateAge",
        "updatedAgo",
    }
)

METADATA_TAG_FIELD: Final[str] = "tag"
METADATA_BAG_FIELD: Final[str] = "metadata"
CATALOG_TAG_FIELD: Final[str] = "sourceTag"


def normalize(kind: SourceKind, payload: object) -> SourceRecord:
    """Build the ``SourceRecord`` for ``kind`` from its raw decoded payload."""

    if kind is SourceKind.PRIMARY:
        entries = _primary_entries(payload)
    elif kind is SourceKind.METADATA:
        entries = _metadata_entries(payload)
    else:
        entries = _catalog_entries(payload)

    log.debug("Normalized %s source: %d tags", kind, len(entries))
    return SourceRecord(kind=kind, entries=entries)


def _is_sequence(payload: object) -> bool:
    return isinstance(payload, Sequence) and not isinstance(payload, (str, bytes))


def _primary_entries(payload: object) -> dict[TagKey, AttributeBag]:
    document = payload
    if _is_sequence(payload):
        items = list(payload)  # type: ignore[arg-type]
        if not items:
            raise MalformedSourceError(
                "expected a document, got an empty list", kind=SourceKind.PRIMARY
            )
        document = items[0]
    if not isinstance(document, Mapping):
        raise MalformedSourceError(
            f"expected an object keyed by tag, got {type(document).__name__}",
            kind=SourceKind.PRIMARY,
        )

    entries: dict[TagKey, AttributeBag] = {}
    skipped: list[str] = []
    for key, value in document.items():
        if key in PRIMARY_DOCUMENT_DENYLIST:
            continue
        if not isinstance(value, Mapping):
            skipped.append(str(key))
            continue
        entries[str(key)] = value
    if skipped:
        log.warning(
            "Skipped %d non-object entries in primary document: %s",
            len(skipped),
            ", ".join(skipped[:5]),
        )
    return entries


def _require_items(payload: object, kind: SourceKind) -> list[object]:
    if not _is_sequence(payload):
        raise MalformedSourceError(
            f"expected a list of entries, got {type(payload).__name__}", kind=kind
        )
    return list(payload)  # type: ignore[arg-type]


def _metadata_entries(payload: object) -> dict[TagKey, AttributeBag]:
    entries: dict[TagKey, AttributeBag] = {}
    for index, item in enumerate(_require_items(payload, SourceKind.METADATA)):
        if not isinstance(item, Mapping):
            raise MalformedSourceError(f"entry {index} is not an object", kind=SourceKind.METADATA)
        tag = item.get(METADATA_TAG_FIELD)
        if not isinstance(tag, str):
            raise MalformedSourceError(
                f"entry {index} has no {METADATA_TAG_FIELD!r} field", kind=SourceKind.METADATA
            )
        bag = item.get(METADATA_BAG_FIELD)
        if bag is None:
            bag = {}
        elif not isinstance(bag, Mapping):
            raise MalformedSourceError(
                f"entry {index} ({tag}) has a non-object {METADATA_BAG_FIELD!r}",
                kind=SourceKind.METADATA,
            )
        if tag in entries:
            log.debug("Duplicate metadata tag %s at entry %d; keeping the later one", tag, index)
        entries[tag] = bag
    return entries


def _catalog_entries(payload: object) -> dict[TagKey, AttributeBag]:
    entries: dict[TagKey, AttributeBag] = {}
    for index, item in enumerate(_require_items(payload, SourceKind.CATALOG)):
        if not isinstance(item, Mapping):
            raise MalformedSourceError(f"entry {index} is not an object", kind=SourceKind.CATALOG)
        tag = item.get(CATALOG_TAG_FIELD)
        if not isinstance(tag, str):
            raise MalformedSourceError(
                f"entry {index} has no {CATALOG_TAG_FIELD!r} field", kind=SourceKind.CATALOG
            )
        if tag in entries:
            log.debug("Duplicate catalog tag %s at entry %d; keeping the later one", tag, index)
        entries[tag] = {key: value for key, value in item.items() if key != CATALOG_TAG_FIELD}
    return entries
