"""JSON file sources and the persisted master snapshot."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from tagrecon.domain.errors import MalformedSourceError
from tagrecon.domain.model import MasterRecord, SourceKind

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from tagrecon.domain.model import MasterMapping

log = getLogger(__name__)


def read_json(path: Path, *, kind: SourceKind) -> object:
    """Decode one JSON source file; decoding failures surface as ``MalformedSourceError``."""

    raw = path.read_bytes()
    try:
        return json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedSourceError(f"{path} is not valid UTF-8 JSON: {exc}", kind=kind) from exc


def write_json(path: Path, payload: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")


class SnapshotEntry(BaseModel):
    """One persisted master record."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    tag: str
    primary: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    catalog: dict[str, Any] | None = None
    presence: list[SourceKind] = Field(default_factory=list)
    diff_category: str = Field(alias="diffCategory")

    @classmethod
    def from_record(cls, record: MasterRecord) -> SnapshotEntry:
        return cls(
            tag=record.tag,
            primary=_plain(record.primary),
            metadata=_plain(record.metadata),
            catalog=_plain(record.catalog),
            presence=[kind for kind in SourceKind if kind in record.presence],
            diff_category=str(record.diff_category),
        )

    def to_record(self) -> MasterRecord:
        return MasterRecord(
            tag=self.tag,
            primary=self.primary,
            metadata=self.metadata,
            catalog=self.catalog,
        )


_SNAPSHOT_ADAPTER = TypeAdapter(dict[str, SnapshotEntry])


def _plain(bag: Mapping[str, object] | None) -> dict[str, Any] | None:
    return None if bag is None else dict(bag)


def write_master_snapshot(path: Path, master: MasterMapping) -> None:
    """Persist ``master`` as one JSON object per tag, keyed by tag."""

    entries = {tag: SnapshotEntry.from_record(record) for tag, record in master.items()}
    payload = _SNAPSHOT_ADAPTER.dump_python(entries, mode="json", by_alias=True)
    write_json(path, payload)
    log.info("Wrote master snapshot with %d tags to %s", len(entries), path)


def read_master_snapshot(path: Path) -> MasterMapping:
    """Rebuild a master mapping from ``write_master_snapshot`` output."""

    raw = path.read_text(encoding="utf-8")
    try:
        entries = _SNAPSHOT_ADAPTER.validate_json(raw)
    except ValidationError as exc:
        raise ValueError(f"Invalid master snapshot {path}: {exc}") from exc

    master: MasterMapping = {}
    for tag, entry in entries.items():
        record = entry.to_record()
        if record.tag != tag:
            raise ValueError(f"Snapshot entry {tag!r} carries mismatching tag {record.tag!r}")
        if not record.presence:
            raise ValueError(f"Snapshot entry {tag!r} has no contributing source")
        master[tag] = record
    return master
