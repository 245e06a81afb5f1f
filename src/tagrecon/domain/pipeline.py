"""Explicit reconciliation pipeline with one slot per source."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import IncompleteReconciliationError
from .model import SourceKind, SourceRecord
from .normalize import normalize
from .query import export_rows, query
from .reconcile import ReconciliationSummary, reconcile, summarize

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import ExportRow, FilterCriteria, MasterMapping
    from .query import QueryMatch

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationPipeline:
    """Owns the current source snapshots and the master mapping derived from them.

    Every change to a slot rebuilds the master mapping from scratch, so readers
    always see a pure function of the current sources. Filtering never mutates
    the mapping.
    """

    expected: frozenset[SourceKind] = field(default_factory=lambda: frozenset(SourceKind))
    _sources: dict[SourceKind, SourceRecord] = field(
        default_factory=dict["SourceKind", "SourceRecord"], init=False, repr=False
    )
    _master: MasterMapping = field(default_factory=dict["str", "MasterRecord"], init=False)

    def load(self, kind: SourceKind, payload: object) -> SourceRecord:
        """Normalize ``payload`` into the ``kind`` slot.

        On ``MalformedSourceError`` the slot keeps its previous content.
        """

        record = normalize(kind, payload)
        self.set_source(record)
        return record

    def set_source(self, record: SourceRecord) -> None:
        self._sources[record.kind] = record
        log.info("Loaded %s source with %d tags", record.kind, len(record))
        self._recompute()

    def clear(self, kind: SourceKind) -> None:
        if self._sources.pop(kind, None) is not None:
            self._recompute()

    def source(self, kind: SourceKind) -> SourceRecord | None:
        return self._sources.get(kind)

    @property
    def loaded(self) -> frozenset[SourceKind]:
        return frozenset(self._sources)

    @property
    def missing_sources(self) -> tuple[SourceKind, ...]:
        return tuple(
            kind for kind in SourceKind if kind in self.expected and kind not in self._sources
        )

    @property
    def is_complete(self) -> bool:
        return not self.missing_sources

    @property
    def master(self) -> MasterMapping:
        return self._master

    def require_complete(self) -> MasterMapping:
        """Return the master mapping, raising if any expected source is still missing."""

        if not self.is_complete:
            raise IncompleteReconciliationError(self.missing_sources)
        return self._master

    def query(self, criteria: FilterCriteria) -> list[QueryMatch]:
        return query(self._master, criteria)

    def export(self, criteria: FilterCriteria) -> list[ExportRow]:
        return export_rows(self.query(criteria))

    def summary(self, matches: Iterable[QueryMatch] | None = None) -> ReconciliationSummary:
        if matches is None:
            return summarize(self._master.values())
        return summarize(record for _tag, record in matches)

    def _recompute(self) -> None:
        self._master = reconcile(
            primary=self._sources.get(SourceKind.PRIMARY),
            metadata=self._sources.get(SourceKind.METADATA),
            catalog=self._sources.get(SourceKind.CATALOG),
        )
        if not self.is_complete:
            log.debug(
                "Master mapping is provisional; waiting for %s",
                ", ".join(str(kind) for kind in self.missing_sources),
            )
