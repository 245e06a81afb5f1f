"""Domain core: normalization, reconciliation and querying of sensor tags."""

from __future__ import annotations

from .errors import (
    IncompleteReconciliationError,
    MalformedSourceError,
    TagReconError,
    TransportError,
)
from .model import (
    DiffCategory,
    ExportRow,
    FilterCriteria,
    MasterMapping,
    MasterRecord,
    SourceKind,
    SourceRecord,
)
from .normalize import normalize
from .pipeline import ReconciliationPipeline
from .query import export_rows, query, unit_options
from .reconcile import ReconciliationSummary, reconcile, summarize

__all__ = [
    "DiffCategory",
    "ExportRow",
    "FilterCriteria",
    "IncompleteReconciliationError",
    "MalformedSourceError",
    "MasterMapping",
    "MasterRecord",
    "ReconciliationPipeline",
    "ReconciliationSummary",
    "SourceKind",
    "SourceRecord",
    "TagReconError",
    "TransportError",
    "export_rows",
    "normalize",
    "query",
    "reconcile",
    "summarize",
    "unit_options",
]
