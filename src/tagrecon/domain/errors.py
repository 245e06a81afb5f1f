"""Errors raised by the reconciliation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .model import SourceKind


class TagReconError(RuntimeError):
    """Base class for tagrecon domain errors."""


class TransportError(TagReconError):
    """Raised when a catalog page cannot be retrieved or decoded."""

    def __init__(self, message: str, *, page: int, status_code: int | None = None) -> None:
        super().__init__(message)
        self.page = page
        self.status_code = status_code


class MalformedSourceError(TagReconError):
    """Raised when a raw source payload does not have the expected shape."""

    def __init__(self, message: str, *, kind: SourceKind) -> None:
        super().__init__(f"{kind} source: {message}")
        self.kind = kind


class IncompleteReconciliationError(TagReconError):
    """Raised when a final result is requested while expected sources are missing."""

    def __init__(self, missing: Iterable[SourceKind]) -> None:
        self.missing = tuple(missing)
        names = ", ".join(str(kind) for kind in self.missing)
        super().__init__(f"Reconciliation is provisional; missing sources: {names}")
