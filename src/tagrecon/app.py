"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from tagrecon.adapters.catalog import CatalogClient
from tagrecon.adapters.json_files import read_json, write_json, write_master_snapshot
from tagrecon.config import get_catalog_config
from tagrecon.domain.errors import MalformedSourceError, TransportError
from tagrecon.domain.model import SourceKind
from tagrecon.domain.pipeline import ReconciliationPipeline

if TYPE_CHECKING:
    from collections.abc import Awaitable
    from pathlib import Path

    from tagrecon.config import SourceFilesConfig
    from tagrecon.domain.ports import CatalogPageFetcher
    from tagrecon.domain.reconcile import ReconciliationSummary

log = getLogger(__name__)


@dataclass(slots=True)
class LoadReport:
    """Outcome of loading every configured source into a pipeline."""

    pipeline: ReconciliationPipeline
    failures: dict[SourceKind, Exception] = field(default_factory=dict["SourceKind", "Exception"])

    @property
    def is_complete(self) -> bool:
        return not self.failures and self.pipeline.is_complete


def build_catalog_client(*, max_pages: int | None = None) -> CatalogClient:
    return CatalogClient(
        config=get_catalog_config(),
        max_pages=max_pages,
    )


async def load_sources_async(
    files: SourceFilesConfig,
    *,
    catalog_fetcher: CatalogPageFetcher | None = None,
) -> LoadReport:
    """Load every configured source concurrently and reconcile what arrived.

    The catalog comes from ``catalog_fetcher`` when given, else from
    ``files.catalog_path``. A source that fails to load is logged and left
    absent; it never contributes partial data.
    """

    jobs: dict[SourceKind, Awaitable[object]] = {}
    if files.primary_path is not None:
        jobs[SourceKind.PRIMARY] = asyncio.to_thread(
            read_json, files.primary_path, kind=SourceKind.PRIMARY
        )
    if files.metadata_path is not None:
        jobs[SourceKind.METADATA] = asyncio.to_thread(
            read_json, files.metadata_path, kind=SourceKind.METADATA
        )
    if catalog_fetcher is not None:
        jobs[SourceKind.CATALOG] = catalog_fetcher.fetch_all_async()
    elif files.catalog_path is not None:
        jobs[SourceKind.CATALOG] = asyncio.to_thread(
            read_json, files.catalog_path, kind=SourceKind.CATALOG
        )

    pipeline = ReconciliationPipeline(expected=frozenset(jobs))
    report = LoadReport(pipeline=pipeline)

    payloads = await asyncio.gather(*jobs.values(), return_exceptions=True)
    for kind, payload in zip(jobs, payloads, strict=True):
        if isinstance(payload, (TransportError, MalformedSourceError, OSError)):
            log.error("Failed to load %s source: %s", kind, payload)
            report.failures[kind] = payload
            continue
        if isinstance(payload, BaseException):
            raise payload
        try:
            pipeline.load(kind, payload)
        except MalformedSourceError as exc:
            log.error("Failed to normalize %s source: %s", kind, exc)
            report.failures[kind] = exc

    return report


def load_sources(
    files: SourceFilesConfig,
    *,
    catalog_fetcher: CatalogPageFetcher | None = None,
) -> LoadReport:
    return asyncio.run(load_sources_async(files, catalog_fetcher=catalog_fetcher))


def fetch_catalog_to_file(
    destination: Path,
    *,
    client: CatalogClient | None = None,
    page_size: int | None = None,
) -> int:
    """Fetch the full catalog and write the raw items to ``destination``."""

    active_client = client or build_catalog_client()
    items = active_client.fetch_all(page_size=page_size)
    write_json(destination, items)
    log.info("Wrote %d catalog tags to %s", len(items), destination)
    return len(items)


def compare_sources(
    files: SourceFilesConfig,
    *,
    snapshot_path: Path | None = None,
    catalog_fetcher: CatalogPageFetcher | None = None,
) -> ReconciliationSummary:
    """Reconcile the configured sources, log a summary and optionally persist the result."""

    report = load_sources(files, catalog_fetcher=catalog_fetcher)
    pipeline = report.pipeline
    summary = pipeline.summary()

    log.info(
        "Tags: total=%s primary=%s metadata=%s catalog=%s both=%s "
        "only_primary=%s only_metadata=%s neither=%s",
        summary.total,
        summary.primary_total,
        summary.metadata_total,
        summary.catalog_total,
        summary.both,
        summary.only_primary,
        summary.only_metadata,
        summary.neither,
    )
    if not report.is_complete:
        log.warning(
            "Result is provisional; failed sources: %s",
            ", ".join(str(kind) for kind in report.failures) or "none",
        )

    if snapshot_path is not None:
        write_master_snapshot(snapshot_path, pipeline.master)
    return summary
