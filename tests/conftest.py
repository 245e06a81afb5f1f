from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from tagrecon.adapters.http_resilience import ResilientClient
from tagrecon.config import CatalogApiConfig, ResilienceConfig
from tagrecon.domain.model import SourceKind
from tagrecon.domain.normalize import normalize

if TYPE_CHECKING:
    from collections.abc import Callable

    from tagrecon.domain.model import SourceRecord

CATALOG_URL = "https://catalog.test/SensorEdge/GetTags"


@pytest.fixture
def primary_payload() -> list[dict[str, object]]:
    return [
        {
            "_id": {"$oid": "6650f0c2e4b0a1a2b3c4d5e6"},
            "__v": 0,
            "createdAt": {"$date": "2024-05-01T10:00:00Z"},
            "updatedAt": {"$date": "2024-05-02T10:00:00Z"},
            "T001": {
                "DESCR": "Main Engine RPM",
                "VALUE": 712.5,
                "STATUS": "OK",
                "UNIT": "rpm",
                "CREATED": {"$date": "2023-11-20T08:15:00Z"},
            },
            "T002": {
                "DESCR": "Lube Oil Pressure",
                "VALUE": 4.2,
                "STATUS": "OK",
                "UNIT": "bar",
                "CREATED": "2023-11-21T09:00:00Z",
            },
            "T003": {
                "DESCR": "Fuel Oil Temperature",
                "VALUE": 98,
                "STATUS": "ALARM",
                "UNIT": "degC",
            },
        }
    ]


@pytest.fixture
def metadata_payload() -> list[dict[str, object]]:
    return [
        {
            "tag": "T002",
            "metadata": {
                "description": "LO pressure after filter",
                "unit": {"unitSymbol": "psi"},
            },
        },
        {
            "tag": "T004",
            "metadata": {
                "description": "Ballast pump running",
                "name": "BP1 RUN",
                "unit": {"unitSymbol": ""},
            },
        },
    ]


@pytest.fixture
def catalog_payload() -> list[dict[str, object]]:
    return [
        {
            "sourceTag": "T003",
            "description": "FO temp engine inlet",
            "lastValue": 97.8,
            "lastTimestamp": "2024-06-01T12:00:00Z",
            "unitSymbol": "degC",
            "paths": [{"path": "Engine/FuelOil/Inlet"}],
        },
        {
            "sourceTag": "T005",
            "description": "Hull stress sensor",
            "lastValue": 12,
            "lastTimestamp": "2024-06-01T12:05:00Z",
            "unitSymbol": "MPa",
            "paths": [{"path": "Hull/Frame40"}, {"path": "Structure/Stress"}],
        },
    ]


@pytest.fixture
def primary_record(primary_payload: list[dict[str, object]]) -> SourceRecord:
    return normalize(SourceKind.PRIMARY, primary_payload)


@pytest.fixture
def metadata_record(metadata_payload: list[dict[str, object]]) -> SourceRecord:
    return normalize(SourceKind.METADATA, metadata_payload)


@pytest.fixture
def catalog_record(catalog_payload: list[dict[str, object]]) -> SourceRecord:
    return normalize(SourceKind.CATALOG, catalog_payload)


@pytest.fixture
def catalog_config() -> CatalogApiConfig:
    return CatalogApiConfig(
        base_url=CATALOG_URL,
        entity_id=9278234,
        page_size=1000,
        resilience=ResilienceConfig(name="catalog-test"),
    )


@pytest.fixture
def make_client_factory() -> Callable[
    [Callable[[httpx.Request], httpx.Response]],
    Callable[[ResilienceConfig], ResilientClient],
]:
    def build(
        handler: Callable[[httpx.Request], httpx.Response],
    ) -> Callable[[ResilienceConfig], ResilientClient]:
        def factory(resilience: ResilienceConfig) -> ResilientClient:
            return ResilientClient(resilience, transport=httpx.MockTransport(handler))

        return factory

    return build
