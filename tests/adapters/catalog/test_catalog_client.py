"""Pagination behavior of the catalog client against a fake transport."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

from tagrecon.adapters.catalog import CatalogClient, should_cache_page
from tagrecon.domain.errors import TransportError

if TYPE_CHECKING:
    from collections.abc import Callable

    from tagrecon.adapters.http_resilience import ResilientClient
    from tagrecon.config import CatalogApiConfig, ResilienceConfig

    ClientFactoryBuilder = Callable[
        [Callable[[httpx.Request], httpx.Response]],
        Callable[[ResilienceConfig], ResilientClient],
    ]


class PagedCatalog:
    """Serves pre-sized pages and records every request it sees."""

    def __init__(self, page_sizes: list[int]) -> None:
        self.page_sizes = page_sizes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = int(request.url.params["page"])
        size = self.page_sizes[page - 1] if page <= len(self.page_sizes) else 0
        items = [{"sourceTag": f"P{page}-{index}"} for index in range(size)]
        return httpx.Response(status_code=200, json=items)


def _client(
    config: CatalogApiConfig,
    handler: Callable[[httpx.Request], httpx.Response],
    make_client_factory: ClientFactoryBuilder,
    **kwargs: object,
) -> CatalogClient:
    factory = make_client_factory(handler)
    return CatalogClient(config=config, client_factory=factory, **kwargs)  # type: ignore[arg-type]


def test_fetch_all_stops_after_partial_page(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    catalog = PagedCatalog([1000, 1000, 437])

    items = _client(catalog_config, catalog, make_client_factory).fetch_all(page_size=1000)

    assert len(items) == 2437
    assert len(catalog.requests) == 3
    assert [int(request.url.params["page"]) for request in catalog.requests] == [1, 2, 3]


def test_fetch_all_stops_on_empty_page_without_appending(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    catalog = PagedCatalog([1000, 0])

    items = _client(catalog_config, catalog, make_client_factory).fetch_all(page_size=1000)

    assert len(items) == 1000
    assert len(catalog.requests) == 2


def test_fetch_all_preserves_page_order(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    catalog = PagedCatalog([2, 2, 1])

    items = _client(catalog_config, catalog, make_client_factory).fetch_all(page_size=2)

    assert [item["sourceTag"] for item in items] == [  # type: ignore[index]
        "P1-0",
        "P1-1",
        "P2-0",
        "P2-1",
        "P3-0",
    ]


def test_fetch_all_sends_catalog_query_parameters(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    catalog = PagedCatalog([3])

    _client(catalog_config, catalog, make_client_factory).fetch_all()

    params = catalog.requests[0].url.params
    assert catalog.requests[0].url.path == "/SensorEdge/GetTags"
    assert params["entityId"] == "9278234"
    assert params["sortDesc"] == "false"
    assert params["page"] == "1"
    assert params["pageSize"] == "1000"
    assert params["addCounter"] == "false"


def test_fetch_all_stops_when_page_is_not_a_list(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.params["page"] == "1":
            return httpx.Response(200, json=[{"sourceTag": "A"}, {"sourceTag": "B"}])
        return httpx.Response(200, json={"message": "no more data"})

    items = _client(catalog_config, handler, make_client_factory).fetch_all(page_size=2)

    assert items == [{"sourceTag": "A"}, {"sourceTag": "B"}]
    assert len(requests) == 2


def test_fetch_all_raises_transport_error_on_http_failure(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["page"] == "2":
            return httpx.Response(503, text="unavailable")
        return httpx.Response(200, json=[{"sourceTag": "A"}, {"sourceTag": "B"}])

    client = _client(catalog_config, handler, make_client_factory)

    with pytest.raises(TransportError) as excinfo:
        client.fetch_all(page_size=2)

    assert excinfo.value.page == 2
    assert excinfo.value.status_code == 503


def test_fetch_all_raises_transport_error_on_malformed_body(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        del request
        return httpx.Response(200, content=b"<html>not json</html>")

    with pytest.raises(TransportError, match="Malformed body on page 1"):
        _client(catalog_config, handler, make_client_factory).fetch_all()


def test_fetch_all_wraps_network_errors(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as excinfo:
        _client(catalog_config, handler, make_client_factory).fetch_all()

    assert excinfo.value.page == 1
    assert excinfo.value.status_code is None


def test_fetch_all_honours_max_pages(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    catalog = PagedCatalog([2, 2, 2, 2])

    items = _client(catalog_config, catalog, make_client_factory, max_pages=2).fetch_all(
        page_size=2
    )

    assert len(items) == 4
    assert len(catalog.requests) == 2


def test_fetch_all_rejects_non_positive_page_size(
    catalog_config: CatalogApiConfig,
    make_client_factory: ClientFactoryBuilder,
) -> None:
    catalog = PagedCatalog([1])

    with pytest.raises(ValueError, match="page_size"):
        _client(catalog_config, catalog, make_client_factory).fetch_all(page_size=-1)

    assert catalog.requests == []


def test_should_cache_page_only_accepts_lists() -> None:
    assert should_cache_page([{"sourceTag": "A"}])
    assert should_cache_page([])
    assert not should_cache_page({"error": "boom"})
