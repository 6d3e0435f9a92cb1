"""
Shared fixtures: fast settings and an in-memory HTTP session double.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
import requests

from pricescan.scraping.config.models import PriceScanSettings, ShopSource


class FakeResponse:
    def __init__(self, body: str | bytes, status_code: int = 200) -> None:
        self.status_code = status_code
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self.closed = False

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        for start in range(0, len(self._body), chunk_size):
            yield self._body[start : start + chunk_size]

    def close(self) -> None:
        self.closed = True


class FakeSession:
    """
    Maps URLs to a response, an exception, or a list of those (one per call).
    Unknown URLs answer 404.
    """

    def __init__(self, routes: dict[str, object] | None = None) -> None:
        self.routes: dict[str, object] = dict(routes or {})
        self.calls: list[tuple[str, dict[str, str]]] = []

    def get(self, url: str, *, headers=None, timeout=None, allow_redirects=True, stream=False):
        self.calls.append((url, dict(headers or {})))
        route = self.routes.get(url)
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
        if route is None:
            return FakeResponse("not found", status_code=404)
        if isinstance(route, BaseException):
            raise route
        if isinstance(route, FakeResponse):
            return route
        return FakeResponse(str(route))

    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


@pytest.fixture()
def settings(tmp_path) -> PriceScanSettings:
    return PriceScanSettings(
        sources_path=str(tmp_path / "shops.json"),
        timeout_ms=2000,
        retries=0,
        backoff_step_seconds=0.0,
        product_delay_ms=0,
        shop_delay_ms=0,
        output_json=str(tmp_path / "report.json"),
        output_csv=str(tmp_path / "report.csv"),
    )


@pytest.fixture()
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture()
def make_source():
    def _make(name: str, *templates: str, domain: str | None = None) -> ShopSource:
        return ShopSource(
            name=name,
            domain=domain or f"www.{name}.example",
            search_url_templates=tuple(templates or (f"https://www.{name}.example/search?q={{query}}",)),
        )

    return _make


@pytest.fixture()
def timeout_error() -> requests.Timeout:
    return requests.Timeout("read timed out")
