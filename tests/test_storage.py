"""
tests/test_storage.py

JSON/CSV report sinks, the export schema and debug file naming.
"""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone

import pytest

from pricescan.domain.price_scan import (
    Blocked,
    CatalogProduct,
    Found,
    PriceStats,
    ProductPriceReport,
    RunReport,
    ShopAttemptSummary,
    ShopHealthEntry,
)
from pricescan.schemas import to_document
from pricescan.scraping.aggregation import CSV_COLUMNS
from pricescan.scraping.storage import CsvReportSink, JsonReportSink, debug_file_name, slugify


@pytest.fixture()
def run_report() -> RunReport:
    priced = ProductPriceReport(
        product_id="p1",
        title='Fortis NXT 720W "Pro"',
        handle="fortis",
        query="Fox Lighting Fortis NXT 720W",
        manufacturer="Fox Lighting",
        reference_price=169.99,
        stats=PriceStats(lowest=179.0, average=179.0, highest=179.0, samples=1),
        sampled_shops=1,
        blocked_shops=1,
        total_shops=2,
        links=("https://a.example/p",),
        shop_results=(
            ShopAttemptSummary(
                shop="a",
                outcome=Found(PriceStats(179.0, 179.0, 179.0, 1)),
                duration_ms=420,
                url="https://a.example/p",
                matched_links=("https://a.example/p",),
            ),
            ShopAttemptSummary(shop="b", outcome=Blocked("captcha"), duration_ms=80, url="https://b.example/s"),
        ),
    )
    unpriced = ProductPriceReport(
        product_id="p2",
        title="Perlite",
        handle="",
        query="Perlite",
        manufacturer=None,
        reference_price=None,
        stats=None,
        sampled_shops=0,
        blocked_shops=0,
        total_shops=2,
    )
    return RunReport(
        generated_at=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        config={"provider": "shop-list", "totalProducts": 2},
        shop_health=[ShopHealthEntry(shop="a", runs=2, avg_duration_ms=210.0, timeouts_in_row=0, skipped=0)],
        results=[priced, unpriced],
    )


class TestJsonReportSink:
    def test_camel_case_document(self, tmp_path, run_report) -> None:
        path = JsonReportSink(tmp_path / "out" / "report.json").write(run_report)
        payload = json.loads(path.read_text(encoding="utf-8"))

        assert payload["config"] == {"provider": "shop-list", "totalProducts": 2}
        assert payload["shopHealth"][0] == {
            "shop": "a",
            "runs": 2,
            "avgDurationMs": 210.0,
            "timeoutsInRow": 0,
            "skipped": 0,
        }
        first = payload["results"][0]
        assert first["productId"] == "p1"
        assert first["status"] == "ok"
        assert first["sampledShops"] == 1
        assert first["shopResults"][0]["matchedLinks"] == ["https://a.example/p"]
        assert first["shopResults"][1] == {
            "shop": "b",
            "status": "blocked",
            "durationMs": 80,
            "url": "https://b.example/s",
            "info": "captcha",
        }

    def test_absent_values_are_omitted(self, tmp_path, run_report) -> None:
        path = JsonReportSink(tmp_path / "report.json").write(run_report)
        second = json.loads(path.read_text(encoding="utf-8"))["results"][1]

        assert second["status"] == "no_prices_found"
        for key in ("lowest", "average", "highest", "samples", "manufacturer", "referencePrice"):
            assert key not in second


class TestCsvReportSink:
    def test_rows_are_quoted(self, tmp_path, run_report) -> None:
        path = CsvReportSink(tmp_path / "report.csv").write(run_report)
        lines = path.read_text(encoding="utf-8").splitlines()

        assert lines[0] == ",".join(f'"{column}"' for column in CSV_COLUMNS)
        assert lines[1].startswith('"p1","Fox Lighting","Fortis NXT 720W ""Pro""","fortis"')
        assert lines[2] == '"p2","","Perlite","","Perlite","no_prices_found","","","","","","0","0","2"'

    def test_readable_as_csv(self, tmp_path, run_report) -> None:
        path = CsvReportSink(tmp_path / "report.csv").write(run_report)
        with path.open(encoding="utf-8", newline="") as handle:
            rows = list(csv.DictReader(handle))
        assert rows[0]["lowest"] == "179.0"
        assert rows[0]["blockedShops"] == "1"


def test_document_model_roundtrips_aliases(run_report) -> None:
    document = to_document(run_report)
    assert document.results[0].shop_results[0].samples == 1
    assert document.model_dump(by_alias=True)["generatedAt"] == run_report.generated_at


class TestDebugFileNames:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("Fox Lighting / Fortis", "fox-lighting-fortis"),
            ("--Grow_Shop--", "grow_shop"),
            ("", "item"),
            ("äöü", "item"),
            ("x" * 100, "x" * 80),
        ],
    )
    def test_slugify(self, raw: str, expected: str) -> None:
        assert slugify(raw) == expected

    def test_numbered_from_one_and_prefers_handle(self) -> None:
        product = CatalogProduct(product_id="p", title="Fortis NXT", handle="fortis-nxt")
        assert debug_file_name(4, product, "Grow Shop") == "005-fortis-nxt-grow-shop.html"

    def test_falls_back_to_title(self) -> None:
        product = CatalogProduct(product_id="p", title="Fortis NXT")
        assert debug_file_name(0, product, "a") == "001-fortis-nxt-a.html"
