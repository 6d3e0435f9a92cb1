"""
tests/test_aggregation.py

Statistics, product report assembly, export rows and link listing.
"""

from __future__ import annotations

import pytest

from pricescan.domain.price_scan import (
    Blocked,
    CatalogProduct,
    Failed,
    Found,
    NotFound,
    PriceStats,
    ShopAttempt,
    ShopAttemptSummary,
    ShopStatus,
)
from pricescan.scraping.aggregation import (
    CSV_COLUMNS,
    build_product_report,
    compute_stats,
    format_shop_links,
    report_row,
)

PRODUCT = CatalogProduct(product_id="p1", title="Fortis NXT 720W", handle="fortis", manufacturer="Fox Lighting", reference_price=169.994)


def _found(shop: str, *prices: float, links: tuple[str, ...] = ()) -> ShopAttempt:
    return ShopAttempt(
        summary=ShopAttemptSummary(shop=shop, outcome=Found(compute_stats(prices)), matched_links=links),
        prices=prices,
    )


class TestComputeStats:
    def test_empty_pool(self) -> None:
        assert compute_stats([]) is None

    def test_single_value(self) -> None:
        assert compute_stats([179.0]) == PriceStats(lowest=179.0, average=179.0, highest=179.0, samples=1)

    def test_average_is_rounded(self) -> None:
        stats = compute_stats([10.0, 10.0, 10.01])
        assert stats.average == 10.0
        assert stats.samples == 3

    @pytest.mark.parametrize("values", [[1.0, 2.0, 3.0], [5.5], [999.99, 0.01, 45.0, 45.0]])
    def test_ordering_invariant(self, values) -> None:
        stats = compute_stats(values)
        assert stats.lowest <= stats.average <= stats.highest
        assert stats.samples == len(values)


class TestBuildProductReport:
    def test_counts_and_links(self) -> None:
        attempts = [
            _found("a", 170.0, links=("https://a.example/p",)),
            ShopAttempt(summary=ShopAttemptSummary(shop="b", outcome=Blocked("captcha"))),
            ShopAttempt(
                summary=ShopAttemptSummary(
                    shop="c",
                    outcome=NotFound("no prices on matched product pages"),
                    matched_links=("https://c.example/p",),
                )
            ),
            _found("d", 170.0, 190.0, links=("https://d.example/p",)),
        ]
        report = build_product_report(product=PRODUCT, query="q", attempts=attempts, total_shops=5)

        assert report.status == ShopStatus.OK
        assert report.stats.samples == 3
        assert report.sampled_shops == 2
        assert report.blocked_shops == 1
        assert report.total_shops == 5
        assert report.links == ("https://a.example/p", "https://d.example/p")
        assert report.reference_price == 169.99
        assert [item.shop for item in report.shop_results] == ["a", "b", "c", "d"]

    def test_non_positive_reference_price_is_dropped(self) -> None:
        product = CatalogProduct(product_id="p", title="x", reference_price=0.0)
        report = build_product_report(product=product, query="x", attempts=[], total_shops=0)
        assert report.reference_price is None
        assert report.status == ShopStatus.NO_PRICES_FOUND


class TestReportRow:
    def test_columns_and_absent_values(self) -> None:
        attempts = [ShopAttempt(summary=ShopAttemptSummary(shop="a", outcome=Failed("HTTP 500")))]
        report = build_product_report(product=PRODUCT, query="Fox Lighting Fortis NXT 720W", attempts=attempts, total_shops=1)
        row = report_row(report)

        assert tuple(row) == CSV_COLUMNS
        assert row["status"] == "no_prices_found"
        assert row["lowest"] is None
        assert row["samples"] is None
        assert row["sampledShops"] == 0
        assert row["totalShops"] == 1

    def test_priced_row(self) -> None:
        report = build_product_report(product=PRODUCT, query="q", attempts=[_found("a", 179.0)], total_shops=1)
        row = report_row(report)
        assert (row["lowest"], row["average"], row["highest"], row["samples"]) == (179.0, 179.0, 179.0, 1)


class TestFormatShopLinks:
    SUMMARIES = [
        _found("a", 179.0, links=("https://a.example/p", "https://a.example/p")).summary,
        ShopAttemptSummary(
            shop="b",
            outcome=NotFound("no prices on matched product pages"),
            matched_links=("https://b.example/p",),
        ),
        ShopAttemptSummary(shop="c", outcome=Failed("HTTP 500"), matched_links=("https://c.example/p",)),
    ]

    def test_ok_links_only(self) -> None:
        assert format_shop_links(self.SUMMARIES) == [
            "https://a.example/p  low=179.0 avg=179.0 high=179.0 (n=1)",
        ]

    def test_reachable_links_include_status(self) -> None:
        lines = format_shop_links(self.SUMMARIES, include_reachable=True)
        assert lines[1] == "https://b.example/p  status=no_prices_found (no prices on matched product pages)"
        assert len(lines) == 2
