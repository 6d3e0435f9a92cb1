"""
Aggregation of per-shop samples into product statistics and export rows.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from pricescan.domain.price_scan import (
    CatalogProduct,
    PriceStats,
    ProductPriceReport,
    ShopAttempt,
    ShopAttemptSummary,
    ShopStatus,
)

CSV_COLUMNS: tuple[str, ...] = (
    "productId",
    "manufacturer",
    "title",
    "handle",
    "query",
    "status",
    "referencePrice",
    "lowest",
    "average",
    "highest",
    "samples",
    "sampledShops",
    "blockedShops",
    "totalShops",
)


def compute_stats(values: Iterable[float]) -> PriceStats | None:
    """
    Lowest/average/highest rounded to two decimals; None for an empty pool.
    """

    ordered = sorted(values)
    if not ordered:
        return None
    return PriceStats(
        lowest=round(ordered[0], 2),
        average=round(sum(ordered) / len(ordered), 2),
        highest=round(ordered[-1], 2),
        samples=len(ordered),
    )


def build_product_report(
    *,
    product: CatalogProduct,
    query: str,
    attempts: Sequence[ShopAttempt],
    total_shops: int,
) -> ProductPriceReport:
    """
    Fold all shop attempts for one product into its report.
    """

    pool: list[float] = []
    summaries: list[ShopAttemptSummary] = []
    for attempt in attempts:
        summaries.append(attempt.summary)
        pool.extend(attempt.prices)

    reference_price = product.reference_price
    if reference_price is not None and reference_price > 0:
        reference_price = round(reference_price, 2)
    else:
        reference_price = None

    ok_summaries = [summary for summary in summaries if summary.status == ShopStatus.OK]
    links = tuple(link for summary in ok_summaries for link in summary.matched_links if link)
    return ProductPriceReport(
        product_id=product.product_id,
        title=product.title,
        handle=product.handle,
        query=query,
        manufacturer=product.manufacturer,
        reference_price=reference_price,
        stats=compute_stats(pool),
        sampled_shops=len(ok_summaries),
        blocked_shops=sum(1 for summary in summaries if summary.status == ShopStatus.BLOCKED),
        total_shops=total_shops,
        links=links,
        shop_results=tuple(summaries),
    )


def report_row(report: ProductPriceReport) -> dict[str, Any]:
    """
    One flat export row; absent values are None.
    """

    stats = report.stats
    return {
        "productId": report.product_id,
        "manufacturer": report.manufacturer,
        "title": report.title,
        "handle": report.handle,
        "query": report.query,
        "status": report.status,
        "referencePrice": report.reference_price,
        "lowest": stats.lowest if stats else None,
        "average": stats.average if stats else None,
        "highest": stats.highest if stats else None,
        "samples": stats.samples if stats else None,
        "sampledShops": report.sampled_shops,
        "blockedShops": report.blocked_shops,
        "totalShops": report.total_shops,
    }


def report_rows(reports: Iterable[ProductPriceReport]) -> list[dict[str, Any]]:
    return [report_row(report) for report in reports]


def format_shop_links(
    summaries: Iterable[ShopAttemptSummary],
    *,
    include_reachable: bool = False,
) -> list[str]:
    """
    Human-readable matched-link lines for one product.

    `ok` shops list their stats; with `include_reachable`, links of
    `no_prices_found` and `blocked` shops are listed with their status.
    """

    allowed = {ShopStatus.OK}
    if include_reachable:
        allowed |= {ShopStatus.NO_PRICES_FOUND, ShopStatus.BLOCKED}

    lines: list[str] = []
    seen: set[tuple[str, str]] = set()
    for summary in summaries:
        if summary.status not in allowed:
            continue
        for candidate in summary.matched_links:
            url = candidate.strip()
            if not url or (summary.status, url) in seen:
                continue
            seen.add((summary.status, url))
            stats = summary.stats
            if stats is not None:
                lines.append(
                    f"{url}  low={stats.lowest} avg={stats.average} "
                    f"high={stats.highest} (n={stats.samples})"
                )
            else:
                info = f" ({summary.info})" if summary.info else ""
                lines.append(f"{url}  status={summary.status}{info}")
    return lines
