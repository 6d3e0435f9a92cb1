"""
pricescan/schemas/price_report.py

Export schema for the JSON run report (camelCase wire names).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pricescan.domain.price_scan import (
    ProductPriceReport,
    RunReport,
    ShopAttemptSummary,
    ShopHealthEntry,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class ShopResultDocument(_CamelModel):
    shop: str
    status: str
    duration_ms: int = Field(..., ge=0)
    url: str | None = None
    info: str | None = None
    lowest: float | None = None
    average: float | None = None
    highest: float | None = None
    samples: int | None = Field(default=None, ge=1)
    matched_links: list[str] | None = None


class ShopHealthDocument(_CamelModel):
    shop: str
    runs: int = Field(..., ge=0)
    avg_duration_ms: float = Field(..., ge=0)
    timeouts_in_row: int = Field(..., ge=0)
    skipped: int = Field(..., ge=0)


class ProductResultDocument(_CamelModel):
    product_id: str
    title: str
    handle: str
    query: str
    manufacturer: str | None = None
    reference_price: float | None = None
    status: str
    lowest: float | None = None
    average: float | None = None
    highest: float | None = None
    samples: int | None = None
    sampled_shops: int = Field(..., ge=0)
    blocked_shops: int = Field(..., ge=0)
    total_shops: int = Field(..., ge=0)
    links: list[str] = Field(default_factory=list)
    shop_results: list[ShopResultDocument] = Field(default_factory=list)


class RunReportDocument(_CamelModel):
    """
    Top-level JSON report document.
    """

    generated_at: datetime
    config: dict[str, Any]
    shop_health: list[ShopHealthDocument] = Field(default_factory=list)
    results: list[ProductResultDocument] = Field(default_factory=list)


def _shop_result(summary: ShopAttemptSummary) -> ShopResultDocument:
    stats = summary.stats
    return ShopResultDocument(
        shop=summary.shop,
        status=summary.status,
        duration_ms=summary.duration_ms,
        url=summary.url,
        info=summary.info,
        lowest=stats.lowest if stats else None,
        average=stats.average if stats else None,
        highest=stats.highest if stats else None,
        samples=stats.samples if stats else None,
        matched_links=list(summary.matched_links) or None,
    )


def _health(entry: ShopHealthEntry) -> ShopHealthDocument:
    return ShopHealthDocument(
        shop=entry.shop,
        runs=entry.runs,
        avg_duration_ms=entry.avg_duration_ms,
        timeouts_in_row=entry.timeouts_in_row,
        skipped=entry.skipped,
    )


def _product_result(report: ProductPriceReport) -> ProductResultDocument:
    stats = report.stats
    return ProductResultDocument(
        product_id=report.product_id,
        title=report.title,
        handle=report.handle,
        query=report.query,
        manufacturer=report.manufacturer,
        reference_price=report.reference_price,
        status=report.status,
        lowest=stats.lowest if stats else None,
        average=stats.average if stats else None,
        highest=stats.highest if stats else None,
        samples=stats.samples if stats else None,
        sampled_shops=report.sampled_shops,
        blocked_shops=report.blocked_shops,
        total_shops=report.total_shops,
        links=list(report.links),
        shop_results=[_shop_result(summary) for summary in report.shop_results],
    )


def to_document(report: RunReport) -> RunReportDocument:
    return RunReportDocument(
        generated_at=report.generated_at,
        config=dict(report.config),
        shop_health=[_health(entry) for entry in report.shop_health],
        results=[_product_result(item) for item in report.results],
    )
