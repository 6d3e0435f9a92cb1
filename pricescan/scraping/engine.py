"""
Price scan run coordinator.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

from pricescan.domain.price_scan import (
    CatalogProduct,
    ProductPriceReport,
    RunReport,
    ShopAttempt,
)
from pricescan.scraping.aggregation import build_product_report, format_shop_links
from pricescan.scraping.config.models import PriceScanSettings, ShopSource
from pricescan.scraping.fetcher import BoundedFetcher
from pricescan.scraping.health import ShopHealthTracker
from pricescan.scraping.logging_utils import log_event
from pricescan.scraping.parsing import TitleMatcher, build_search_query
from pricescan.scraping.shop_scraper import ShopPriceScraper
from pricescan.scraping.storage.debug_store import HtmlDebugStore

logger = logging.getLogger(__name__)

PROVIDER_NAME = "shop-list"


def _batches(sources: Sequence[ShopSource], size: int) -> list[Sequence[ShopSource]]:
    size = max(1, size)
    return [sources[start : start + size] for start in range(0, len(sources), size)]


class PriceScanEngine:
    """
    Scans products one after another against every shop source.

    Shops for one product run in fixed-size concurrent batches; results are
    kept in source-list order regardless of completion order.
    """

    def __init__(
        self,
        *,
        settings: PriceScanSettings,
        fetcher: BoundedFetcher | None = None,
        tracker: ShopHealthTracker | None = None,
        debug_store: HtmlDebugStore | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher or BoundedFetcher(settings=settings)
        self._tracker = tracker or ShopHealthTracker(skip_after=settings.shop_timeout_skip_after)
        if debug_store is None and settings.debug_html_dir:
            debug_store = HtmlDebugStore(settings.debug_html_dir)
        self._scraper = ShopPriceScraper(
            settings=settings,
            fetcher=self._fetcher,
            tracker=self._tracker,
            debug_store=debug_store,
        )
        self._sleep = sleep

    @property
    def tracker(self) -> ShopHealthTracker:
        return self._tracker

    def run(
        self,
        *,
        products: Sequence[CatalogProduct],
        sources: Sequence[ShopSource],
    ) -> RunReport:
        results: list[ProductPriceReport] = []
        for index, product in enumerate(products):
            report = self.scan_product(index=index, product=product, sources=sources)
            results.append(report)
            if index < len(products) - 1:
                self._pause(self._settings.product_delay_ms)

        return RunReport(
            generated_at=datetime.now(timezone.utc),
            config=self._config_echo(total_products=len(products), total_shops=len(sources)),
            shop_health=self._tracker.snapshot(),
            results=results,
        )

    def scan_product(
        self,
        *,
        index: int,
        product: CatalogProduct,
        sources: Sequence[ShopSource],
    ) -> ProductPriceReport:
        query = build_search_query(product)
        matcher = TitleMatcher.from_product(product)
        attempts: list[ShopAttempt] = []

        batches = _batches(sources, self._settings.shop_concurrency)
        with ThreadPoolExecutor(max_workers=max(1, self._settings.shop_concurrency)) as executor:
            for batch_index, batch in enumerate(batches):
                futures = [
                    executor.submit(
                        self._scraper.attempt,
                        product_index=index,
                        product=product,
                        query=query,
                        matcher=matcher,
                        source=source,
                    )
                    for source in batch
                ]
                # join barrier; collected in source-list order
                attempts.extend(future.result() for future in futures)
                if batch_index < len(batches) - 1:
                    self._pause(self._settings.shop_delay_ms)

        report = build_product_report(
            product=product,
            query=query,
            attempts=attempts,
            total_shops=len(sources),
        )
        stats = report.stats
        log_event(
            logger,
            logging.INFO,
            "product_scanned",
            position=index + 1,
            product_id=product.product_id,
            title=product.title,
            status=report.status,
            lowest=stats.lowest if stats else None,
            average=stats.average if stats else None,
            highest=stats.highest if stats else None,
            samples=stats.samples if stats else 0,
            sampled_shops=report.sampled_shops,
            blocked_shops=report.blocked_shops,
            total_shops=report.total_shops,
        )
        if self._settings.show_links or self._settings.show_reachable_links:
            for line in format_shop_links(
                report.shop_results,
                include_reachable=self._settings.show_reachable_links,
            ):
                log_event(logger, logging.INFO, "product_link", product_id=product.product_id, link=line)
        return report

    def _pause(self, delay_ms: int) -> None:
        if delay_ms > 0:
            self._sleep(delay_ms / 1000.0)

    def _config_echo(self, *, total_products: int, total_shops: int) -> dict[str, Any]:
        settings = self._settings
        return {
            "provider": PROVIDER_NAME,
            "sourcesPath": settings.sources_path,
            "timeoutMs": settings.timeout_ms,
            "retries": settings.retries,
            "shopConcurrency": settings.shop_concurrency,
            "shopTimeoutSkipAfter": settings.shop_timeout_skip_after,
            "verifyProductPages": settings.verify_product_pages,
            "totalProducts": total_products,
            "totalShops": total_shops,
        }
