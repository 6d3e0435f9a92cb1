"""
Per-product, per-shop price lookup.

One `attempt` searches a shop for one product, walks its search URL
templates in order, optionally verifies matched product pages and folds
the outcome into the shared health tracker exactly once.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import replace
from urllib.parse import quote

from pricescan.domain.price_scan import (
    Blocked,
    CatalogProduct,
    Failed,
    Found,
    NotFound,
    ShopAttempt,
    ShopAttemptSummary,
    Skipped,
)
from pricescan.scraping.aggregation import compute_stats
from pricescan.scraping.config.models import QUERY_PLACEHOLDER, PriceScanSettings, ShopSource
from pricescan.scraping.errors import FetchError
from pricescan.scraping.fetcher import BoundedFetcher
from pricescan.scraping.health import ShopHealthTracker
from pricescan.scraping.logging_utils import log_event
from pricescan.scraping.parsing import (
    TitleMatcher,
    detect_blocked_page,
    extract_matched_links,
    extract_prices,
)
from pricescan.scraping.parsing.prices import unique_amounts
from pricescan.scraping.storage.debug_store import HtmlDebugStore

logger = logging.getLogger(__name__)

# encodeURIComponent-compatible
_QUERY_SAFE_CHARS = "-_.!~*'()"


def render_template(template: str, query: str) -> str:
    return template.replace(QUERY_PLACEHOLDER, quote(query, safe=_QUERY_SAFE_CHARS))


class ShopPriceScraper:
    """
    Looks up one product on one shop source.
    """

    def __init__(
        self,
        *,
        settings: PriceScanSettings,
        fetcher: BoundedFetcher,
        tracker: ShopHealthTracker,
        debug_store: HtmlDebugStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._fetcher = fetcher
        self._tracker = tracker
        self._debug_store = debug_store
        self._clock = clock

    def attempt(
        self,
        *,
        product_index: int,
        product: CatalogProduct,
        query: str,
        matcher: TitleMatcher,
        source: ShopSource,
    ) -> ShopAttempt:
        """
        Never raises; every failure becomes an `error` summary.
        """

        if self._tracker.should_skip(source.name):
            timeouts_in_row = self._tracker.state(source.name).timeouts_in_row
            summary = ShopAttemptSummary(
                shop=source.name,
                outcome=Skipped(
                    f"Auto-skip after {timeouts_in_row} timeout/throttle errors in a row"
                ),
                duration_ms=0,
            )
            self._tracker.record(summary)
            log_event(
                logger,
                logging.WARNING,
                "shop_auto_skipped",
                shop=source.name,
                product_id=product.product_id,
                timeouts_in_row=timeouts_in_row,
            )
            return ShopAttempt(summary=summary)

        started = self._clock()
        try:
            attempt = self._search_source(
                product_index=product_index,
                product=product,
                query=query,
                matcher=matcher,
                source=source,
            )
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            log_event(
                logger,
                logging.ERROR,
                "shop_attempt_crashed",
                shop=source.name,
                product_id=product.product_id,
                error=message,
            )
            attempt = ShopAttempt(summary=ShopAttemptSummary(shop=source.name, outcome=Failed(message)))

        duration_ms = int(round((self._clock() - started) * 1000))
        summary = replace(attempt.summary, duration_ms=max(0, duration_ms))
        self._tracker.record(summary)
        log_event(
            logger,
            logging.DEBUG,
            "shop_attempt_finished",
            shop=source.name,
            product_id=product.product_id,
            status=summary.status,
            info=summary.info,
            samples=len(attempt.prices),
            duration_ms=summary.duration_ms,
        )
        return ShopAttempt(summary=summary, prices=attempt.prices)

    def _search_source(
        self,
        *,
        product_index: int,
        product: CatalogProduct,
        query: str,
        matcher: TitleMatcher,
        source: ShopSource,
    ) -> ShopAttempt:
        templates = source.search_url_templates
        if not templates:
            return ShopAttempt(
                summary=ShopAttemptSummary(
                    shop=source.name,
                    outcome=Failed("No search URL template configured"),
                )
            )

        verify = self._settings.verify_product_pages
        last_index = len(templates) - 1
        for index, template in enumerate(templates):
            is_last = index == last_index
            search_url = render_template(template, query)

            try:
                markup = self._fetcher.fetch(search_url, referer=source.referer)
            except FetchError as exc:
                if not is_last:
                    continue
                return self._finish(source, Failed(str(exc)), url=search_url)

            signal = detect_blocked_page(markup)
            if signal:
                return self._finish(source, Blocked(signal), url=search_url)

            links = extract_matched_links(
                markup,
                search_url,
                matcher,
                max_count=self._settings.max_matched_links_per_shop,
            )
            if not links and not matcher.is_relevant(markup):
                if not is_last:
                    continue
                return self._finish(source, NotFound("title match missing"), url=search_url)

            if verify and not links:
                if not is_last:
                    continue
                return self._finish(source, NotFound("no matched product links"), url=search_url)

            prices = self._verified_prices(
                links,
                search_url=search_url,
                matcher=matcher,
                product=product,
                source=source,
            )
            if not verify and not prices:
                prices = extract_prices(markup, product.reference_price)

            if not prices:
                if not is_last:
                    continue
                if self._debug_store is not None:
                    self._debug_store.dump(
                        product_index=product_index,
                        product=product,
                        shop=source.name,
                        markup=markup,
                    )
                reason = "no prices on matched product pages" if verify else None
                return self._finish(source, NotFound(reason), url=search_url, links=links)

            stats = compute_stats(prices)
            return ShopAttempt(
                summary=ShopAttemptSummary(
                    shop=source.name,
                    outcome=Found(stats),
                    url=links[0] if links else search_url,
                    matched_links=tuple(links),
                ),
                prices=tuple(prices),
            )

        # unreachable with at least one template
        return self._finish(source, NotFound(), url=None)

    def _verified_prices(
        self,
        links: list[str],
        *,
        search_url: str,
        matcher: TitleMatcher,
        product: CatalogProduct,
        source: ShopSource,
    ) -> list[float]:
        collected: list[float] = []
        for link in links:
            try:
                page = self._fetcher.fetch(link, retries=0, referer=search_url)
            except FetchError as exc:
                log_event(
                    logger,
                    logging.DEBUG,
                    "product_page_fetch_failed",
                    shop=source.name,
                    url=link,
                    error=str(exc),
                )
                continue
            if not matcher.is_relevant(page):
                continue
            collected.extend(extract_prices(page, product.reference_price))
        return unique_amounts(collected)

    @staticmethod
    def _finish(
        source: ShopSource,
        outcome: Failed | Blocked | NotFound,
        *,
        url: str | None,
        links: list[str] | None = None,
    ) -> ShopAttempt:
        return ShopAttempt(
            summary=ShopAttemptSummary(
                shop=source.name,
                outcome=outcome,
                url=url,
                matched_links=tuple(links or ()),
            )
        )
