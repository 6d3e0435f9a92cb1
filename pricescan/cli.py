"""
Command line entry point for price scans.
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Sequence
from dataclasses import replace
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from pricescan.scraping.config import PriceScanSettings, get_price_scan_settings, resolve_path
from pricescan.scraping.errors import PriceScanConfigError
from pricescan.scraping.logging_utils import log_event
from pricescan.services import PriceScanService

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare catalog prices against competitor shop search results.",
    )
    parser.add_argument("--limit", type=int, default=None, help="Max products to scan (<=0 for all).")
    parser.add_argument("--all-statuses", action="store_true", default=None, help="Include non-ACTIVE products.")
    parser.add_argument("--timeout-ms", type=int, default=None, help="Per-request time budget.")
    parser.add_argument("--retries", type=int, default=None, help="Extra attempts per search page.")
    parser.add_argument("--retry-timeouts", action="store_true", default=None, help="Also retry timeouts.")
    parser.add_argument("--delay-ms", type=int, default=None, help="Pause between products.")
    parser.add_argument("--shop-delay-ms", type=int, default=None, help="Pause between shop batches.")
    parser.add_argument("--shop-concurrency", type=int, default=None, help="Shops queried concurrently.")
    parser.add_argument(
        "--shop-timeout-skip-after",
        type=int,
        default=None,
        help="Timeout/throttle errors in a row before a shop is skipped.",
    )
    parser.add_argument("--max-html-bytes", type=int, default=None, help="Response body byte cap.")
    parser.add_argument("--max-shops", type=int, default=None, help="Max shop sources (<=0 for all).")
    parser.add_argument("--only-shop", default=None, help="Only shops whose name contains this text.")
    parser.add_argument("--sources", default=None, help="Shop source registry JSON.")
    parser.add_argument("--debug-html-dir", default=None, help="Dump pages without prices here.")
    parser.add_argument("--show-links", action="store_true", default=None, help="Log matched links per product.")
    parser.add_argument(
        "--show-reachable-links",
        action="store_true",
        default=None,
        help="Also log links of shops without usable prices.",
    )
    parser.add_argument(
        "--max-matched-links-per-shop",
        type=int,
        default=None,
        help="Product pages verified per shop.",
    )
    parser.add_argument(
        "--no-verify-product-pages",
        dest="verify_product_pages",
        action="store_false",
        default=None,
        help="Accept prices from search pages.",
    )
    parser.add_argument("--output-json", default=None, help="JSON report path.")
    parser.add_argument("--output-csv", default=None, help="CSV report path.")
    parser.add_argument("--catalog-json", default=None, help="Read products from a JSON file instead of the database.")
    return parser


def apply_overrides(settings: PriceScanSettings, args: argparse.Namespace) -> PriceScanSettings:
    """
    Layer explicitly passed flags over env-derived settings.
    """

    overrides: dict[str, Any] = {}
    if args.limit is not None:
        overrides["product_limit"] = args.limit
    if args.all_statuses:
        overrides["include_all_statuses"] = True
    if args.timeout_ms is not None:
        overrides["timeout_ms"] = max(1000, args.timeout_ms)
    if args.retries is not None:
        overrides["retries"] = max(0, args.retries)
    if args.retry_timeouts:
        overrides["retry_timeouts"] = True
    if args.delay_ms is not None:
        overrides["product_delay_ms"] = max(0, args.delay_ms)
    if args.shop_delay_ms is not None:
        overrides["shop_delay_ms"] = max(0, args.shop_delay_ms)
    if args.shop_concurrency is not None:
        overrides["shop_concurrency"] = max(1, args.shop_concurrency)
    if args.shop_timeout_skip_after is not None:
        overrides["shop_timeout_skip_after"] = max(1, args.shop_timeout_skip_after)
    if args.max_html_bytes is not None:
        overrides["max_html_bytes"] = max(1, args.max_html_bytes)
    if args.max_shops is not None:
        overrides["max_shops"] = args.max_shops
    if args.only_shop is not None:
        overrides["only_shop"] = args.only_shop.strip().lower()
    if args.sources:
        overrides["sources_path"] = str(resolve_path(args.sources))
    if args.debug_html_dir:
        overrides["debug_html_dir"] = str(resolve_path(args.debug_html_dir))
    if args.show_links:
        overrides["show_links"] = True
    if args.show_reachable_links:
        overrides["show_reachable_links"] = True
    if args.max_matched_links_per_shop is not None:
        overrides["max_matched_links_per_shop"] = max(1, args.max_matched_links_per_shop)
    if args.verify_product_pages is not None:
        overrides["verify_product_pages"] = args.verify_product_pages
    if args.output_json:
        overrides["output_json"] = args.output_json
    if args.output_csv:
        overrides["output_csv"] = args.output_csv
    return replace(settings, **overrides) if overrides else settings


def main(argv: Sequence[str] | None = None) -> int:
    _configure_logging()
    args = build_parser().parse_args(argv)

    try:
        settings = apply_overrides(get_price_scan_settings(), args)
        result = PriceScanService(settings).run(catalog_json=args.catalog_json)
    except (PriceScanConfigError, RuntimeError, SQLAlchemyError) as exc:
        log_event(logger, logging.ERROR, "price_scan_aborted", error=str(exc))
        return 1

    print(f"Wrote {len(result.report.results)} products to {result.json_path} and {result.csv_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
