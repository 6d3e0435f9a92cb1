"""
Environment + JSON config loader for price scanning.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path

from pricescan.db.config import load_env_files
from pricescan.scraping.config.models import (
    DEFAULT_ACCEPT_LANGUAGE,
    DEFAULT_USER_AGENT,
    QUERY_PLACEHOLDER,
    PriceScanSettings,
    ShopSource,
)
from pricescan.scraping.errors import PriceScanConfigError


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


BUNDLED_SOURCES_PATH = Path(__file__).resolve().parent / "shop_sources.json"


def resolve_path(raw_path: str | Path) -> Path:
    """
    Resolve an operator-supplied path against the current working directory.
    """

    return Path(raw_path).expanduser().resolve()


@lru_cache(maxsize=1)
def get_price_scan_settings() -> PriceScanSettings:
    """
    Return cached price scan settings from environment variables.
    """

    load_env_files()
    raw_sources_path = _get_optional_str_env("PRICE_SCAN_SOURCES_PATH")
    sources_path = resolve_path(raw_sources_path) if raw_sources_path else BUNDLED_SOURCES_PATH
    return PriceScanSettings(
        sources_path=str(sources_path),
        user_agent=_get_str_env("PRICE_SCAN_USER_AGENT", DEFAULT_USER_AGENT),
        accept_language=_get_str_env("PRICE_SCAN_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
        product_limit=_get_int_env("PRICE_SCAN_PRODUCT_LIMIT", 100),
        include_all_statuses=_get_bool_env("PRICE_SCAN_INCLUDE_ALL_STATUSES", False),
        timeout_ms=max(1000, _get_int_env("PRICE_SCAN_TIMEOUT_MS", 15000)),
        retries=max(0, _get_int_env("PRICE_SCAN_RETRIES", 0)),
        retry_timeouts=_get_bool_env("PRICE_SCAN_RETRY_TIMEOUTS", False),
        backoff_step_seconds=max(0.0, _get_float_env("PRICE_SCAN_BACKOFF_STEP_SECONDS", 0.8)),
        product_delay_ms=max(0, _get_int_env("PRICE_SCAN_PRODUCT_DELAY_MS", 800)),
        shop_delay_ms=max(0, _get_int_env("PRICE_SCAN_SHOP_DELAY_MS", 250)),
        shop_concurrency=max(1, _get_int_env("PRICE_SCAN_SHOP_CONCURRENCY", 4)),
        shop_timeout_skip_after=max(1, _get_int_env("PRICE_SCAN_SHOP_TIMEOUT_SKIP_AFTER", 3)),
        max_html_bytes=max(1, _get_int_env("PRICE_SCAN_MAX_HTML_BYTES", 800_000)),
        max_shops=_get_int_env("PRICE_SCAN_MAX_SHOPS", 100),
        only_shop=_get_str_env("PRICE_SCAN_ONLY_SHOP", "").lower(),
        max_matched_links_per_shop=max(
            1,
            _get_int_env("PRICE_SCAN_MAX_MATCHED_LINKS_PER_SHOP", 3),
        ),
        verify_product_pages=_get_bool_env("PRICE_SCAN_VERIFY_PRODUCT_PAGES", True),
        debug_html_dir=_get_optional_str_env("PRICE_SCAN_DEBUG_HTML_DIR"),
        show_links=_get_bool_env("PRICE_SCAN_SHOW_LINKS", False),
        show_reachable_links=_get_bool_env("PRICE_SCAN_SHOW_REACHABLE_LINKS", False),
        output_json=_get_str_env("PRICE_SCAN_OUTPUT_JSON", "reports/shops-price-report.json"),
        output_csv=_get_str_env("PRICE_SCAN_OUTPUT_CSV", "reports/shops-price-report.csv"),
    )


def load_shop_sources(
    *,
    sources_path: str,
    only_shop: str = "",
    max_shops: int = 0,
) -> list[ShopSource]:
    """
    Load the enabled shop sources from a registry JSON file.

    Raises PriceScanConfigError for anything that must stop the run
    before the first product is scanned.
    """

    path = resolve_path(sources_path)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise PriceScanConfigError(f"Shop source registry not readable: {path} ({exc})") from exc

    try:
        raw_data = json.loads(raw_text)
    except json.JSONDecodeError as exc:
        raise PriceScanConfigError(f"Shop source registry is not valid JSON: {path} ({exc})") from exc

    shops = raw_data.get("shops", []) if isinstance(raw_data, dict) else None
    if not isinstance(shops, list):
        raise PriceScanConfigError("Invalid shop source registry: 'shops' must be a list.")

    name_filter = only_shop.strip().lower()
    parsed: list[ShopSource] = []
    for entry in shops:
        if not isinstance(entry, dict):
            continue
        if not _optional_bool(entry.get("enabled"), True):
            continue

        name = str(entry.get("name") or "unknown-shop").strip()
        if name_filter and name_filter not in name.lower():
            continue

        templates = _normalize_templates(
            entry.get("searchUrlTemplates", entry.get("search_url_templates"))
        )
        if not templates:
            raise PriceScanConfigError(f"Shop source '{name}' has no search URL template.")
        for template in templates:
            if QUERY_PLACEHOLDER not in template:
                raise PriceScanConfigError(
                    f"Search URL template for shop source '{name}' lacks the "
                    f"{QUERY_PLACEHOLDER} placeholder: {template}"
                )

        parsed.append(
            ShopSource(
                name=name,
                domain=str(entry.get("domain") or "").strip().lower(),
                search_url_templates=tuple(templates),
                enabled=True,
            )
        )

    if max_shops > 0:
        parsed = parsed[:max_shops]
    if not parsed:
        raise PriceScanConfigError("No enabled shop sources matched the run criteria.")
    return parsed


def _normalize_templates(templates: object) -> list[str]:
    if isinstance(templates, str):
        templates = [templates]
    if not isinstance(templates, list):
        return []
    return [item.strip() for item in templates if isinstance(item, str) and item.strip()]


def _optional_bool(value: object, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default
