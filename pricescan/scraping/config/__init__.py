"""
Config helpers for price scanning.
"""

from pricescan.scraping.config.loader import (
    get_price_scan_settings,
    load_shop_sources,
    resolve_path,
)
from pricescan.scraping.config.models import PriceScanSettings, ShopSource

__all__ = [
    "PriceScanSettings",
    "ShopSource",
    "get_price_scan_settings",
    "load_shop_sources",
    "resolve_path",
]
