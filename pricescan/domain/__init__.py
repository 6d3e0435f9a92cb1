"""
Domain model exports.
"""

from pricescan.domain.price_scan import (
    Blocked,
    CatalogProduct,
    Failed,
    Found,
    NotFound,
    PriceStats,
    ProductPriceReport,
    RunReport,
    ShopAttempt,
    ShopAttemptSummary,
    ShopHealthEntry,
    ShopHealthState,
    ShopOutcome,
    ShopStatus,
    Skipped,
)

__all__ = [
    "Blocked",
    "CatalogProduct",
    "Failed",
    "Found",
    "NotFound",
    "PriceStats",
    "ProductPriceReport",
    "RunReport",
    "ShopAttempt",
    "ShopAttemptSummary",
    "ShopHealthEntry",
    "ShopHealthState",
    "ShopOutcome",
    "ShopStatus",
    "Skipped",
]
