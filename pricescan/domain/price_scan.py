"""
pricescan/domain/price_scan.py

Domain models for competitive price scanning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union


class ShopStatus:
    OK = "ok"
    NO_PRICES_FOUND = "no_prices_found"
    BLOCKED = "blocked"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class CatalogProduct:
    """
    One catalog product as supplied by the storefront catalog.
    """

    product_id: str
    title: str
    handle: str = ""
    manufacturer: str | None = None
    reference_price: float | None = None

    @property
    def label(self) -> str:
        parts = [(self.manufacturer or "").strip(), self.title.strip()]
        return " ".join(part for part in parts if part) or self.title


@dataclass(frozen=True)
class PriceStats:
    """
    Lowest/average/highest over a non-empty sample pool.
    """

    lowest: float
    average: float
    highest: float
    samples: int


# ---------------------------------------------------------------------------
# Shop outcomes (tagged union)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Found:
    stats: PriceStats
    status: str = field(default=ShopStatus.OK, init=False)


@dataclass(frozen=True)
class NotFound:
    reason: str | None = None
    status: str = field(default=ShopStatus.NO_PRICES_FOUND, init=False)


@dataclass(frozen=True)
class Blocked:
    signal: str
    status: str = field(default=ShopStatus.BLOCKED, init=False)


@dataclass(frozen=True)
class Skipped:
    reason: str
    status: str = field(default=ShopStatus.SKIPPED, init=False)


@dataclass(frozen=True)
class Failed:
    message: str
    status: str = field(default=ShopStatus.ERROR, init=False)


ShopOutcome = Union[Found, NotFound, Blocked, Skipped, Failed]


@dataclass(frozen=True)
class ShopAttemptSummary:
    """
    Outcome of querying one shop source for one product.
    """

    shop: str
    outcome: ShopOutcome
    duration_ms: int = 0
    url: str | None = None
    matched_links: tuple[str, ...] = ()

    @property
    def status(self) -> str:
        return self.outcome.status

    @property
    def info(self) -> str | None:
        outcome = self.outcome
        if isinstance(outcome, NotFound):
            return outcome.reason
        if isinstance(outcome, Blocked):
            return outcome.signal
        if isinstance(outcome, Skipped):
            return outcome.reason
        if isinstance(outcome, Failed):
            return outcome.message
        return None

    @property
    def stats(self) -> PriceStats | None:
        if isinstance(self.outcome, Found):
            return self.outcome.stats
        return None


@dataclass(frozen=True)
class ShopAttempt:
    """
    Summary plus the raw price samples gathered for the product pool.
    """

    summary: ShopAttemptSummary
    prices: tuple[float, ...] = ()


@dataclass
class ShopHealthState:
    """
    Run-scoped health bookkeeping for one shop source.
    """

    runs: int = 0
    avg_duration_ms: float = 0.0
    timeouts_in_row: int = 0
    skipped: int = 0


@dataclass(frozen=True)
class ShopHealthEntry:
    shop: str
    runs: int
    avg_duration_ms: float
    timeouts_in_row: int
    skipped: int


@dataclass(frozen=True)
class ProductPriceReport:
    """
    Aggregated comparison result for one product.
    """

    product_id: str
    title: str
    handle: str
    query: str
    manufacturer: str | None
    reference_price: float | None
    stats: PriceStats | None
    sampled_shops: int
    blocked_shops: int
    total_shops: int
    links: tuple[str, ...] = ()
    shop_results: tuple[ShopAttemptSummary, ...] = ()

    @property
    def status(self) -> str:
        return ShopStatus.OK if self.stats is not None else ShopStatus.NO_PRICES_FOUND


@dataclass(frozen=True)
class RunReport:
    """
    Top-level output of one price scan run.
    """

    generated_at: datetime
    config: dict[str, Any]
    shop_health: list[ShopHealthEntry] = field(default_factory=list)
    results: list[ProductPriceReport] = field(default_factory=list)
