"""
Price extraction from raw third-party markup.

Extraction is an ordered list of independent rules; each rule yields raw
numeric-looking strings, which are normalized, unioned and de-duplicated
to two-decimal precision.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from pricescan.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

MAX_AMOUNT = 1_000_000.0
SANITY_MIN_FACTOR = 0.35
SANITY_MAX_FACTOR = 2.8

_NON_AMOUNT_CHARS = re.compile(r"[^\d,.\s]")
_WHITESPACE = re.compile(r"\s+")

_EURO_ESCAPE = re.compile(r"\\[uU]20[aA][cC]|&euro;|&#8364;", re.IGNORECASE)
_NBSP_ESCAPE = re.compile(r"\\(?:[uU]00[aA]0|[xX][aA]0)|&nbsp;|&#160;", re.IGNORECASE)


@dataclass(frozen=True)
class PriceRule:
    """
    One extraction rule: a pattern whose first group is a raw amount.
    """

    name: str
    pattern: re.Pattern[str]

    def candidates(self, markup: str) -> list[str]:
        return [match.group(1) for match in self.pattern.finditer(markup)]


PRICE_RULES: tuple[PriceRule, ...] = (
    PriceRule("json_price_quoted", re.compile(r'"price"\s*:\s*"([^"]+)"', re.IGNORECASE)),
    PriceRule("json_price_number", re.compile(r'"price"\s*:\s*([0-9][0-9.,]*)', re.IGNORECASE)),
    PriceRule("json_offer_price", re.compile(r'"offerPrice"\s*:\s*"([^"]+)"', re.IGNORECASE)),
    PriceRule(
        "itemprop_price",
        re.compile(r"""itemprop=["']price["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
    ),
    PriceRule(
        "itemprop_price_content_first",
        re.compile(r"""content=["']([^"']+)["'][^>]*itemprop=["']price["']""", re.IGNORECASE),
    ),
    PriceRule("data_price", re.compile(r"""data-price=["']([^"']+)["']""", re.IGNORECASE)),
    PriceRule("currency_before", re.compile(r"(?:€|EUR)\s*([0-9][0-9.,\s]*)", re.IGNORECASE)),
    PriceRule("currency_after", re.compile(r"([0-9][0-9.,\s]*)\s*(?:€|EUR)", re.IGNORECASE)),
)


def normalize_localized_amount(raw: str | None) -> float | None:
    """
    Parse a localized amount such as "1.234,56 €" or "1,234.56".

    With both separators present the right-most one is the decimal point;
    a lone comma is a decimal comma. The result is rounded to two decimals.
    Returns None for anything that is not a finite amount in (0, 1_000_000].
    """

    if not raw:
        return None
    value = _WHITESPACE.sub("", _NON_AMOUNT_CHARS.sub("", raw))
    if not value:
        return None

    has_comma = "," in value
    has_dot = "." in value
    if has_comma and has_dot:
        if value.rfind(",") > value.rfind("."):
            normalized = value.replace(".", "").replace(",", ".", 1)
        else:
            normalized = value.replace(",", "")
    elif has_comma:
        normalized = value.replace(".", "").replace(",", ".", 1)
    else:
        normalized = value.replace(",", "")

    try:
        amount = float(normalized)
    except ValueError:
        return None
    if not math.isfinite(amount):
        return None
    amount = round(amount, 2)
    if amount <= 0 or amount > MAX_AMOUNT:
        return None
    return amount


def sanity_window(reference_price: float | None) -> tuple[float, float] | None:
    """
    Inclusive acceptance window relative to the reference price.
    """

    if reference_price is None or not math.isfinite(reference_price) or reference_price <= 0:
        return None
    return reference_price * SANITY_MIN_FACTOR, reference_price * SANITY_MAX_FACTOR


def filter_by_reference_price(
    prices: Sequence[float],
    reference_price: float | None,
) -> list[float]:
    """
    Keep prices inside the sanity window.

    If the window would remove every price, the unfiltered list is returned.
    """

    window = sanity_window(reference_price)
    if window is None:
        return list(prices)
    low, high = window
    filtered = [price for price in prices if low <= price <= high]
    if filtered:
        return filtered
    if prices:
        log_event(
            logger,
            logging.DEBUG,
            "price_sanity_filter_bypassed",
            reference_price=reference_price,
            samples=len(prices),
        )
    return list(prices)


def normalize_markup(markup: str) -> str:
    return _NBSP_ESCAPE.sub(" ", _EURO_ESCAPE.sub("€", markup))


def unique_amounts(values: Iterable[float]) -> list[float]:
    """
    Round to two decimals and de-duplicate, keeping first-seen order.
    """

    seen: set[float] = set()
    unique: list[float] = []
    for value in values:
        rounded = round(value, 2)
        if rounded in seen:
            continue
        seen.add(rounded)
        unique.append(rounded)
    return unique


def extract_prices(
    markup: str,
    reference_price: float | None = None,
    *,
    rules: Sequence[PriceRule] = PRICE_RULES,
) -> list[float]:
    """
    Extract sanity-filtered, de-duplicated prices from raw markup.
    """

    normalized = normalize_markup(markup)
    collected: list[float] = []
    for rule in rules:
        for raw in rule.candidates(normalized):
            amount = normalize_localized_amount(raw)
            if amount is not None:
                collected.append(amount)
    return filter_by_reference_price(unique_amounts(collected), reference_price)
