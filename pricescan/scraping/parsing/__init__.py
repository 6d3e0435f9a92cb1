"""
Markup parsing layer: block detection, prices, title matching, links.
"""

from pricescan.scraping.parsing.blocking import BLOCK_SIGNALS, detect_blocked_page
from pricescan.scraping.parsing.links import extract_candidate_links, extract_matched_links
from pricescan.scraping.parsing.matching import (
    TitleMatcher,
    build_search_query,
    normalize_for_match,
)
from pricescan.scraping.parsing.prices import (
    PRICE_RULES,
    extract_prices,
    filter_by_reference_price,
    normalize_localized_amount,
)

__all__ = [
    "BLOCK_SIGNALS",
    "PRICE_RULES",
    "TitleMatcher",
    "build_search_query",
    "detect_blocked_page",
    "extract_candidate_links",
    "extract_matched_links",
    "extract_prices",
    "filter_by_reference_price",
    "normalize_for_match",
    "normalize_localized_amount",
]
