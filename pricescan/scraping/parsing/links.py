"""
Candidate product-link extraction from search result pages.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from pricescan.scraping.parsing.matching import TitleMatcher

NON_PRODUCT_URL = re.compile(
    r"(/search|/suche|\?|cart|warenkorb|checkout|login|konto|account)",
    flags=re.IGNORECASE,
)


@dataclass(frozen=True)
class CandidateLink:
    url: str
    score: int


def extract_candidate_links(markup: str, page_url: str, matcher: TitleMatcher) -> list[CandidateLink]:
    """
    Score every anchor on the page, highest score first.

    Anchors with the same score keep document order.
    """

    soup = BeautifulSoup(markup, "html.parser")
    seen: set[str] = set()
    candidates: list[CandidateLink] = []
    for anchor in soup.find_all("a", href=True):
        raw_href = str(anchor.get("href") or "").strip()
        if not raw_href or raw_href.startswith("#") or raw_href.lower().startswith("javascript:"):
            continue
        try:
            url = urljoin(page_url, raw_href)
        except ValueError:
            continue
        if url in seen:
            continue
        seen.add(url)

        if NON_PRODUCT_URL.search(url):
            continue

        anchor_text = anchor.get_text(" ", strip=True)
        match = matcher.score(f"{url} {anchor_text}")
        if not match.ok:
            continue
        candidates.append(CandidateLink(url=url, score=match.score))

    candidates.sort(key=lambda item: item.score, reverse=True)
    return candidates


def extract_matched_links(
    markup: str,
    page_url: str,
    matcher: TitleMatcher,
    max_count: int = 3,
) -> list[str]:
    """
    Top `max_count` candidate product URLs on a search page.
    """

    return [item.url for item in extract_candidate_links(markup, page_url, matcher)[: max(0, max_count)]]
