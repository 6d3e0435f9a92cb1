"""
Title relevance matching between a catalog product and third-party text.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass

from pricescan.domain.price_scan import CatalogProduct

STOPWORDS = frozenset({"the", "and", "mit", "und", "der", "die", "das", "with", "fur", "für"})
NUMERIC_MATCH_WEIGHT = 5
MAX_REQUIRED_WORDS = 2

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_DIGIT = re.compile(r"\d")


def normalize_for_match(value: str | None) -> str:
    """
    Lower-case, decode entities, turn non-alphanumerics into single spaces.
    """

    if not value:
        return ""
    decoded = html.unescape(str(value)).lower()
    return _NON_ALNUM.sub(" ", decoded).strip()


@dataclass(frozen=True)
class MatchScore:
    ok: bool
    score: int = 0


@dataclass(frozen=True)
class TitleMatcher:
    """
    Token sets derived once per product.

    Numeric tokens (containing a digit) must all be present; at least
    min(2, len(word_tokens)) word tokens must be present.
    """

    numeric_tokens: tuple[str, ...]
    word_tokens: tuple[str, ...]

    @classmethod
    def from_product(cls, product: CatalogProduct) -> TitleMatcher:
        return cls.from_text(product.manufacturer or "", product.title)

    @classmethod
    def from_text(cls, *parts: str) -> TitleMatcher:
        tokens: list[str] = []
        for part in parts:
            for token in normalize_for_match(part).split():
                if len(token) < 2 or token in STOPWORDS or token in tokens:
                    continue
                tokens.append(token)
        return cls(
            numeric_tokens=tuple(token for token in tokens if _DIGIT.search(token)),
            word_tokens=tuple(token for token in tokens if not _DIGIT.search(token)),
        )

    @property
    def required_words(self) -> int:
        return min(MAX_REQUIRED_WORDS, len(self.word_tokens))

    def score(self, text: str | None) -> MatchScore:
        normalized = normalize_for_match(text)
        if not normalized:
            return MatchScore(ok=False)

        numeric_matches = sum(1 for token in self.numeric_tokens if token in normalized)
        if numeric_matches < len(self.numeric_tokens):
            return MatchScore(ok=False)

        word_matches = sum(1 for token in self.word_tokens if token in normalized)
        if word_matches < self.required_words:
            return MatchScore(ok=False)

        return MatchScore(ok=True, score=numeric_matches * NUMERIC_MATCH_WEIGHT + word_matches)

    def is_relevant(self, text: str | None) -> bool:
        return self.score(text).ok


def build_search_query(product: CatalogProduct) -> str:
    """
    Manufacturer + title with case-insensitive duplicate tokens removed.
    """

    seen: set[str] = set()
    tokens: list[str] = []
    for part in ((product.manufacturer or "").strip(), product.title.strip()):
        for token in part.split():
            key = token.lower()
            if key in seen:
                continue
            seen.add(key)
            tokens.append(token)
    return " ".join(tokens)
