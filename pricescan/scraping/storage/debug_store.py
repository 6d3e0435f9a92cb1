"""
Debug dump of search pages that produced no prices.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from pricescan.domain.price_scan import CatalogProduct
from pricescan.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

_SLUG_UNSAFE = re.compile(r"[^a-z0-9_-]+")
MAX_SLUG_LENGTH = 80


def slugify(value: str | None) -> str:
    slug = _SLUG_UNSAFE.sub("-", (value or "").lower()).strip("-")[:MAX_SLUG_LENGTH]
    return slug or "item"


def debug_file_name(product_index: int, product: CatalogProduct, shop: str) -> str:
    """
    `NNN-<product-slug>-<shop-slug>.html`, numbered from 1.
    """

    product_slug = slugify(product.handle or product.title)
    return f"{product_index + 1:03d}-{product_slug}-{slugify(shop)}.html"


class HtmlDebugStore:
    """
    Writes raw markup into one directory, creating it on first use.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def dump(self, *, product_index: int, product: CatalogProduct, shop: str, markup: str) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self._directory / debug_file_name(product_index, product, shop)
        path.write_text(markup, encoding="utf-8")
        log_event(
            logger,
            logging.DEBUG,
            "debug_html_written",
            path=str(path),
            shop=shop,
            product_id=product.product_id,
        )
        return path
