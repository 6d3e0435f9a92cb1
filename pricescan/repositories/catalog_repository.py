"""
pricescan/repositories/catalog_repository.py

Read-only access to the storefront catalog for price scans.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from pricescan.db.models import Product, ProductStatus
from pricescan.domain.price_scan import CatalogProduct
from pricescan.scraping.errors import PriceScanConfigError


def _reference_price_from_cents(price_cents: int | None) -> float | None:
    if price_cents is None or price_cents <= 0:
        return None
    return round(price_cents / 100.0, 2)


class CatalogRepository:
    """
    Repository for catalog products to compare against shop prices.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_products(
        self,
        *,
        limit: int = 100,
        include_all_statuses: bool = False,
    ) -> list[CatalogProduct]:
        """
        Oldest products first; ACTIVE only unless `include_all_statuses`.

        The reference price is the first variant's price.
        """

        stmt = select(Product).order_by(Product.created_at.asc(), Product.id.asc())
        if not include_all_statuses:
            stmt = stmt.where(Product.status == ProductStatus.ACTIVE)
        if limit > 0:
            stmt = stmt.limit(limit)

        products: list[CatalogProduct] = []
        for row in self._session.scalars(stmt):
            first_variant = row.variants[0] if row.variants else None
            products.append(
                CatalogProduct(
                    product_id=row.id,
                    title=row.title,
                    handle=row.handle or "",
                    manufacturer=row.manufacturer,
                    reference_price=_reference_price_from_cents(
                        first_variant.price_cents if first_variant else None
                    ),
                )
            )
        return products


def _optional_price(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = float(value)
    except (TypeError, ValueError):
        return None
    return round(price, 2) if price > 0 else None


def load_catalog_file(path: str | Path, *, limit: int = 100) -> list[CatalogProduct]:
    """
    Read products from `{"products": [...]}` or a bare JSON list.
    """

    catalog_path = Path(path)
    try:
        payload = json.loads(catalog_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise PriceScanConfigError(f"Cannot read catalog file {catalog_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise PriceScanConfigError(f"Invalid JSON in catalog file {catalog_path}: {exc}") from exc

    items = payload.get("products") if isinstance(payload, dict) else payload
    if not isinstance(items, list):
        raise PriceScanConfigError(f"Catalog file {catalog_path} must contain a product list")

    products: list[CatalogProduct] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "").strip()
        if not title:
            continue
        manufacturer = str(item.get("manufacturer") or "").strip() or None
        products.append(
            CatalogProduct(
                product_id=str(item.get("id") or item.get("productId") or title),
                title=title,
                handle=str(item.get("handle") or ""),
                manufacturer=manufacturer,
                reference_price=_optional_price(
                    item.get("referencePrice", item.get("reference_price"))
                ),
            )
        )
        if 0 < limit <= len(products):
            break
    return products
