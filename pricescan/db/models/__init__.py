"""
Catalog model exports.
"""

from pricescan.db.models.product import Product, ProductStatus, ProductVariant

__all__ = ["Product", "ProductStatus", "ProductVariant"]
