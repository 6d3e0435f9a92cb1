from pricescan.repositories.catalog_repository import CatalogRepository, load_catalog_file

__all__ = ["CatalogRepository", "load_catalog_file"]
