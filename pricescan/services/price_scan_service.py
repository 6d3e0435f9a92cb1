"""
pricescan/services/price_scan_service.py

Service orchestration for one competitive price scan run.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy.orm import Session

from pricescan.db.session import SessionLocal
from pricescan.domain.price_scan import CatalogProduct, RunReport
from pricescan.repositories import CatalogRepository, load_catalog_file
from pricescan.scraping.config import (
    PriceScanSettings,
    ShopSource,
    get_price_scan_settings,
    load_shop_sources,
    resolve_path,
)
from pricescan.scraping.engine import PriceScanEngine
from pricescan.scraping.logging_utils import log_event
from pricescan.scraping.storage import CsvReportSink, JsonReportSink

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceScanResult:
    report: RunReport
    json_path: Path
    csv_path: Path


class PriceScanService:
    """
    Loads shop sources and catalog products, runs the engine, writes reports.
    """

    def __init__(
        self,
        settings: PriceScanSettings | None = None,
        *,
        session_factory: Callable[[], Session] = SessionLocal,
        engine_factory: Callable[[PriceScanSettings], PriceScanEngine] | None = None,
    ) -> None:
        self._settings = settings or get_price_scan_settings()
        self._session_factory = session_factory
        self._engine_factory = engine_factory or (lambda settings: PriceScanEngine(settings=settings))

    @property
    def settings(self) -> PriceScanSettings:
        return self._settings

    def load_sources(self) -> list[ShopSource]:
        return load_shop_sources(
            sources_path=self._settings.sources_path,
            only_shop=self._settings.only_shop,
            max_shops=self._settings.max_shops,
        )

    def load_products(self, *, catalog_json: str | None = None) -> list[CatalogProduct]:
        if catalog_json:
            return load_catalog_file(resolve_path(catalog_json), limit=self._settings.product_limit)
        with self._session_factory() as db:
            return CatalogRepository(db).list_products(
                limit=self._settings.product_limit,
                include_all_statuses=self._settings.include_all_statuses,
            )

    def run(self, *, catalog_json: str | None = None) -> PriceScanResult:
        # sources first: registry errors abort before any catalog access
        sources = self.load_sources()
        products = self.load_products(catalog_json=catalog_json)
        log_event(
            logger,
            logging.INFO,
            "price_scan_started",
            products=len(products),
            shops=len(sources),
            sources_path=self._settings.sources_path,
        )

        report = self._engine_factory(self._settings).run(products=products, sources=sources)

        json_path = JsonReportSink(resolve_path(self._settings.output_json)).write(report)
        csv_path = CsvReportSink(resolve_path(self._settings.output_csv)).write(report)
        log_event(
            logger,
            logging.INFO,
            "price_scan_completed",
            products=len(report.results),
            priced_products=sum(1 for item in report.results if item.stats is not None),
            output_json=str(json_path),
            output_csv=str(csv_path),
        )
        return PriceScanResult(report=report, json_path=json_path, csv_path=csv_path)
