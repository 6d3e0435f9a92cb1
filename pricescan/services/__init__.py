from pricescan.services.price_scan_service import PriceScanResult, PriceScanService

__all__ = ["PriceScanResult", "PriceScanService"]
