"""
Pydantic export schemas.
"""

from pricescan.schemas.price_report import RunReportDocument, to_document

__all__ = ["RunReportDocument", "to_document"]
