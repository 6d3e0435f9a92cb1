"""
Storage layer exports.
"""

from pricescan.scraping.storage.base import ReportSink
from pricescan.scraping.storage.debug_store import HtmlDebugStore, debug_file_name, slugify
from pricescan.scraping.storage.file_storage import CsvReportSink, JsonReportSink

__all__ = [
    "CsvReportSink",
    "HtmlDebugStore",
    "JsonReportSink",
    "ReportSink",
    "debug_file_name",
    "slugify",
]
