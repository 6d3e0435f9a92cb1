"""
Storage layer interfaces for price scan output.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pricescan.domain.price_scan import RunReport


class ReportSink(ABC):
    """
    Destination for a finished run report.
    """

    @abstractmethod
    def write(self, report: RunReport) -> Path:
        """
        Persist the report and return the written location.
        """
