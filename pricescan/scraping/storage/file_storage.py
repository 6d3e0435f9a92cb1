"""
File-backed report sinks.
"""

from __future__ import annotations

import csv
from pathlib import Path

from pricescan.domain.price_scan import RunReport
from pricescan.schemas.price_report import to_document
from pricescan.scraping.aggregation import CSV_COLUMNS, report_rows
from pricescan.scraping.storage.base import ReportSink


class JsonReportSink(ReportSink):
    """
    Writes the full run report as one indented JSON document.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def write(self, report: RunReport) -> Path:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        document = to_document(report)
        payload = document.model_dump_json(by_alias=True, exclude_none=True, indent=2)
        self._path.write_text(payload + "\n", encoding="utf-8")
        return self._path


class CsvReportSink(ReportSink):
    """
    Writes one fully quoted row per product; absent values become "".
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def write(self, report: RunReport) -> Path:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("w", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(
                handle,
                fieldnames=list(CSV_COLUMNS),
                extrasaction="ignore",
                restval="",
                quoting=csv.QUOTE_ALL,
                lineterminator="\n",
            )
            writer.writeheader()
            for row in report_rows(report.results):
                writer.writerow({key: ("" if value is None else value) for key, value in row.items()})
        return self._path
