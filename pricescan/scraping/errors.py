"""
Error taxonomy for price scanning.

Fetch errors are raised by the bounded fetcher and converted into shop
attempt summaries one layer up. Only `PriceScanConfigError` is meant to
reach the operator.
"""

from __future__ import annotations


class PriceScanConfigError(ValueError):
    """
    Setup-time configuration problem (bad registry, no usable sources).
    """


class FetchError(RuntimeError):
    """
    Base class for a failed page retrieval.
    """

    def __init__(self, message: str, *, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class FetchTimeoutError(FetchError):
    """
    The retrieval did not complete within its time budget.
    """

    def __init__(self, timeout_ms: int, *, url: str | None = None) -> None:
        super().__init__(f"Timeout after {timeout_ms}ms", url=url)
        self.timeout_ms = timeout_ms


class HttpStatusError(FetchError):
    """
    The server answered with a non-2xx status code.
    """

    def __init__(self, status_code: int, *, url: str | None = None) -> None:
        super().__init__(f"HTTP {status_code}", url=url)
        self.status_code = status_code
