"""
Run-scoped per-shop health tracking.
"""

from __future__ import annotations

import threading
from dataclasses import replace

from pricescan.domain.price_scan import (
    Failed,
    ShopAttemptSummary,
    ShopHealthEntry,
    ShopHealthState,
    ShopStatus,
)

TIMEOUT_LIKE_MARKERS = ("timeout", "http 429", "http 503")


def is_timeout_like(summary: ShopAttemptSummary) -> bool:
    """
    An error whose message points at throttling: timeout, HTTP 429 or 503.
    """

    if not isinstance(summary.outcome, Failed):
        return False
    message = summary.outcome.message.lower()
    return any(marker in message for marker in TIMEOUT_LIKE_MARKERS)


class ShopHealthTracker:
    """
    Counts consecutive timeout-like outcomes per shop and decides auto-skips.

    State is created lazily on first contact and kept for the whole run.
    """

    def __init__(self, *, skip_after: int = 3) -> None:
        self._skip_after = max(1, skip_after)
        self._states: dict[str, ShopHealthState] = {}
        self._lock = threading.Lock()

    @property
    def skip_after(self) -> int:
        return self._skip_after

    def state(self, shop: str) -> ShopHealthState:
        """
        Copy of the current state for `shop` (zeroed if never seen).
        """

        with self._lock:
            current = self._states.get(shop)
            if current is None:
                return ShopHealthState()
            return replace(current)

    def should_skip(self, shop: str) -> bool:
        with self._lock:
            current = self._states.get(shop)
            return current is not None and current.timeouts_in_row >= self._skip_after

    def record(self, summary: ShopAttemptSummary) -> ShopHealthState:
        """
        Fold one attempt outcome into the shop's state.
        """

        with self._lock:
            current = self._states.setdefault(summary.shop, ShopHealthState())
            duration = float(summary.duration_ms)
            current.runs += 1
            if current.runs <= 1:
                current.avg_duration_ms = duration
            else:
                current.avg_duration_ms = round(
                    (current.avg_duration_ms * (current.runs - 1) + duration) / current.runs,
                    2,
                )

            if summary.status == ShopStatus.SKIPPED:
                current.skipped += 1
            elif is_timeout_like(summary):
                current.timeouts_in_row += 1
            else:
                current.timeouts_in_row = 0
            return replace(current)

    def snapshot(self) -> list[ShopHealthEntry]:
        """
        All states in first-contact order.
        """

        with self._lock:
            return [
                ShopHealthEntry(
                    shop=shop,
                    runs=state.runs,
                    avg_duration_ms=state.avg_duration_ms,
                    timeouts_in_row=state.timeouts_in_row,
                    skipped=state.skipped,
                )
                for shop, state in self._states.items()
            ]
