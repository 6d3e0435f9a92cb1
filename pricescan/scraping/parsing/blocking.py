"""
Anti-bot / block page detection.
"""

from __future__ import annotations

BLOCK_SIGNALS: tuple[str, ...] = (
    "access denied",
    "forbidden",
    "captcha",
    "too many requests",
    "rate limit",
    "request blocked",
    "just a moment",
    "attention required",
)


def detect_blocked_page(markup: str) -> str | None:
    """
    Return the first block signal found in `markup` (case-insensitive), else None.
    """

    lowered = markup.lower()
    for signal in BLOCK_SIGNALS:
        if signal in lowered:
            return signal
    return None
