"""
Bounded HTTP retrieval client.

One GET per attempt with browser-like headers, a hard time budget, linear
retry backoff and a byte cap on the body. No shared state is touched here;
health bookkeeping happens in the shop scraper.
"""

from __future__ import annotations

import logging
import socket
import threading
import time
from collections.abc import Callable

import requests

from pricescan.scraping.config.models import PriceScanSettings
from pricescan.scraping.errors import FetchError, FetchTimeoutError, HttpStatusError
from pricescan.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 16 * 1024
_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8"


class _BodyWatchdog:
    """
    Cuts a streaming response off once its time budget is spent.

    A blocked socket read only returns when data arrives or the socket is
    shut down, so expiry shuts the underlying socket down from the timer
    thread. The reading thread then sees end-of-stream or a protocol error.
    """

    def __init__(self, response: requests.Response, seconds: float) -> None:
        self._response = response
        self.expired = False
        self._timer = threading.Timer(max(0.0, seconds), self._expire)
        self._timer.daemon = True

    def __enter__(self) -> _BodyWatchdog:
        self._timer.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._timer.cancel()

    def _expire(self) -> None:
        self.expired = True
        raw = getattr(self._response, "raw", None)
        sock = getattr(getattr(raw, "_connection", None), "sock", None)
        if sock is None:
            self._response.close()
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # peer already gone
            return


class BoundedFetcher:
    """
    Fetches pages with timeout, retry and size limits.

    An injected session is used as-is; otherwise every calling thread gets
    its own session from `session_factory`.
    """

    def __init__(
        self,
        *,
        settings: PriceScanSettings,
        session: requests.Session | None = None,
        session_factory: Callable[[], requests.Session] = requests.Session,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings
        self._shared_session = session
        self._session_factory = session_factory
        self._local = threading.local()
        self._sleep = sleep
        self._clock = clock

    @property
    def session(self) -> requests.Session:
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._session_factory()
            self._local.session = session
        return session

    def fetch(
        self,
        url: str,
        *,
        retries: int | None = None,
        referer: str | None = None,
    ) -> str:
        """
        Return the (possibly truncated) body of `url` decoded as UTF-8.

        Retries up to `retries` extra times (settings default) with
        `attempt * backoff_step` pauses. Timeouts are retried only when
        `retry_timeouts` is set. The last failure is raised.
        """

        max_retries = self._settings.retries if retries is None else max(0, retries)
        attempt = 0
        while True:
            try:
                return self._fetch_once(url, referer=referer)
            except FetchError as exc:
                is_timeout = isinstance(exc, FetchTimeoutError)
                if attempt >= max_retries or (is_timeout and not self._settings.retry_timeouts):
                    raise
                attempt += 1
                backoff_seconds = self._settings.backoff_step_seconds * attempt
                log_event(
                    logger,
                    logging.DEBUG,
                    "fetch_retry",
                    url=url,
                    attempt=attempt,
                    backoff_seconds=backoff_seconds,
                    error=str(exc),
                )
                self._sleep(backoff_seconds)

    def _fetch_once(self, url: str, *, referer: str | None) -> str:
        deadline = self._clock() + self._settings.timeout_seconds
        try:
            response = self.session.get(
                url,
                headers=self._headers(referer),
                timeout=self._settings.timeout_seconds,
                allow_redirects=True,
                stream=True,
            )
        except requests.Timeout as exc:
            raise FetchTimeoutError(self._settings.timeout_ms, url=url) from exc
        except requests.RequestException as exc:
            raise FetchError(str(exc), url=url) from exc

        try:
            remaining = deadline - self._clock()
            if remaining <= 0:
                raise FetchTimeoutError(self._settings.timeout_ms, url=url)
            if not 200 <= response.status_code < 300:
                raise HttpStatusError(response.status_code, url=url)
            with _BodyWatchdog(response, remaining) as watchdog:
                body = self._read_limited(response, deadline=deadline, url=url, watchdog=watchdog)
        finally:
            response.close()
        return body.decode("utf-8", errors="replace")

    def _read_limited(
        self,
        response: requests.Response,
        *,
        deadline: float,
        url: str,
        watchdog: _BodyWatchdog,
    ) -> bytes:
        max_bytes = self._settings.max_html_bytes
        chunks: list[bytes] = []
        received = 0
        try:
            for chunk in response.iter_content(chunk_size=_CHUNK_SIZE):
                if watchdog.expired or self._clock() > deadline:
                    raise FetchTimeoutError(self._settings.timeout_ms, url=url)
                if not chunk:
                    continue
                piece = chunk[: max_bytes - received]
                chunks.append(piece)
                received += len(piece)
                if received >= max_bytes:
                    break
        except requests.RequestException as exc:
            # requests re-raises urllib3 read timeouts mid-stream as ConnectionError
            if watchdog.expired or isinstance(exc, requests.Timeout) or "timed out" in str(exc).lower():
                raise FetchTimeoutError(self._settings.timeout_ms, url=url) from exc
            raise FetchError(str(exc), url=url) from exc
        if watchdog.expired:
            # stream ended early because the socket was shut down
            raise FetchTimeoutError(self._settings.timeout_ms, url=url)
        return b"".join(chunks)

    def _headers(self, referer: str | None) -> dict[str, str]:
        headers = {
            "User-Agent": self._settings.user_agent,
            "Accept-Language": self._settings.accept_language,
            "Accept": _ACCEPT,
        }
        if referer:
            headers["Referer"] = referer
        return headers
