"""
Price scan configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass

QUERY_PLACEHOLDER = "{query}"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/133.0.0.0 Safari/537.36"
)
DEFAULT_ACCEPT_LANGUAGE = "de-DE,de;q=0.9,en;q=0.8"


@dataclass(frozen=True)
class ShopSource:
    """
    One external shop whose search results are scraped for comparison prices.
    """

    name: str
    domain: str
    search_url_templates: tuple[str, ...]
    enabled: bool = True

    @property
    def referer(self) -> str:
        return f"https://{self.domain or 'www.preisvergleich.de'}"


@dataclass(frozen=True)
class PriceScanSettings:
    """
    Runtime settings for one price scan run.

    Durations ending in `_ms` are milliseconds, matching the report echo.
    """

    sources_path: str
    user_agent: str = DEFAULT_USER_AGENT
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    product_limit: int = 100
    include_all_statuses: bool = False
    timeout_ms: int = 15000
    retries: int = 0
    retry_timeouts: bool = False
    backoff_step_seconds: float = 0.8
    product_delay_ms: int = 800
    shop_delay_ms: int = 250
    shop_concurrency: int = 4
    shop_timeout_skip_after: int = 3
    max_html_bytes: int = 800_000
    max_shops: int = 100
    only_shop: str = ""
    max_matched_links_per_shop: int = 3
    verify_product_pages: bool = True
    debug_html_dir: str | None = None
    show_links: bool = False
    show_reachable_links: bool = False
    output_json: str = "reports/shops-price-report.json"
    output_csv: str = "reports/shops-price-report.csv"

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0
