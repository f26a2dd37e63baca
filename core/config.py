"""
Default scraper configuration for kind-scraper.

These settings are IMMUTABLE and describe the polite defaults every scrape
starts from. Callers never mutate them: per-call overrides are expressed as
ScrapeOptions and merged with `merge_request_options`, which returns a new
RequestOptions value.

Design: one page, one robots check, one courtesy delay. Speed is a non-goal.
"""

from typing import Set

from core.models import MAX_RESULT_LINKS, RequestOptions, ScrapeOptions


class ScraperConfig:
    """
    Immutable scraper defaults.

    Every value here is read-only; a different policy is a different
    ScrapeOptions value passed at call time.
    """

    # ========================================================================
    # Fetch-Layer Defaults
    # ========================================================================

    # User-Agent sent with robots.txt and page requests
    USER_AGENT: str = "KindWebScraper"
    """User-Agent header identifying the scraper."""

    # Page fetch timeout
    FETCH_TIMEOUT_SECONDS: float = 5.0
    """Maximum time to wait for the page response (seconds)."""

    # Robots.txt fetch timeout
    ROBOTS_TIMEOUT_SECONDS: float = 5.0
    """Maximum time to wait for robots.txt before failing open (seconds)."""

    # Fixed pause between the robots decision and the page request
    COURTESY_DELAY_SECONDS: float = 1.0
    """Courtesy delay applied on every scrape, after a policy allowance."""

    # Expected response shape
    DEFAULT_RESPONSE_TYPE: str = "text"
    """Response bodies are requested as decoded text."""

    # Protocol whitelist for scrape targets
    ALLOWED_PROTOCOLS: Set[str] = {"http", "https"}
    """Only HTTP(S) targets are scraped."""

    # ========================================================================
    # Extraction Defaults
    # ========================================================================

    # Outbound link cap
    MAX_LINKS: int = MAX_RESULT_LINKS
    """Maximum number of unique links returned per page."""

    # Schemes that count as web links when filtering is enabled
    HTTP_URL_SCHEMES: Set[str] = {"http", "https"}
    """Schemes kept when exclude_non_http_schemes is on."""

    # javascript:, mailto: and friends are kept unless a caller opts out
    EXCLUDE_NON_HTTP_SCHEMES: bool = False
    """Default for dropping non-HTTP(S) links from results."""

    @classmethod
    def default_headers(cls) -> dict[str, str]:
        """Return a fresh copy of the default request headers."""
        return {"User-Agent": cls.USER_AGENT}

    @classmethod
    def validate(cls) -> None:
        """
        Validate configuration at startup.

        Raises:
            AssertionError: If any constraint is violated.
        """
        assert cls.USER_AGENT.strip(), "USER_AGENT must be non-empty"

        assert (
            cls.FETCH_TIMEOUT_SECONDS > 0
        ), "FETCH_TIMEOUT_SECONDS must be > 0"

        assert (
            cls.ROBOTS_TIMEOUT_SECONDS > 0
        ), "ROBOTS_TIMEOUT_SECONDS must be > 0"

        assert (
            cls.COURTESY_DELAY_SECONDS >= 0
        ), "COURTESY_DELAY_SECONDS must be ≥0"

        assert cls.MAX_LINKS > 0, "MAX_LINKS must be > 0"

        assert (
            cls.ALLOWED_PROTOCOLS <= {"http", "https"}
        ), "ALLOWED_PROTOCOLS may only contain http/https"


# Validate at module import time
ScraperConfig.validate()


def merge_request_options(options: ScrapeOptions | None = None) -> RequestOptions:
    """
    Merge caller overrides over the defaults.

    Headers merge key-by-key (header names compare case-insensitively, the
    caller's spelling wins); timeout and response type replace the default
    wholesale when given.
    """
    options = options or ScrapeOptions()

    headers = ScraperConfig.default_headers()
    for name, value in options.headers.items():
        for existing in [key for key in headers if key.lower() == name.lower()]:
            del headers[existing]
        headers[name] = value

    timeout_seconds = options.timeout_seconds
    if timeout_seconds is None:
        timeout_seconds = ScraperConfig.FETCH_TIMEOUT_SECONDS

    return RequestOptions(
        headers=headers,
        timeout_seconds=timeout_seconds,
        response_type=options.response_type or ScraperConfig.DEFAULT_RESPONSE_TYPE,
    )


def robots_request_options() -> RequestOptions:
    """Options used for every robots.txt retrieval."""
    return RequestOptions(
        headers=ScraperConfig.default_headers(),
        timeout_seconds=ScraperConfig.ROBOTS_TIMEOUT_SECONDS,
        response_type="text",
    )


def exclude_non_http_schemes(options: ScrapeOptions | None = None) -> bool:
    """Resolve the link scheme filter for one scrape."""
    if options is None or options.exclude_non_http_schemes is None:
        return ScraperConfig.EXCLUDE_NON_HTTP_SCHEMES
    return options.exclude_non_http_schemes
