"""Public entrypoints: wire the default stages and scrape one page."""

from __future__ import annotations

from typing import Mapping

import requests

from core.config import ScraperConfig
from core.models import ScrapeOptions, ScrapeResult
from core.pipeline import DocumentParser, EventLogger, FetchTransport, ScrapeOrchestrator
from extractor import LinkExtractStage
from fetcher import CourtesyDelay, PolicyResolver, RequestsTransport, robots_event_hook
from parser import HtmlDocumentParser


def build_orchestrator(
    transport: FetchTransport | None = None,
    parser: DocumentParser | None = None,
    delay: CourtesyDelay | None = None,
    session: requests.Session | None = None,
    log_scrapes: bool = True,
    event_logger: EventLogger | None = None,
) -> ScrapeOrchestrator:
    """
    Build a ScrapeOrchestrator from the default stages.

    The same transport serves both robots.txt and page requests. Every stage
    can be swapped for tests or for a different HTTP/HTML stack.
    """
    http = transport or RequestsTransport(session=session)
    return ScrapeOrchestrator(
        policy=PolicyResolver(http, event_hook=event_logger or robots_event_hook),
        delay=delay or CourtesyDelay(ScraperConfig.COURTESY_DELAY_SECONDS),
        transport=http,
        parser=parser or HtmlDocumentParser(),
        extractor=LinkExtractStage(),
        log_scrapes=log_scrapes,
        event_logger=event_logger,
    )


def build_options(
    headers: Mapping[str, str] | None = None,
    timeout_seconds: float | None = None,
    exclude_non_http_schemes: bool | None = None,
) -> ScrapeOptions:
    """Shorthand for ScrapeOptions from keyword arguments."""
    return ScrapeOptions(
        headers=dict(headers or {}),
        timeout_seconds=timeout_seconds,
        exclude_non_http_schemes=exclude_non_http_schemes,
    )


async def scrape(url: str, options: ScrapeOptions | None = None) -> ScrapeResult:
    """
    Politely fetch one page and summarize it.

    Checks robots.txt (fail-open), waits the courtesy delay, fetches the page
    and returns its title plus up to 3 unique absolute links.

    Raises:
        ScrapeFailure: `kind` tells which step failed
    """
    transport = RequestsTransport()
    try:
        return await build_orchestrator(transport=transport).scrape(url, options)
    finally:
        transport.close()
