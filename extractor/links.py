"""Extract stage: DocumentModel -> bounded ScrapeResult."""

from __future__ import annotations

from core.config import ScraperConfig, exclude_non_http_schemes
from core.models import DocumentModel, ScrapeOptions, ScrapeResult
from core.pipeline import ExtractStage
from quality.urlnorm import is_http_url, resolve_url


def extract_links(
    document: DocumentModel,
    base_url: str,
    *,
    max_links: int = ScraperConfig.MAX_LINKS,
    exclude_non_http: bool = ScraperConfig.EXCLUDE_NON_HTTP_SCHEMES,
) -> list[str]:
    """
    Return up to `max_links` unique absolute links in first-seen order.

    Anchors without an href, or whose href cannot be resolved, are skipped.
    Scanning stops as soon as the cap is reached.
    """
    seen: set[str] = set()
    links: list[str] = []

    for anchor in document.anchors:
        if len(links) >= max_links:
            break
        href = anchor.get_attribute("href")
        if not href:
            continue
        try:
            absolute = resolve_url(href, base_url)
        except ValueError:
            continue
        if exclude_non_http and not is_http_url(absolute, ScraperConfig.HTTP_URL_SCHEMES):
            continue
        if absolute in seen:
            continue
        seen.add(absolute)
        links.append(absolute)

    return links


def extract_summary(
    document: DocumentModel,
    base_url: str,
    *,
    exclude_non_http: bool = ScraperConfig.EXCLUDE_NON_HTTP_SCHEMES,
) -> ScrapeResult:
    """Build the page summary: title (never None) plus bounded links."""
    return ScrapeResult(
        title=document.title or "",
        links=extract_links(document, base_url, exclude_non_http=exclude_non_http),
    )


class LinkExtractStage(ExtractStage):
    """ExtractStage implementation backed by extract_summary."""

    def extract(
        self,
        document: DocumentModel,
        base_url: str,
        options: ScrapeOptions,
    ) -> ScrapeResult:
        """Apply the per-call scheme filter and summarize the document."""
        return extract_summary(
            document,
            base_url,
            exclude_non_http=exclude_non_http_schemes(options),
        )
