"""kind-scraper: polite single-page fetch unit."""

from kind_scraper.api import build_options, build_orchestrator, scrape

__all__ = ["build_options", "build_orchestrator", "scrape"]
