"""Core module for kind-scraper."""

from core.models import (
    DocumentModel,
    Element,
    FetchResponse,
    RequestOptions,
    ScrapeFailureInfo,
    ScrapeFailureKind,
    ScrapeLog,
    ScrapeOptions,
    ScrapeOutcome,
    ScrapeRequest,
    ScrapeResult,
    ScrapeState,
)
from core.config import ScraperConfig, merge_request_options
from core.errors import DocumentParseError, ScrapeFailure, TransportError, TransportTimeout
from core.pipeline import ScrapeOrchestrator

__all__ = [
    "DocumentModel",
    "Element",
    "FetchResponse",
    "RequestOptions",
    "ScrapeFailureInfo",
    "ScrapeFailureKind",
    "ScrapeLog",
    "ScrapeOptions",
    "ScrapeOutcome",
    "ScrapeRequest",
    "ScrapeResult",
    "ScrapeState",
    "ScraperConfig",
    "merge_request_options",
    "DocumentParseError",
    "ScrapeFailure",
    "TransportError",
    "TransportTimeout",
    "ScrapeOrchestrator",
]
