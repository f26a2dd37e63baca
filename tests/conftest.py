"""
Shared pytest fixtures and configuration for kind-scraper tests.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

import pytest

from core.models import DocumentModel, Element, FetchResponse, RequestOptions
from core.pipeline import DelayStage, FetchTransport, ScrapeOrchestrator
from extractor import LinkExtractStage
from fetcher import PolicyResolver
from parser import HtmlDocumentParser


# ============================================================================
# Test Doubles
# ============================================================================

class FakeTransport(FetchTransport):
    """
    Route-driven transport.

    `routes` maps URL -> FetchResponse or Exception. Unknown URLs answer 404.
    Every call is appended to `calls` and to the shared `timeline`.
    """

    def __init__(
        self,
        routes: dict[str, FetchResponse | Exception] | None = None,
        timeline: list[tuple[str, object]] | None = None,
    ) -> None:
        self.routes = dict(routes or {})
        self.calls: list[tuple[str, RequestOptions]] = []
        self.call_times: list[tuple[str, float]] = []
        self.timeline = timeline if timeline is not None else []

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]

    async def fetch(self, url: str, options: RequestOptions) -> FetchResponse:
        self.calls.append((url, options))
        self.call_times.append((url, time.monotonic()))
        self.timeline.append(("fetch", url))
        item = self.routes.get(url)
        if item is None:
            return FetchResponse(status=404, status_text="Not Found", data="")
        if isinstance(item, Exception):
            raise item
        return item


class RecordingDelay(DelayStage):
    """Courtesy delay that records instead of sleeping."""

    def __init__(self, timeline: list[tuple[str, object]], seconds: float = 1.0) -> None:
        self.timeline = timeline
        self.seconds = seconds
        self.calls = 0

    async def wait(self) -> float:
        self.calls += 1
        self.timeline.append(("delay", self.seconds))
        return self.seconds


def html_response(body: str, status: int = 200, status_text: str = "OK") -> FetchResponse:
    """Build a text/html FetchResponse."""
    return FetchResponse(
        status=status,
        status_text=status_text,
        headers={"content-type": "text/html; charset=utf-8"},
        data=body,
    )


def robots_response(body: str, status: int = 200) -> FetchResponse:
    """Build a text/plain robots.txt FetchResponse."""
    return FetchResponse(
        status=status,
        status_text="OK" if status == 200 else "",
        headers={"content-type": "text/plain"},
        data=body,
    )


def anchors(*hrefs: str | None, title: str = "") -> DocumentModel:
    """Build a DocumentModel with one anchor per href (None = no href attribute)."""
    elements = [
        Element(tag="a", attrs={} if href is None else {"href": href})
        for href in hrefs
    ]
    return DocumentModel(title=title, anchors=elements)


# ============================================================================
# Fixtures: Doubles
# ============================================================================

@pytest.fixture
def timeline() -> list[tuple[str, object]]:
    """Shared ordered record of transport and delay activity."""
    return []


@pytest.fixture
def events() -> list[tuple[str, dict[str, object]]]:
    """Captured structured events."""
    return []


@pytest.fixture
def make_orchestrator(
    timeline: list[tuple[str, object]],
    events: list[tuple[str, dict[str, object]]],
) -> Callable[..., tuple[ScrapeOrchestrator, FakeTransport, RecordingDelay]]:
    """Factory for an orchestrator wired to a FakeTransport and RecordingDelay."""

    def _capture(event_type: str, payload: dict[str, object]) -> None:
        events.append((event_type, payload))

    def _make(
        routes: dict[str, FetchResponse | Exception] | None = None,
        delay: DelayStage | None = None,
        parser=None,
    ) -> tuple[ScrapeOrchestrator, FakeTransport, RecordingDelay]:
        transport = FakeTransport(routes, timeline=timeline)
        recording = RecordingDelay(timeline)
        orchestrator = ScrapeOrchestrator(
            policy=PolicyResolver(transport, event_hook=_capture),
            delay=delay or recording,
            transport=transport,
            parser=parser or HtmlDocumentParser(),
            extractor=LinkExtractStage(),
            log_scrapes=False,
            event_logger=_capture,
        )
        return orchestrator, transport, recording

    return _make


# ============================================================================
# Fixtures: HTML
# ============================================================================

@pytest.fixture
def sample_html() -> str:
    """Page with a title and five anchors, two of which resolve identically."""
    return """\
<!DOCTYPE html>
<html>
<head><title>  Test
    Page </title></head>
<body>
  <a href="/a">A</a>
  <a href="https://h/a">A again</a>
  <a href="/b">B</a>
  <a href="/c">C</a>
  <a href="/d">D</a>
</body>
</html>
"""


# ============================================================================
# Fixtures: File Paths
# ============================================================================

@pytest.fixture
def schemas_dir() -> Path:
    """Path to schemas directory."""
    return Path(__file__).parent.parent / "schemas"


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "contract: contract schema compliance tests")
    config.addinivalue_line("markers", "integration: end-to-end integration tests")
    config.addinivalue_line("markers", "unit: unit tests")
