"""Exceptions raised across stage boundaries."""

from __future__ import annotations

from core.models import ScrapeFailureInfo, ScrapeFailureKind


class TransportError(Exception):
    """Raised by a transport when no HTTP response was obtained."""


class TransportTimeout(TransportError):
    """Raised by a transport when the request timed out."""


class DocumentParseError(Exception):
    """Raised by a document parser when markup cannot be turned into a document."""


class ScrapeFailure(Exception):
    """A scrape ended in one of the classified failure kinds."""

    def __init__(self, info: ScrapeFailureInfo) -> None:
        """Wrap the failure payload so callers can branch on `kind`."""
        super().__init__(info.message)
        self.info = info

    @property
    def kind(self) -> ScrapeFailureKind:
        return self.info.kind

    @property
    def status(self) -> int | None:
        return self.info.status

    @property
    def status_text(self) -> str | None:
        return self.info.status_text

    @property
    def detail(self) -> str | None:
        return self.info.detail
