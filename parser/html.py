"""HTML parse stage for building a DocumentModel from fetched page text."""

from __future__ import annotations

from html.parser import HTMLParser

from core.errors import DocumentParseError
from core.models import DocumentModel, Element
from core.pipeline import DocumentParser


class _DocumentBuilder(HTMLParser):
    """Collect the first <title> text and every <a> element in document order."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._in_title = False
        self._title_done = False
        self._title_chunks: list[str] = []
        self._svg_depth = 0
        self.anchors: list[Element] = []

    @property
    def title(self) -> str:
        """Return the title with whitespace collapsed, as browsers report it."""
        return _normalize_whitespace("".join(self._title_chunks))

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        tag_lower = tag.lower()
        if tag_lower == "svg":
            self._svg_depth += 1
            return
        if tag_lower == "title" and not self._title_done and self._svg_depth == 0:
            self._in_title = True
            return
        if tag_lower == "a":
            self.anchors.append(Element(tag="a", attrs=_first_attrs(attrs)))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        # <a/> is still an anchor; <svg/> and <title/> open nothing.
        if tag.lower() == "a":
            self.anchors.append(Element(tag="a", attrs=_first_attrs(attrs)))

    def handle_endtag(self, tag: str) -> None:
        tag_lower = tag.lower()
        if tag_lower == "svg" and self._svg_depth > 0:
            self._svg_depth -= 1
            return
        if tag_lower == "title" and self._in_title:
            self._in_title = False
            self._title_done = True

    def handle_data(self, data: str) -> None:
        if self._in_title:
            self._title_chunks.append(data)


def _first_attrs(attrs: list[tuple[str, str | None]]) -> dict[str, str | None]:
    """Keep the first occurrence of each attribute name."""
    collected: dict[str, str | None] = {}
    for name, value in attrs:
        key = name.lower()
        if key not in collected:
            collected[key] = value
    return collected


def _normalize_whitespace(value: str) -> str:
    """Collapse runs of whitespace and trim."""
    return " ".join(value.split())


class HtmlDocumentParser(DocumentParser):
    """Convert page HTML into a DocumentModel."""

    def parse(self, html: str, base_url: str) -> DocumentModel:
        """Parse markup; any parser failure surfaces as DocumentParseError."""
        _ = base_url
        if not isinstance(html, str):
            raise DocumentParseError(f"expected text, got {type(html).__name__}")

        builder = _DocumentBuilder()
        try:
            builder.feed(html)
            builder.close()
        except Exception as exc:
            raise DocumentParseError(f"{type(exc).__name__}: {exc}") from exc

        return DocumentModel(title=builder.title, anchors=builder.anchors)
