"""Parser package for turning page HTML into a document model."""

from parser.html import HtmlDocumentParser

__all__ = ["HtmlDocumentParser"]
