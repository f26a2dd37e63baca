"""Extractor package for mapping a parsed document to a ScrapeResult."""

from extractor.links import LinkExtractStage, extract_links, extract_summary

__all__ = ["LinkExtractStage", "extract_links", "extract_summary"]
