"""
Contract tests for schema compliance.

Ensures that scrape results match the published schema (scrape_result.schema.json).
These tests are run on CI and must pass before any feature work.
"""

import asyncio
import json
from pathlib import Path

import pytest
import jsonschema
from pydantic import ValidationError

from conftest import html_response, robots_response
from core.models import ScrapeResult


# Load schemas
SCHEMAS_DIR = Path(__file__).parent.parent.parent / "schemas"
SCRAPE_RESULT_SCHEMA = json.loads((SCHEMAS_DIR / "scrape_result.schema.json").read_text())


@pytest.fixture
def sample_result() -> ScrapeResult:
    """Sample valid result."""
    return ScrapeResult(
        title="Example Domain",
        links=["https://example.com/a", "https://example.com/b", "mailto:team@example.com"],
    )


# ============================================================================
# ScrapeResult Schema Tests
# ============================================================================

@pytest.mark.contract
class TestScrapeResultSchema:
    """ScrapeResult must conform to scrape_result.schema.json."""

    def test_result_against_schema(self, sample_result: ScrapeResult):
        """Result serialization matches schema."""
        data = json.loads(sample_result.model_dump_json())
        try:
            jsonschema.validate(data, SCRAPE_RESULT_SCHEMA)
        except jsonschema.ValidationError as e:
            pytest.fail(f"ScrapeResult schema validation failed: {e.message}")

    def test_empty_result_against_schema(self):
        """A page with no title and no links still conforms."""
        data = json.loads(ScrapeResult().model_dump_json())

        assert data == {"title": "", "links": []}
        jsonschema.validate(data, SCRAPE_RESULT_SCHEMA)

    def test_scraped_result_against_schema(self, make_orchestrator, sample_html: str):
        """A result produced end-to-end conforms."""
        orchestrator, _, _ = make_orchestrator(
            {
                "https://h/robots.txt": robots_response("User-agent: *\nDisallow: /private"),
                "https://h/": html_response(sample_html),
            }
        )

        result = asyncio.run(orchestrator.scrape("https://h/"))

        jsonschema.validate(json.loads(result.model_dump_json()), SCRAPE_RESULT_SCHEMA)

    def test_schema_requires_mandatory_fields(self):
        """Missing mandatory fields fail validation."""
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate({"title": "x"}, SCRAPE_RESULT_SCHEMA)

    def test_schema_rejects_extra_fields(self):
        """Extra fields fail validation (additionalProperties: false)."""
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate({"title": "x", "links": [], "html": "<p>"}, SCRAPE_RESULT_SCHEMA)

    def test_schema_rejects_more_than_three_links(self):
        data = {"title": "", "links": ["https://h/1", "https://h/2", "https://h/3", "https://h/4"]}
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(data, SCRAPE_RESULT_SCHEMA)

    def test_schema_rejects_duplicate_links(self):
        data = {"title": "", "links": ["https://h/1", "https://h/1"]}
        with pytest.raises(jsonschema.ValidationError):
            jsonschema.validate(data, SCRAPE_RESULT_SCHEMA)


# ============================================================================
# Model-side enforcement
# ============================================================================

@pytest.mark.contract
class TestScrapeResultModel:
    """The model refuses what the schema refuses."""

    def test_model_rejects_more_than_three_links(self):
        with pytest.raises(ValidationError):
            ScrapeResult(links=["https://h/1", "https://h/2", "https://h/3", "https://h/4"])

    def test_model_rejects_duplicate_links(self):
        with pytest.raises(ValidationError):
            ScrapeResult(links=["https://h/1", "https://h/1"])

    def test_model_is_frozen(self, sample_result: ScrapeResult):
        with pytest.raises(ValidationError):
            sample_result.title = "changed"
