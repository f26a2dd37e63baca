"""
Core Pydantic models for kind-scraper.

Design principles:
- Every model is explicitly typed and validated
- Request/result values are frozen: created once, consumed once
- Failures are data too (ScrapeFailureInfo), so every exit path is enumerable
- Nothing here is persisted; every value lives for a single scrape
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List, Dict, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# Hard cap on outbound links carried by a ScrapeResult.
MAX_RESULT_LINKS = 3

# Non-text/* media types whose bodies are still markup.
TEXTUAL_MEDIA_TYPES = frozenset({"application/xhtml+xml", "application/xml"})


# ============================================================================
# Enums
# ============================================================================

class ScrapeState(str, Enum):
    """Where is a scrape in its lifecycle?"""
    VALIDATING = "VALIDATING"
    CHECKING_POLICY = "CHECKING_POLICY"
    DELAYING = "DELAYING"
    FETCHING = "FETCHING"
    EXTRACTING = "EXTRACTING"
    DONE = "DONE"
    FAILED = "FAILED"


class ScrapeFailureKind(str, Enum):
    """Why did a scrape fail?"""
    INVALID_URL = "INVALID_URL"  # Not an absolute http(s) URL; no I/O attempted
    POLICY_DENIED = "POLICY_DENIED"  # robots.txt disallows the path
    NETWORK_ERROR = "NETWORK_ERROR"  # DNS, refused, reset, timeout on the page fetch
    HTTP_ERROR = "HTTP_ERROR"  # Non-2xx page response
    EMPTY_CONTENT = "EMPTY_CONTENT"  # 2xx with empty or non-text body
    PARSE_ERROR = "PARSE_ERROR"  # Body could not be turned into a document


# ============================================================================
# Request Side
# ============================================================================

class ScrapeOptions(BaseModel):
    """
    Caller-supplied overrides for one scrape.

    Unset fields fall back to ScraperConfig defaults at merge time.
    """
    model_config = ConfigDict(frozen=True)

    headers: Dict[str, str] = Field(default_factory=dict)
    timeout_seconds: Optional[float] = Field(default=None, gt=0)
    response_type: Optional[str] = None
    exclude_non_http_schemes: Optional[bool] = None


class RequestOptions(BaseModel):
    """Fully merged options handed to a transport."""
    model_config = ConfigDict(frozen=True)

    headers: Dict[str, str] = Field(default_factory=dict)
    timeout_seconds: float = Field(gt=0)
    response_type: str = "text"


class ScrapeRequest(BaseModel):
    """A single page to scrape. Validity of `url` is checked by the orchestrator."""
    model_config = ConfigDict(frozen=True)

    url: str
    options: ScrapeOptions = Field(default_factory=ScrapeOptions)
    request_id: str = Field(default_factory=lambda: str(uuid4()))


class FetchResponse(BaseModel):
    """What a transport hands back for one GET."""
    status: int
    status_text: str = ""
    headers: Dict[str, str] = Field(default_factory=dict)
    data: Union[str, bytes, None] = None

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    def is_textual(self) -> bool:
        """
        True when the declared content type is text.

        A missing content-type is accepted; otherwise it must be text/* or an
        XML/XHTML markup type.
        """
        content_type = self.header("content-type")
        if not content_type:
            return True
        media_type = content_type.split(";", 1)[0].strip().lower()
        return media_type.startswith("text/") or media_type in TEXTUAL_MEDIA_TYPES


# ============================================================================
# Document Model
# ============================================================================

class Element(BaseModel):
    """One parsed element with its attributes as written in the markup."""
    tag: str
    attrs: Dict[str, Optional[str]] = Field(default_factory=dict)

    def get_attribute(self, name: str) -> Optional[str]:
        """Return the attribute value, or None when absent."""
        return self.attrs.get(name.lower())


class DocumentModel(BaseModel):
    """
    Parsed page: the title plus anchors in document order.

    The title is already whitespace-normalized by the parser.
    """
    title: str = ""
    anchors: List[Element] = Field(default_factory=list)


# ============================================================================
# Outcomes
# ============================================================================

class ScrapeResult(BaseModel):
    """
    Normalized page summary.

    - title: never None, empty when the page has none
    - links: at most 3 unique absolute URLs, first-seen document order
    """
    model_config = ConfigDict(frozen=True)

    title: str = ""
    links: List[str] = Field(default_factory=list, max_length=MAX_RESULT_LINKS)

    @field_validator("links")
    @classmethod
    def validate_unique_links(cls, v: List[str]) -> List[str]:
        """Reject duplicate links; order is meaningful so nothing is sorted."""
        if len(set(v)) != len(v):
            raise ValueError("links must be unique")
        return v


class ScrapeFailureInfo(BaseModel):
    """Classified reason a scrape produced no result."""
    model_config = ConfigDict(frozen=True)

    kind: ScrapeFailureKind
    message: str
    state: ScrapeState  # State the failure happened in
    url: str
    detail: Optional[str] = None
    status: Optional[int] = None  # HTTP_ERROR only
    status_text: Optional[str] = None  # HTTP_ERROR only


class ScrapeLog(BaseModel):
    """
    Log entry for a single scrape.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    url: str
    request_id: str

    status_code: Optional[int] = None  # HTTP status of the page fetch
    latency_ms: Optional[int] = None  # Whole scrape, courtesy delay included
    bytes_received: Optional[int] = None
    links_found: int = 0

    final_state: ScrapeState
    failure_kind: Optional[ScrapeFailureKind] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)


class ScrapeOutcome(BaseModel):
    """
    Terminal outcome of one scrape: DONE with a result or FAILED with a failure.
    """
    state: ScrapeState
    result: Optional[ScrapeResult] = None
    failure: Optional[ScrapeFailureInfo] = None
    log: ScrapeLog

    @model_validator(mode="after")
    def validate_terminal_state(self) -> "ScrapeOutcome":
        """Exactly one of result/failure, matching the state."""
        if self.state == ScrapeState.DONE:
            if self.result is None or self.failure is not None:
                raise ValueError("DONE outcome requires a result and no failure")
        elif self.state == ScrapeState.FAILED:
            if self.failure is None or self.result is not None:
                raise ValueError("FAILED outcome requires a failure and no result")
        else:
            raise ValueError(f"{self.state.value} is not a terminal state")
        return self

    @property
    def ok(self) -> bool:
        """True when the scrape produced a result."""
        return self.state == ScrapeState.DONE
