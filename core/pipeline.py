"""
Pipeline interface for kind-scraper.

Defines the contract for moving one page through the stages:
validate → check policy → delay → fetch → parse → extract

This is intentionally minimal and prescriptive:
- No skipping stages
- No out-of-order execution
- No retries (a failure is terminal for that scrape; retrying is the caller's call)
"""

from abc import ABC, abstractmethod
import time
from typing import Callable, Optional

from pydantic import ValidationError

from core.config import ScraperConfig, merge_request_options
from core.errors import ScrapeFailure, TransportError, TransportTimeout
from core.models import (
    DocumentModel,
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
from core.structured_logging import emit_json_event, emit_scrape_log
from quality.urlnorm import validate_target_url


EventLogger = Callable[[str, dict[str, object]], None]


# ============================================================================
# Stage Interfaces
# ============================================================================

class FetchTransport(ABC):
    """
    Transport: perform one HTTP GET.

    Responsibilities:
    - Connection handling, TLS, redirects
    - Honor the timeout in RequestOptions
    - Decode the body as text when response_type is "text"
    """

    @abstractmethod
    async def fetch(self, url: str, options: RequestOptions) -> FetchResponse:
        """
        Fetch a single URL.

        Args:
            url: Absolute URL to GET
            options: Merged headers, timeout, response type

        Returns:
            FetchResponse for any HTTP status (4xx/5xx are responses, not errors)

        Raises:
            TransportTimeout: The request timed out
            TransportError: No response was obtained (DNS, refused, reset, ...)
        """
        pass


class DocumentParser(ABC):
    """
    Parse stage: convert HTML text → DocumentModel.
    """

    @abstractmethod
    def parse(self, html: str, base_url: str) -> DocumentModel:
        """
        Parse page markup.

        Args:
            html: Decoded page body
            base_url: URL the body was fetched from

        Returns:
            DocumentModel with title and anchors in document order

        Raises:
            DocumentParseError: Markup cannot be turned into a document
        """
        pass


class PolicyStage(ABC):
    """
    Policy stage: decide whether a URL may be fetched at all.

    Implementations must be total: any problem resolving the policy is
    reported as a decision, never as an exception.
    """

    @abstractmethod
    async def is_allowed(self, url: str) -> bool:
        """Return True when the target may be fetched."""
        pass


class DelayStage(ABC):
    """Delay stage: the courtesy pause before a page request."""

    @abstractmethod
    async def wait(self) -> float:
        """Pause and return the seconds actually waited."""
        pass


class ExtractStage(ABC):
    """
    Extract stage: DocumentModel → ScrapeResult.

    Implementations must be total: bad links are skipped, not raised.
    """

    @abstractmethod
    def extract(
        self,
        document: DocumentModel,
        base_url: str,
        options: ScrapeOptions,
    ) -> ScrapeResult:
        """Build the bounded page summary."""
        pass


# ============================================================================
# Scrape Orchestrator
# ============================================================================

class _Failed(Exception):
    """Internal transition to FAILED; never leaves this module."""

    def __init__(
        self,
        kind: ScrapeFailureKind,
        message: str,
        *,
        detail: Optional[str] = None,
        status: Optional[int] = None,
        status_text: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.detail = detail
        self.status = status
        self.status_text = status_text


class ScrapeOrchestrator:
    """
    Main orchestrator: walks one ScrapeRequest through the state machine.

        VALIDATING → CHECKING_POLICY → DELAYING → FETCHING → EXTRACTING → DONE
                              any state ──────────────────────────────→ FAILED(kind)

    Usage:
        orchestrator = ScrapeOrchestrator(policy, delay, transport, parser, extractor)
        outcome = await orchestrator.run(ScrapeRequest(url="https://example.com"))
        result = await orchestrator.scrape("https://example.com")  # raises ScrapeFailure

    Guarantees:
    - policy is always checked before any page bytes are requested
    - the courtesy delay always elapses between the policy decision and the fetch
    - every failure is one of ScrapeFailureKind; nothing else escapes `run`
      (asyncio cancellation always propagates)

    No per-scrape state is stored on the instance, so one orchestrator can run
    many scrapes concurrently.
    """

    def __init__(
        self,
        policy: PolicyStage,
        delay: DelayStage,
        transport: FetchTransport,
        parser: DocumentParser,
        extractor: ExtractStage,
        log_scrapes: bool = True,
        event_logger: Optional[EventLogger] = None,
        clock_fn: Optional[Callable[[], float]] = None,
    ) -> None:
        """Initialize stage instances, event sink, and an optional test clock."""
        self.policy = policy
        self.delay = delay
        self.transport = transport
        self.parser = parser
        self.extractor = extractor
        self.log_scrapes = log_scrapes
        self.event_logger = event_logger or self._default_event_logger
        self._clock = clock_fn or time.monotonic

    @staticmethod
    def _default_event_logger(event_type: str, payload: dict[str, object]) -> None:
        """Default event sink writing to structured JSON stdout."""
        request_id = payload.pop("request_id", None)
        emit_json_event(
            event_type,
            request_id=str(request_id) if request_id is not None else None,
            level="error" if event_type == "scrape_failed" else "info",
            component="orchestrator",
            **payload,
        )

    def _emit(self, event_type: str, request: ScrapeRequest, **payload: object) -> None:
        self.event_logger(
            event_type,
            {"request_id": request.request_id, "url": request.url, **payload},
        )

    async def scrape(self, url: str, options: Optional[ScrapeOptions] = None) -> ScrapeResult:
        """
        Scrape one page.

        Returns:
            ScrapeResult with title and up to 3 unique absolute links

        Raises:
            ScrapeFailure: With `kind` set to one of ScrapeFailureKind
        """
        try:
            request = ScrapeRequest(url=url, options=options or ScrapeOptions())
        except ValidationError as exc:
            failure = ScrapeFailureInfo(
                kind=ScrapeFailureKind.INVALID_URL,
                message=f"Invalid URL: {url!r}",
                state=ScrapeState.VALIDATING,
                url=str(url),
                detail=str(exc),
            )
            self.event_logger(
                "scrape_failed",
                {
                    "request_id": None,
                    "url": failure.url,
                    "failure_kind": failure.kind.value,
                    "state": failure.state.value,
                    "error": failure.message,
                    "detail": failure.detail,
                },
            )
            raise ScrapeFailure(failure) from exc
        outcome = await self.run(request)
        if outcome.failure is not None:
            raise ScrapeFailure(outcome.failure)
        assert outcome.result is not None
        return outcome.result

    async def run(self, request: ScrapeRequest) -> ScrapeOutcome:
        """
        Execute the full state machine for one request.

        Returns:
            ScrapeOutcome in DONE or FAILED state, with its ScrapeLog
        """
        start = self._clock()
        state = ScrapeState.VALIDATING
        response: Optional[FetchResponse] = None

        try:
            # Stage 1: Validate (no I/O for malformed input)
            try:
                url = validate_target_url(request.url, ScraperConfig.ALLOWED_PROTOCOLS)
            except ValueError as exc:
                raise _Failed(
                    ScrapeFailureKind.INVALID_URL,
                    f"Invalid URL: {request.url}",
                    detail=str(exc),
                ) from exc

            # Stage 2: Robots policy
            state = ScrapeState.CHECKING_POLICY
            if not await self.policy.is_allowed(url):
                raise _Failed(
                    ScrapeFailureKind.POLICY_DENIED,
                    f"Scraping disallowed by robots.txt for {url}",
                )
            self._emit("scrape_requesting", request)

            # Stage 3: Courtesy delay
            state = ScrapeState.DELAYING
            waited = await self.delay.wait()
            self._emit("scrape_processing", request, delay_seconds=waited)

            # Stage 4: Fetch
            state = ScrapeState.FETCHING
            response = await self._fetch(url, request.options)
            html = self._checked_body(url, response)

            # Stage 5: Parse + extract
            state = ScrapeState.EXTRACTING
            try:
                document = self.parser.parse(html, url)
            except Exception as exc:
                raise _Failed(
                    ScrapeFailureKind.PARSE_ERROR,
                    "Unable to process the webpage content",
                    detail=str(exc) or type(exc).__name__,
                ) from exc
            result = self.extractor.extract(document, url, request.options)

        except _Failed as failed:
            failure = ScrapeFailureInfo(
                kind=failed.kind,
                message=failed.message,
                state=state,
                url=request.url,
                detail=failed.detail,
                status=failed.status,
                status_text=failed.status_text,
            )
            self._emit(
                "scrape_failed",
                request,
                failure_kind=failure.kind.value,
                state=state.value,
                error=failure.message,
                detail=failure.detail,
            )
            log = self._build_log(request, start, ScrapeState.FAILED, response, failure=failure)
            return ScrapeOutcome(state=ScrapeState.FAILED, failure=failure, log=log)

        self._emit(
            "scrape_completed",
            request,
            title=result.title,
            links=list(result.links),
        )
        log = self._build_log(request, start, ScrapeState.DONE, response, result=result)
        return ScrapeOutcome(state=ScrapeState.DONE, result=result, log=log)

    async def _fetch(self, url: str, options: ScrapeOptions) -> FetchResponse:
        """Issue the page request and classify transport failures."""
        request_options = merge_request_options(options)
        try:
            return await self.transport.fetch(url, request_options)
        except TransportTimeout as exc:
            raise _Failed(
                ScrapeFailureKind.NETWORK_ERROR,
                f"Request to {url} timed out after {request_options.timeout_seconds}s",
                detail="timeout",
            ) from exc
        except TransportError as exc:
            raise _Failed(
                ScrapeFailureKind.NETWORK_ERROR,
                f"Network error while requesting {url}",
                detail=str(exc) or type(exc).__name__,
            ) from exc
        except Exception as exc:
            raise _Failed(
                ScrapeFailureKind.NETWORK_ERROR,
                f"Network error while requesting {url}",
                detail=f"{type(exc).__name__}: {exc}",
            ) from exc

    @staticmethod
    def _checked_body(url: str, response: FetchResponse) -> str:
        """Return the page text, or fail on non-2xx / empty / non-text bodies."""
        if not 200 <= response.status <= 299:
            raise _Failed(
                ScrapeFailureKind.HTTP_ERROR,
                f"Received HTTP {response.status}: {response.status_text} for {url}",
                status=response.status,
                status_text=response.status_text,
            )
        if not isinstance(response.data, str) or not response.data or not response.is_textual():
            raise _Failed(
                ScrapeFailureKind.EMPTY_CONTENT,
                f"Received empty or non-text content from {url}",
                status=response.status,
            )
        return response.data

    def _build_log(
        self,
        request: ScrapeRequest,
        start: float,
        final_state: ScrapeState,
        response: Optional[FetchResponse],
        *,
        result: Optional[ScrapeResult] = None,
        failure: Optional[ScrapeFailureInfo] = None,
    ) -> ScrapeLog:
        """Build (and optionally emit) the ScrapeLog for a finished scrape."""
        bytes_received = None
        if response is not None and response.data is not None:
            data = response.data
            bytes_received = len(data.encode("utf-8")) if isinstance(data, str) else len(data)

        log = ScrapeLog(
            url=request.url,
            request_id=request.request_id,
            status_code=response.status if response is not None else None,
            latency_ms=int((self._clock() - start) * 1000),
            bytes_received=bytes_received,
            links_found=len(result.links) if result is not None else 0,
            final_state=final_state,
            failure_kind=failure.kind if failure is not None else None,
        )
        if self.log_scrapes:
            emit_scrape_log(log)
        return log
