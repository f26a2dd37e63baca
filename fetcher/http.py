"""HTTP transport backed by requests, run off the event loop."""

from __future__ import annotations

import asyncio
import re

import requests

from core.errors import TransportError, TransportTimeout
from core.models import FetchResponse, RequestOptions
from core.pipeline import FetchTransport


_CHARSET = re.compile(r"charset=[\"']?([a-zA-Z0-9._-]+)", re.IGNORECASE)


def _decode_text(body: bytes, content_type: str) -> str:
    """Decode body bytes using the response charset hint with safe fallback."""
    encodings = []
    charset_match = _CHARSET.search(content_type)
    if charset_match:
        encodings.append(charset_match.group(1))
    encodings.extend(["utf-8", "latin-1"])

    for encoding in encodings:
        try:
            return body.decode(encoding)
        except (LookupError, UnicodeDecodeError):
            continue

    return body.decode("utf-8", errors="replace")


def _decode_body(
    response: requests.Response,
    response_type: str,
    content_type: str,
) -> str | bytes | None:
    """Return text for "text" responses, raw bytes otherwise."""
    if response_type == "text":
        return _decode_text(response.content, content_type)
    return response.content


def _fetch_blocking(
    session: requests.Session,
    url: str,
    options: RequestOptions,
) -> FetchResponse:
    """Perform one GET and convert it into a FetchResponse."""
    try:
        response = session.get(
            url,
            headers=dict(options.headers),
            timeout=options.timeout_seconds,
            allow_redirects=True,
        )
    except requests.Timeout as exc:
        raise TransportTimeout(f"timed out after {options.timeout_seconds}s: {url}") from exc
    except requests.RequestException as exc:
        raise TransportError(f"{type(exc).__name__}: {exc}") from exc

    headers = {k.lower(): v for k, v in response.headers.items()}
    try:
        data = _decode_body(response, options.response_type, headers.get("content-type", ""))
    except requests.RequestException as exc:
        raise TransportError(f"failed reading body from {url}: {exc}") from exc
    finally:
        response.close()

    return FetchResponse(
        status=response.status_code,
        status_text=response.reason or "",
        headers=headers,
        data=data,
    )


class RequestsTransport(FetchTransport):
    """FetchTransport implementation backed by a requests.Session."""

    def __init__(self, session: requests.Session | None = None) -> None:
        """Initialize the HTTP session shared by every request from this transport."""
        self.session = session or requests.Session()

    async def fetch(self, url: str, options: RequestOptions) -> FetchResponse:
        """Run the blocking GET in a worker thread."""
        return await asyncio.to_thread(_fetch_blocking, self.session, url, options)

    def close(self) -> None:
        """Release pooled connections."""
        self.session.close()
