"""URL validation and reference resolution."""

from __future__ import annotations

import re
from urllib.parse import urljoin, urlsplit, urlunsplit


_SPECIAL_SCHEMES = {"http", "https", "ws", "wss", "ftp"}
_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}

# Characters a browser refuses inside a host name.
_FORBIDDEN_HOST_CHARS = re.compile(r"[\s<>^|%/\\#?@\[\]]")
# Tabs and newlines are silently removed from URL input.
_TAB_OR_NEWLINE = re.compile(r"[\t\n\r]")


def validate_target_url(url: str, allowed_schemes: set[str] | frozenset[str] = frozenset({"http", "https"})) -> str:
    """
    Check that `url` is an absolute URL worth requesting.

    Rules:
    - Must parse, with a scheme in `allowed_schemes` (case-insensitive)
    - Must carry a host name without forbidden characters
    - An explicit port must be numeric and in range

    Returns the URL unchanged. Raises ValueError describing the first problem.
    """
    if not isinstance(url, str) or not url.strip():
        raise ValueError("URL is empty")

    parsed = urlsplit(url.strip())
    scheme = parsed.scheme.lower()
    if not scheme:
        raise ValueError("URL has no scheme")
    if scheme not in allowed_schemes:
        raise ValueError(f"unsupported scheme: {scheme}")
    _checked_host(parsed)
    return url


def _checked_host(parsed) -> str:
    """Return the lowercased host of a special-scheme URL or raise ValueError."""
    hostname = parsed.hostname or ""
    if not hostname:
        raise ValueError("URL has no host")
    if _FORBIDDEN_HOST_CHARS.search(hostname) and not _is_ipv6_literal(parsed.netloc):
        raise ValueError(f"invalid host: {hostname}")
    # .port raises ValueError for non-numeric or out-of-range ports
    _ = parsed.port
    return hostname.lower()


def _is_ipv6_literal(netloc: str) -> bool:
    host_part = netloc.rsplit("@", 1)[-1]
    return host_part.startswith("[")


def resolve_url(href: str, base_url: str) -> str:
    """
    Resolve an href against the page URL, the way a browser serializes it.

    Rules (v0):
    - Strip surrounding whitespace; drop embedded tabs/newlines
    - Relative and protocol-relative references resolve against `base_url`
    - For web schemes: lowercase scheme + host, drop the default port,
      empty path becomes "/"
    - Other schemes (mailto:, javascript:, ...) pass through as resolved
    - No further normalization: query, fragment and trailing slashes are kept

    Raises ValueError when the reference cannot be resolved.
    """
    reference = _TAB_OR_NEWLINE.sub("", href.strip())
    resolved = urljoin(base_url, reference)
    parsed = urlsplit(resolved)
    scheme = parsed.scheme.lower()
    if not scheme:
        raise ValueError(f"reference did not resolve to an absolute URL: {href!r}")

    if scheme not in _SPECIAL_SCHEMES:
        return resolved

    hostname = _checked_host(parsed)
    if ":" in hostname:
        hostname = f"[{hostname}]"

    netloc = hostname
    if parsed.port is not None and parsed.port != _DEFAULT_PORTS[scheme]:
        netloc = f"{hostname}:{parsed.port}"
    if parsed.username is not None:
        userinfo = parsed.username
        if parsed.password is not None:
            userinfo = f"{userinfo}:{parsed.password}"
        netloc = f"{userinfo}@{netloc}"

    path = parsed.path or "/"
    return urlunsplit((scheme, netloc, path, parsed.query, parsed.fragment))


def is_http_url(url: str, schemes: set[str] | frozenset[str] = frozenset({"http", "https"})) -> bool:
    """True when the resolved URL uses one of the web schemes."""
    return urlsplit(url).scheme.lower() in schemes


def origin_of(url: str) -> str:
    """Return scheme://host[:port] for an absolute web URL."""
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()
    hostname = _checked_host(parsed)
    if ":" in hostname:
        hostname = f"[{hostname}]"
    port = parsed.port
    if port is not None and port != _DEFAULT_PORTS.get(scheme):
        return f"{scheme}://{hostname}:{port}"
    return f"{scheme}://{hostname}"


def policy_path_of(url: str) -> str:
    """Return the path (plus query) used for robots prefix matching."""
    parsed = urlsplit(url)
    path = parsed.path or "/"
    if parsed.query:
        path = f"{path}?{parsed.query}"
    return path
