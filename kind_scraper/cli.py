"""Minimal CLI entrypoint for kind-scraper."""

from __future__ import annotations

import argparse
import asyncio
from typing import Any
from typing import Sequence
from uuid import uuid4

from core.errors import ScrapeFailure
from core.models import ScrapeFailureKind, ScrapeOptions
from core.structured_logging import emit_json_event
from fetcher import PolicyResolver, RequestsTransport, robots_event_hook
from kind_scraper.api import build_options, build_orchestrator


EXIT_CODE_BY_FAILURE: dict[ScrapeFailureKind, int] = {
    ScrapeFailureKind.INVALID_URL: 2,
    ScrapeFailureKind.POLICY_DENIED: 3,
    ScrapeFailureKind.NETWORK_ERROR: 4,
    ScrapeFailureKind.HTTP_ERROR: 5,
    ScrapeFailureKind.EMPTY_CONTENT: 6,
    ScrapeFailureKind.PARSE_ERROR: 7,
}


def _emit_cli_event(
    event_type: str,
    *,
    request_id: str,
    command: str,
    **payload: Any,
) -> str:
    """Emit one structured CLI event line with standard fields."""
    return emit_json_event(
        event_type,
        request_id=request_id,
        command=command,
        **payload,
    )


def _parse_header(raw: str) -> tuple[str, str]:
    """Parse NAME:VALUE into a header pair."""
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"header must look like NAME:VALUE, got {raw!r}")
    return name.strip(), value.strip()


def _options_from_args(args: argparse.Namespace) -> ScrapeOptions:
    """Translate CLI flags into per-call ScrapeOptions."""
    return build_options(
        headers=dict(args.header or []),
        timeout_seconds=args.timeout,
        exclude_non_http_schemes=True if args.exclude_non_http_schemes else None,
    )


async def _scrape(args: argparse.Namespace):
    transport = RequestsTransport()
    try:
        orchestrator = build_orchestrator(transport=transport, log_scrapes=not args.quiet)
        return await orchestrator.scrape(args.url, _options_from_args(args))
    finally:
        transport.close()


def _cmd_scrape(args: argparse.Namespace) -> int:
    """Scrape one page and print its title and links."""
    request_id = str(uuid4())
    try:
        result = asyncio.run(_scrape(args))
    except ScrapeFailure as failure:
        _emit_cli_event(
            "cli_scrape_failed",
            request_id=request_id,
            command="scrape",
            url=args.url,
            failure_kind=failure.kind.value,
            error=str(failure),
            status=failure.status,
            status_text=failure.status_text,
            detail=failure.detail,
        )
        return EXIT_CODE_BY_FAILURE[failure.kind]

    _emit_cli_event(
        "cli_scrape_completed",
        request_id=request_id,
        command="scrape",
        url=args.url,
        title=result.title,
        links=list(result.links),
    )
    return 0


async def _check_robots(url: str) -> bool:
    transport = RequestsTransport()
    try:
        return await PolicyResolver(transport, event_hook=robots_event_hook).is_allowed(url)
    finally:
        transport.close()


def _cmd_check_robots(args: argparse.Namespace) -> int:
    """Report whether robots.txt allows fetching a URL (fail-open)."""
    allowed = asyncio.run(_check_robots(args.url))
    _emit_cli_event(
        "cli_check_robots_completed",
        request_id=str(uuid4()),
        command="check-robots",
        url=args.url,
        allowed=allowed,
    )
    return 0 if allowed else EXIT_CODE_BY_FAILURE[ScrapeFailureKind.POLICY_DENIED]


def build_parser() -> argparse.ArgumentParser:
    """Create argument parser for the kind-scraper CLI."""
    parser = argparse.ArgumentParser(
        prog="kind-scraper",
        description="Polite single-page scraper: robots.txt, courtesy delay, title + 3 links",
    )
    parser.add_argument("--version", action="version", version="kind-scraper 0.1.0")

    subparsers = parser.add_subparsers(dest="command")

    scrape_parser = subparsers.add_parser(
        "scrape",
        help="Scrape one page and print its title and first unique links",
    )
    scrape_parser.add_argument("url", help="Absolute http(s) URL to scrape")
    scrape_parser.add_argument(
        "--header",
        action="append",
        type=_parse_header,
        metavar="NAME:VALUE",
        help="Extra request header (repeatable; overrides defaults by name)",
    )
    scrape_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Page request timeout in seconds (default 5)",
    )
    scrape_parser.add_argument(
        "--exclude-non-http-schemes",
        action="store_true",
        help="Drop mailto:, javascript: and other non-http(s) links",
    )
    scrape_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not print the per-scrape log line",
    )
    scrape_parser.set_defaults(func=_cmd_scrape)

    robots_parser = subparsers.add_parser(
        "check-robots",
        help="Check robots.txt permission for a URL",
    )
    robots_parser.add_argument("url", help="URL to check")
    robots_parser.set_defaults(func=_cmd_check_robots)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Execute CLI and return process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        return int(args.func(args))
    except Exception as exc:
        _emit_cli_event(
            "cli_error",
            request_id=str(uuid4()),
            command=str(getattr(args, "command", "unknown")),
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return 1


def cli() -> None:
    """Console-script entrypoint."""
    raise SystemExit(main())


if __name__ == "__main__":
    raise SystemExit(main())
