"""Robots.txt policy evaluation with a fail-open resolution strategy."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable

from core.config import robots_request_options
from core.pipeline import FetchTransport, PolicyStage
from quality.urlnorm import origin_of, policy_path_of


# Only LF and CRLF end a line; other Unicode breaks are line content.
_LINE_BREAK = re.compile(r"\r?\n")


@dataclass(slots=True)
class PolicyRuleSet:
    """Disallowed path prefixes that apply to the wildcard agent."""

    disallow_prefixes: list[str] = field(default_factory=list)

    def allows(self, request_path: str) -> bool:
        """Case-sensitive prefix match; the first hit denies."""
        for prefix in self.disallow_prefixes:
            if request_path.startswith(prefix):
                return False
        return True


@dataclass(slots=True)
class PolicyDecision:
    """Decision payload for one URL robots check."""

    allowed: bool
    mode: str  # "parsed" | "allow_all"
    robots_url: str
    status_code: int | None = None
    warning: str | None = None


def parse_policy(policy_text: str) -> PolicyRuleSet:
    """
    Collect `Disallow` prefixes for `User-agent: *`.

    Any `User-agent` line opens a new section; only lines inside a `*` section
    count. Empty `Disallow:` is "allow all" and adds nothing. Lines without a
    colon, blank lines and `#` comments are skipped.
    """
    rules = PolicyRuleSet()
    active_wildcard = False

    for raw in _LINE_BREAK.split(policy_text):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip().lower()
        value = value.strip()

        if key == "user-agent":
            active_wildcard = value == "*"
        elif key == "disallow" and active_wildcard and value:
            rules.disallow_prefixes.append(value)

    return rules


def evaluate_policy(policy_text: str, request_path: str) -> bool:
    """Return True when `request_path` is allowed by `policy_text`."""
    return parse_policy(policy_text).allows(request_path)


class PolicyResolver(PolicyStage):
    """
    Resolve robots.txt for a URL and evaluate it.

    Fail-open: a malformed URL, a transport error or timeout, any non-2xx
    status (404 included) or a non-text payload all resolve to "allowed".
    Nothing is cached; every call fetches robots.txt again.
    """

    def __init__(
        self,
        transport: FetchTransport,
        event_hook: Callable[[str, dict[str, object]], None] | None = None,
    ) -> None:
        """Initialize the transport used for robots.txt and an optional warning sink."""
        self.transport = transport
        self.event_hook = event_hook

    async def is_allowed(self, url: str) -> bool:
        """Return True when `url` may be fetched."""
        decision = await self.evaluate(url)
        return decision.allowed

    async def evaluate(self, url: str) -> PolicyDecision:
        """Return a full robots decision for observability."""
        decision = await self._resolve(url)
        if decision.warning and self.event_hook:
            self.event_hook(
                "robots_warning",
                {
                    "url": url,
                    "robots_url": decision.robots_url,
                    "robots_mode": decision.mode,
                    "robots_status_code": decision.status_code,
                    "message": decision.warning,
                },
            )
        return decision

    async def _resolve(self, url: str) -> PolicyDecision:
        try:
            robots_url = f"{origin_of(url)}/robots.txt"
            request_path = policy_path_of(url)
        except ValueError as exc:
            return PolicyDecision(
                allowed=True,
                mode="allow_all",
                robots_url="",
                warning=f"cannot derive robots.txt location for {url!r} ({exc}); allowing",
            )

        try:
            response = await self.transport.fetch(robots_url, robots_request_options())
        except Exception as exc:
            return PolicyDecision(
                allowed=True,
                mode="allow_all",
                robots_url=robots_url,
                warning=f"robots.txt request failed for {robots_url} ({type(exc).__name__}); allowing",
            )

        if not 200 <= response.status <= 299:
            return PolicyDecision(
                allowed=True,
                mode="allow_all",
                robots_url=robots_url,
                status_code=response.status,
                warning=f"robots.txt returned {response.status} for {robots_url}; allowing",
            )

        if not isinstance(response.data, str) or not response.is_textual():
            return PolicyDecision(
                allowed=True,
                mode="allow_all",
                robots_url=robots_url,
                status_code=response.status,
                warning=f"robots.txt at {robots_url} is not text; allowing",
            )

        return PolicyDecision(
            allowed=evaluate_policy(response.data, request_path),
            mode="parsed",
            robots_url=robots_url,
            status_code=response.status,
        )
