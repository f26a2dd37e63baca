"""Fetcher subsystem with robots policy, courtesy delay, and HTTP transport."""

from fetcher.http import RequestsTransport
from fetcher.logging import emit_event, robots_event_hook
from fetcher.politeness import CourtesyDelay
from fetcher.robots import PolicyDecision, PolicyResolver, PolicyRuleSet, evaluate_policy, parse_policy

__all__ = [
    "RequestsTransport",
    "emit_event",
    "robots_event_hook",
    "CourtesyDelay",
    "PolicyDecision",
    "PolicyResolver",
    "PolicyRuleSet",
    "evaluate_policy",
    "parse_policy",
]
