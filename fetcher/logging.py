"""Structured logging helpers for fetch-side events."""

from __future__ import annotations

from typing import Any

from core.structured_logging import emit_json_event


_WARNING_EVENTS = {"robots_warning"}


def emit_event(event_type: str, **payload: Any) -> str:
    """Emit a structured event log line and return it for testability."""
    request_id = payload.pop("request_id", None)
    return emit_json_event(
        event_type,
        request_id=request_id,
        level="warning" if event_type in _WARNING_EVENTS else "info",
        component="fetcher",
        **payload,
    )


def robots_event_hook(event_type: str, payload: dict[str, object]) -> None:
    """Default PolicyResolver event sink writing to structured JSON stdout."""
    emit_event(event_type, **payload)
