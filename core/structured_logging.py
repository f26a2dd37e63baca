"""Shared structured JSON logging helpers."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

from core.models import ScrapeLog


def emit_json_event(
    event_type: str,
    *,
    request_id: str | None,
    level: str = "info",
    **payload: Any,
) -> str:
    """Emit one JSON event line to stdout and return the rendered line."""
    event: dict[str, Any] = {
        "event_type": event_type,
        "level": level,
        "timestamp": datetime.now(UTC).isoformat(),
        "request_id": request_id,
    }
    event.update(payload)
    line = json.dumps(event, ensure_ascii=True, sort_keys=True, default=str)
    print(line)
    return line


def scrape_log_to_dict(scrape_log: ScrapeLog) -> dict[str, Any]:
    """Convert ScrapeLog to a JSON-safe dictionary."""
    return {
        "id": scrape_log.id,
        "url": scrape_log.url,
        "request_id": scrape_log.request_id,
        "status_code": scrape_log.status_code,
        "latency_ms": scrape_log.latency_ms,
        "bytes_received": scrape_log.bytes_received,
        "links_found": scrape_log.links_found,
        "final_state": scrape_log.final_state.value,
        "failure_kind": scrape_log.failure_kind.value if scrape_log.failure_kind else None,
        "timestamp": scrape_log.created_at.isoformat(),
    }


def emit_scrape_log(scrape_log: ScrapeLog) -> str:
    """Emit a structured JSON log line and return it for testability."""
    line = json.dumps(scrape_log_to_dict(scrape_log), ensure_ascii=True, sort_keys=True)
    print(line)
    return line
