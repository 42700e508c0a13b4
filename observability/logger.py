"""
Observability Layer — Structured logging for tool invocations.

Responsibility:
- Log events in a structured JSON format
- Time each invocation (Idle → Executing → Idle) and report its outcome
- Contextual logging (service, invocation_id)
"""

import json
import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Iterator

logger = logging.getLogger("observability")


def new_invocation_id() -> str:
    return uuid.uuid4().hex


class Observability:
    """Structured logger for engine events."""

    def __init__(self, service: str = "finance-engine"):
        self.service = service

    def log_event(self, event_type: str, payload: dict[str, Any], level: str = "INFO") -> None:
        """Log a structured event."""
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": self.service,
            "event": event_type,
            "level": level,
            **payload,
        }
        log_method = getattr(logger, level.lower(), logger.info)
        log_method(json.dumps(entry, default=str))

    @contextmanager
    def measure(self, operation: str, metadata: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """
        Measure one operation.

        Yields a mutable span dict; callers may set "status" and "error_kind"
        on it. "duration_ms" is filled in when the block exits.
        """
        span: dict[str, Any] = {"invocation_id": new_invocation_id(), "status": "success", "error_kind": None}
        start_time = time.perf_counter()
        try:
            yield span
        except Exception as e:
            span["status"] = "error"
            span["error_kind"] = type(e).__name__
            raise
        finally:
            span["duration_ms"] = round((time.perf_counter() - start_time) * 1000, 3)
            level = "INFO" if span["status"] == "success" else "WARNING"
            self.log_event(
                "execution_metric",
                {
                    "operation": operation,
                    **span,
                    **(metadata or {}),
                },
                level=level,
            )
