"""Structured tool-call logging."""

from __future__ import annotations

import json
import sys
import time
from typing import Any, Callable

SLOW_RESPONSE_MS = 2000.0


def log_tool_event(
    tool: str,
    latency_ms: float,
    success: bool,
    warning: str | None = None,
) -> None:
    payload: dict[str, Any] = {
        "tool": tool,
        "latency_ms": round(latency_ms, 3),
        "success": success,
        "timestamp": int(time.time()),
    }
    if warning:
        payload["warning"] = warning
    print(json.dumps(payload, ensure_ascii=True), file=sys.stderr)


def timed_tool_call(tool: str, call: Callable[[], dict[str, Any]]) -> str:
    """Run a tool body, log the structured event and return its JSON payload."""
    started = time.perf_counter()
    success = False
    try:
        payload = call()
        success = bool(payload.get("ok"))
        return json.dumps(payload, ensure_ascii=True)
    finally:
        latency_ms = (time.perf_counter() - started) * 1000.0
        warning = "slow_response" if latency_ms > SLOW_RESPONSE_MS else None
        log_tool_event(tool=tool, latency_ms=latency_ms, success=success, warning=warning)
