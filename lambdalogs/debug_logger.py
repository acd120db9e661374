#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Debug logging for lambdalogs.

Outputs JSON lines format to ~/.local/state/lambdalogs/debug.log
when LAMBDALOGS_DEBUG is set.

Levels:
  0 or unset: disabled
  1: info - startup, fetch results, failures
  2: debug - request queueing, view transitions, page budgets
  3: trace - per-call timing
"""

import json
import os
import sys
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


DEBUG_ENV_VAR = "LAMBDALOGS_DEBUG"
STATE_ENV_VAR = "LAMBDALOGS_STATE"
LOG_FILE_NAME = "debug.log"
MAX_LOG_SIZE_MB = 10
MAX_LOG_FILES = 3

# Session ID - generated once per process
_SESSION_ID: Optional[str] = None


def _get_session_id() -> str:
    """Get or create a session ID for correlating events."""
    global _SESSION_ID
    if _SESSION_ID is None:
        _SESSION_ID = uuid.uuid4().hex[:12]
    return _SESSION_ID


def _get_debug_level() -> int:
    """Get the configured debug level from LAMBDALOGS_DEBUG (default 0)."""
    env_level = os.environ.get(DEBUG_ENV_VAR)
    if not env_level:
        return 0
    try:
        return int(env_level)
    except ValueError:
        # Treat any non-numeric truthy value as level 1
        return 1 if env_level.lower() in ("true", "yes", "on") else 0


def _get_log_path() -> Path:
    """Get the log file path.

    LAMBDALOGS_STATE overrides the state directory, otherwise
    XDG_STATE_HOME/lambdalogs is used.
    """
    explicit_state = os.environ.get(STATE_ENV_VAR)
    if explicit_state:
        state_dir = Path(explicit_state)
    else:
        xdg_state = os.environ.get("XDG_STATE_HOME") or (Path.home() / ".local" / "state")
        state_dir = Path(xdg_state) / "lambdalogs"
    return state_dir / LOG_FILE_NAME


def _rotate_if_needed(log_path: Path) -> None:
    """Rotate log file if it exceeds size limit."""
    if not log_path.exists():
        return

    size_mb = log_path.stat().st_size / (1024 * 1024)
    if size_mb < MAX_LOG_SIZE_MB:
        return

    # debug.log.2 -> delete, debug.log.1 -> .2, debug.log -> .1
    for i in range(MAX_LOG_FILES - 1, 0, -1):
        old_path = log_path.parent / f"{LOG_FILE_NAME}.{i}"
        new_path = log_path.parent / f"{LOG_FILE_NAME}.{i + 1}"
        if old_path.exists():
            if i == MAX_LOG_FILES - 1:
                old_path.unlink()
            else:
                old_path.rename(new_path)

    log_path.rename(log_path.parent / f"{LOG_FILE_NAME}.1")


class DebugLogger:
    """
    JSON lines debug logger for lambdalogs.

    All methods are no-ops when LAMBDALOGS_DEBUG is 0 or unset.
    Safe to call from the gateway thread and the UI thread.
    """

    def __init__(self) -> None:
        self._level = _get_debug_level()
        self._log_path = _get_log_path() if self._level > 0 else None

    @property
    def enabled(self) -> bool:
        return self._level > 0

    @property
    def level(self) -> int:
        return self._level

    @property
    def log_path(self) -> Optional[Path]:
        return self._log_path

    def _write(self, event: Dict[str, Any]) -> None:
        """Write an event to the log file."""
        if not self.enabled or self._log_path is None:
            return

        event["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        event["session_id"] = _get_session_id()
        event["pid"] = os.getpid()

        try:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            _rotate_if_needed(self._log_path)

            with open(self._log_path, "a") as f:
                f.write(json.dumps(event, default=str) + "\n")
        except (OSError, ValueError) as e:
            # Logging must never break the dashboard
            if self._level >= 3:
                print(f"[debug_logger] write failed: {type(e).__name__}: {e}", file=sys.stderr)

    # =========================================================================
    # Level 1: Info events
    # =========================================================================

    def startup(self, account_id: str, function_count: int, duration_ms: float) -> None:
        """Log a completed startup inventory load."""
        if self._level < 1:
            return
        self._write(
            {
                "event": "startup",
                "level": "info",
                "account_id": account_id,
                "function_count": function_count,
                "duration_ms": round(duration_ms, 2),
            }
        )

    def fetch_completed(self, kind: str, request_id: int, items: int, duration_ms: float) -> None:
        """Log a request that produced a success result."""
        if self._level < 1:
            return
        self._write(
            {
                "event": "fetch_completed",
                "level": "info",
                "kind": kind,
                "request_id": request_id,
                "items": items,
                "duration_ms": round(duration_ms, 2),
            }
        )

    def fetch_failed(self, kind: str, request_id: int, error_type: str, error: str) -> None:
        """Log a request that produced a failure result."""
        if self._level < 1:
            return
        self._write(
            {
                "event": "fetch_failed",
                "level": "error",
                "kind": kind,
                "request_id": request_id,
                "error_type": error_type,
                "err": error[:500],
            }
        )

    def error(self, operation: str, error: str, context: Optional[Dict] = None) -> None:
        """Log an error outside a fetch request (e.g. during startup)."""
        if self._level < 1:
            return
        event = {"event": "error", "level": "error", "op": operation, "err": error[:500]}
        if context:
            event["context"] = context
        self._write(event)

    # =========================================================================
    # Level 2: Debug events
    # =========================================================================

    def request_enqueued(self, kind: str, request_id: int, target: str) -> None:
        if self._level < 2:
            return
        self._write(
            {
                "event": "request_enqueued",
                "level": "debug",
                "kind": kind,
                "request_id": request_id,
                "target": target,
            }
        )

    def request_dropped(self, kind: str, target: str) -> None:
        """Log a request that could not be queued because the gateway was busy."""
        if self._level < 2:
            return
        self._write({"event": "request_dropped", "level": "debug", "kind": kind, "target": target})

    def stale_result(self, request_id: int, expected_id: Optional[int]) -> None:
        if self._level < 2:
            return
        self._write(
            {
                "event": "stale_result",
                "level": "debug",
                "request_id": request_id,
                "expected_id": expected_id,
            }
        )

    def page_budget_exhausted(self, operation: str, pages: int) -> None:
        if self._level < 2:
            return
        self._write(
            {
                "event": "page_budget_exhausted",
                "level": "debug",
                "operation": operation,
                "pages": pages,
            }
        )

    def transition(self, from_view: str, to_view: str, overlay: str) -> None:
        if self._level < 2:
            return
        self._write(
            {
                "event": "transition",
                "level": "debug",
                "from": from_view,
                "to": to_view,
                "overlay": overlay,
            }
        )

    # =========================================================================
    # Level 3: Trace events
    # =========================================================================

    @contextmanager
    def timer(self, operation: str, context: Optional[Dict[str, Any]] = None):
        """Context manager to time a single remote call."""
        if self._level < 3:
            yield
            return

        start = time.perf_counter()
        try:
            yield
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            event = {
                "event": "timing",
                "level": "trace",
                "op": operation,
                "ms": round(duration_ms, 2),
            }
            if context:
                event["context"] = context
            self._write(event)


# Global singleton
_logger: Optional[DebugLogger] = None


def get_logger() -> DebugLogger:
    """Get the global debug logger instance."""
    global _logger
    if _logger is None:
        _logger = DebugLogger()
    return _logger


def reset_logger() -> None:
    """Reset the global logger (for testing, or after changing LAMBDALOGS_DEBUG)."""
    global _logger
    _logger = None
