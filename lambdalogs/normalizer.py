#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Normalization of raw AWS API items into dashboard records.

Pure functions only: no I/O and no clock access (callers pass "now").
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from lambdalogs.errors import RemoteMalformedResponse
from lambdalogs.models import FunctionDetail, FunctionSummary, LogEventEntry, LogStreamSummary

MILLIS_PER_DAY = 86_400_000

# RFC 1123, e.g. "Mon, 02 Jan 2006 15:04:05 MST"
TIMESTAMP_FORMAT = "%a, %d %b %Y %H:%M:%S %Z"


def format_timestamp(epoch_ms: int) -> str:
    """Render epoch milliseconds as an RFC 1123 string in local time."""
    dt = datetime.fromtimestamp(epoch_ms // 1000, tz=timezone.utc).astimezone()
    return dt.strftime(TIMESTAMP_FORMAT)


def _require(raw: Dict[str, Any], key: str, what: str) -> Any:
    value = raw.get(key)
    if value is None:
        raise RemoteMalformedResponse(f"{what} is missing {key}")
    return value


def _millis(value: Any, key: str, what: str) -> Optional[int]:
    if value is None or (isinstance(value, int) and not isinstance(value, bool)):
        return value
    raise RemoteMalformedResponse(f"{what} has non-integer {key}")


def function_summary(raw: Dict[str, Any]) -> FunctionSummary:
    """
    Build a FunctionSummary from a ListFunctions item.

    Functions without an explicit logging config write to the default
    /aws/lambda/<name> group.
    """
    name = _require(raw, "FunctionName", "function")
    log_group = (raw.get("LoggingConfig") or {}).get("LogGroup") or f"/aws/lambda/{name}"
    return FunctionSummary(name=name, log_group=log_group)


def _pairs(mapping: Optional[Dict[str, str]]):
    return tuple((k, v) for k, v in (mapping or {}).items())


def function_detail(name: str, response: Dict[str, Any]) -> FunctionDetail:
    """
    Build a FunctionDetail from a GetFunction response.

    Args:
        name: The function name that was requested
        response: Raw GetFunction response

    Raises:
        RemoteMalformedResponse: if the response has no Configuration
    """
    config = response.get("Configuration")
    if config is None:
        raise RemoteMalformedResponse("received nil function config")

    architectures = config.get("Architectures") or []
    environment = config.get("Environment") or {}

    return FunctionDetail(
        name=config.get("FunctionName") or name,
        arn=config.get("FunctionArn"),
        description=config.get("Description"),
        last_modified=config.get("LastModified"),
        runtime=config.get("Runtime"),
        architecture=architectures[0] if architectures else None,
        memory_mb=config.get("MemorySize"),
        ephemeral_storage_mb=(config.get("EphemeralStorage") or {}).get("Size"),
        timeout_seconds=config.get("Timeout"),
        environment_variables=_pairs(environment.get("Variables")),
        tags=_pairs(response.get("Tags")),
    )


def retention_millis(log_group: Dict[str, Any]) -> Optional[int]:
    """Retention of a DescribeLogGroups item in ms, None when it never expires."""
    days = log_group.get("retentionInDays")
    if days is None:
        return None
    return int(days) * MILLIS_PER_DAY


def is_expired(last_event_ms: Optional[int], retention_ms: Optional[int], now_ms: int) -> bool:
    """True when last_event_ms + retention_ms lies before now_ms."""
    if last_event_ms is None or retention_ms is None:
        return False
    return last_event_ms + retention_ms < now_ms


def log_stream_summary(
    raw: Dict[str, Any],
    retention_ms: Optional[int],
    now_ms: int,
) -> LogStreamSummary:
    """Build a LogStreamSummary from a DescribeLogStreams item."""
    name = _require(raw, "logStreamName", "log stream")
    last_event_ms = _millis(raw.get("lastEventTimestamp"), "lastEventTimestamp", "log stream")
    return LogStreamSummary(
        name=name,
        last_event_ms=last_event_ms,
        last_event_timestamp=format_timestamp(last_event_ms) if last_event_ms is not None else None,
        expired=is_expired(last_event_ms, retention_ms, now_ms),
    )


def log_event_entry(raw: Dict[str, Any]) -> Optional[LogEventEntry]:
    """Build a LogEventEntry from a GetLogEvents item, None if it has no message."""
    message = raw.get("message")
    if message is None:
        return None
    if not isinstance(message, str):
        raise RemoteMalformedResponse("log event has non-string message")
    timestamp = _millis(_require(raw, "timestamp", "log event"), "timestamp", "log event")
    if message.endswith("\n"):
        message = message[:-1]
    return LogEventEntry(
        timestamp=format_timestamp(timestamp),
        message=message,
    )
