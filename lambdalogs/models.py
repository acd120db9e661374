#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Data models for the lambdalogs dashboard.

Defines the normalized records (functions, log streams, log events),
the navigation state owned by the view state machine, and the
request/result messages exchanged with the fetch gateway.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Tuple, Union


class ListItem(Protocol):
    """Anything shown as a row in one of the dashboard lists."""

    @property
    def key(self) -> str:
        ...

    @property
    def description(self) -> str:
        ...


@dataclass(frozen=True)
class FunctionSummary:
    """
    One deployed function from the startup inventory.

    Attributes:
        name: Function name (unique key)
        log_group: Name of the CloudWatch log group the function writes to
    """

    name: str
    log_group: str

    @property
    def key(self) -> str:
        return self.name

    @property
    def description(self) -> str:
        return self.log_group


@dataclass(frozen=True)
class FunctionDetail:
    """
    Configuration and tags of a single function.

    Scalar fields are None when the API omitted them; the presentation
    layer decides what placeholder to show. Environment variables and
    tags are (key, value) pairs in the order the API returned them.
    """

    name: str
    arn: Optional[str] = None
    description: Optional[str] = None
    last_modified: Optional[str] = None
    runtime: Optional[str] = None
    architecture: Optional[str] = None
    memory_mb: Optional[int] = None
    ephemeral_storage_mb: Optional[int] = None
    timeout_seconds: Optional[int] = None
    environment_variables: Tuple[Tuple[str, str], ...] = ()
    tags: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class LogStreamSummary:
    """
    One log stream within a log group.

    Attributes:
        name: Stream name (unique within its group)
        last_event_ms: Epoch milliseconds of the last event, None for empty streams
        last_event_timestamp: Human-readable form of last_event_ms
        expired: True when the last event is older than the group's retention
    """

    name: str
    last_event_ms: Optional[int] = None
    last_event_timestamp: Optional[str] = None
    expired: bool = False

    @property
    def key(self) -> str:
        return self.name

    @property
    def description(self) -> str:
        return f"Last Event: {self.last_event_timestamp or 'never'}"


@dataclass(frozen=True)
class LogEventEntry:
    """A single log line."""

    timestamp: str
    message: str

    @property
    def key(self) -> str:
        return self.timestamp

    @property
    def description(self) -> str:
        return self.message


class View(Enum):
    """Base views of the dashboard."""

    FUNCTION_LIST = "function_list"
    FUNCTION_DETAIL = "function_detail"
    LOG_STREAM_LIST = "log_stream_list"
    LOG_EVENT_LIST = "log_event_list"


class Overlay(Enum):
    """Overlays drawn on top of the active view."""

    NONE = "none"
    LOADING = "loading"
    ERROR = "error"


@dataclass
class NavigationState:
    """
    What is currently on screen.

    error_message is only meaningful while overlay is Overlay.ERROR.
    """

    active_view: View = View.FUNCTION_LIST
    active_function_name: str = ""
    active_log_group: str = ""
    active_log_stream_name: str = ""
    overlay: Overlay = Overlay.NONE
    error_message: str = ""


# --- Requests (foreground -> gateway) ---


@dataclass(frozen=True)
class GetFunctionDetail:
    function_name: str
    request_id: int = 0


@dataclass(frozen=True)
class ListLogStreams:
    log_group: str
    request_id: int = 0


@dataclass(frozen=True)
class ListLogEvents:
    log_group: str
    log_stream_name: str
    request_id: int = 0


FetchRequest = Union[GetFunctionDetail, ListLogStreams, ListLogEvents]


# --- Results (gateway -> foreground) ---


@dataclass(frozen=True)
class FunctionDetailLoaded:
    request_id: int
    detail: FunctionDetail


@dataclass(frozen=True)
class LogStreamsLoaded:
    request_id: int
    log_group: str
    streams: Tuple[LogStreamSummary, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class LogEventsLoaded:
    request_id: int
    log_group: str
    log_stream_name: str
    events: Tuple[LogEventEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FetchFailed:
    request_id: int
    message: str


FetchResult = Union[FunctionDetailLoaded, LogStreamsLoaded, LogEventsLoaded, FetchFailed]
