#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
View state machine for the lambdalogs dashboard.

Owns the navigation state and every record on screen. Input (actions,
cursor moves, filter edits, resizes) and gateway results both come in
as method calls; the machine decides what to show next and is the only
place that submits fetch requests.

It performs no I/O and never blocks: requests are handed to a
non-blocking submit callable, and results arrive later through
handle_result().
"""

import dataclasses
import textwrap
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from lambdalogs.debug_logger import get_logger
from lambdalogs.models import (
    FetchFailed,
    FetchRequest,
    FetchResult,
    FunctionDetail,
    FunctionDetailLoaded,
    FunctionSummary,
    GetFunctionDetail,
    ListLogEvents,
    ListLogStreams,
    LogEventEntry,
    LogEventsLoaded,
    LogStreamSummary,
    LogStreamsLoaded,
    NavigationState,
    Overlay,
    View,
)

ERROR_DISMISS_HINT = "Press enter/esc to continue"

# Error text is wrapped to this fraction of the terminal width
ERROR_WIDTH_RATIO = 0.7


class Action(Enum):
    """Key-level input events."""

    CONFIRM = "confirm"
    BACK = "back"
    VIEW_LOGS = "view_logs"
    REFRESH = "refresh"
    QUIT = "quit"


def wrap_error(message: str, width: int) -> str:
    """Word-wrap an error for the full-screen overlay and append the dismiss hint."""
    wrap_width = int(width * ERROR_WIDTH_RATIO)
    text = textwrap.fill(message, wrap_width) if wrap_width > 0 else message
    return f"{text}\n\n{ERROR_DISMISS_HINT}"


def _matches(filter_text: str, name: str) -> bool:
    return filter_text.lower() in name.lower()


class ViewStateMachine:
    """
    Foreground controller for navigation.

    Args:
        functions: Function inventory loaded at startup
        submit: Non-blocking request sink; returns False when the request
            could not be queued
        width: Initial terminal width
        height: Initial terminal height
    """

    def __init__(
        self,
        functions: Sequence[FunctionSummary],
        submit: Callable[[FetchRequest], bool],
        width: int = 0,
        height: int = 0,
    ) -> None:
        self.state = NavigationState()
        self.functions: List[FunctionSummary] = list(functions)
        self.function_detail: Optional[FunctionDetail] = None
        self.log_streams: List[LogStreamSummary] = []
        self.log_events: List[LogEventEntry] = []
        self.width = width
        self.height = height
        self.terminated = False
        # Bumped whenever a displayed record set changes
        self.data_version = 0

        self._submit = submit
        self._filters: Dict[View, str] = {View.FUNCTION_LIST: "", View.LOG_STREAM_LIST: ""}
        self._cursors: Dict[View, int] = {View.FUNCTION_LIST: 0, View.LOG_STREAM_LIST: 0}
        self._events_for: Optional[Tuple[str, str]] = None
        self._last_request_id = 0
        self._expected_request_id: Optional[int] = None
        self._state_before_request: Optional[NavigationState] = None

    # --- Read-only views for the presentation layer ---

    def snapshot(self) -> NavigationState:
        return dataclasses.replace(self.state)

    @property
    def loading(self) -> bool:
        return self.state.overlay is Overlay.LOADING

    @property
    def pending_request_id(self) -> Optional[int]:
        return self._expected_request_id

    def filter_text(self, view: Optional[View] = None) -> str:
        return self._filters.get(view or self.state.active_view, "")

    def cursor(self, view: View) -> int:
        return self._cursors.get(view, 0)

    def visible_functions(self) -> List[FunctionSummary]:
        text = self._filters[View.FUNCTION_LIST]
        return [f for f in self.functions if _matches(text, f.name)]

    def visible_log_streams(self) -> List[LogStreamSummary]:
        text = self._filters[View.LOG_STREAM_LIST]
        return [s for s in self.log_streams if _matches(text, s.name)]

    def _selected(self, view: View, items: list):
        if not items:
            return None
        index = min(max(self._cursors[view], 0), len(items) - 1)
        return items[index]

    def selected_function(self) -> Optional[FunctionSummary]:
        return self._selected(View.FUNCTION_LIST, self.visible_functions())

    def selected_log_stream(self) -> Optional[LogStreamSummary]:
        return self._selected(View.LOG_STREAM_LIST, self.visible_log_streams())

    # --- Input events ---

    def resize(self, width: int, height: int) -> None:
        """Record terminal dimensions; layout only, navigation is untouched."""
        self.width = width
        self.height = height

    def highlight(self, view: View, index: int) -> None:
        """Move the cursor of a list view."""
        if self.state.overlay is not Overlay.NONE or view not in self._cursors:
            return
        self._cursors[view] = max(index, 0)

    def set_filter(self, text: str) -> None:
        """Replace the filter of the active list view."""
        view = self.state.active_view
        if self.state.overlay is not Overlay.NONE or view not in self._filters:
            return
        if self._filters[view] == text:
            return
        self._filters[view] = text
        self._cursors[view] = 0
        self.data_version += 1

    def handle_action(self, action: Action) -> None:
        if action is Action.QUIT:
            self.terminated = True
            return

        overlay = self.state.overlay
        if overlay is Overlay.ERROR:
            if action in (Action.CONFIRM, Action.BACK):
                self._dismiss_error()
            return
        if overlay is Overlay.LOADING:
            return

        view = self.state.active_view
        if view is View.FUNCTION_LIST:
            self._on_function_list(action)
        elif view is View.FUNCTION_DETAIL:
            if action is Action.BACK:
                self._go(View.FUNCTION_LIST)
        elif view is View.LOG_STREAM_LIST:
            self._on_log_stream_list(action)
        elif view is View.LOG_EVENT_LIST:
            if action is Action.BACK:
                self._go(View.LOG_STREAM_LIST)

    def _on_function_list(self, action: Action) -> None:
        if action is Action.BACK:
            self.set_filter("")
            return

        selected = self.selected_function()
        if selected is None:
            return

        if action is Action.CONFIRM:
            if (
                selected.name == self.state.active_function_name
                and self.function_detail is not None
                and self.function_detail.name == selected.name
            ):
                self._go(View.FUNCTION_DETAIL)
                return
            self._issue(
                GetFunctionDetail(selected.name, request_id=self._next_request_id()),
                active_function_name=selected.name,
            )
        elif action is Action.VIEW_LOGS:
            self._issue(
                ListLogStreams(selected.log_group, request_id=self._next_request_id()),
                active_log_group=selected.log_group,
            )

    def _on_log_stream_list(self, action: Action) -> None:
        if action is Action.BACK:
            if self._filters[View.LOG_STREAM_LIST]:
                self.set_filter("")
            else:
                self.state.active_log_group = ""
                self._go(View.FUNCTION_LIST)
        elif action is Action.REFRESH:
            self._issue(
                ListLogStreams(self.state.active_log_group, request_id=self._next_request_id())
            )
        elif action is Action.CONFIRM:
            selected = self.selected_log_stream()
            if selected is None:
                return
            group = self.state.active_log_group
            if (
                selected.name == self.state.active_log_stream_name
                and self._events_for == (group, selected.name)
            ):
                self._go(View.LOG_EVENT_LIST)
                return
            self._issue(
                ListLogEvents(group, selected.name, request_id=self._next_request_id()),
                active_log_stream_name=selected.name,
            )

    # --- Requests ---

    def _next_request_id(self) -> int:
        self._last_request_id += 1
        return self._last_request_id

    def _issue(self, request: FetchRequest, **changes: str) -> bool:
        """
        Submit a request and enter the loading overlay.

        The navigation state is snapshotted first so a failure can put
        it back exactly as it was. If the gateway is busy the request is
        dropped and nothing changes.
        """
        logger = get_logger()
        kind = type(request).__name__
        target = str(dataclasses.astuple(request)[0])

        if not self._submit(request):
            logger.request_dropped(kind, target)
            return False

        self._state_before_request = self.snapshot()
        for name, value in changes.items():
            setattr(self.state, name, value)
        self.state.overlay = Overlay.LOADING
        self._expected_request_id = request.request_id
        logger.request_enqueued(kind, request.request_id, target)
        return True

    # --- Results ---

    def handle_result(self, result: FetchResult) -> None:
        """Apply a gateway result; results for anything but the pending request are dropped."""
        if self._expected_request_id is None or result.request_id != self._expected_request_id:
            get_logger().stale_result(result.request_id, self._expected_request_id)
            return
        self._expected_request_id = None

        if isinstance(result, FetchFailed):
            self._fail(result.message)
        elif isinstance(result, FunctionDetailLoaded):
            self.function_detail = result.detail
            self.data_version += 1
            self._go(View.FUNCTION_DETAIL)
        elif isinstance(result, LogStreamsLoaded):
            self.log_streams = list(result.streams)
            self._cursors[View.LOG_STREAM_LIST] = 0
            self.data_version += 1
            self._go(View.LOG_STREAM_LIST)
        elif isinstance(result, LogEventsLoaded):
            self.log_events = list(result.events)
            self._events_for = (result.log_group, result.log_stream_name)
            self.data_version += 1
            self._go(View.LOG_EVENT_LIST)
        else:
            raise TypeError(f"unknown result type: {type(result).__name__}")
        self._state_before_request = None

    def _fail(self, message: str) -> None:
        if self._state_before_request is not None:
            self.state = self._state_before_request
        self.state.overlay = Overlay.ERROR
        self.state.error_message = wrap_error(message, self.width)
        get_logger().transition(self.state.active_view.value, self.state.active_view.value, "error")

    def _dismiss_error(self) -> None:
        self.state.overlay = Overlay.NONE
        self.state.error_message = ""

    def _go(self, view: View) -> None:
        previous = self.state.active_view
        self.state.active_view = view
        self.state.overlay = Overlay.NONE
        get_logger().transition(previous.value, view.value, "none")
