#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Main TUI application for the lambdalogs dashboard.

Renders the view state machine with Textual:
- Function list and function detail
- Log streams of a function's log group
- Log events of a stream
- Loading and error overlays

Keys and resizes are translated into state machine events; results from
the gateway thread come back through the message pump as FetchCompleted.
"""

from typing import Dict, Optional, Sequence

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.message import Message
from textual.widgets import (
    ContentSwitcher,
    DataTable,
    Footer,
    Header,
    Input,
    LoadingIndicator,
    RichLog,
    Static,
)

from lambdalogs.gateway import FetchGateway
from lambdalogs.models import FetchResult, FunctionSummary, Overlay, View
from lambdalogs.tui.formatting import (
    format_detail,
    function_list_title,
    log_event_list_title,
    log_stream_list_title,
    stream_description,
)
from lambdalogs.tui.state import Action, ViewStateMachine

# ContentSwitcher child for each base view
VIEW_WIDGETS = {
    View.FUNCTION_LIST: "functions",
    View.FUNCTION_DETAIL: "detail-view",
    View.LOG_STREAM_LIST: "log-streams",
    View.LOG_EVENT_LIST: "log-events",
}

TABLE_VIEWS = {
    "functions": View.FUNCTION_LIST,
    "log-streams": View.LOG_STREAM_LIST,
}

TIMESTAMP_STYLE = "bold #3275c4"


class FetchCompleted(Message):
    """Posted from the gateway thread when a request has a result."""

    def __init__(self, result: FetchResult) -> None:
        self.result = result
        super().__init__()


class LambdaLogsApp(App):
    """
    Textual front end for browsing functions and their logs.

    The app holds no navigation state of its own: every decision goes
    through self.machine, and widgets are redrawn from it.
    """

    TITLE = "Lambda Logs"
    CSS_PATH = "styles/app.tcss"

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit", show=False, priority=True),
        Binding("enter", "confirm", "Open", show=False),
        Binding("escape", "back", "Back"),
        Binding("l", "view_logs", "Logs"),
        Binding("r", "refresh", "Refresh"),
        Binding("slash", "filter", "Filter"),
    ]

    def __init__(
        self,
        functions: Sequence[FunctionSummary],
        gateway: FetchGateway,
        account_id: str = "",
    ) -> None:
        """
        Initialize the app.

        Args:
            functions: Function inventory loaded at startup
            gateway: Fetch gateway (started on mount, stopped by run_app)
            account_id: AWS account id shown in titles
        """
        super().__init__()
        self.gateway = gateway
        self.account_id = account_id
        self.machine = ViewStateMachine(functions, gateway.submit)
        self._rendered_version: Optional[int] = None
        self._rendered_keys: Dict[str, object] = {}
        self._editing_filter = False

    def compose(self) -> ComposeResult:
        """Compose the app layout."""
        yield Header()
        yield Static("", id="view-title")
        yield Input(placeholder="Filter by name...", id="filter")
        with ContentSwitcher(initial="functions", id="views"):
            yield DataTable(id="functions", cursor_type="row")
            yield VerticalScroll(Static("", id="function-detail"), id="detail-view")
            yield DataTable(id="log-streams", cursor_type="row")
            yield RichLog(id="log-events", wrap=True)
            yield LoadingIndicator(id="loading")
            yield Static("", id="error")
        yield Footer()

    def on_mount(self) -> None:
        """Set up tables and start the gateway worker."""
        self.query_one("#functions", DataTable).add_columns("Function", "Log Group")
        self.query_one("#log-streams", DataTable).add_columns("Log Stream", "Last Event")
        self.query_one("#filter", Input).display = False
        self.sub_title = f"Account ID: {self.account_id}"

        self.machine.resize(self.size.width, self.size.height)
        self.gateway.start(self._deliver_result)
        self._render_state()

    def _deliver_result(self, result: FetchResult) -> None:
        """Gateway-thread callback; post_message is thread-safe."""
        self.post_message(FetchCompleted(result))

    # --- Inbound events ---

    def on_fetch_completed(self, message: FetchCompleted) -> None:
        self.machine.handle_result(message.result)
        self._render_state()

    def on_resize(self, event: events.Resize) -> None:
        self.machine.resize(event.size.width, event.size.height)

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        view = TABLE_VIEWS.get(event.data_table.id or "")
        if view is not None:
            self.machine.highlight(view, event.cursor_row)

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        view = TABLE_VIEWS.get(event.data_table.id or "")
        if view is not None:
            self.machine.highlight(view, event.cursor_row)
        self._dispatch(Action.CONFIRM)

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.input.id != "filter":
            return
        self.machine.set_filter(event.value)
        self._render_state()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "filter":
            self._editing_filter = False
            self._render_state()

    # --- Actions ---

    def _dispatch(self, action: Action) -> None:
        self.machine.handle_action(action)
        if self.machine.terminated:
            # run_app stops the gateway once the event loop has exited
            self.exit()
            return
        self._render_state()

    async def action_quit(self) -> None:
        self._dispatch(Action.QUIT)

    def action_confirm(self) -> None:
        self._dispatch(Action.CONFIRM)

    def action_back(self) -> None:
        self._editing_filter = False
        self._dispatch(Action.BACK)

    def action_view_logs(self) -> None:
        self._dispatch(Action.VIEW_LOGS)

    def action_refresh(self) -> None:
        self._dispatch(Action.REFRESH)

    def action_filter(self) -> None:
        """Show and focus the filter box on list views."""
        state = self.machine.state
        if state.overlay is not Overlay.NONE or state.active_view not in TABLE_VIEWS.values():
            return
        self._editing_filter = True
        filter_input = self.query_one("#filter", Input)
        filter_input.display = True
        filter_input.focus()

    # --- Rendering ---

    def _render_state(self) -> None:
        """Redraw widgets from the state machine."""
        state = self.machine.snapshot()
        if self._rendered_version != self.machine.data_version:
            self._populate()
            self._rendered_version = self.machine.data_version

        switcher = self.query_one("#views", ContentSwitcher)
        filter_input = self.query_one("#filter", Input)

        if state.overlay is not Overlay.NONE:
            if state.overlay is Overlay.ERROR:
                self.query_one("#error", Static).update(Text(state.error_message))
                switcher.current = "error"
            else:
                switcher.current = "loading"
            self._editing_filter = False
            filter_input.display = False
            self.set_focus(None)
            return

        switcher.current = VIEW_WIDGETS[state.active_view]
        self._update_title()

        filter_text = self.machine.filter_text()
        if filter_input.value != filter_text:
            filter_input.value = filter_text
        is_list = state.active_view in TABLE_VIEWS.values()
        self._editing_filter = self._editing_filter and is_list
        filter_input.display = is_list and (bool(filter_text) or self._editing_filter)
        if not self._editing_filter:
            self._focus_active_view()

    def _focus_active_view(self) -> None:
        widget_id = VIEW_WIDGETS[self.machine.state.active_view]
        self.query_one(f"#{widget_id}").focus()

    def _update_title(self) -> None:
        state = self.machine.state
        if state.active_view is View.FUNCTION_LIST:
            title = function_list_title(self.account_id)
        elif state.active_view is View.FUNCTION_DETAIL:
            title = f"Function - {state.active_function_name}"
        elif state.active_view is View.LOG_STREAM_LIST:
            title = log_stream_list_title(state.active_log_group, self.account_id)
        else:
            title = log_event_list_title(state.active_log_group, state.active_log_stream_name)
        self.query_one("#view-title", Static).update(Text(title))

        sub_title = f"Account ID: {self.account_id}"
        if state.active_log_group:
            sub_title += f" - Log Group: {state.active_log_group}"
        self.sub_title = sub_title

    def _populate(self) -> None:
        """Reload view widgets whose record sets or filters changed."""
        machine = self.machine
        rendered = self._rendered_keys

        key = (id(machine.functions), machine.filter_text(View.FUNCTION_LIST))
        if rendered.get("functions") != key:
            rendered["functions"] = key
            functions = self.query_one("#functions", DataTable)
            functions.clear()
            for fn in machine.visible_functions():
                functions.add_row(Text(fn.key), Text(fn.description))
            if functions.row_count:
                functions.move_cursor(row=machine.cursor(View.FUNCTION_LIST))

        key = (id(machine.log_streams), machine.filter_text(View.LOG_STREAM_LIST))
        if rendered.get("log-streams") != key:
            rendered["log-streams"] = key
            streams = self.query_one("#log-streams", DataTable)
            streams.clear()
            for stream in machine.visible_log_streams():
                streams.add_row(Text(stream.key), Text(stream_description(stream)))
            if streams.row_count:
                streams.move_cursor(row=machine.cursor(View.LOG_STREAM_LIST))

        if machine.function_detail is not None and rendered.get("detail") != id(machine.function_detail):
            rendered["detail"] = id(machine.function_detail)
            self.query_one("#function-detail", Static).update(format_detail(machine.function_detail))

        if rendered.get("log-events") != id(machine.log_events):
            rendered["log-events"] = id(machine.log_events)
            log_events = self.query_one("#log-events", RichLog)
            log_events.clear()
            for entry in machine.log_events:
                log_events.write(Text.assemble((entry.timestamp, TIMESTAMP_STYLE), "  ", entry.message))


def run_app(
    functions: Sequence[FunctionSummary],
    gateway: FetchGateway,
    account_id: str = "",
) -> None:
    """
    Run the TUI application.

    Args:
        functions: Function inventory loaded at startup
        gateway: Fetch gateway that serves the dashboard's requests
        account_id: AWS account id shown in titles
    """
    app = LambdaLogsApp(functions, gateway, account_id=account_id)
    try:
        app.run()
    finally:
        gateway.stop(timeout=1.0)
