#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Pilot-based tests for the LambdaLogsApp TUI.

These tests use Textual's pilot testing framework with a fake gateway
that answers requests in-process.
"""

import pytest

pytest.importorskip("textual")

# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

from textual.widgets import ContentSwitcher, DataTable, Input

from lambdalogs.models import (
    FetchFailed,
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
    Overlay,
    View,
)
from lambdalogs.tui.app import LambdaLogsApp, run_app


# --- Fixtures ---


FUNCTIONS = [
    FunctionSummary("fn-a", "/aws/lambda/fn-a"),
    FunctionSummary("fn-b", "/aws/lambda/fn-b"),
]


def answer(request):
    """Canned successful result for any request."""
    if isinstance(request, GetFunctionDetail):
        return FunctionDetailLoaded(
            request.request_id,
            FunctionDetail(name=request.function_name, runtime="python3.12"),
        )
    if isinstance(request, ListLogStreams):
        streams = (
            LogStreamSummary("stream-1", 2000, "Mon, 01 Jan 2024 00:00:02 UTC"),
            LogStreamSummary("stream-2", 1000, "Mon, 01 Jan 2024 00:00:01 UTC"),
        )
        return LogStreamsLoaded(request.request_id, request.log_group, streams)
    if isinstance(request, ListLogEvents):
        events = (LogEventEntry("Mon, 01 Jan 2024 00:00:02 UTC", "[INFO] hello"),)
        return LogEventsLoaded(request.request_id, request.log_group, request.log_stream_name, events)
    raise TypeError(request)


class FakeGateway:
    """Stands in for FetchGateway; answers synchronously unless paused."""

    def __init__(self, responder=answer, auto=True):
        self.responder = responder
        self.auto = auto
        self.requests = []
        self.on_result = None
        self.stopped = False

    def start(self, on_result):
        self.on_result = on_result

    def stop(self, timeout=None):
        self.stopped = True

    def submit(self, request):
        self.requests.append(request)
        if self.auto:
            self.on_result(self.responder(request))
        return True

    def release(self):
        """Answer the last request (for auto=False)."""
        self.on_result(self.responder(self.requests[-1]))


def current(app) -> str:
    return app.query_one("#views", ContentSwitcher).current


# --- Pilot Tests ---


@pytest.mark.asyncio
async def test_function_list_on_start():
    app = LambdaLogsApp(FUNCTIONS, FakeGateway(), account_id="123456789012")

    async with app.run_test() as pilot:
        await pilot.pause()

        assert current(app) == "functions"
        assert app.query_one("#functions", DataTable).row_count == 2
        assert "123456789012" in app.sub_title


@pytest.mark.asyncio
async def test_enter_opens_detail_and_escape_returns():
    gateway = FakeGateway()
    app = LambdaLogsApp(FUNCTIONS, gateway)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("enter")
        await pilot.pause()

        assert gateway.requests == [GetFunctionDetail("fn-a", request_id=1)]
        assert app.machine.state.active_view is View.FUNCTION_DETAIL
        assert current(app) == "detail-view"

        await pilot.press("escape")
        await pilot.pause()
        assert current(app) == "functions"


@pytest.mark.asyncio
async def test_logs_drill_down():
    gateway = FakeGateway()
    app = LambdaLogsApp(FUNCTIONS, gateway)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("down")
        await pilot.pause()
        await pilot.press("l")
        await pilot.pause()

        assert gateway.requests[-1] == ListLogStreams("/aws/lambda/fn-b", request_id=1)
        assert current(app) == "log-streams"
        assert app.query_one("#log-streams", DataTable).row_count == 2
        assert "/aws/lambda/fn-b" in app.sub_title

        await pilot.press("enter")
        await pilot.pause()

        assert gateway.requests[-1] == ListLogEvents("/aws/lambda/fn-b", "stream-1", request_id=2)
        assert current(app) == "log-events"
        assert app.machine.log_events[0].message == "[INFO] hello"

        await pilot.press("escape")
        await pilot.pause()
        assert current(app) == "log-streams"

        await pilot.press("escape")
        await pilot.pause()
        assert current(app) == "functions"
        assert app.machine.state.active_log_group == ""


@pytest.mark.asyncio
async def test_loading_blocks_input_until_result():
    gateway = FakeGateway(auto=False)
    app = LambdaLogsApp(FUNCTIONS, gateway)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("enter")
        await pilot.pause()

        assert current(app) == "loading"

        await pilot.press("escape")
        await pilot.press("l")
        await pilot.pause()
        assert len(gateway.requests) == 1
        assert app.machine.state.overlay is Overlay.LOADING

        gateway.release()
        await pilot.pause()
        assert current(app) == "detail-view"


@pytest.mark.asyncio
async def test_failure_shows_error_and_dismisses():
    gateway = FakeGateway(responder=lambda r: FetchFailed(r.request_id, "log group not found"))
    app = LambdaLogsApp(FUNCTIONS, gateway)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("l")
        await pilot.pause()

        assert current(app) == "error"
        assert "log group not found" in app.machine.state.error_message

        await pilot.press("escape")
        await pilot.pause()

        assert current(app) == "functions"
        assert app.machine.state.overlay is Overlay.NONE
        assert app.machine.state.active_log_group == ""


@pytest.mark.asyncio
async def test_filter_functions():
    app = LambdaLogsApp(FUNCTIONS, FakeGateway())

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("slash")
        await pilot.press("b")
        await pilot.pause()

        assert app.query_one("#filter", Input).value == "b"
        assert app.query_one("#functions", DataTable).row_count == 1

        await pilot.press("escape")
        await pilot.pause()

        assert app.machine.filter_text() == ""
        assert app.query_one("#functions", DataTable).row_count == 2


@pytest.mark.asyncio
async def test_quit_key():
    gateway = FakeGateway()
    app = LambdaLogsApp(FUNCTIONS, gateway)

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("q")
        await pilot.pause()

    assert app.machine.terminated
    assert not gateway.stopped


def test_run_app_stops_gateway(monkeypatch):
    gateway = FakeGateway()
    monkeypatch.setattr(LambdaLogsApp, "run", lambda self: None)

    run_app(FUNCTIONS, gateway, account_id="123456789012")

    assert gateway.stopped


@pytest.mark.asyncio
async def test_repeated_stream_names_render():
    def repeated(request):
        if isinstance(request, ListLogStreams):
            streams = (
                LogStreamSummary("dup", 2000, "Mon, 01 Jan 2024 00:00:02 UTC"),
                LogStreamSummary("dup", 1000, "Mon, 01 Jan 2024 00:00:01 UTC"),
            )
            return LogStreamsLoaded(request.request_id, request.log_group, streams)
        return answer(request)

    app = LambdaLogsApp(FUNCTIONS, FakeGateway(responder=repeated))

    async with app.run_test() as pilot:
        await pilot.pause()
        await pilot.press("l")
        await pilot.pause()

        assert current(app) == "log-streams"
        assert app.query_one("#log-streams", DataTable).row_count == 2
