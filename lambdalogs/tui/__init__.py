#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
TUI module for the lambdalogs dashboard.

Usage:
    from lambdalogs.tui import ViewStateMachine, run_app
    run_app(functions, gateway, account_id="123456789012")
"""

from .formatting import DETAIL_PLACEHOLDERS, format_detail, general_rows, stream_description
from .state import Action, ViewStateMachine, wrap_error


# Defer app import so the state machine can be used without textual loaded
def _get_app():
    """Lazy import of app module to avoid textual import at module load."""
    from .app import LambdaLogsApp, run_app
    return LambdaLogsApp, run_app


def run_app(*args, **kwargs):
    """Run the TUI application. See app.run_app for details."""
    _, _run_app = _get_app()
    return _run_app(*args, **kwargs)


__all__ = [
    # State machine
    "Action",
    "ViewStateMachine",
    "wrap_error",
    # Formatting
    "DETAIL_PLACEHOLDERS",
    "format_detail",
    "general_rows",
    "stream_description",
    # App (lazy loaded)
    "run_app",
]
