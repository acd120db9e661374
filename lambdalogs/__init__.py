#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
lambdalogs - terminal dashboard for AWS Lambda functions and their logs.

Usage:
    from lambdalogs import FetchGateway
    from lambdalogs.tui import run_app

    gateway = FetchGateway.from_session(boto3.Session())
    run_app(gateway.list_functions(), gateway)
"""

__version__ = "0.1.0"

# Errors
from lambdalogs.errors import (
    RemoteError,
    RemoteMalformedResponse,
    RemoteNotFound,
    RemoteTransportError,
)

# Data models
from lambdalogs.models import (
    FetchFailed,
    FunctionDetail,
    FunctionDetailLoaded,
    FunctionSummary,
    GetFunctionDetail,
    ListItem,
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

# Gateway
from lambdalogs.gateway import (
    LOG_EVENT_PAGE_BUDGET,
    LOG_STREAM_PAGE_BUDGET,
    FetchGateway,
    resolve_account_id,
)

__all__ = [
    "__version__",
    # Errors
    "RemoteError",
    "RemoteMalformedResponse",
    "RemoteNotFound",
    "RemoteTransportError",
    # Records
    "FunctionDetail",
    "FunctionSummary",
    "ListItem",
    "LogEventEntry",
    "LogStreamSummary",
    # Navigation
    "NavigationState",
    "Overlay",
    "View",
    # Requests / results
    "GetFunctionDetail",
    "ListLogEvents",
    "ListLogStreams",
    "FetchFailed",
    "FunctionDetailLoaded",
    "LogEventsLoaded",
    "LogStreamsLoaded",
    # Gateway
    "LOG_EVENT_PAGE_BUDGET",
    "LOG_STREAM_PAGE_BUDGET",
    "FetchGateway",
    "resolve_account_id",
]
