#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Data-fetch gateway: the only code that talks to AWS.

A single background thread takes requests off a bounded queue one at a
time, performs the (possibly paginated) API calls, and hands exactly one
result per request to a callback. The UI thread never blocks on it.

Page budgets:
    - log streams: 10 pages
    - log events: 5 pages
    - function inventory (startup only): unlimited, through the boto3 paginator
Running out of budget returns the partial result as a success. A hard
API error fails the whole request.
"""

import queue
import threading
import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lambdalogs import normalizer
from lambdalogs.debug_logger import get_logger
from lambdalogs.errors import (
    RemoteError,
    RemoteMalformedResponse,
    RemoteNotFound,
    RemoteTransportError,
)
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
)

LOG_STREAM_PAGE_BUDGET = 10
LOG_EVENT_PAGE_BUDGET = 5

# Worker wakes up this often to notice stop()
_POLL_INTERVAL = 0.5


@contextmanager
def _translate_errors() -> Iterator[None]:
    """
    Translate botocore errors raised inside the block.

    Raises:
        RemoteNotFound: on ResourceNotFoundException
        RemoteTransportError: on any other client or transport error
    """
    try:
        yield
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        if code == "ResourceNotFoundException":
            raise RemoteNotFound(str(e)) from e
        raise RemoteTransportError(str(e)) from e
    except BotoCoreError as e:
        raise RemoteTransportError(str(e)) from e


def _call(operation: str, method: Callable[..., Any], **params: Any) -> Dict[str, Any]:
    """
    Invoke one API method; see _translate_errors for the error mapping.

    Raises:
        RemoteMalformedResponse: if the response is not a dict
    """
    with _translate_errors(), get_logger().timer(operation):
        response = method(**params)

    if not isinstance(response, dict):
        raise RemoteMalformedResponse(f"{operation}: received nil response")
    return response


def _paginate(
    operation: str,
    fetch_page: Callable[[Optional[str]], Dict[str, Any]],
    token_field: str,
    budget: Optional[int] = None,
) -> Iterator[Dict[str, Any]]:
    """
    Yield pages until the continuation token runs out or the budget is spent.

    A token equal to the one just sent also ends pagination (GetLogEvents
    repeats its token at the end of a stream).
    """
    token: Optional[str] = None
    pages = 0
    while True:
        page = fetch_page(token)
        pages += 1
        yield page

        next_token = page.get(token_field)
        if not next_token or next_token == token:
            return
        if budget is not None and pages >= budget:
            get_logger().page_budget_exhausted(operation, pages)
            return
        token = next_token


def _items(page: Dict[str, Any], key: str, operation: str) -> List[Dict[str, Any]]:
    items = page.get(key)
    if items is None:
        return []
    if not isinstance(items, list):
        raise RemoteMalformedResponse(f"{operation}: {key} is not a list")
    for item in items:
        if not isinstance(item, dict):
            raise RemoteMalformedResponse(f"{operation}: {key} item is not an object")
    return items


def resolve_account_id(session: "boto3.session.Session") -> str:
    """
    Return the AWS account id for the session's credentials.

    Raises:
        RemoteTransportError: when no credentials can be resolved
    """
    if session.get_credentials() is None:
        raise RemoteTransportError("no AWS credentials found")
    identity = _call("GetCallerIdentity", session.client("sts").get_caller_identity)
    return identity.get("Account", "")


class FetchGateway:
    """
    Owns the Lambda and CloudWatch Logs clients for the process lifetime.

    Usage:
        gateway = FetchGateway.from_session(boto3.Session())
        functions = gateway.list_functions()  # startup, blocking
        gateway.start(on_result)
        gateway.submit(ListLogStreams("/aws/lambda/fn-a", request_id=1))
    """

    def __init__(self, lambda_client: Any, logs_client: Any, max_pending: int = 1) -> None:
        self.lambda_client = lambda_client
        self.logs_client = logs_client
        self._requests: "queue.Queue[FetchRequest]" = queue.Queue(maxsize=max_pending)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @classmethod
    def from_session(cls, session: "boto3.session.Session") -> "FetchGateway":
        return cls(session.client("lambda"), session.client("logs"))

    # --- Remote operations ---

    def list_functions(self) -> List[FunctionSummary]:
        """List every function in the account/region, following all markers."""
        functions = []
        with _translate_errors(), get_logger().timer("ListFunctions"):
            for page in self.lambda_client.get_paginator("list_functions").paginate():
                for raw in _items(page, "Functions", "ListFunctions"):
                    functions.append(normalizer.function_summary(raw))
        return functions

    def get_function_detail(self, function_name: str) -> FunctionDetail:
        response = _call("GetFunction", self.lambda_client.get_function, FunctionName=function_name)
        return normalizer.function_detail(function_name, response)

    def _retention_millis(self, log_group: str) -> Optional[int]:
        response = _call(
            "DescribeLogGroups",
            self.logs_client.describe_log_groups,
            logGroupNamePrefix=log_group,
        )
        for group in _items(response, "logGroups", "DescribeLogGroups"):
            if group.get("logGroupName") == log_group:
                return normalizer.retention_millis(group)
        raise RemoteNotFound(f"log group not found: {log_group}")

    def list_log_streams(self, log_group: str, now_ms: Optional[int] = None) -> List[LogStreamSummary]:
        """
        List streams of a log group, most recent last event first.

        Args:
            log_group: Log group name
            now_ms: Reference time for expiration (defaults to the current time)
        """
        retention_ms = self._retention_millis(log_group)
        if now_ms is None:
            now_ms = int(time.time() * 1000)

        def fetch(token: Optional[str]) -> Dict[str, Any]:
            params: Dict[str, Any] = {
                "logGroupName": log_group,
                "orderBy": "LastEventTime",
                "descending": True,
            }
            if token:
                params["nextToken"] = token
            return _call("DescribeLogStreams", self.logs_client.describe_log_streams, **params)

        # A stream written to between page fetches can show up on two pages;
        # the first occurrence wins.
        streams: Dict[str, LogStreamSummary] = {}
        pages = _paginate("DescribeLogStreams", fetch, "nextToken", LOG_STREAM_PAGE_BUDGET)
        for page in pages:
            for raw in _items(page, "logStreams", "DescribeLogStreams"):
                stream = normalizer.log_stream_summary(raw, retention_ms, now_ms)
                streams.setdefault(stream.name, stream)
        return list(streams.values())

    def list_log_events(self, log_group: str, log_stream_name: str) -> List[LogEventEntry]:
        """Read a stream backward from its newest events."""

        def fetch(token: Optional[str]) -> Dict[str, Any]:
            params: Dict[str, Any] = {"logGroupName": log_group, "logStreamName": log_stream_name}
            if token:
                params["nextToken"] = token
            return _call("GetLogEvents", self.logs_client.get_log_events, **params)

        events = []
        pages = _paginate("GetLogEvents", fetch, "nextBackwardToken", LOG_EVENT_PAGE_BUDGET)
        for page in pages:
            for raw in _items(page, "events", "GetLogEvents"):
                entry = normalizer.log_event_entry(raw)
                if entry is not None:
                    events.append(entry)
        return events

    # --- Request handling ---

    def handle(self, request: FetchRequest) -> FetchResult:
        """Execute one request synchronously and return its single result."""
        logger = get_logger()
        kind = type(request).__name__
        start = time.perf_counter()
        try:
            if isinstance(request, GetFunctionDetail):
                result: FetchResult = FunctionDetailLoaded(
                    request.request_id, self.get_function_detail(request.function_name)
                )
                items = 1
            elif isinstance(request, ListLogStreams):
                streams = tuple(self.list_log_streams(request.log_group))
                result = LogStreamsLoaded(request.request_id, request.log_group, streams)
                items = len(streams)
            elif isinstance(request, ListLogEvents):
                events = tuple(self.list_log_events(request.log_group, request.log_stream_name))
                result = LogEventsLoaded(
                    request.request_id, request.log_group, request.log_stream_name, events
                )
                items = len(events)
            else:
                raise TypeError(f"unknown request type: {kind}")
        except RemoteError as e:
            logger.fetch_failed(kind, request.request_id, type(e).__name__, str(e))
            return FetchFailed(request.request_id, str(e))

        logger.fetch_completed(kind, request.request_id, items, (time.perf_counter() - start) * 1000)
        return result

    # --- Worker thread ---

    def submit(self, request: FetchRequest) -> bool:
        """Queue a request without blocking. Returns False if the queue is full."""
        try:
            self._requests.put_nowait(request)
        except queue.Full:
            return False
        return True

    def start(self, on_result: Callable[[FetchResult], None]) -> None:
        """Start the worker thread; on_result is called from that thread."""
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._serve, args=(on_result,), name="lambdalogs-gateway", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _serve(self, on_result: Callable[[FetchResult], None]) -> None:
        while not self._stop.is_set():
            try:
                request = self._requests.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                continue
            try:
                result = self.handle(request)
            except Exception as e:
                # The worker must outlive any one request
                get_logger().error(
                    type(request).__name__,
                    f"{type(e).__name__}: {e}",
                    {"request_id": request.request_id},
                )
                result = FetchFailed(request.request_id, str(e) or type(e).__name__)
            try:
                on_result(result)
            finally:
                self._requests.task_done()
