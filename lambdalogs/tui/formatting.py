#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Display helpers for the dashboard views.

Turns records into the strings/rows shown by the Textual widgets,
including placeholder text for function fields the API omitted.
"""

from typing import List, Optional, Tuple

from rich.markup import escape

from lambdalogs.models import FunctionDetail, LogStreamSummary

# Placeholders for FunctionDetail fields that are None
DETAIL_PLACEHOLDERS = {
    "arn": "invalid arn",
    "description": "invalid description",
    "last_modified": "invalid last modified date",
    "runtime": "invalid runtime",
    "architecture": "invalid arch",
    "memory_mb": 0,
    "ephemeral_storage_mb": 0,
    "timeout_seconds": 0,
}


def _value(detail: FunctionDetail, field_name: str):
    value = getattr(detail, field_name)
    return DETAIL_PLACEHOLDERS[field_name] if value is None else value


def general_rows(detail: FunctionDetail) -> List[Tuple[str, str]]:
    """Label/value rows for the "General" section of the detail view."""
    return [
        ("ARN", str(_value(detail, "arn"))),
        ("Name", detail.name),
        ("Description", str(_value(detail, "description"))),
        ("Last Modified", str(_value(detail, "last_modified"))),
        ("Runtime", str(_value(detail, "runtime"))),
        ("Architecture", str(_value(detail, "architecture"))),
        ("Memory Size", f"{_value(detail, 'memory_mb')} MB"),
        ("Ephemeral Storage", f"{_value(detail, 'ephemeral_storage_mb')} MB"),
        ("Timeout", f"{_value(detail, 'timeout_seconds')} seconds"),
    ]


def _section(title: str, rows) -> List[str]:
    lines = [f"[bold]{title}[/bold]"]
    if not rows:
        lines.append("  [dim]none[/dim]")
    for label, value in rows:
        lines.append(f"  [bold #5f87d7]{escape(label):<20}[/bold #5f87d7] {escape(value)}")
    lines.append("")
    return lines


def format_detail(detail: FunctionDetail) -> str:
    """Rich markup for the whole function detail panel."""
    lines = []
    lines.extend(_section("General", general_rows(detail)))
    lines.extend(_section("Environment Variables", detail.environment_variables))
    lines.extend(_section("Tags", detail.tags))
    return "\n".join(lines)


def stream_description(stream: LogStreamSummary) -> str:
    """Second column of the stream list, marking streams past retention."""
    if stream.expired:
        return f"{stream.description} (expired)"
    return stream.description


def function_list_title(account_id: str) -> str:
    return f"Viewing Lambdas - Account ID: {account_id}"


def log_stream_list_title(log_group: str, account_id: str) -> str:
    return f'Viewing Log Streams - Log Group "{log_group}" - Account ID: {account_id}'


def log_event_list_title(log_group: str, log_stream_name: Optional[str]) -> str:
    return f"Viewing Log Events - {log_group} / {log_stream_name or ''}"
