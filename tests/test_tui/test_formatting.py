#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""Tests for the dashboard display helpers."""

from lambdalogs.models import FunctionDetail, LogStreamSummary
from lambdalogs.tui.formatting import (
    DETAIL_PLACEHOLDERS,
    format_detail,
    general_rows,
    log_stream_list_title,
    stream_description,
)


class TestGeneralRows:
    def test_placeholders_for_missing_fields(self):
        rows = dict(general_rows(FunctionDetail(name="fn-a")))

        assert rows["ARN"] == "invalid arn"
        assert rows["Description"] == "invalid description"
        assert rows["Last Modified"] == "invalid last modified date"
        assert rows["Runtime"] == "invalid runtime"
        assert rows["Architecture"] == "invalid arch"
        assert rows["Memory Size"] == "0 MB"
        assert rows["Ephemeral Storage"] == "0 MB"
        assert rows["Timeout"] == "0 seconds"

    def test_every_optional_field_has_placeholder(self):
        optional = set(FunctionDetail.__dataclass_fields__) - {
            "name",
            "environment_variables",
            "tags",
        }
        assert optional == set(DETAIL_PLACEHOLDERS)

    def test_real_values(self):
        detail = FunctionDetail(name="fn-a", arn="arn:x", memory_mb=1024, timeout_seconds=900)
        rows = dict(general_rows(detail))

        assert rows["ARN"] == "arn:x"
        assert rows["Memory Size"] == "1024 MB"
        assert rows["Timeout"] == "900 seconds"


class TestFormatDetail:
    def test_sections(self):
        detail = FunctionDetail(
            name="fn-a",
            environment_variables=(("STAGE", "prod"),),
            tags=(("team", "payments"),),
        )
        text = format_detail(detail)

        assert "General" in text
        assert "Environment Variables" in text
        assert "STAGE" in text and "prod" in text
        assert "team" in text and "payments" in text

    def test_markup_in_values_is_escaped(self):
        detail = FunctionDetail(name="fn-a", environment_variables=(("X", "[bold]y"),))
        assert "\\[bold]y" in format_detail(detail)

    def test_empty_sections(self):
        assert format_detail(FunctionDetail(name="fn-a")).count("none") == 2


class TestStreams:
    def test_expired_marker(self):
        stream = LogStreamSummary("s1", 1, "Mon, 01 Jan 2024 00:00:00 UTC", expired=True)
        assert stream_description(stream).endswith("(expired)")

    def test_live_stream(self):
        stream = LogStreamSummary("s1", 1, "Mon, 01 Jan 2024 00:00:00 UTC")
        assert stream_description(stream) == "Last Event: Mon, 01 Jan 2024 00:00:00 UTC"

    def test_title(self):
        assert log_stream_list_title("/aws/lambda/fn-a", "123") == (
            'Viewing Log Streams - Log Group "/aws/lambda/fn-a" - Account ID: 123'
        )
