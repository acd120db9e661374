#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Tests for the lambdalogs command-line entry point.

Run with: pytest tests/test_cli.py -v
"""

import os

import pytest

from lambdalogs import cli
from lambdalogs.debug_logger import reset_logger
from lambdalogs.errors import RemoteTransportError
from lambdalogs.models import FunctionSummary


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("LAMBDALOGS_STATE", str(tmp_path / "state"))
    monkeypatch.setenv("LAMBDALOGS_DEBUG", "0")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    reset_logger()
    yield
    reset_logger()


class FakeGateway:
    def __init__(self, functions):
        self.functions = functions

    def list_functions(self):
        return self.functions


class TestParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args([])
        assert args.profile is None
        assert args.region is None
        assert args.debug is None

    def test_flags(self):
        args = cli.build_parser().parse_args(
            ["--profile", "dev", "--region", "eu-west-1", "--debug", "2"]
        )
        assert args.profile == "dev"
        assert args.region == "eu-west-1"
        assert args.debug == 2

    def test_debug_must_be_integer(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["--debug", "loud"])


class TestMain:
    def test_missing_credentials_is_fatal(self, monkeypatch, capsys):
        def no_credentials(session):
            raise RemoteTransportError("no AWS credentials found")

        monkeypatch.setattr(cli, "resolve_account_id", no_credentials)

        assert cli.main([]) == 1
        assert "fatal: no AWS credentials found" in capsys.readouterr().err

    def test_inventory_failure_is_fatal(self, monkeypatch, capsys):
        class BrokenGateway:
            def list_functions(self):
                raise RemoteTransportError("throttled")

        monkeypatch.setattr(cli, "resolve_account_id", lambda session: "123456789012")
        monkeypatch.setattr(cli.FetchGateway, "from_session", classmethod(lambda c, s: BrokenGateway()))

        assert cli.main([]) == 1
        assert "fatal: throttled" in capsys.readouterr().err

    def test_starts_dashboard(self, monkeypatch):
        functions = [FunctionSummary("fn-a", "/aws/lambda/fn-a")]
        gateway = FakeGateway(functions)
        launched = {}

        def fake_run_app(funcs, gw, account_id=""):
            launched.update(functions=funcs, gateway=gw, account_id=account_id)

        monkeypatch.setattr(cli, "resolve_account_id", lambda session: "123456789012")
        monkeypatch.setattr(cli.FetchGateway, "from_session", classmethod(lambda c, s: gateway))
        monkeypatch.setattr("lambdalogs.tui.run_app", fake_run_app)

        assert cli.main(["--region", "us-west-2"]) == 0
        assert launched == {"functions": functions, "gateway": gateway, "account_id": "123456789012"}

    def test_debug_flag_sets_level(self, monkeypatch):
        monkeypatch.setattr(cli, "resolve_account_id", lambda session: "123456789012")
        monkeypatch.setattr(cli.FetchGateway, "from_session", classmethod(lambda c, s: FakeGateway([])))
        monkeypatch.setattr("lambdalogs.tui.run_app", lambda *a, **k: None)

        cli.main(["--debug", "2"])

        assert os.environ["LAMBDALOGS_DEBUG"] == "2"
        assert cli.get_logger().level == 2
