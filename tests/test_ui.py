"""Tests for fedlogin.ui -- the console sink."""

from __future__ import annotations

import json
from datetime import datetime

from fedlogin.models import Account
from fedlogin.output import OutputFormat, OutputManager, set_output
from fedlogin.ui import ConsoleSink, account_rows


def _clock() -> datetime:
    return datetime(2024, 5, 1, 9, 7, 3)


class TestAccountRows:
    def test_missing_fields_are_blank(self) -> None:
        rows = account_rows([Account(Name="db01", UserName="root"), Account(Address="10.0.0.1")])
        assert rows == [["db01", "root", "", ""], ["", "", "10.0.0.1", ""]]


class TestConsoleSink:
    def test_log_lines_are_timestamped_on_stderr(self, capfd, monkeypatch) -> None:
        monkeypatch.setattr("fedlogin.output._is_tty", lambda: False)
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        ConsoleSink(clock=_clock).log("Step 1: Contacting StartAuthentication...")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "[09:07:03] Step 1: Contacting StartAuthentication...\n"

    def test_accounts_go_to_stdout(self, capfd, monkeypatch) -> None:
        monkeypatch.setattr("fedlogin.output._is_tty", lambda: False)
        set_output(OutputManager(format=OutputFormat.JSON))
        ConsoleSink(clock=_clock).display_accounts(
            [Account(Name="db01", UserName="root", Address="10.0.0.1", PlatformID="UnixSSH")]
        )
        records = json.loads(capfd.readouterr().out)
        assert records == [
            {"Name": "db01", "UserName": "root", "Address": "10.0.0.1", "PlatformID": "UnixSSH"}
        ]
