"""UI sinks the orchestrator reports to.

The orchestrator only ever calls ``log(line)`` and
``display_accounts(accounts)``; neither call can influence the attempt.
:class:`ConsoleSink` renders both through the global
:class:`~fedlogin.output.OutputManager`: log lines go to stderr with an
``[HH:MM:SS]`` prefix and accounts go to stdout as a table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Protocol

from fedlogin.models import Account
from fedlogin.output import get_output

ACCOUNT_HEADERS = ["Name", "UserName", "Address", "PlatformID"]


class UISink(Protocol):
    """Notification sink for one attempt's log lines and resulting accounts."""

    def log(self, line: str) -> None: ...

    def display_accounts(self, accounts: list[Account]) -> None: ...


def account_rows(accounts: list[Account]) -> list[list[str]]:
    """Table rows in API order; missing fields render as empty cells."""
    return [
        [a.name or "", a.username or "", a.address or "", a.platform_id or ""]
        for a in accounts
    ]


class ConsoleSink:
    """Writes timestamped log lines to stderr and accounts to stdout.

    Args:
        clock: Returns the current time; injectable for tests.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or datetime.now

    def log(self, line: str) -> None:
        get_output().info(f"[{self._clock():%H:%M:%S}] {line}")

    def display_accounts(self, accounts: list[Account]) -> None:
        get_output().print_table(ACCOUNT_HEADERS, account_rows(accounts), title="Accounts")
