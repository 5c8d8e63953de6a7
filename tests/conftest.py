"""Shared test fixtures for fedlogin.

Provides isolated config environments, output state management, a CLI
runner, and in-memory stand-ins for the browser and the UI sink so that
whole authentication attempts can run without Chromium or a network.
These fixtures are automatically discovered by pytest.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import httpx
import pytest

from fedlogin.browser.base import Browser, InterceptedRequest, NavigationEvent, SyntheticResponse
from fedlogin.models import Account, AuthMode, CaptureStrategy, Profile
from fedlogin.output import OutputFormat, OutputManager, reset_output, set_output
from fedlogin.session import Cookie


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# In-memory collaborators
# ---------------------------------------------------------------------------


NavigateScript = Callable[["FakeBrowser", str], Awaitable[None]]


class FakeBrowser(Browser):
    """Browser double driven by a script run on every :meth:`navigate`.

    The script receives the browser and the URL and typically calls
    :meth:`load` or :meth:`send` to simulate what the identity provider
    would make the real browser do.
    """

    def __init__(
        self,
        script: Optional[NavigateScript] = None,
        cookies: Optional[dict[str, list[Cookie]]] = None,
        supports_interception: bool = True,
    ) -> None:
        super().__init__()
        self.script = script
        self.cookies = cookies or {}
        self.supports_interception = supports_interception
        self.navigated: list[str] = []
        self.responses: list[Optional[SyntheticResponse]] = []
        self.closed = False

    async def navigate(self, url: str) -> None:
        self.navigated.append(url)
        if self.script is not None:
            await self.script(self, url)

    async def get_cookies(self, url: str) -> list[Cookie]:
        host = httpx.URL(url).host
        return list(self.cookies.get(host, []))

    async def close(self) -> None:
        self.closed = True

    async def load(self, url: str, success: bool = True) -> None:
        await self.dispatch_navigation(NavigationEvent(url=url, success=success))

    async def send(
        self,
        url: str,
        method: str = "GET",
        body: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Optional[SyntheticResponse]:
        response = await self.dispatch_request(
            InterceptedRequest(url=url, method=method, headers=headers or {}, body=body)
        )
        self.responses.append(response)
        return response

    @property
    def handler_count(self) -> int:
        return len(self._navigation_handlers) + len(self._request_handlers)


class RecordingSink:
    """UI sink that keeps every log line and account list it receives."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.displayed: list[list[Account]] = []

    def log(self, line: str) -> None:
        self.lines.append(line)

    def display_accounts(self, accounts: list[Account]) -> None:
        self.displayed.append(list(accounts))

    def has_line(self, fragment: str) -> bool:
        return any(fragment in line for line in self.lines)


@pytest.fixture
def make_browser() -> Callable[..., FakeBrowser]:
    """Factory for :class:`FakeBrowser` instances."""
    return FakeBrowser


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


# ---------------------------------------------------------------------------
# Profiles and HTTP stubs
# ---------------------------------------------------------------------------


@pytest.fixture
def oidc_profile() -> Profile:
    return Profile(name="acme", tenant="acme", user="me@acme.com", mode=AuthMode.OIDC)


@pytest.fixture
def saml_profile() -> Profile:
    return Profile(name="acme", tenant="acme", user="me@acme.com", mode=AuthMode.SAML)


@pytest.fixture
def cookie_profile() -> Profile:
    return Profile(
        name="acme",
        tenant="acme",
        user="me@acme.com",
        mode=AuthMode.OIDC,
        capture=CaptureStrategy.COOKIE_SCAN,
    )


def json_response(status: int, data: Any) -> httpx.Response:
    return httpx.Response(status, content=json.dumps(data).encode(), headers={"Content-Type": "application/json"})


@pytest.fixture
def respond() -> Callable[[int, Any], httpx.Response]:
    """Build a JSON :class:`httpx.Response` from a status and a payload."""
    return json_response


@pytest.fixture
def mock_transport() -> Callable[..., httpx.MockTransport]:
    """Wrap a ``handler(request) -> Response`` and record every request it sees.

    The returned transport exposes the captured requests as ``.calls``.
    """

    def _factory(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.MockTransport:
        calls: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return handler(request)

        transport = httpx.MockTransport(_record)
        transport.calls = calls  # type: ignore[attr-defined]
        return transport

    return _factory


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME and XDG_DATA_HOME below tmp_path, forces the
    XDG layout, clears FEDLOGIN_* variables and changes the working
    directory to tmp_path.
    """
    monkeypatch.setattr("fedlogin.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ["FEDLOGIN_PROFILE", "FEDLOGIN_TENANT", "FEDLOGIN_USER", "FEDLOGIN_MODE"]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
