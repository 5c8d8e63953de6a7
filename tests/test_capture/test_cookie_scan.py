"""Tests for fedlogin.capture.cookie_scan -- idToken cookie capture."""

from __future__ import annotations

import pytest

from fedlogin.browser.base import AttemptSubscription
from fedlogin.capture.cookie_scan import CookieScanCapture
from fedlogin.models import AuthMode, ProviderConfig
from fedlogin.session import Cookie, CredentialKind, Session

HOST = "acme.id.cyberark.cloud"


def _setup(make_browser, cookies: dict[str, list[Cookie]]):
    browser = make_browser(cookies=cookies)
    session = Session.start("acme", "me", AuthMode.OIDC, "id.cyberark.cloud", attempt_id=1)
    lines: list[str] = []
    subscription = AttemptSubscription(browser, 1, lambda attempt: True)
    CookieScanCapture(ProviderConfig(), log=lines.append).attach(subscription, session)
    return browser, session, lines


class TestCookieScan:
    @pytest.mark.asyncio
    async def test_id_token_cookie_becomes_bearer(self, make_browser) -> None:
        browser, session, _ = _setup(
            make_browser,
            {HOST: [Cookie("other", "x"), Cookie("IDTOKEN-abc", "tok-1"), Cookie("idToken-def", "tok-2")]},
        )
        await browser.load(f"https://{HOST}/home")

        assert session.slot.credential.kind is CredentialKind.BEARER_TOKEN
        assert session.slot.credential.value == "tok-1"
        assert set(session.cookies) == {"other", "IDTOKEN-abc", "idToken-def"}

    @pytest.mark.asyncio
    async def test_empty_value_skipped(self, make_browser) -> None:
        browser, session, _ = _setup(make_browser, {HOST: [Cookie("idToken-a", ""), Cookie("idToken-b", "v")]})
        await browser.load(f"https://{HOST}/")
        assert session.slot.credential.value == "v"

    @pytest.mark.asyncio
    async def test_failed_navigation_ignored(self, make_browser) -> None:
        browser, session, _ = _setup(make_browser, {HOST: [Cookie("idToken-a", "v")]})
        await browser.load(f"https://{HOST}/", success=False)
        assert not session.slot.filled

    @pytest.mark.asyncio
    async def test_foreign_host_ignored(self, make_browser) -> None:
        browser, session, _ = _setup(make_browser, {"login.example.com": [Cookie("idToken-a", "v")]})
        await browser.load("https://login.example.com/")
        assert not session.slot.filled
        assert session.cookies == {}

    @pytest.mark.asyncio
    async def test_no_rescan_after_capture(self, make_browser) -> None:
        browser, session, lines = _setup(make_browser, {HOST: [Cookie("idToken-a", "first")]})
        await browser.load(f"https://{HOST}/one")
        browser.cookies[HOST] = [Cookie("idToken-a", "second")]
        await browser.load(f"https://{HOST}/two")

        assert session.slot.credential.value == "first"
        assert sum("Scanned" in line for line in lines) == 1
