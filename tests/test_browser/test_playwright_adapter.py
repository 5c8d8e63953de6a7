"""Tests for fedlogin.browser.playwright that do not launch Chromium."""

from __future__ import annotations

import pytest

pytest.importorskip("playwright")

from fedlogin.browser.playwright import PlaywrightBrowser  # noqa: E402
from fedlogin.exceptions import BrowserError  # noqa: E402


class TestPlaywrightBrowserUnstarted:
    def test_routes_queued_until_start(self) -> None:
        browser = PlaywrightBrowser(headless=True)

        async def handler(request):
            return None

        browser.add_request_handler("id.cyberark.cloud", handler)
        assert browser._pending_routes == ["id.cyberark.cloud"]
        assert browser.supports_interception is True

    @pytest.mark.asyncio
    async def test_navigate_before_start(self) -> None:
        with pytest.raises(BrowserError):
            await PlaywrightBrowser().navigate("https://example.com")

    @pytest.mark.asyncio
    async def test_cookies_before_start(self) -> None:
        assert await PlaywrightBrowser().get_cookies("https://example.com") == []

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self) -> None:
        browser = PlaywrightBrowser()
        await browser.close()
        await browser.close()


class _FailingContext:
    async def route(self, pattern, handler) -> None:
        from playwright.async_api import Error as PlaywrightError

        raise PlaywrightError("Target page, context or browser has been closed")


class _UnusedPage:
    async def goto(self, url, wait_until=None) -> None:
        raise AssertionError("goto must not run after a failed route install")


class TestPlaywrightBrowserNavigate:
    @pytest.mark.asyncio
    async def test_route_failure_becomes_browser_error(self) -> None:
        browser = PlaywrightBrowser()

        async def handler(request):
            return None

        browser.add_request_handler("id.cyberark.cloud", handler)
        browser._context = _FailingContext()
        browser._page = _UnusedPage()

        with pytest.raises(BrowserError, match="has been closed"):
            await browser.navigate("https://login.idp.example.com/authorize")
