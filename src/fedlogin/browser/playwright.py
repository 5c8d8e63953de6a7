"""Playwright-driven browser collaborator.

Opens a Chromium window (or a headless one) and maps Playwright events onto
the :class:`~fedlogin.browser.base.Browser` contract:

* ``page.on("load")`` -> successful :class:`NavigationEvent` for the page URL.
* ``page.on("requestfailed")`` on a main-frame navigation -> failed event.
* ``context.route("https://*.{domain}/**")`` -> :meth:`dispatch_request`;
  a synthetic response is fulfilled in place, anything else continues.
* ``context.cookies(url)`` -> :meth:`get_cookies`.

Playwright is an optional dependency (``pip install fedlogin[browser]``
followed by ``playwright install chromium``).
"""

from __future__ import annotations

from typing import Any, Optional

from playwright.async_api import BrowserContext, Page, Playwright, Request, Route
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from fedlogin.browser.base import Browser, InterceptedRequest, NavigationEvent
from fedlogin.exceptions import BrowserError
from fedlogin.output import debug
from fedlogin.session import Cookie


class PlaywrightBrowser(Browser):
    """Browser collaborator backed by Playwright's async Chromium API.

    Use as an async context manager::

        async with PlaywrightBrowser(headless=False) as browser:
            outcome = await orchestrator.run()

    Args:
        headless: Run Chromium without a visible window. Federated logins
            usually need a human at the keyboard, so this defaults to
            ``False``.
    """

    def __init__(self, headless: bool = False) -> None:
        super().__init__()
        self._headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Any = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._routed: set[str] = set()
        self._pending_routes: list[str] = []

    async def __aenter__(self) -> PlaywrightBrowser:
        await self.start()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    async def start(self) -> None:
        """Launch Chromium and open the single page used for the login."""
        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(headless=self._headless)
            self._context = await self._browser.new_context()
            self._page = await self._context.new_page()
        except PlaywrightError as exc:
            await self.close()
            raise BrowserError(f"Could not start Chromium: {exc}") from exc

        self._page.on("load", self._on_load)
        self._page.on("requestfailed", self._on_request_failed)
        for domain in self._pending_routes:
            await self._install_route(domain)
        self._pending_routes.clear()
        debug(f"Chromium started (headless={self._headless})")

    async def close(self) -> None:
        if self._context is not None:
            await self._context.close()
            self._context = None
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None
        self._page = None
        self._routed.clear()

    async def navigate(self, url: str) -> None:
        if self._page is None:
            raise BrowserError("Browser not started")
        try:
            for domain, _ in self._request_handlers:
                await self._install_route(domain)
            await self._page.goto(url, wait_until="commit")
        except PlaywrightError as exc:
            raise BrowserError(f"Navigation to {url} failed: {exc}") from exc

    async def get_cookies(self, url: str) -> list[Cookie]:
        if self._context is None:
            return []
        raw = await self._context.cookies([url])
        return [
            Cookie(
                name=c.get("name", ""),
                value=c.get("value", ""),
                domain=c.get("domain", ""),
                path=c.get("path", "/"),
            )
            for c in raw
        ]

    # ------------------------------------------------------------------ #
    # Playwright event bridges
    # ------------------------------------------------------------------ #

    def _on_request_domain_added(self, domain: str) -> None:
        if self._context is None:
            self._pending_routes.append(domain)

    async def _install_route(self, domain: str) -> None:
        if self._context is None or domain in self._routed:
            return
        self._routed.add(domain)
        await self._context.route(f"https://*.{domain}/**", self._on_route)
        await self._context.route(f"https://{domain}/**", self._on_route)

    async def _on_route(self, route: Route, request: Request) -> None:
        intercepted = InterceptedRequest(
            url=request.url,
            method=request.method,
            headers=await request.all_headers(),
            body=request.post_data_buffer,
        )
        response = await self.dispatch_request(intercepted)
        if response is None:
            await route.continue_()
            return
        await route.fulfill(
            status=response.status,
            body=response.body,
            headers=response.headers,
        )

    async def _on_load(self, page: Page) -> None:
        await self.dispatch_navigation(NavigationEvent(url=page.url, success=True))

    async def _on_request_failed(self, request: Request) -> None:
        if self._page is None or not request.is_navigation_request():
            return
        if request.frame != self._page.main_frame:
            return
        await self.dispatch_navigation(NavigationEvent(url=request.url, success=False))
