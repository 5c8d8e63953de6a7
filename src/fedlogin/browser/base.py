"""Abstract browser collaborator and attempt-scoped subscriptions.

The core never drives a real browser directly. It talks to a
:class:`Browser`, which can navigate, report finished navigations, hand
outbound requests to interceptors, and list cookies for a URL. Concrete
adapters (see :mod:`fedlogin.browser.playwright`) translate their engine's
events into calls to :meth:`Browser.dispatch_navigation` and
:meth:`Browser.dispatch_request`.

Handlers are never registered on the browser directly by business code.
They go through an :class:`AttemptSubscription`, which tags every handler
with the attempt that owns it and silently drops events once that attempt
is no longer current. Cancelling the subscription unregisters everything
it added.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional
from urllib.parse import urlparse

from fedlogin.session import Cookie


@dataclass(frozen=True)
class NavigationEvent:
    """A top-level navigation finished (``success=False`` when it failed)."""

    url: str
    success: bool = True

    @property
    def host(self) -> str:
        return (urlparse(self.url).hostname or "").lower()


@dataclass(frozen=True)
class InterceptedRequest:
    """An outbound request offered to interceptors before it is sent."""

    url: str
    method: str = "GET"
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

    @property
    def host(self) -> str:
        return (urlparse(self.url).hostname or "").lower()

    @property
    def path(self) -> str:
        return urlparse(self.url).path

    @property
    def query(self) -> str:
        return urlparse(self.url).query

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None


@dataclass(frozen=True)
class SyntheticResponse:
    """Response an interceptor returns to answer a request without sending it."""

    status: int = 200
    reason: str = "OK"
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)


NavigationHandler = Callable[[NavigationEvent], Awaitable[None]]
RequestHandler = Callable[[InterceptedRequest], Awaitable[Optional[SyntheticResponse]]]


def host_in_domain(host: str, domain: str) -> bool:
    """``True`` when *host* is *domain* or one of its subdomains."""
    host = host.lower().rstrip(".")
    domain = domain.lower().lstrip(".")
    return host == domain or host.endswith("." + domain)


class Browser(ABC):
    """Base class for browser collaborators.

    Subclasses implement :meth:`navigate`, :meth:`get_cookies` and
    :meth:`close`, and feed engine events into :meth:`dispatch_navigation`
    and :meth:`dispatch_request`. Adapters that cannot intercept requests
    set :attr:`supports_interception` to ``False``.
    """

    supports_interception: bool = True

    def __init__(self) -> None:
        self._navigation_handlers: list[NavigationHandler] = []
        self._request_handlers: list[tuple[str, RequestHandler]] = []

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Start loading *url* in the main frame."""
        ...

    @abstractmethod
    async def get_cookies(self, url: str) -> list[Cookie]:
        """Return the cookies the browser would send to *url*."""
        ...

    async def close(self) -> None:
        """Release browser resources. The default does nothing."""

    # ------------------------------------------------------------------ #
    # Handler registry
    # ------------------------------------------------------------------ #

    def add_navigation_handler(self, handler: NavigationHandler) -> None:
        self._navigation_handlers.append(handler)

    def remove_navigation_handler(self, handler: NavigationHandler) -> None:
        if handler in self._navigation_handlers:
            self._navigation_handlers.remove(handler)

    def add_request_handler(self, domain: str, handler: RequestHandler) -> None:
        """Offer every request whose host is in *domain* to *handler*."""
        self._request_handlers.append((domain, handler))
        self._on_request_domain_added(domain)

    def remove_request_handler(self, handler: RequestHandler) -> None:
        self._request_handlers = [
            (domain, h) for domain, h in self._request_handlers if h is not handler
        ]

    def _on_request_domain_added(self, domain: str) -> None:
        """Hook for adapters that must install an engine-level route per domain."""

    # ------------------------------------------------------------------ #
    # Event dispatch (called by adapters)
    # ------------------------------------------------------------------ #

    async def dispatch_navigation(self, event: NavigationEvent) -> None:
        for handler in list(self._navigation_handlers):
            await handler(event)

    async def dispatch_request(self, request: InterceptedRequest) -> Optional[SyntheticResponse]:
        """Run matching interceptors in registration order.

        Returns:
            The first synthetic response produced, or ``None`` to let the
            request go out unchanged.
        """
        for domain, handler in list(self._request_handlers):
            if not host_in_domain(request.host, domain):
                continue
            response = await handler(request)
            if response is not None:
                return response
        return None


class AttemptSubscription:
    """Handlers registered on behalf of one authentication attempt.

    Every handler added here is wrapped so that it only runs while
    ``is_current(attempt_id)`` holds. :meth:`cancel` removes all wrapped
    handlers from the browser; it is safe to call more than once.

    Example::

        with AttemptSubscription(browser, attempt_id, orchestrator.is_current) as sub:
            sub.on_navigation(handle_navigation)
            await browser.navigate(url)
    """

    def __init__(
        self,
        browser: Browser,
        attempt_id: int,
        is_current: Callable[[int], bool],
    ) -> None:
        self.browser = browser
        self.attempt_id = attempt_id
        self._is_current = is_current
        self._navigation: list[NavigationHandler] = []
        self._requests: list[RequestHandler] = []
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled and self._is_current(self.attempt_id)

    def on_navigation(self, handler: NavigationHandler) -> None:
        async def scoped(event: NavigationEvent) -> None:
            if self.active:
                await handler(event)

        self._navigation.append(scoped)
        self.browser.add_navigation_handler(scoped)

    def on_request(self, domain: str, handler: RequestHandler) -> None:
        async def scoped(request: InterceptedRequest) -> Optional[SyntheticResponse]:
            if not self.active:
                return None
            return await handler(request)

        self._requests.append(scoped)
        self.browser.add_request_handler(domain, scoped)

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        for nav in self._navigation:
            self.browser.remove_navigation_handler(nav)
        for req in self._requests:
            self.browser.remove_request_handler(req)
        self._navigation.clear()
        self._requests.clear()

    def __enter__(self) -> AttemptSubscription:
        return self

    def __exit__(self, *args: object) -> None:
        self.cancel()
