"""Capture by scanning cookies after each provider navigation.

Some tenants finish the federated login by setting an ``idToken-<id>``
cookie on the identity host instead of redirecting with a code. That
cookie's value is already the bearer token, so token exchange is skipped.
"""

from __future__ import annotations

from fedlogin.browser.base import AttemptSubscription, NavigationEvent, host_in_domain
from fedlogin.capture.base import CredentialCapture
from fedlogin.models import CaptureStrategy
from fedlogin.output import mask_secret
from fedlogin.session import CapturedCredential, CredentialKind, Session

ID_TOKEN_PREFIX = "idtoken-"


class CookieScanCapture(CredentialCapture):
    """Takes the first ``idToken-*`` cookie seen on a provider host as the bearer token."""

    @property
    def strategy(self) -> CaptureStrategy:
        return CaptureStrategy.COOKIE_SCAN

    def attach(self, subscription: AttemptSubscription, session: Session) -> None:
        browser = subscription.browser

        async def handle(event: NavigationEvent) -> None:
            if not self._wants(event, session):
                return
            cookies = await browser.get_cookies(event.url)
            session.merge_cookies(cookies)
            self._log(f"Scanned {len(cookies)} cookie(s) at {event.host}")
            for cookie in cookies:
                if cookie.name.lower().startswith(ID_TOKEN_PREFIX) and cookie.value:
                    self._log(f"Bearer token found in cookie {cookie.name}: {mask_secret(cookie.value)}")
                    self._offer(
                        session, CapturedCredential(CredentialKind.BEARER_TOKEN, cookie.value)
                    )
                    return

        subscription.on_navigation(handle)

    def _wants(self, event: NavigationEvent, session: Session) -> bool:
        if session.slot.filled or not event.success:
            return False
        return host_in_domain(event.host, self.provider.identity_domain)
