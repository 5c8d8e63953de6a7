"""The authentication attempt state machine.

One call to :meth:`Orchestrator.run` is one attempt::

    StartAuthentication (following PodFqdn hints)
      -> pick the IdP redirect (IdpRedirectUrl or a URL-shaped challenge prompt)
      -> navigate the browser and wait for the capture strategy to fill the slot
      -> AdvanceAuthentication (skipped for idToken cookies)
      -> GET accounts with the session token
      -> display_accounts

Only one attempt runs at a time. Browser handlers are registered through an
:class:`~fedlogin.browser.base.AttemptSubscription` tagged with the attempt
id; :meth:`Orchestrator.cancel` retires the current id so that any late
callback, and the attempt's own remaining steps, become no-ops.

Every :class:`~fedlogin.exceptions.FedloginError` raised inside an attempt
is reported through the sink and returned as an :class:`AttemptOutcome`,
as is any other failure raised by the browser while it navigates;
only input validation and the in-flight guard raise to the caller.
"""

from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Optional

import httpx

from fedlogin.browser.base import (
    AttemptSubscription,
    Browser,
    NavigationEvent,
    NavigationHandler,
    host_in_domain,
)
from fedlogin.capture.registry import CaptureRegistry, create_default_registry
from fedlogin.client.identity import IdentityClient
from fedlogin.client.resource import ResourceClient
from fedlogin.exceptions import (
    AttemptInProgressError,
    AuthenticationRejected,
    BrowserError,
    CaptureTimeout,
    FedloginError,
    InvalidUsageError,
    ProtocolError,
    ResourceApiError,
)
from fedlogin.exit_codes import EXIT_GENERIC_FAILURE, EXIT_NO_REDIRECT, EXIT_SUCCESS
from fedlogin.flow.challenge import RedirectResolution, resolve_redirect
from fedlogin.flow.exchange import exchange_credential
from fedlogin.flow.pods import resolve_pod
from fedlogin.models import Account, AuthMode, Profile
from fedlogin.session import CapturedCredential, Session
from fedlogin.ui import UISink


class AttemptStatus(str, enum.Enum):
    COMPLETED = "completed"
    NO_REDIRECT = "no_redirect"
    REJECTED = "rejected"
    FAILED = "failed"
    SUPERSEDED = "superseded"


@dataclass
class AttemptOutcome:
    """What one attempt ended with.

    ``accounts`` is only populated for :attr:`AttemptStatus.COMPLETED`;
    ``error`` holds the reported exception for ``REJECTED`` and ``FAILED``.
    """

    attempt_id: int
    status: AttemptStatus
    accounts: list[Account] = field(default_factory=list)
    redirect_url: Optional[str] = None
    reason: Optional[str] = None
    error: Optional[FedloginError] = None
    session: Optional[Session] = None

    @property
    def exit_code(self) -> int:
        if self.status is AttemptStatus.COMPLETED:
            return EXIT_SUCCESS
        if self.status is AttemptStatus.NO_REDIRECT:
            return EXIT_NO_REDIRECT
        if self.error is not None:
            return self.error.exit_code
        return EXIT_GENERIC_FAILURE


class _Superseded(Exception):
    """Internal signal: the running attempt was cancelled by the caller."""


class Orchestrator:
    """Runs authentication attempts for one profile against one browser.

    Args:
        profile: Tenant, user, mode, capture strategy, domains and limits.
        browser: The browser collaborator to drive.
        sink: Receives log lines and the resulting accounts.
        capture_registry: Strategy lookup; defaults to both built-ins.
        transport: Optional httpx transport shared by the identity and
            resource clients, used by tests to stub the network.
    """

    def __init__(
        self,
        profile: Profile,
        browser: Browser,
        sink: UISink,
        capture_registry: Optional[CaptureRegistry] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._browser = browser
        self._sink = sink
        self._registry = capture_registry or create_default_registry()
        self._transport = transport
        self._attempts = 0
        self._current: Optional[int] = None
        self._in_flight = False
        self._waiter: Optional[asyncio.Future[CapturedCredential]] = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    def is_current(self, attempt_id: int) -> bool:
        return self._current == attempt_id

    def cancel(self) -> bool:
        """Abandon the attempt in flight, if any.

        Returns:
            ``True`` when an attempt was running and is now superseded.
        """
        if not self._in_flight:
            return False
        self._current = None
        if self._waiter is not None and not self._waiter.done():
            self._waiter.cancel()
        return True

    def _log(self, line: str) -> None:
        self._sink.log(line)

    def _check_current(self, attempt_id: int) -> None:
        if not self.is_current(attempt_id):
            raise _Superseded()

    # ------------------------------------------------------------------ #
    # Attempt boundary
    # ------------------------------------------------------------------ #

    async def run(self) -> AttemptOutcome:
        """Run one full attempt and report how it ended.

        Raises:
            AttemptInProgressError: If another attempt is still running.
            InvalidUsageError: If tenant, user or mode is missing.
        """
        if self._in_flight:
            raise AttemptInProgressError("An authentication attempt is already in progress")
        self._validate_inputs()

        self._in_flight = True
        self._attempts += 1
        attempt_id = self._attempts
        self._current = attempt_id
        profile = self._profile
        session = Session.start(
            tenant=profile.tenant.strip(),
            user=profile.user.strip(),
            mode=profile.mode,
            identity_domain=profile.provider.identity_domain,
            attempt_id=attempt_id,
        )
        subscription = AttemptSubscription(self._browser, attempt_id, self.is_current)

        try:
            return await self._run_attempt(session, subscription)
        except _Superseded:
            self._log(f"Attempt #{attempt_id} superseded; ignoring its remaining events")
            return AttemptOutcome(attempt_id, AttemptStatus.SUPERSEDED, session=session)
        except AuthenticationRejected as exc:
            self._log(f"Authentication failed: {exc.message or 'no reason given'}")
            return AttemptOutcome(attempt_id, AttemptStatus.REJECTED, error=exc, session=session)
        except ResourceApiError as exc:
            self._log(f"Accounts API error: HTTP {exc.status_code}: {exc.body}")
            return AttemptOutcome(attempt_id, AttemptStatus.FAILED, error=exc, session=session)
        except ProtocolError as exc:
            self._log(f"Unexpected response: {exc}")
            if exc.raw_body:
                self._log(f"Raw response: {exc.raw_body}")
            return AttemptOutcome(attempt_id, AttemptStatus.FAILED, error=exc, session=session)
        except FedloginError as exc:
            self._log(f"{type(exc).__name__}: {exc}")
            return AttemptOutcome(attempt_id, AttemptStatus.FAILED, error=exc, session=session)
        finally:
            subscription.cancel()
            self._waiter = None
            if self._current == attempt_id:
                self._current = None
            self._in_flight = False

    def _validate_inputs(self) -> None:
        profile = self._profile
        if not profile.tenant or not profile.tenant.strip():
            raise InvalidUsageError("Tenant must not be empty")
        if not profile.user or not profile.user.strip():
            raise InvalidUsageError("User must not be empty")
        if not isinstance(profile.mode, AuthMode):
            raise InvalidUsageError("Mode must be OIDC or SAML")

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #

    async def _run_attempt(
        self, session: Session, subscription: AttemptSubscription
    ) -> AttemptOutcome:
        attempt_id = session.attempt_id
        profile = self._profile
        self._log(
            f"Attempt #{attempt_id}: {session.mode.value} sign-in for {session.user} "
            f"on tenant {session.tenant}"
        )

        async with IdentityClient(profile.request, transport=self._transport, log=self._log) as identity:
            self._log("Step 1: Contacting StartAuthentication...")
            resolution = await self._discover_redirect(identity, session)
            self._check_current(attempt_id)

            if not resolution.found:
                self._log(f"No redirect URL found in response: {resolution.reason}")
                return AttemptOutcome(
                    attempt_id, AttemptStatus.NO_REDIRECT, reason=resolution.reason, session=session
                )

            credential = await self._capture(session, subscription, resolution.url or "")
            self._check_current(attempt_id)

            if credential.needs_exchange:
                self._log("Step 2: Exchanging credential via AdvanceAuthentication...")
                identity.add_cookies(session.http_cookies())
                result = await exchange_credential(identity, session.base_url, credential)
                self._check_current(attempt_id)
                session.set_token(result.token)
                self._log("Authentication successful. Session token acquired.")
                if result.pod_fqdn and result.pod_fqdn.lower() != session.authority:
                    self._apply_exchange_pod(session, result.pod_fqdn)
            else:
                session.set_token(credential.value)
                self._log("Bearer token taken from idToken cookie; AdvanceAuthentication skipped")

        subdomain = session.resource_subdomain()
        self._log(f"Step 3: Accessing accounts API for {subdomain}...")
        async with ResourceClient(
            profile.provider,
            profile.request,
            transport=self._transport,
            log=self._log,
            cookies=session.http_cookies(),
        ) as resource:
            accounts = await resource.fetch_accounts(subdomain, session.session_token or "")
        self._check_current(attempt_id)

        self._sink.display_accounts(accounts)
        self._log(f"Displaying {len(accounts)} accounts.")
        return AttemptOutcome(
            attempt_id,
            AttemptStatus.COMPLETED,
            accounts=accounts,
            redirect_url=resolution.url,
            session=session,
        )

    async def _discover_redirect(
        self, identity: IdentityClient, session: Session
    ) -> RedirectResolution:
        try:
            response = await resolve_pod(identity, session, self._profile.flow.max_pod_redirects)
        except ProtocolError as exc:
            self._log(f"Error parsing StartAuthentication response: {exc}")
            if exc.raw_body:
                self._log(f"Raw response: {exc.raw_body}")
            return RedirectResolution(reason="StartAuthentication response could not be parsed")

        if session.pod_redirects:
            self._log(f"Pod routing settled on {session.authority}")
        if not response.success and response.message:
            self._log(f"StartAuthentication reported: {response.message}")
        return resolve_redirect(response.result)

    async def _capture(
        self, session: Session, subscription: AttemptSubscription, url: str
    ) -> CapturedCredential:
        """Navigate to *url* and wait for the first captured credential."""
        profile = self._profile
        capture = self._registry.create(profile.capture, profile.provider, log=self._log)
        if not capture.supports(self._browser):
            raise BrowserError(
                f"This browser cannot run the '{capture.strategy.value}' capture strategy"
            )

        waiter: asyncio.Future[CapturedCredential] = asyncio.get_running_loop().create_future()
        self._waiter = waiter

        # The slot notifies once; the waiter may already be cancelled.
        def on_filled(credential: CapturedCredential) -> None:
            if not waiter.done():
                waiter.set_result(credential)

        session.slot.on_filled(on_filled)
        subscription.on_navigation(self._navigation_recorder(session))
        capture.attach(subscription, session)

        self._log(f"Redirecting browser to identity provider ({capture.strategy.value} capture)...")
        try:
            await self._browser.navigate(url)
        except FedloginError:
            raise
        except Exception as exc:
            raise BrowserError(f"Browser failed while opening {url}: {exc}") from exc
        self._check_current(session.attempt_id)

        timeout = profile.flow.capture_timeout
        try:
            return await asyncio.wait_for(waiter, timeout=timeout)
        except asyncio.TimeoutError:
            raise CaptureTimeout(f"No credential captured within {timeout:g}s") from None
        except asyncio.CancelledError:
            if not self.is_current(session.attempt_id):
                raise _Superseded() from None
            raise

    def _navigation_recorder(self, session: Session) -> NavigationHandler:
        domain = self._profile.provider.identity_domain

        async def record(event: NavigationEvent) -> None:
            if not event.success:
                self._log(f"Navigation failed: {event.url}")
                return
            if host_in_domain(event.host, domain):
                session.navigation_host = event.host

        return record

    def _apply_exchange_pod(self, session: Session, pod_fqdn: str) -> None:
        # Hosts visited, including this hop, stay within max_pod_redirects.
        if session.pod_redirects + 1 >= self._profile.flow.max_pod_redirects:
            self._log(f"Ignoring PodFqdn {pod_fqdn} from AdvanceAuthentication: redirect bound reached")
            return
        session.redirect_to_pod(pod_fqdn.lower())
        self._log(f"AdvanceAuthentication moved the session to {session.authority}")
