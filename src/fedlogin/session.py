"""Per-attempt session state and the captured-credential slot.

A :class:`Session` is created fresh for every authentication attempt and
handed by reference through the pipeline: the pod resolver rewrites its
``base_url``, the capture strategies fill its :class:`CaptureSlot` and
cookie jar, and the token exchanger sets ``session_token``. Nothing here
is shared across attempts or written to disk.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Callable, Optional
from urllib.parse import urlparse

import httpx

from fedlogin.models import AuthMode


class CredentialKind(str, enum.Enum):
    """What a captured value is and how it must be consumed.

    ``AUTHORIZATION_CODE`` and ``SAML_ASSERTION`` go through
    AdvanceAuthentication. ``BEARER_TOKEN`` comes from an ``idToken-*``
    cookie and is used as the session token directly.
    """

    AUTHORIZATION_CODE = "authorization_code"
    SAML_ASSERTION = "saml_assertion"
    BEARER_TOKEN = "bearer_token"


@dataclass(frozen=True)
class CapturedCredential:
    """A credential lifted out of the browser by a capture strategy."""

    kind: CredentialKind
    value: str

    @property
    def needs_exchange(self) -> bool:
        return self.kind is not CredentialKind.BEARER_TOKEN

    @property
    def exchange_field(self) -> str:
        """Single key of the AdvanceAuthentication body for this credential."""
        if self.kind is CredentialKind.AUTHORIZATION_CODE:
            return "Code"
        if self.kind is CredentialKind.SAML_ASSERTION:
            return "SAMLResponse"
        raise ValueError("Bearer tokens are not exchanged")


@dataclass(frozen=True)
class Cookie:
    """A cookie observed in the browser for a provider URL."""

    name: str
    value: str
    domain: str = ""
    path: str = "/"


class CaptureSlot:
    """Write-once holder for the attempt's :class:`CapturedCredential`.

    The first :meth:`offer` wins; later offers are ignored and return
    ``False``. Callers that need to wait for a value use
    :attr:`credential` after being notified through ``on_filled``.
    """

    def __init__(self) -> None:
        self._credential: Optional[CapturedCredential] = None
        self._listeners: list[Callable[[CapturedCredential], None]] = []

    @property
    def credential(self) -> Optional[CapturedCredential]:
        return self._credential

    @property
    def filled(self) -> bool:
        return self._credential is not None

    def on_filled(self, listener: Callable[[CapturedCredential], None]) -> None:
        """Register a callable invoked once with the credential when the slot fills."""
        self._listeners.append(listener)

    def offer(self, credential: CapturedCredential) -> bool:
        """Store *credential* unless the slot is already filled.

        Returns:
            ``True`` when this call filled the slot.
        """
        if self._credential is not None:
            return False
        self._credential = credential
        for listener in self._listeners:
            listener(credential)
        return True


@dataclass
class Session:
    """Mutable state for exactly one authentication attempt.

    Attributes:
        tenant: Tenant identifier as entered by the user.
        user: User name sent to StartAuthentication.
        mode: OIDC or SAML.
        base_url: Identity service origin; starts at
            ``https://{tenant}.{identity_domain}`` and follows ``PodFqdn``.
        session_token: Token obtained from AdvanceAuthentication or an
            ``idToken-*`` cookie. Set at most once.
        cookies: Cookie jar keyed by cookie name.
        navigation_host: Last provider host the browser finished loading;
            its first label names the resource-API subdomain.
        slot: The write-once credential slot.
    """

    tenant: str
    user: str
    mode: AuthMode
    base_url: str
    attempt_id: int = 0
    session_token: Optional[str] = None
    cookies: dict[str, Cookie] = field(default_factory=dict)
    navigation_host: Optional[str] = None
    pod_redirects: int = 0
    slot: CaptureSlot = field(default_factory=CaptureSlot)

    @classmethod
    def start(
        cls,
        tenant: str,
        user: str,
        mode: AuthMode,
        identity_domain: str,
        attempt_id: int = 0,
    ) -> Session:
        """Create the session for a new attempt with the tenant's vanity origin."""
        return cls(
            tenant=tenant,
            user=user,
            mode=mode,
            base_url=f"https://{tenant}.{identity_domain}",
            attempt_id=attempt_id,
        )

    @property
    def authority(self) -> str:
        """Host part of :attr:`base_url`, lower-cased."""
        return (urlparse(self.base_url).hostname or "").lower()

    def redirect_to_pod(self, pod_fqdn: str) -> None:
        self.base_url = f"https://{pod_fqdn}"
        self.pod_redirects += 1

    def set_token(self, token: str) -> None:
        """Record the session token.

        Raises:
            RuntimeError: If a token was already set in this attempt.
        """
        if self.session_token is not None:
            raise RuntimeError("Session token already set for this attempt")
        self.session_token = token

    def merge_cookies(self, cookies: list[Cookie]) -> None:
        for cookie in cookies:
            self.cookies[cookie.name] = cookie

    def http_cookies(self) -> httpx.Cookies:
        """The cookie jar as :class:`httpx.Cookies` for the HTTP clients.

        Cookies reported without a domain are scoped to the identity host.
        """
        jar = httpx.Cookies()
        for cookie in self.cookies.values():
            jar.set(
                cookie.name,
                cookie.value,
                domain=cookie.domain or self.authority,
                path=cookie.path or "/",
            )
        return jar

    def resource_subdomain(self) -> str:
        """First DNS label of the observed navigation host, else the tenant."""
        if self.navigation_host:
            return self.navigation_host.split(".", 1)[0]
        return self.tenant
