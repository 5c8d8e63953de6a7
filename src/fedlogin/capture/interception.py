"""Capture by intercepting outbound requests to the identity provider.

OIDC: the IdP sends the browser back to the identity service with
``?code=...``. We read the code from the query string and answer the
request ourselves with an empty 200 so the browser does not land on a
callback page that has nothing to show.

SAML: the IdP auto-submits a form POST to the identity service's SAML
callback. We read ``SAMLResponse`` from the form-encoded body and let the
request continue.
"""

from __future__ import annotations

from typing import Optional

from fedlogin.browser.base import (
    AttemptSubscription,
    Browser,
    InterceptedRequest,
    SyntheticResponse,
)
from fedlogin.capture.base import CredentialCapture, find_parameter
from fedlogin.models import AuthMode, CaptureStrategy
from fedlogin.output import mask_secret
from fedlogin.session import CapturedCredential, CredentialKind, Session

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class InterceptionCapture(CredentialCapture):
    """Reads the authorization code or SAML assertion from intercepted requests."""

    @property
    def strategy(self) -> CaptureStrategy:
        return CaptureStrategy.INTERCEPTION

    def supports(self, browser: Browser) -> bool:
        return browser.supports_interception

    def attach(self, subscription: AttemptSubscription, session: Session) -> None:
        async def handle(request: InterceptedRequest) -> Optional[SyntheticResponse]:
            return self.inspect(request, session)

        subscription.on_request(self.provider.identity_domain, handle)

    def inspect(self, request: InterceptedRequest, session: Session) -> Optional[SyntheticResponse]:
        """Examine one request; returns a synthetic response when it was consumed."""
        if session.slot.filled:
            return None
        if session.mode is AuthMode.OIDC:
            return self._inspect_oidc(request, session)
        self._inspect_saml(request, session)
        return None

    def _inspect_oidc(
        self, request: InterceptedRequest, session: Session
    ) -> Optional[SyntheticResponse]:
        code = find_parameter(request.query, "code")
        if not code:
            return None
        self._log(f"OIDC code intercepted from {request.host}{request.path}")
        self._log(f"Extracted code: {mask_secret(code)}")
        if not self._offer(session, CapturedCredential(CredentialKind.AUTHORIZATION_CODE, code)):
            return None
        return SyntheticResponse(status=200, reason="OK", body=b"")

    def _inspect_saml(self, request: InterceptedRequest, session: Session) -> None:
        if request.method.upper() != "POST":
            return
        if not request.path.rstrip("/").endswith(self.provider.saml_callback_path.rstrip("/")):
            return

        self._log("SAML callback intercepted from POST body")
        content_type = (request.header("content-type") or "").split(";", 1)[0].strip().lower()
        if content_type and content_type != FORM_CONTENT_TYPE:
            self._log(f"SAML callback body is {content_type}, not form-encoded; nothing extracted")
            return

        body = (request.body or b"").decode("utf-8", errors="replace")
        assertion = find_parameter(body, "SAMLResponse")
        if not assertion:
            self._log("SAML callback carried no SAMLResponse field; nothing extracted")
            return
        self._log(f"Extracted SAMLResponse: {mask_secret(assertion)}")
        self._offer(session, CapturedCredential(CredentialKind.SAML_ASSERTION, assertion))
