"""Client for the CyberArk Identity ``/Security`` endpoints.

Two calls drive a federated login:

* ``POST {base}/Security/StartAuthentication`` with
  ``{"User": ..., "Version": "1.0"}`` returns routing hints (``PodFqdn``),
  an IdP redirect URL, or a list of challenges.
* ``POST {base}/Security/AdvanceAuthentication`` with a single
  ``{"Code": ...}`` or ``{"SAMLResponse": ...}`` key trades the federated
  credential for a session token.

Every request and response is traced through the log sink; the secret
part of an AdvanceAuthentication payload is masked.
"""

from __future__ import annotations

import json
from urllib.parse import urlparse

from fedlogin.client.base import BaseClient
from fedlogin.exceptions import InvalidUsageError, TransportError
from fedlogin.models import AdvanceAuthenticationResponse, StartAuthenticationResponse
from fedlogin.output import dump_json, mask_secret
from fedlogin.session import CapturedCredential

START_AUTHENTICATION_PATH = "/Security/StartAuthentication"
ADVANCE_AUTHENTICATION_PATH = "/Security/AdvanceAuthentication"
PROTOCOL_VERSION = "1.0"


def validate_origin(base_url: str) -> str:
    """Return *base_url* without a trailing slash if it is a bare http(s) origin.

    Raises:
        InvalidUsageError: If the value has no host, a non-http scheme, or
            carries a path, query or fragment.
    """
    parsed = urlparse(base_url)
    if parsed.scheme not in ("https", "http") or not parsed.hostname:
        raise InvalidUsageError(f"Not a valid origin: '{base_url}'")
    if parsed.path not in ("", "/") or parsed.query or parsed.fragment:
        raise InvalidUsageError(f"Origin must not carry a path or query: '{base_url}'")
    return f"{parsed.scheme}://{parsed.netloc}"


class IdentityClient(BaseClient):
    """Async client for StartAuthentication and AdvanceAuthentication.

    Example::

        async with IdentityClient(profile.request) as client:
            response = await client.start_authentication(
                "https://acme.id.cyberark.cloud", "me@acme.com"
            )
    """

    async def start_authentication(
        self, base_url: str, user: str
    ) -> StartAuthenticationResponse:
        """Send StartAuthentication for *user* against *base_url*.

        Raises:
            InvalidUsageError: If *user* is empty or *base_url* is not an origin.
            TransportError: On network failure or a non-2xx status.
            ProtocolError: If the body is not a StartAuthentication object.
        """
        if not user or not user.strip():
            raise InvalidUsageError("User identifier must not be empty")
        origin = validate_origin(base_url)
        url = f"{origin}{START_AUTHENTICATION_PATH}"
        payload = {"User": user, "Version": PROTOCOL_VERSION}

        self._log(f"POST URL: {url}")
        self._log(f"Payload: {dump_json(payload)}")
        response = await self._send("POST", url, json_body=payload)
        self._log(f"Response: {response.text}")
        self._raise_for_status(response.status_code, url)
        return self._parse(response, StartAuthenticationResponse)

    async def advance_authentication(
        self, base_url: str, credential: CapturedCredential
    ) -> AdvanceAuthenticationResponse:
        """Send AdvanceAuthentication carrying *credential*.

        The body has exactly one key, ``Code`` for authorization codes or
        ``SAMLResponse`` for SAML assertions. A ``success: false`` answer is
        returned as-is; interpreting it is the token exchanger's job.

        Raises:
            TransportError: On network failure or a non-2xx status.
            ProtocolError: If the body is not an AdvanceAuthentication object.
        """
        origin = validate_origin(base_url)
        url = f"{origin}{ADVANCE_AUTHENTICATION_PATH}"
        key = credential.exchange_field
        payload = {key: credential.value}

        self._log(f"POST URL: {url}")
        self._log(f"Payload: {dump_json({key: mask_secret(credential.value)})}")
        response = await self._send("POST", url, json_body=payload)
        self._log(f"Response: {_redact_token(response.text)}")
        self._raise_for_status(response.status_code, url)
        return self._parse(response, AdvanceAuthenticationResponse)

    @staticmethod
    def _raise_for_status(status: int, url: str) -> None:
        if not 200 <= status < 300:
            raise TransportError(f"HTTP {status} from {url}", status_code=status)


def _redact_token(body: str) -> str:
    """Mask ``Result.Token`` in a raw AdvanceAuthentication body for logging.

    Bodies that are not JSON, or carry no string token, are returned as-is.
    """
    try:
        data = json.loads(body)
    except ValueError:
        return body
    result = data.get("Result") if isinstance(data, dict) else None
    if not isinstance(result, dict) or not isinstance(result.get("Token"), str):
        return body
    result["Token"] = mask_secret(result["Token"])
    return dump_json(data)
