"""Trade a captured federated credential for a session token."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fedlogin.client.identity import IdentityClient
from fedlogin.exceptions import AuthenticationRejected, ProtocolError
from fedlogin.session import CapturedCredential


@dataclass(frozen=True)
class ExchangeResult:
    token: str
    pod_fqdn: Optional[str] = None


async def exchange_credential(
    client: IdentityClient, base_url: str, credential: CapturedCredential
) -> ExchangeResult:
    """Call AdvanceAuthentication once with *credential*.

    Exchange never loops. A ``PodFqdn`` in the answer is handed back for the
    caller to apply to the session.

    Raises:
        ValueError: If *credential* is a bearer token, which is never exchanged.
        AuthenticationRejected: When the service answers ``success: false``.
        ProtocolError: When ``success`` is true but no token is present.
    """
    if not credential.needs_exchange:
        raise ValueError("Bearer-token credentials bypass AdvanceAuthentication")

    response = await client.advance_authentication(base_url, credential)
    if not response.success:
        raise AuthenticationRejected(response.message or "")

    result = response.result
    if result is None or not result.token:
        raise ProtocolError("AdvanceAuthentication succeeded without a Token")
    return ExchangeResult(token=result.token, pod_fqdn=result.pod_fqdn or None)
