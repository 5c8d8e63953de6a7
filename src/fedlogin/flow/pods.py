"""Pod redirect resolution.

A tenant's vanity host (``acme.id.cyberark.cloud``) may not be the pod that
actually serves it. StartAuthentication answers with ``Result.PodFqdn``
when the request landed on the wrong pod; we then repeat the call against
``https://{PodFqdn}`` until the hint matches the host we asked.
"""

from __future__ import annotations

from fedlogin.client.identity import IdentityClient
from fedlogin.exceptions import RedirectLoopExceeded
from fedlogin.models import StartAuthenticationResponse
from fedlogin.session import Session

DEFAULT_MAX_POD_REDIRECTS = 3


def _pod_hint(response: StartAuthenticationResponse) -> str | None:
    if response.result is None or not response.result.pod_fqdn:
        return None
    return response.result.pod_fqdn.strip().lower() or None


async def resolve_pod(
    client: IdentityClient,
    session: Session,
    max_calls: int = DEFAULT_MAX_POD_REDIRECTS,
) -> StartAuthenticationResponse:
    """Call StartAuthentication until pod routing is stable.

    ``session.base_url`` is rewritten for each hint that names a different
    host. At most *max_calls* StartAuthentication requests are sent.

    Returns:
        The response from the pod that accepted the request. It is the one
        the challenge resolver should look at.

    Raises:
        RedirectLoopExceeded: If the last permitted call still points at a
            different pod. ``session.base_url`` is left at the last host
            that was actually called.
    """
    calls = 0
    while True:
        response = await client.start_authentication(session.base_url, session.user)
        calls += 1
        pod = _pod_hint(response)
        if pod is None or pod == session.authority:
            return response
        if calls >= max_calls:
            raise RedirectLoopExceeded(calls, pod)
        session.redirect_to_pod(pod)
