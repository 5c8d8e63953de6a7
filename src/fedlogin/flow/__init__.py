"""The HTTP-side steps of an authentication attempt.

- :func:`resolve_pod` -- follow ``PodFqdn`` hints from StartAuthentication.
- :func:`resolve_redirect` -- choose the identity-provider URL to open.
- :func:`exchange_credential` -- AdvanceAuthentication with a captured credential.
"""

from fedlogin.flow.challenge import RedirectResolution, resolve_redirect
from fedlogin.flow.exchange import ExchangeResult, exchange_credential
from fedlogin.flow.pods import resolve_pod

__all__ = [
    "ExchangeResult",
    "RedirectResolution",
    "exchange_credential",
    "resolve_pod",
    "resolve_redirect",
]
