"""Browser collaborator contract.

:class:`Browser` is what the orchestrator drives; adapters such as
:class:`fedlogin.browser.playwright.PlaywrightBrowser` implement it. The
Playwright adapter is not imported here so that the core works without
the optional ``playwright`` dependency.
"""

from fedlogin.browser.base import (
    AttemptSubscription,
    Browser,
    InterceptedRequest,
    NavigationEvent,
    SyntheticResponse,
    host_in_domain,
)

__all__ = [
    "AttemptSubscription",
    "Browser",
    "InterceptedRequest",
    "NavigationEvent",
    "SyntheticResponse",
    "host_in_domain",
]
