"""Pick the identity-provider redirect out of a StartAuthentication result."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fedlogin.models import StartAuthenticationResult

NO_REDIRECT_REASON = "no IdpRedirectUrl and no challenges in the StartAuthentication result"
INTERACTIVE_REASON = "mechanism requires interactive input not supported by this flow"


@dataclass(frozen=True)
class RedirectResolution:
    """Outcome of :func:`resolve_redirect`.

    Exactly one of ``url`` and ``reason`` is set.
    """

    url: Optional[str] = None
    reason: Optional[str] = None
    source: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.url is not None


def _looks_like_url(value: str) -> bool:
    return value.lower().startswith("http")


def resolve_redirect(result: Optional[StartAuthenticationResult]) -> RedirectResolution:
    """Return the URL the browser should open, or why there is none.

    Precedence:

    1. ``IdpRedirectUrl`` when present and non-empty, used verbatim.
    2. The prompt of the first mechanism of the first challenge, if it is a
       URL. A prompt such as "Enter the code sent to your device" means the
       user must type something, which this flow does not handle.

    Having no redirect is a normal outcome (the account is not federated),
    not an error.
    """
    if result is None:
        return RedirectResolution(reason=NO_REDIRECT_REASON)

    if result.idp_redirect_url and result.idp_redirect_url.strip():
        return RedirectResolution(url=result.idp_redirect_url, source="IdpRedirectUrl")

    if not result.challenges:
        return RedirectResolution(reason=NO_REDIRECT_REASON)

    mechanisms = result.challenges[0].mechanisms or []
    if not mechanisms:
        return RedirectResolution(reason="first challenge offers no mechanisms")

    prompt = (mechanisms[0].prompt_text() or "").strip()
    if prompt and _looks_like_url(prompt):
        return RedirectResolution(url=prompt, source="Challenges[0].Mechanisms[0]")
    return RedirectResolution(reason=INTERACTIVE_REASON)
