"""Credential capture strategies.

- :class:`CredentialCapture` -- the interface the orchestrator depends on.
- :class:`InterceptionCapture` -- OIDC ``code`` query parameter or SAML
  ``SAMLResponse`` POST field, read from intercepted requests.
- :class:`CookieScanCapture` -- ``idToken-*`` cookie read after navigation.
- :class:`CaptureRegistry` / :func:`create_default_registry` -- strategy lookup.
"""

from fedlogin.capture.base import CredentialCapture, find_parameter
from fedlogin.capture.cookie_scan import CookieScanCapture
from fedlogin.capture.interception import InterceptionCapture
from fedlogin.capture.registry import CaptureRegistry, create_default_registry

__all__ = [
    "CaptureRegistry",
    "CookieScanCapture",
    "CredentialCapture",
    "InterceptionCapture",
    "create_default_registry",
    "find_parameter",
]
