"""Canonical Pydantic models shared across all fedlogin modules.

This is the single source of truth for data shapes in the project. The
models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`AuthMode`, :class:`CaptureStrategy`, :class:`ProviderConfig`,
    :class:`FlowConfig`, :class:`RequestConfig`, :class:`OutputConfig`,
    :class:`GlobalConfig`, and :class:`Profile`.

**Wire models** -- parsed from identity-service and resource-API responses:
    :class:`Mechanism`, :class:`Challenge`, :class:`StartAuthenticationResult`,
    :class:`StartAuthenticationResponse`, :class:`AdvanceAuthenticationResult`,
    :class:`AdvanceAuthenticationResponse`, :class:`Account`, and
    :class:`AccountsResponse`.

Wire models use the service's PascalCase keys as aliases and keep every
optional field optional, so callers check presence explicitly instead of
probing nested dictionaries. Unknown keys are ignored.
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Configuration models ---


class AuthMode(str, enum.Enum):
    """Federation flavour used by the tenant's identity provider."""

    OIDC = "OIDC"
    SAML = "SAML"


class CaptureStrategy(str, enum.Enum):
    """How the federated credential is lifted out of the browser.

    ``INTERCEPTION`` inspects outbound requests (OIDC ``code`` query
    parameter, SAML POST body). ``COOKIE_SCAN`` inspects cookies after each
    navigation and takes an ``idToken-*`` cookie as the bearer token.
    """

    INTERCEPTION = "interception"
    COOKIE_SCAN = "cookie_scan"


class ProviderConfig(BaseModel):
    """Domains and paths of the identity service and the resource API."""

    identity_domain: str = Field(
        default="id.cyberark.cloud",
        description="Identity service domain; tenants live at https://{tenant}.<domain>",
    )
    resource_domain: str = Field(
        default="privilegecloud.cyberark.cloud",
        description="Resource API domain; accounts live at https://{subdomain}.<domain>",
    )
    resource_path: str = Field(
        default="/PasswordVault",
        description="Path prefix placed before /API/Accounts on the resource host",
    )
    saml_callback_path: str = Field(
        default="/auth/saml/callback",
        description="Path of the POST that carries the SAMLResponse form field",
    )
    accounts_limit: int = Field(default=10, description="limit= query value for the accounts call")


class FlowConfig(BaseModel):
    """Bounds applied to one authentication attempt."""

    max_pod_redirects: int = Field(
        default=3, ge=1, description="Maximum StartAuthentication calls while following PodFqdn hints"
    )
    capture_timeout: float = Field(
        default=300.0, gt=0, description="Seconds to wait for the browser to yield a credential"
    )


class RequestConfig(BaseModel):
    """Default HTTP request settings applied to every outbound call."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/fedlogin/config.json``.

    Loaded and saved by :func:`~fedlogin.config.load_global_config` and
    :func:`~fedlogin.config.save_global_config`. Fields here have the
    lowest precedence; see :func:`~fedlogin.config.resolve_config`.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    headless: bool = Field(default=False, description="Run the login browser without a window")
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """One tenant/user pairing stored under the ``profiles/`` config directory.

    Profiles are created with ``fedlogin profile create`` and selected with
    ``--profile`` or ``FEDLOGIN_PROFILE``.

    Example::

        Profile(name="acme", tenant="acme", user="me@acme.com", mode=AuthMode.SAML)
    """

    model_config = ConfigDict(extra="allow")

    name: str
    tenant: str = Field(description="Tenant identifier, e.g. 'acme' for acme.id.cyberark.cloud")
    user: str = Field(default="", description="User name or e-mail sent to StartAuthentication")
    mode: AuthMode = AuthMode.OIDC
    capture: CaptureStrategy = CaptureStrategy.INTERCEPTION
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    flow: FlowConfig = Field(default_factory=FlowConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Wire models ---


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Mechanism(_WireModel):
    """One authentication mechanism offered inside a challenge."""

    name: Optional[str] = Field(default=None, alias="Name")
    mechanism_id: Optional[str] = Field(default=None, alias="MechanismId")
    prompt: Optional[str] = Field(default=None, alias="Prompt")
    prompt_select_mech: Optional[str] = Field(default=None, alias="PromptSelectMech")

    def prompt_text(self) -> Optional[str]:
        """Return ``Prompt`` when set, else ``PromptSelectMech``."""
        return self.prompt or self.prompt_select_mech


class Challenge(_WireModel):
    """An ordered group of mechanisms the user must satisfy one of."""

    mechanisms: Optional[list[Mechanism]] = Field(default=None, alias="Mechanisms")


class StartAuthenticationResult(_WireModel):
    """``Result`` object of a StartAuthentication answer."""

    pod_fqdn: Optional[str] = Field(default=None, alias="PodFqdn")
    idp_redirect_url: Optional[str] = Field(default=None, alias="IdpRedirectUrl")
    challenges: Optional[list[Challenge]] = Field(default=None, alias="Challenges")
    session_id: Optional[str] = Field(default=None, alias="SessionId")


class StartAuthenticationResponse(_WireModel):
    """Parsed body of ``POST /Security/StartAuthentication``."""

    success: bool = False
    result: Optional[StartAuthenticationResult] = Field(default=None, alias="Result")
    message: Optional[str] = Field(default=None, alias="Message")


class AdvanceAuthenticationResult(_WireModel):
    """``Result`` object of an AdvanceAuthentication answer."""

    token: Optional[str] = Field(default=None, alias="Token")
    pod_fqdn: Optional[str] = Field(default=None, alias="PodFqdn")


class AdvanceAuthenticationResponse(_WireModel):
    """Parsed body of ``POST /Security/AdvanceAuthentication``."""

    success: bool = False
    result: Optional[AdvanceAuthenticationResult] = Field(default=None, alias="Result")
    message: Optional[str] = Field(default=None, alias="Message")


class Account(_WireModel):
    """Read-only projection of one entry in the accounts API ``value`` array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    name: Optional[str] = Field(default=None, alias="Name")
    username: Optional[str] = Field(default=None, alias="UserName")
    address: Optional[str] = Field(default=None, alias="Address")
    platform_id: Optional[str] = Field(default=None, alias="PlatformID")


class AccountsResponse(_WireModel):
    """Parsed body of ``GET /API/Accounts``."""

    value: Optional[list[Account]] = None
