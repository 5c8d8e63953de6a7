"""Login commands -- run a federated sign-in or just resolve its redirect.

Provides two top-level commands:

* ``fedlogin login`` -- a full attempt: StartAuthentication, browser
  redirect, credential capture, token exchange and the accounts call.
  Accounts are printed to stdout; the attempt log goes to stderr.
* ``fedlogin resolve`` -- StartAuthentication and pod resolution only,
  printing the identity-provider URL the browser would be sent to. Useful
  for checking a tenant's federation setup without opening a browser.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import typer

from fedlogin.exceptions import FedloginError
from fedlogin.models import GlobalConfig, Profile
from fedlogin.output import error, get_output, info, print_data, success, suggest


_TENANT_OPTION = typer.Option(None, "--tenant", "-t", help="Tenant identifier (acme for acme.id.cyberark.cloud).")
_USER_OPTION = typer.Option(None, "--user", "-u", help="User name or e-mail.")
_MODE_OPTION = typer.Option(None, "--mode", "-m", help="Federation mode: OIDC or SAML.")


def _resolve_profile(
    ctx: typer.Context,
    tenant: Optional[str],
    user: Optional[str],
    mode: Optional[str],
    capture: Optional[str] = None,
) -> tuple[GlobalConfig, Profile]:
    """Merge CLI flags with stored config, exiting with code 2 when nothing usable is found."""
    from fedlogin.config import resolve_config

    cli_profile = ctx.obj.get("profile") if ctx.obj else None
    try:
        global_cfg, profile = resolve_config(
            cli_profile=cli_profile,
            cli_tenant=tenant,
            cli_user=user,
            cli_mode=mode,
            cli_capture=capture,
        )
    except FedloginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if profile is None:
        error("No tenant selected.")
        suggest("Pass --tenant, set FEDLOGIN_TENANT, or run: fedlogin profile create")
        raise typer.Exit(code=2)
    if not profile.user:
        error(f"No user configured for tenant '{profile.tenant}'.")
        suggest("Pass --user or set FEDLOGIN_USER.")
        raise typer.Exit(code=2)
    return global_cfg, profile


async def _run_login(profile: Profile, headless: bool) -> Any:
    """Open Chromium and run one orchestrated attempt."""
    from fedlogin.browser.playwright import PlaywrightBrowser
    from fedlogin.orchestrator import Orchestrator
    from fedlogin.ui import ConsoleSink

    async with PlaywrightBrowser(headless=headless) as browser:
        orchestrator = Orchestrator(profile, browser, ConsoleSink())
        return await orchestrator.run()


def login_command(
    ctx: typer.Context,
    tenant: Optional[str] = _TENANT_OPTION,
    user: Optional[str] = _USER_OPTION,
    mode: Optional[str] = _MODE_OPTION,
    capture: Optional[str] = typer.Option(
        None, "--capture", "-c", help="Capture strategy: interception or cookie-scan."
    ),
    headless: Optional[bool] = typer.Option(
        None, "--headless/--headed", help="Run the browser without a window."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the browser to yield a credential."
    ),
) -> None:
    """Sign in through the tenant's identity provider and list accounts.

    Example::

        fedlogin login --tenant acme --user me@acme.com --mode SAML
    """
    from fedlogin.orchestrator import AttemptStatus

    global_cfg, profile = _resolve_profile(ctx, tenant, user, mode, capture)
    if timeout is not None:
        profile.flow.capture_timeout = timeout
    use_headless = global_cfg.headless if headless is None else headless

    info(
        f"Signing in {profile.user} to {profile.tenant} "
        f"({profile.mode.value}, {profile.capture.value} capture)"
    )
    try:
        outcome = asyncio.run(_run_login(profile, use_headless))
    except FedloginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if outcome.status is AttemptStatus.COMPLETED:
        success(f"Signed in. {len(outcome.accounts)} account(s) retrieved.")
        return
    if outcome.status is AttemptStatus.NO_REDIRECT:
        error(f"No identity-provider redirect: {outcome.reason}")
        suggest(f"Check the federation setup with: fedlogin resolve --tenant {profile.tenant}")
    elif outcome.error is not None:
        error(str(outcome.error))
    raise typer.Exit(code=outcome.exit_code)


async def resolve_for(profile: Profile) -> tuple[str, Any]:
    """Run StartAuthentication with pod resolution and pick the redirect.

    Returns:
        ``(final_base_url, RedirectResolution)``.
    """
    from fedlogin.client.identity import IdentityClient
    from fedlogin.flow.challenge import resolve_redirect
    from fedlogin.flow.pods import resolve_pod
    from fedlogin.session import Session

    session = Session.start(
        tenant=profile.tenant,
        user=profile.user,
        mode=profile.mode,
        identity_domain=profile.provider.identity_domain,
    )
    async with IdentityClient(profile.request) as client:
        response = await resolve_pod(client, session, profile.flow.max_pod_redirects)
    return session.base_url, resolve_redirect(response.result)


def resolve_command(
    ctx: typer.Context,
    tenant: Optional[str] = _TENANT_OPTION,
    user: Optional[str] = _USER_OPTION,
    mode: Optional[str] = _MODE_OPTION,
) -> None:
    """Print the identity-provider URL a login would navigate to.

    Exits with code 4 when the tenant does not answer with a usable
    redirect (the account is not federated, or needs interactive input).

    Example::

        fedlogin resolve --tenant acme --user me@acme.com
        fedlogin --json resolve -t acme -u me@acme.com
    """
    import json

    from fedlogin.exit_codes import EXIT_NO_REDIRECT
    from fedlogin.output import OutputFormat

    _, profile = _resolve_profile(ctx, tenant, user, mode)
    try:
        base_url, resolution = asyncio.run(resolve_for(profile))
    except FedloginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if get_output().format == OutputFormat.JSON:
        print_data(
            json.dumps(
                {
                    "base_url": base_url,
                    "redirect_url": resolution.url,
                    "source": resolution.source,
                    "reason": resolution.reason,
                },
                indent=2,
            )
        )
    elif resolution.found:
        print_data(resolution.url)

    info(f"Identity service: {base_url}")
    if not resolution.found:
        error(f"No identity-provider redirect: {resolution.reason}")
        raise typer.Exit(code=EXIT_NO_REDIRECT)
    info(f"Redirect taken from {resolution.source}")
