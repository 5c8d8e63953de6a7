"""Profile commands -- manage stored tenant/user pairings.

A profile saves the tenant, user, federation mode and capture strategy so
that ``fedlogin login`` can run without flags. Profiles hold no secrets.
"""

from __future__ import annotations

import json
from typing import Optional

import typer

from fedlogin.exceptions import FedloginError
from fedlogin.output import error, info, print_data, print_table, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("create")
def profile_create(
    name: str = typer.Argument(help="Profile name."),
    tenant: str = typer.Option(..., "--tenant", "-t", help="Tenant identifier."),
    user: str = typer.Option("", "--user", "-u", help="User name or e-mail."),
    mode: str = typer.Option("OIDC", "--mode", "-m", help="Federation mode: OIDC or SAML."),
    capture: str = typer.Option(
        "interception", "--capture", "-c", help="Capture strategy: interception or cookie-scan."
    ),
    make_default: bool = typer.Option(
        False, "--default", help="Make this the default profile."
    ),
) -> None:
    """Create or replace a profile.

    Example::

        fedlogin profile create acme --tenant acme --user me@acme.com --mode SAML
    """
    from fedlogin.config import (
        load_global_config,
        parse_capture,
        parse_mode,
        profile_exists,
        save_global_config,
        save_profile,
    )
    from fedlogin.models import Profile

    if not tenant.strip():
        error("Tenant must not be empty.")
        raise typer.Exit(code=2)
    try:
        profile = Profile(
            name=name,
            tenant=tenant.strip(),
            user=user.strip(),
            mode=parse_mode(mode),
            capture=parse_capture(capture),
        )
    except FedloginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    replaced = profile_exists(name)
    save_profile(profile)
    if make_default:
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)

    success(f"Profile '{name}' {'updated' if replaced else 'created'}.")
    if not profile.user:
        suggest(f"Add a user with: fedlogin profile create {name} --tenant {tenant} --user <name>")


@profile_app.command("list")
def profile_list() -> None:
    """List stored profiles.

    Example::

        fedlogin profile list
        fedlogin --json profile list
    """
    from fedlogin.config import list_profiles, load_global_config, load_profile

    names = list_profiles()
    if not names:
        info("No profiles found.")
        suggest("Create one with: fedlogin profile create <name> --tenant <tenant>")
        return

    default = load_global_config().default_profile
    rows: list[list[str]] = []
    for name in names:
        try:
            profile = load_profile(name)
        except FedloginError as exc:
            error(str(exc))
            continue
        rows.append(
            [
                name,
                profile.tenant,
                profile.user,
                profile.mode.value,
                profile.capture.value,
                "yes" if name == default else "",
            ]
        )
    print_table(["Name", "Tenant", "User", "Mode", "Capture", "Default"], rows, title="Profiles")


@profile_app.command("show")
def profile_show(
    name: Optional[str] = typer.Argument(None, help="Profile name (defaults to the active one)."),
) -> None:
    """Show a profile as JSON.

    Example::

        fedlogin profile show acme
    """
    from fedlogin.config import load_profile, resolve_config

    try:
        if name is None:
            _, profile = resolve_config()
            if profile is None:
                error("No active profile.")
                raise typer.Exit(code=2)
        else:
            profile = load_profile(name)
    except FedloginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    print_data(json.dumps(profile.model_dump(mode="json"), indent=2))


@profile_app.command("delete")
def profile_delete(
    name: str = typer.Argument(help="Profile name."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete a stored profile.

    Example::

        fedlogin profile delete acme --force
    """
    from fedlogin.config import delete_profile, load_global_config, save_global_config

    if not force and not typer.confirm(f"Delete profile '{name}'?"):
        info("Cancelled.")
        raise typer.Exit()

    try:
        delete_profile(name)
    except FedloginError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    success(f"Profile '{name}' deleted.")
