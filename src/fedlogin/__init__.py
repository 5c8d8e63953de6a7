"""fedlogin -- federated sign-in to CyberArk Identity from the command line.

This package drives a browser through a federated (OIDC authorization-code
or SAML POST-binding) login against a CyberArk Identity tenant, captures
the credential the identity provider hands back, trades it for a session
token, and uses that token against the Privilege Cloud accounts API.

Typical workflow::

    fedlogin profile create acme --tenant acme --user me@acme.com
    fedlogin login                # opens a browser, prints accounts

Modules:
    app: Typer application factory and CLI entry point.
    orchestrator: The authentication attempt state machine.
    models: Pydantic models for wire payloads and configuration.
    session: Per-attempt session state and the captured-credential slot.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
