"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~fedlogin.exceptions.FedloginError` subclass.
Shell wrappers can inspect the exit code to tell a rejected login apart
from a network outage without parsing stderr.

Example::

    $ fedlogin login --tenant acme --user me@acme.com
    $ echo $?
    3   # EXIT_AUTH_REJECTED -- the identity service said no
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_REJECTED = 3
"""The identity service rejected the captured credential."""

EXIT_NO_REDIRECT = 4
"""StartAuthentication did not yield a usable identity-provider redirect."""

EXIT_RESOURCE_API_ERROR = 5
"""The resource API answered with a non-2xx status."""

EXIT_TRANSPORT_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused, non-2xx)."""

EXIT_PROTOCOL_ERROR = 7
"""A response body could not be parsed into the expected shape."""

EXIT_REDIRECT_LOOP = 8
"""Pod routing did not stabilise within the configured bound."""

EXIT_CAPTURE_TIMEOUT = 9
"""No credential was captured from the browser before the deadline."""

EXIT_BROWSER_ERROR = 10
"""The browser collaborator failed to start or navigate."""
