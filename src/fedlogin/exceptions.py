"""Exception hierarchy for fedlogin.

All exceptions inherit from :class:`FedloginError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`fedlogin.exit_codes`.
The orchestrator catches ``FedloginError`` at the attempt boundary and
reports it through the log sink; the CLI entry point in
:func:`fedlogin.app.main` turns the reported error into an exit code, while
unexpected exceptions produce a crash log and exit with
:data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    FedloginError (exit 1)
    +-- InvalidUsageError        (exit 2)
    +-- AttemptInProgressError   (exit 2)
    +-- AuthenticationRejected   (exit 3)
    +-- ResourceApiError         (exit 5)
    +-- TransportError           (exit 6)
    +-- ProtocolError            (exit 7)
    +-- RedirectLoopExceeded     (exit 8)
    +-- CaptureTimeout           (exit 9)
    +-- BrowserError             (exit 10)
    +-- ConfigError              (exit 1)
"""

from __future__ import annotations

from fedlogin.exit_codes import (
    EXIT_AUTH_REJECTED,
    EXIT_BROWSER_ERROR,
    EXIT_CAPTURE_TIMEOUT,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PROTOCOL_ERROR,
    EXIT_REDIRECT_LOOP,
    EXIT_RESOURCE_API_ERROR,
    EXIT_TRANSPORT_ERROR,
)

RESOURCE_BODY_LIMIT = 500
"""Maximum number of response-body characters kept on a :class:`ResourceApiError`."""


class FedloginError(Exception):
    """Base exception for all fedlogin errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`fedlogin.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(FedloginError):
    """Raised for invalid CLI arguments or empty tenant/user/mode inputs."""

    exit_code = EXIT_INVALID_USAGE


class AttemptInProgressError(FedloginError):
    """Raised when a new attempt is started while another is still in flight."""

    exit_code = EXIT_INVALID_USAGE


class TransportError(FedloginError):
    """Raised on network failures or non-2xx answers from the identity service.

    Args:
        message: Description of the failure.
        status_code: HTTP status when the server answered, ``None`` for
            connection-level failures.
    """

    exit_code = EXIT_TRANSPORT_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProtocolError(FedloginError):
    """Raised when a response body is not the JSON shape we expect.

    The raw body is kept so the log sink can show exactly what the
    service sent back.
    """

    exit_code = EXIT_PROTOCOL_ERROR

    def __init__(self, message: str, raw_body: str = ""):
        super().__init__(message)
        self.raw_body = raw_body


class RedirectLoopExceeded(FedloginError):
    """Raised when pod routing keeps moving after ``max_pod_redirects`` calls."""

    exit_code = EXIT_REDIRECT_LOOP

    def __init__(self, attempts: int, last_pod: str):
        super().__init__(
            f"Pod routing did not stabilise after {attempts} StartAuthentication "
            f"calls (last hint: {last_pod})"
        )
        self.attempts = attempts
        self.last_pod = last_pod


class AuthenticationRejected(FedloginError):
    """The identity service refused the captured credential.

    This is an expected negative outcome, not a bug; ``message`` is the
    provider-supplied reason.
    """

    exit_code = EXIT_AUTH_REJECTED

    def __init__(self, message: str):
        super().__init__(message or "Authentication rejected")
        self.message = message


class ResourceApiError(FedloginError):
    """The resource API answered with a non-2xx status.

    The body is truncated to :data:`RESOURCE_BODY_LIMIT` characters so a
    large HTML error page never floods the log.
    """

    exit_code = EXIT_RESOURCE_API_ERROR

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body[:RESOURCE_BODY_LIMIT]
        super().__init__(f"HTTP {status_code}: {self.body}" if self.body else f"HTTP {status_code}")


class CaptureTimeout(FedloginError):
    """No credential was captured before the capture deadline passed."""

    exit_code = EXIT_CAPTURE_TIMEOUT


class BrowserError(FedloginError):
    """The browser collaborator could not be started or could not navigate."""

    exit_code = EXIT_BROWSER_ERROR


class ConfigError(FedloginError):
    """Raised for configuration problems (missing profiles, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
