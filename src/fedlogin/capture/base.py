"""Abstract base class for credential capture strategies.

A capture strategy watches the browser on behalf of one attempt and puts
at most one :class:`~fedlogin.session.CapturedCredential` into the
session's :class:`~fedlogin.session.CaptureSlot`. The orchestrator only
knows this interface; which strategy runs is a configuration choice.

To add a strategy, subclass :class:`CredentialCapture`, set
:attr:`~CredentialCapture.strategy`, implement
:meth:`~CredentialCapture.attach`, and register the class with a
:class:`~fedlogin.capture.registry.CaptureRegistry`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional
from urllib.parse import parse_qsl

from fedlogin.browser.base import AttemptSubscription, Browser
from fedlogin.models import CaptureStrategy, ProviderConfig
from fedlogin.output import debug
from fedlogin.session import CapturedCredential, Session


def find_parameter(encoded: str, key: str) -> Optional[str]:
    """Return the URL-decoded value of *key* in a query string or form body.

    Key comparison is case-insensitive and the first match wins. Malformed
    pairs are skipped rather than raising.
    """
    if not encoded:
        return None
    wanted = key.lower()
    for name, value in parse_qsl(encoded.lstrip("?"), keep_blank_values=True):
        if name.lower() == wanted:
            return value
    return None


class CredentialCapture(ABC):
    """Lifts a federated credential out of browser events.

    Args:
        provider: Domains and callback paths of the identity provider.
        log: Sink for human-readable trace lines (the attempt log).
    """

    def __init__(
        self,
        provider: ProviderConfig,
        log: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.provider = provider
        self._log = log or debug

    @property
    @abstractmethod
    def strategy(self) -> CaptureStrategy:
        """The :class:`~fedlogin.models.CaptureStrategy` this class implements."""
        ...

    @abstractmethod
    def attach(self, subscription: AttemptSubscription, session: Session) -> None:
        """Register the handlers this strategy needs on *subscription*.

        Handlers must write into ``session.slot`` and must do nothing once
        the slot is filled.
        """
        ...

    def supports(self, browser: Browser) -> bool:
        """Whether *browser* can feed this strategy. Defaults to ``True``."""
        return True

    def _offer(self, session: Session, credential: CapturedCredential) -> bool:
        accepted = session.slot.offer(credential)
        if not accepted:
            self._log(f"Ignoring extra {credential.kind.value}: credential already captured")
        return accepted
