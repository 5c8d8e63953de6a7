"""Capture registry -- maps configured strategies to capture classes.

The :class:`CaptureRegistry` keeps a mapping from
:class:`~fedlogin.models.CaptureStrategy` values to concrete
:class:`~fedlogin.capture.base.CredentialCapture` classes and builds a
fresh instance per attempt. Call :func:`create_default_registry` to get a
registry with both built-in strategies.
"""

from __future__ import annotations

from typing import Callable, Optional

from fedlogin.capture.base import CredentialCapture
from fedlogin.exceptions import InvalidUsageError
from fedlogin.models import CaptureStrategy, ProviderConfig


class CaptureRegistry:
    """Registry and factory for credential capture strategies.

    Example::

        registry = CaptureRegistry()
        registry.register(CaptureStrategy.COOKIE_SCAN, CookieScanCapture)
        capture = registry.create(CaptureStrategy.COOKIE_SCAN, profile.provider)
    """

    def __init__(self) -> None:
        self._classes: dict[CaptureStrategy, type[CredentialCapture]] = {}

    def register(self, strategy: CaptureStrategy, cls: type[CredentialCapture]) -> None:
        """Register *cls* for *strategy*, replacing any earlier registration."""
        self._classes[strategy] = cls

    def create(
        self,
        strategy: CaptureStrategy,
        provider: ProviderConfig,
        log: Optional[Callable[[str], None]] = None,
    ) -> CredentialCapture:
        """Instantiate the capture class registered for *strategy*.

        Raises:
            InvalidUsageError: If nothing is registered for *strategy*.
        """
        cls = self._classes.get(strategy)
        if cls is None:
            available = ", ".join(self.list_strategies()) or "(none)"
            raise InvalidUsageError(
                f"No capture strategy registered for '{strategy.value}'. "
                f"Available strategies: {available}"
            )
        return cls(provider, log=log)

    def list_strategies(self) -> list[str]:
        return sorted(s.value for s in self._classes)


def create_default_registry() -> CaptureRegistry:
    """Return a :class:`CaptureRegistry` with ``interception`` and ``cookie_scan``."""
    from fedlogin.capture.cookie_scan import CookieScanCapture
    from fedlogin.capture.interception import InterceptionCapture

    registry = CaptureRegistry()
    registry.register(CaptureStrategy.INTERCEPTION, InterceptionCapture)
    registry.register(CaptureStrategy.COOKIE_SCAN, CookieScanCapture)
    return registry
