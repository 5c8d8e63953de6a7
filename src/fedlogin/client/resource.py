"""Client for the Privilege Cloud accounts API."""

from __future__ import annotations

from typing import Optional

import httpx

from fedlogin.client.base import BaseClient, LogFn
from fedlogin.exceptions import InvalidUsageError, ResourceApiError
from fedlogin.models import Account, AccountsResponse, ProviderConfig, RequestConfig


def accounts_url(subdomain: str, provider: ProviderConfig) -> str:
    """Build ``https://{subdomain}.{resource_domain}{resource_path}/API/Accounts``."""
    prefix = provider.resource_path.rstrip("/")
    return f"https://{subdomain}.{provider.resource_domain}{prefix}/API/Accounts"


class ResourceClient(BaseClient):
    """Fetches accounts with a bearer token.

    Args:
        provider: Resource domain, path prefix and page size.
        request: Timeout and TLS settings.
        transport: Optional transport override for tests.
        log: Trace sink.
        cookies: Session cookies sent alongside the bearer token.
    """

    def __init__(
        self,
        provider: Optional[ProviderConfig] = None,
        request: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        log: Optional[LogFn] = None,
        cookies: Optional[httpx.Cookies] = None,
    ) -> None:
        super().__init__(request=request, transport=transport, log=log, cookies=cookies)
        self._provider = provider or ProviderConfig()

    async def fetch_accounts(self, subdomain: str, token: str) -> list[Account]:
        """GET the first page of accounts visible to *token*.

        Accounts are returned in the order the API lists them.

        Raises:
            InvalidUsageError: If *subdomain* or *token* is empty.
            TransportError: On network failure.
            ResourceApiError: On a non-2xx status, with the body truncated.
            ProtocolError: If a 2xx body is not an accounts object.
        """
        if not subdomain:
            raise InvalidUsageError("Resource subdomain must not be empty")
        if not token:
            raise InvalidUsageError("Bearer token must not be empty")

        url = accounts_url(subdomain, self._provider)
        self._log(f"GET URL: {url}?limit={self._provider.accounts_limit}")
        response = await self._send(
            "GET",
            url,
            headers={"Authorization": f"Bearer {token}"},
            params={"limit": self._provider.accounts_limit},
        )
        if not 200 <= response.status_code < 300:
            raise ResourceApiError(response.status_code, response.text)
        parsed = self._parse(response, AccountsResponse)
        return list(parsed.value or [])
