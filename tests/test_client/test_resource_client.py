"""Tests for fedlogin.client.resource -- the accounts API."""

from __future__ import annotations

import httpx
import pytest

from fedlogin.client.resource import ResourceClient, accounts_url
from fedlogin.exceptions import InvalidUsageError, RESOURCE_BODY_LIMIT, ResourceApiError
from fedlogin.models import ProviderConfig


class TestAccountsUrl:
    def test_default_layout(self) -> None:
        assert (
            accounts_url("acme", ProviderConfig())
            == "https://acme.privilegecloud.cyberark.cloud/PasswordVault/API/Accounts"
        )

    def test_custom_prefix(self) -> None:
        provider = ProviderConfig(resource_domain="vault.example.com", resource_path="/")
        assert accounts_url("x", provider) == "https://x.vault.example.com/API/Accounts"


class TestFetchAccounts:
    @pytest.mark.asyncio
    async def test_bearer_header_and_order(self, mock_transport, respond) -> None:
        transport = mock_transport(
            lambda req: respond(
                200,
                {
                    "value": [
                        {"Name": "b", "UserName": "root", "Address": "10.0.0.2", "PlatformID": "Unix"},
                        {"Name": "a", "UserName": "admin", "Address": "10.0.0.1", "PlatformID": "Win"},
                    ],
                    "count": 2,
                },
            )
        )
        async with ResourceClient(transport=transport) as client:
            accounts = await client.fetch_accounts("acme", "tok-1")

        (request,) = transport.calls
        assert request.headers["Authorization"] == "Bearer tok-1"
        assert request.url.params["limit"] == "10"
        assert request.url.host == "acme.privilegecloud.cyberark.cloud"
        assert [a.name for a in accounts] == ["b", "a"]
        assert accounts[0].platform_id == "Unix"

    @pytest.mark.asyncio
    async def test_missing_value_is_empty_list(self, mock_transport, respond) -> None:
        transport = mock_transport(lambda req: respond(200, {"value": None}))
        async with ResourceClient(transport=transport) as client:
            assert await client.fetch_accounts("acme", "tok") == []

    @pytest.mark.asyncio
    async def test_partial_account_fields(self, mock_transport, respond) -> None:
        transport = mock_transport(lambda req: respond(200, {"value": [{"Name": "only-name"}]}))
        async with ResourceClient(transport=transport) as client:
            (account,) = await client.fetch_accounts("acme", "tok")
        assert account.username is None

    @pytest.mark.asyncio
    async def test_error_body_truncated(self, mock_transport) -> None:
        transport = mock_transport(lambda req: httpx.Response(401, text="x" * 2000))
        async with ResourceClient(transport=transport) as client:
            with pytest.raises(ResourceApiError) as exc_info:
                await client.fetch_accounts("acme", "tok")
        assert exc_info.value.status_code == 401
        assert len(exc_info.value.body) == RESOURCE_BODY_LIMIT

    @pytest.mark.asyncio
    async def test_empty_token_rejected(self, mock_transport, respond) -> None:
        transport = mock_transport(lambda req: respond(200, {"value": []}))
        async with ResourceClient(transport=transport) as client:
            with pytest.raises(InvalidUsageError):
                await client.fetch_accounts("acme", "")
        assert transport.calls == []
