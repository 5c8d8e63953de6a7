"""Tests for fedlogin.flow.exchange -- AdvanceAuthentication outcomes."""

from __future__ import annotations

import json

import pytest

from fedlogin.client.identity import IdentityClient
from fedlogin.exceptions import AuthenticationRejected, ProtocolError
from fedlogin.flow.exchange import exchange_credential
from fedlogin.session import CapturedCredential, CredentialKind

BASE = "https://acme.id.cyberark.cloud"


class TestExchangeCredential:
    @pytest.mark.asyncio
    async def test_code_exchange_returns_token(self, mock_transport, respond) -> None:
        transport = mock_transport(
            lambda req: respond(200, {"success": True, "Result": {"Token": "tok-123", "PodFqdn": None}})
        )
        credential = CapturedCredential(CredentialKind.AUTHORIZATION_CODE, "abc")
        async with IdentityClient(transport=transport) as client:
            result = await exchange_credential(client, BASE, credential)

        assert result.token == "tok-123"
        assert result.pod_fqdn is None
        (request,) = transport.calls
        assert request.url.path == "/Security/AdvanceAuthentication"
        assert json.loads(request.content) == {"Code": "abc"}

    @pytest.mark.asyncio
    async def test_saml_exchange_body(self, mock_transport, respond) -> None:
        transport = mock_transport(
            lambda req: respond(
                200, {"success": True, "Result": {"Token": "t", "PodFqdn": "pod9.id.cyberark.cloud"}}
            )
        )
        credential = CapturedCredential(CredentialKind.SAML_ASSERTION, "PHNhbWw+")
        async with IdentityClient(transport=transport) as client:
            result = await exchange_credential(client, BASE, credential)

        assert json.loads(transport.calls[0].content) == {"SAMLResponse": "PHNhbWw+"}
        assert result.pod_fqdn == "pod9.id.cyberark.cloud"

    @pytest.mark.asyncio
    async def test_rejection_carries_message(self, mock_transport, respond) -> None:
        transport = mock_transport(lambda req: respond(200, {"success": False, "Message": "Invalid code"}))
        credential = CapturedCredential(CredentialKind.AUTHORIZATION_CODE, "bad")
        async with IdentityClient(transport=transport) as client:
            with pytest.raises(AuthenticationRejected) as exc_info:
                await exchange_credential(client, BASE, credential)

        assert exc_info.value.message == "Invalid code"
        assert exc_info.value.exit_code == 3
        assert len(transport.calls) == 1

    @pytest.mark.asyncio
    async def test_success_without_token_is_protocol_error(self, mock_transport, respond) -> None:
        transport = mock_transport(lambda req: respond(200, {"success": True, "Result": {}}))
        credential = CapturedCredential(CredentialKind.AUTHORIZATION_CODE, "abc")
        async with IdentityClient(transport=transport) as client:
            with pytest.raises(ProtocolError):
                await exchange_credential(client, BASE, credential)

    @pytest.mark.asyncio
    async def test_bearer_token_is_not_exchanged(self, mock_transport, respond) -> None:
        transport = mock_transport(lambda req: respond(200, {}))
        credential = CapturedCredential(CredentialKind.BEARER_TOKEN, "tok")
        async with IdentityClient(transport=transport) as client:
            with pytest.raises(ValueError):
                await exchange_credential(client, BASE, credential)
        assert transport.calls == []
