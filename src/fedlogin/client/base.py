"""Shared plumbing for the identity and resource clients.

:class:`BaseClient` owns an :class:`httpx.AsyncClient`, maps network
failures to :class:`~fedlogin.exceptions.TransportError`, and decodes JSON
bodies into Pydantic models, raising
:class:`~fedlogin.exceptions.ProtocolError` with the raw body when the
payload does not fit. Subclasses decide what a non-2xx status means.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from fedlogin.exceptions import ProtocolError, TransportError
from fedlogin.models import RequestConfig
from fedlogin.output import get_output

ModelT = TypeVar("ModelT", bound=BaseModel)

LogFn = Callable[[str], None]


def _default_log(message: str) -> None:
    get_output().debug(message)


class BaseClient:
    """Async context manager around :class:`httpx.AsyncClient`.

    Args:
        request: Timeout and TLS settings.
        transport: Optional transport override, used by tests to plug in
            :class:`httpx.MockTransport`.
        log: Sink for request/response trace lines. Defaults to
            :func:`fedlogin.output.debug`.
        cookies: Initial cookie jar; httpx sends each cookie only to
            hosts its domain matches.
    """

    def __init__(
        self,
        request: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        log: Optional[LogFn] = None,
        cookies: Optional[httpx.Cookies] = None,
    ) -> None:
        self._request = request or RequestConfig()
        self._transport = transport
        self._log = log or _default_log
        self._cookies = cookies
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> BaseClient:
        self._client = httpx.AsyncClient(
            timeout=self._request.timeout,
            verify=self._request.verify_ssl,
            transport=self._transport,
            headers={"Accept": "application/json"},
            cookies=self._cookies,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def add_cookies(self, cookies: httpx.Cookies) -> None:
        """Merge *cookies* into the jar used for the remaining requests."""
        assert self._client is not None, "Client not initialised -- use as async context manager"
        self._client.cookies.update(cookies)

    async def _send(
        self,
        method: str,
        url: str,
        *,
        json_body: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        """Issue one request; connection-level failures become :class:`TransportError`."""
        assert self._client is not None, "Client not initialised -- use as async context manager"
        try:
            return await self._client.request(
                method, url, json=json_body, headers=headers, params=params
            )
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {url} failed: {exc}") from exc

    @staticmethod
    def _parse(response: httpx.Response, model: type[ModelT]) -> ModelT:
        """Decode *response* as JSON into *model*.

        Raises:
            ProtocolError: When the body is not JSON, not an object, or does
                not validate. ``raw_body`` holds the text as received.
        """
        raw = response.text
        try:
            data = response.json()
        except ValueError as exc:
            raise ProtocolError(f"Response is not valid JSON: {exc}", raw_body=raw) from exc
        if not isinstance(data, dict):
            raise ProtocolError(
                f"Expected a JSON object, got {type(data).__name__}", raw_body=raw
            )
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ProtocolError(
                f"Unexpected {model.__name__} shape: {exc.error_count()} validation error(s)",
                raw_body=raw,
            ) from exc
