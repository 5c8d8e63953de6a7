"""HTTP clients for fedlogin.

Both clients wrap :class:`httpx.AsyncClient`, map network failures to
:class:`~fedlogin.exceptions.TransportError`, and decode bodies into the
Pydantic wire models of :mod:`fedlogin.models`.

Classes:
    :class:`IdentityClient` -- StartAuthentication / AdvanceAuthentication.
    :class:`ResourceClient` -- the Privilege Cloud accounts API.

Example::

    from fedlogin.client import IdentityClient

    async with IdentityClient() as client:
        resp = await client.start_authentication(base_url, "me@acme.com")
"""

from fedlogin.client.identity import IdentityClient
from fedlogin.client.resource import ResourceClient

__all__ = ["IdentityClient", "ResourceClient"]
