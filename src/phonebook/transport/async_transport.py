"""Non-blocking transport backed by :class:`httpx.AsyncClient`.

:meth:`AsyncHttpxTransport.perform` is a plain method that returns the
coroutine for the request without awaiting it. A book calling it therefore
hands back a pending handle immediately, and the caller decides when to
``await`` it::

    async with AsyncHttpxTransport(base_url="https://api.example.com") as transport:
        book = Phonebook.open(url_fragment="/v1", transport=transport)
        pending = book.users.get()
        response = await pending
"""

from __future__ import annotations

from collections.abc import Coroutine
from typing import Any, Optional

import httpx

from phonebook.exceptions import ConnectionError_
from phonebook.models import TransportConfig
from phonebook.output import debug
from phonebook.transport.base import PreparedRequest, build_httpx_kwargs


class AsyncHttpxTransport:
    """Asynchronous transport for book requests.

    Takes the same arguments as
    :class:`~phonebook.transport.sync_transport.HttpxTransport`, with
    ``client`` being an :class:`httpx.AsyncClient`. Must be closed with
    :meth:`aclose` or used as an async context manager when it owns its
    client.
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30,
        verify_ssl: bool = True,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._headers = dict(headers or {})
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: TransportConfig, **kwargs) -> AsyncHttpxTransport:
        return cls(
            base_url=config.base_url or "",
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            headers=config.headers,
            **kwargs,
        )

    async def __aenter__(self) -> AsyncHttpxTransport:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def perform(self, request: PreparedRequest) -> Coroutine[Any, Any, httpx.Response]:
        """Return an un-awaited coroutine that sends *request*."""
        return self._send(request)

    async def _send(self, request: PreparedRequest) -> httpx.Response:
        client = self._ensure_client()
        kwargs = build_httpx_kwargs(request)
        debug(f"Sending {request.method} {request.url}")
        try:
            return await client.request(**kwargs)
        except httpx.TransportError as exc:
            raise ConnectionError_(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                verify=self._verify_ssl,
                headers=self._headers,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client
