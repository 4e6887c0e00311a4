"""Blocking transport backed by :class:`httpx.Client`.

:class:`HttpxTransport` is the default collaborator behind every book. It
sends the prepared request as-is and returns the :class:`httpx.Response`
without looking at the status code; interpreting the answer is left to the
caller (see :mod:`phonebook.transport.response`).

Only network-level failures are translated, into
:class:`~phonebook.exceptions.ConnectionError_`, so that callers deal with a
single exception family.

See Also:
    :class:`~phonebook.transport.async_transport.AsyncHttpxTransport` for
    the non-blocking equivalent.
"""

from __future__ import annotations

from typing import Optional

import httpx

from phonebook.exceptions import ConnectionError_
from phonebook.models import TransportConfig
from phonebook.output import debug
from phonebook.transport.base import PreparedRequest, build_httpx_kwargs


class HttpxTransport:
    """Synchronous transport for book requests.

    The underlying client is created on first use (or on ``__enter__``) and
    is only closed by this object when it created it. A caller-supplied
    ``client`` stays under the caller's control.

    Args:
        base_url: Prefix for every relative request URL.
        timeout: Request timeout in seconds.
        verify_ssl: Verify TLS certificates.
        headers: Headers sent with every request, below per-request options.
        client: Pre-built :class:`httpx.Client` to use instead of creating
            one (handy with :class:`httpx.MockTransport` in tests).

    Example::

        with HttpxTransport(base_url="https://api.example.com") as transport:
            book = Phonebook.open(url_fragment="/v1", transport=transport)
            response = book.get("/status")
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30,
        verify_ssl: bool = True,
        headers: Optional[dict[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._headers = dict(headers or {})
        self._client = client
        self._owns_client = client is None

    @classmethod
    def from_config(cls, config: TransportConfig, **kwargs) -> HttpxTransport:
        return cls(
            base_url=config.base_url or "",
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            headers=config.headers,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> HttpxTransport:
        self._ensure_client()
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        if self._client is not None and self._owns_client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Transport protocol
    # ------------------------------------------------------------------ #

    def perform(self, request: PreparedRequest) -> httpx.Response:
        """Send *request* and return the raw response.

        Raises:
            ConnectionError_: On connection, timeout, protocol or other transport errors.
        """
        client = self._ensure_client()
        kwargs = build_httpx_kwargs(request)
        debug(f"Sending {request.method} {request.url}")
        try:
            return client.request(**kwargs)
        except httpx.TransportError as exc:
            raise ConnectionError_(
                f"{request.method} {request.url} failed: {exc}"
            ) from exc

    def _ensure_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self._base_url,
                timeout=self._timeout,
                verify=self._verify_ssl,
                headers=self._headers,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client
