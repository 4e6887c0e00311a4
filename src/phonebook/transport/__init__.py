"""Transports: the collaborators that actually execute book requests.

A :class:`~phonebook.book.Phonebook` builds a :class:`PreparedRequest` and
passes it to a transport's ``perform`` method. Shipped implementations:

    :class:`HttpxTransport` -- blocking, backed by :class:`httpx.Client`.
    :class:`AsyncHttpxTransport` -- returns an awaitable, backed by
        :class:`httpx.AsyncClient`.
    :class:`DryRunTransport` -- prints the request and sends nothing.

Any object with a compatible ``perform`` method satisfies :class:`Transport`.
"""

from phonebook.transport.async_transport import AsyncHttpxTransport
from phonebook.transport.base import (
    PreparedRequest,
    Transport,
    get_default_transport,
    reset_default_transport,
    set_default_transport,
)
from phonebook.transport.dry_run import DryRunTransport
from phonebook.transport.sync_transport import HttpxTransport

__all__ = [
    "AsyncHttpxTransport",
    "DryRunTransport",
    "HttpxTransport",
    "PreparedRequest",
    "Transport",
    "get_default_transport",
    "reset_default_transport",
    "set_default_transport",
]
