"""Transport contract shared by the request tree and the HTTP clients.

A :class:`~phonebook.book.Phonebook` only computes *what* to send. The
result of that computation is a :class:`PreparedRequest`, which is handed to
a :class:`Transport`; the transport's return value travels back to the
caller untouched. This module defines both halves of that hand-off plus the
process-wide default transport used by books that were not given one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from phonebook.output import debug

# Option keys forwarded to httpx. Anything else in the merged options is
# reported once per request and dropped.
HTTPX_OPTION_KEYS = ("headers", "cookies", "timeout", "follow_redirects")

# Methods whose generic data travels in the query string rather than the body.
QUERY_METHODS = ("GET", "HEAD")


@dataclass
class PreparedRequest:
    """A fully merged request, ready for a transport.

    Attributes:
        method: Upper-case HTTP method.
        url: Relative URL with placeholders already filled in (RESTful
            books) and separators normalised.
        data: The merged data mapping, always populated.
        params: Query parameters. Set by RESTful books for ``GET``.
        body: Serialised JSON text. Set by RESTful books for every method
            other than ``GET``.
        content_type: Content type for :attr:`body`, if any.
        options: Merged transport options (``headers``, ``timeout``, ...).
    """

    method: str
    url: str
    data: dict[str, Any] = field(default_factory=dict)
    params: Optional[dict[str, Any]] = None
    body: Optional[str] = None
    content_type: Optional[str] = None
    options: dict[str, Any] = field(default_factory=dict)

    def as_config(self) -> dict[str, Any]:
        """Flatten into a single configuration mapping.

        Options come first so that ``url``, ``method`` and ``data`` always
        reflect the computed request. ``data`` is the JSON body when one was
        produced and the merged mapping otherwise.
        """
        config = dict(self.options)
        config["url"] = self.url
        config["method"] = self.method
        config["data"] = self.body if self.body is not None else self.data
        if self.content_type is not None:
            config["content_type"] = self.content_type
        return config


@runtime_checkable
class Transport(Protocol):
    """Anything able to perform a :class:`PreparedRequest`.

    The returned handle is opaque to the book: an ``httpx.Response``, an
    awaitable, or whatever a test double chooses to return.
    """

    def perform(self, request: PreparedRequest) -> Any: ...


def build_httpx_kwargs(request: PreparedRequest) -> dict[str, Any]:
    """Translate a prepared request into keyword arguments for ``httpx``.

    Encoding rules:

    * explicit :attr:`~PreparedRequest.params` go to the query string and
      explicit :attr:`~PreparedRequest.body` is sent verbatim;
    * otherwise the generic data mapping goes to the query string for
      ``GET``/``HEAD`` and is form-encoded for every other method.
    """
    kwargs: dict[str, Any] = {"method": request.method, "url": request.url}

    for key, value in request.options.items():
        if key in HTTPX_OPTION_KEYS:
            kwargs[key] = value
        else:
            debug(f"Ignoring unsupported transport option '{key}'")

    if request.content_type is not None:
        headers = dict(kwargs.get("headers") or {})
        if not any(name.lower() == "content-type" for name in headers):
            headers["Content-Type"] = request.content_type
        kwargs["headers"] = headers

    if request.params is not None:
        kwargs["params"] = request.params
    if request.body is not None:
        kwargs["content"] = request.body
    elif request.params is None and request.data:
        if request.method.upper() in QUERY_METHODS:
            kwargs["params"] = request.data
        else:
            kwargs["data"] = request.data

    return kwargs


# ------------------------------------------------------------------ #
# Process-wide default transport
# ------------------------------------------------------------------ #

_default_transport: Optional[Transport] = None


def get_default_transport() -> Transport:
    """Return the default transport, creating an ``HttpxTransport`` lazily."""
    global _default_transport
    if _default_transport is None:
        from phonebook.transport.sync_transport import HttpxTransport

        _default_transport = HttpxTransport()
    return _default_transport


def set_default_transport(transport: Transport) -> None:
    global _default_transport
    _default_transport = transport


def reset_default_transport() -> None:
    """Forget the default transport, closing it when it supports closing."""
    global _default_transport
    close = getattr(_default_transport, "close", None)
    if callable(close):
        close()
    _default_transport = None
