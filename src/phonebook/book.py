"""The request tree: books, chapters and routes.

A :class:`Phonebook` is one node of a tree that describes an HTTP API. Each
node contributes a URL fragment, default request data and default transport
options. Requests issued at any node merge those contributions from the
root down to the node, with the node nearest the call winning field by
field::

    book = Phonebook.open(url_fragment="/api", default_options={"headers": {"Accept": "application/json"}})
    book.add_chapter("users", url_fragment="/users", default_data={"per_page": 20})
    book.users.define("search", url_fragment="/search", method="GET")

    book.users.get()                    # GET /api/users, data {"per_page": 20}
    book.users.search({"q": "ada"})     # GET /api/users/search

Names are installed once. :meth:`Phonebook.add_chapter` and
:meth:`Phonebook.define` refuse any name that is already a chapter, a
route, a built-in method or a private ``_`` name, and report it by
returning ``False``.

In RESTful books (``restful=True``) every chapter also expects an
identifier placeholder after its fragment (``{id}`` below the root,
``{<name>Id}`` deeper down), placeholders are filled from the merged data,
``GET`` data goes to the query string and other methods send it as a JSON
body. See :mod:`phonebook.urls` for the URL rules.

Children hold only a weak reference to their parent. The parent owns its
children through its operations mapping, so a tree lives exactly as long as
someone holds its root.
"""

from __future__ import annotations

import functools
import json
import weakref
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, NamedTuple, Optional, Union

from phonebook import __version__
from phonebook.defaults import (
    Defaults,
    DefaultsLike,
    StaticDefaults,
    as_defaults,
    resolve_defaults,
)
from phonebook.output import debug
from phonebook.transport.base import PreparedRequest, Transport, get_default_transport
from phonebook.urls import finalize_url, join_fragments, nested_placeholder, placeholder_names

FIELD_KINDS = ("data", "options")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

VERB_METHODS: Mapping[str, str] = MappingProxyType(
    {
        "get": "GET",
        "post": "POST",
        "put": "PUT",
        "patch": "PATCH",
        "destroy": "DELETE",
        "delete": "DELETE",
    }
)
"""Verb helper name to HTTP method, as exposed on every node."""


@dataclass(frozen=True)
class Route:
    """A named request bound to a method, a URL fragment and its own defaults.

    Routes are values: they never change after :meth:`Phonebook.define` and
    hold no reference to the node they were installed on.
    """

    name: str
    method: str
    url_fragment: str = ""
    default_data: Defaults = field(default_factory=StaticDefaults)
    default_options: Defaults = field(default_factory=StaticDefaults)

    def merge(
        self,
        data: DefaultsLike = None,
        options: DefaultsLike = None,
    ) -> tuple[dict[str, Any], dict[str, Any]]:
        """Layer call-time *data* and *options* over this route's defaults."""
        return (
            {**self.default_data.resolve(), **resolve_defaults(data)},
            {**self.default_options.resolve(), **resolve_defaults(options)},
        )


class RouteInfo(NamedTuple):
    """One row of :meth:`Phonebook.iter_routes`."""

    path: str
    method: str
    url: str


Operation = Union["Phonebook", Route]


class Phonebook:
    """One node of a request tree.

    Args:
        url_fragment: Relative URL segment contributed by this node.
        default_data: Mapping, or zero-argument callable returning one, of
            default request data.
        default_options: Mapping, or zero-argument callable returning one,
            of default transport options (``headers``, ``timeout``, ...).
        restful: Enable RESTful URL and encoding conventions. Chapters
            inherit the flag of the node they are added to.
        transport: Collaborator that performs requests. Chapters use the
            nearest ancestor's transport; a root without one uses
            :func:`~phonebook.transport.get_default_transport`.
    """

    version = __version__

    def __init__(
        self,
        url_fragment: str = "",
        default_data: DefaultsLike = None,
        default_options: DefaultsLike = None,
        restful: bool = False,
        transport: Optional[Transport] = None,
    ) -> None:
        self._url_fragment = url_fragment or ""
        self._default_data = as_defaults(default_data)
        self._default_options = as_defaults(default_options)
        self._restful = bool(restful)
        self._transport = transport
        self._name: Optional[str] = None
        self._parent_ref: Optional[weakref.ReferenceType[Phonebook]] = None
        self._operations: dict[str, Operation] = {}

    @classmethod
    def open(
        cls,
        url_fragment: str = "",
        default_data: DefaultsLike = None,
        default_options: DefaultsLike = None,
        restful: bool = False,
        transport: Optional[Transport] = None,
    ) -> Phonebook:
        """Create a root book. Same arguments as the constructor."""
        return cls(
            url_fragment=url_fragment,
            default_data=default_data,
            default_options=default_options,
            restful=restful,
            transport=transport,
        )

    # ------------------------------------------------------------------ #
    # Attributes
    # ------------------------------------------------------------------ #

    @property
    def name(self) -> Optional[str]:
        """Key under which this node was added to its parent; ``None`` for a root."""
        return self._name

    @property
    def parent(self) -> Optional[Phonebook]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def url_fragment(self) -> str:
        return self._url_fragment

    @property
    def restful(self) -> bool:
        return self._restful

    @property
    def default_data(self) -> Defaults:
        return self._default_data

    @property
    def default_options(self) -> Defaults:
        return self._default_options

    @property
    def path(self) -> str:
        """Dotted chapter path from the root, ``""`` for the root itself."""
        names: list[str] = []
        node: Optional[Phonebook] = self
        while node is not None and node.parent is not None:
            names.append(node._name or "")
            node = node.parent
        return ".".join(reversed(names))

    @property
    def transport(self) -> Transport:
        node: Optional[Phonebook] = self
        while node is not None:
            if node._transport is not None:
                return node._transport
            node = node.parent
        return get_default_transport()

    @property
    def operations(self) -> Mapping[str, Operation]:
        """Read-only view of every chapter and route installed on this node."""
        return MappingProxyType(self._operations)

    @property
    def chapters(self) -> dict[str, Phonebook]:
        return {k: v for k, v in self._operations.items() if isinstance(v, Phonebook)}

    @property
    def routes(self) -> dict[str, Route]:
        return {k: v for k, v in self._operations.items() if isinstance(v, Route)}

    # ------------------------------------------------------------------ #
    # Tree construction
    # ------------------------------------------------------------------ #

    def add_chapter(
        self,
        name: str,
        url_fragment: str = "",
        default_data: DefaultsLike = None,
        default_options: DefaultsLike = None,
    ) -> bool:
        """Install a child node under *name*.

        The child shares this node's ``restful`` flag and is reachable as
        ``self.<name>`` and ``self[name]``.

        Returns:
            ``True`` when installed, ``False`` when *name* is already taken or
            a default is neither a mapping nor a callable. Nothing is changed
            in the latter cases.
        """
        if self._is_taken(name):
            debug(f"Chapter '{name}' not added: name already taken on {self!r}")
            return False
        try:
            data, options = as_defaults(default_data), as_defaults(default_options)
        except TypeError as exc:
            debug(f"Chapter '{name}' not added: {exc}")
            return False

        chapter = type(self)(
            url_fragment=url_fragment,
            default_data=data,
            default_options=options,
            restful=self._restful,
        )
        chapter._name = name
        chapter._parent_ref = weakref.ref(self)
        self._operations[name] = chapter
        return True

    def define(
        self,
        name: str,
        url_fragment: str = "",
        method: str = "GET",
        default_data: DefaultsLike = None,
        default_options: DefaultsLike = None,
    ) -> bool:
        """Install a custom route under *name*.

        Calling ``self.<name>(data, options)`` then issues *method* against
        *url_fragment* (relative to this node) with the route's defaults
        layered under the call-time values.

        Returns:
            ``True`` when installed, ``False`` when *name* is already taken or
            a default is neither a mapping nor a callable.
        """
        if self._is_taken(name):
            debug(f"Route '{name}' not defined: name already taken on {self!r}")
            return False
        try:
            data, options = as_defaults(default_data), as_defaults(default_options)
        except TypeError as exc:
            debug(f"Route '{name}' not defined: {exc}")
            return False

        self._operations[name] = Route(
            name=name,
            method=_method_name(method),
            url_fragment=url_fragment or "",
            default_data=data,
            default_options=options,
        )
        return True

    def _is_taken(self, name: str) -> bool:
        return (
            name.startswith("_")
            or name in self._operations
            or hasattr(type(self), name)
            or name in self.__dict__
        )

    # ------------------------------------------------------------------ #
    # Composition
    # ------------------------------------------------------------------ #

    def resolve_url(self) -> str:
        """Concatenate URL fragments from the root down to this node.

        RESTful chapters add their identifier placeholder after their own
        fragment.
        """
        parent = self.parent
        prefix = parent.resolve_url() if parent is not None else ""
        url = join_fragments(prefix, self._url_fragment)
        if self._restful and parent is not None:
            url += nested_placeholder(self._name, parent.is_root)
        return url

    def merge_field(self, kind: str, override: DefaultsLike = None) -> dict[str, Any]:
        """Merge one field kind from the root down to this node.

        Args:
            kind: ``"data"`` or ``"options"``.
            override: Call-time values, applied last. May be a mapping or a
                zero-argument callable.

        Returns:
            A new dict: ancestors' values, overridden by this node's
            defaults, overridden by *override*. The merge is shallow.

        Raises:
            ValueError: If *kind* is not a known field kind.
        """
        if kind not in FIELD_KINDS:
            raise ValueError(f"Unknown field kind {kind!r}; expected one of {FIELD_KINDS}")

        parent = self.parent
        merged = parent.merge_field(kind) if parent is not None else {}
        own = self._default_data if kind == "data" else self._default_options
        merged.update(own.resolve())
        merged.update(resolve_defaults(override))
        return merged

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def build_request(
        self,
        method: str,
        url_fragment: str = "",
        data: DefaultsLike = None,
        options: DefaultsLike = None,
    ) -> PreparedRequest:
        """Compute the request :meth:`request` would hand to the transport."""
        method = _method_name(method)
        merged_data = self.merge_field("data", data)
        merged_options = self.merge_field("options", options)
        template = self.resolve_url() + (url_fragment or "")
        if self._restful:
            empty = [
                n for n in placeholder_names(template)
                if merged_data.get(n) is None or merged_data.get(n) is False
            ]
            if empty:
                debug(f"Placeholders rendered empty: {', '.join(empty)}")
        url = finalize_url(template, merged_data, self._restful)

        prepared = PreparedRequest(
            method=method, url=url, data=merged_data, options=merged_options
        )
        if self._restful:
            if method == "GET":
                prepared.params = dict(merged_data)
            else:
                prepared.body = json.dumps(merged_data, default=str)
                prepared.content_type = JSON_CONTENT_TYPE
        return prepared

    def request(
        self,
        method: str,
        url_fragment: str = "",
        data: DefaultsLike = None,
        options: DefaultsLike = None,
    ) -> Any:
        """Build the request and pass it to the transport.

        Returns:
            Whatever the transport's ``perform`` returns, untouched.
        """
        prepared = self.build_request(method, url_fragment, data, options)
        debug(f"{prepared.method} {prepared.url}")
        return self.transport.perform(prepared)

    def get(self, url_fragment: str = "", data: DefaultsLike = None, options: DefaultsLike = None) -> Any:
        return self.request("GET", url_fragment, data, options)

    def post(self, url_fragment: str = "", data: DefaultsLike = None, options: DefaultsLike = None) -> Any:
        return self.request("POST", url_fragment, data, options)

    def put(self, url_fragment: str = "", data: DefaultsLike = None, options: DefaultsLike = None) -> Any:
        return self.request("PUT", url_fragment, data, options)

    def patch(self, url_fragment: str = "", data: DefaultsLike = None, options: DefaultsLike = None) -> Any:
        return self.request("PATCH", url_fragment, data, options)

    def destroy(self, url_fragment: str = "", data: DefaultsLike = None, options: DefaultsLike = None) -> Any:
        return self.request("DELETE", url_fragment, data, options)

    delete = destroy

    def dispatch(self, name: str, data: DefaultsLike = None, options: DefaultsLike = None) -> Any:
        """Invoke the route installed under *name*.

        Raises:
            KeyError: If nothing is installed under *name*.
            TypeError: If *name* is a chapter rather than a route.
        """
        operation = self._operations[name]
        if not isinstance(operation, Route):
            raise TypeError(f"'{name}' is a chapter, not a route")
        route_data, route_options = operation.merge(data, options)
        return self.request(operation.method, operation.url_fragment, route_data, route_options)

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #

    def iter_routes(self) -> Iterator[RouteInfo]:
        """Walk the tree depth-first, root first, in installation order.

        Each node yields one row with method ``*`` for its verb helpers,
        followed by one row per custom route. URLs are templates: RESTful
        placeholders are left in place.
        """
        base = self.resolve_url()
        yield RouteInfo(self.path, "*", base or "/")
        for name, operation in self._operations.items():
            if isinstance(operation, Route):
                path = f"{self.path}.{name}" if self.path else name
                url = join_fragments(base, operation.url_fragment)
                yield RouteInfo(path, operation.method, url or "/")
            else:
                yield from operation.iter_routes()

    # ------------------------------------------------------------------ #
    # Attribute-style access
    # ------------------------------------------------------------------ #

    def _bind(self, name: str, operation: Operation) -> Union[Phonebook, Callable[..., Any]]:
        if isinstance(operation, Route):
            return functools.partial(self.dispatch, name)
        return operation

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails; private names never map to operations.
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            operation = self._operations[name]
        except KeyError:
            raise AttributeError(
                f"{type(self).__name__} has no chapter or route named '{name}'"
            ) from None
        return self._bind(name, operation)

    def __getitem__(self, name: str) -> Union[Phonebook, Callable[..., Any]]:
        return self._bind(name, self._operations[name])

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._operations))

    def __repr__(self) -> str:
        label = self.path or "root"
        return f"<{type(self).__name__} {label} url={self.resolve_url()!r}>"


def _method_name(method: Any) -> str:
    """Normalise a method given as a string or an ``HTTPMethod`` member."""
    return str(getattr(method, "value", method)).upper()


def open(
    url_fragment: str = "",
    default_data: DefaultsLike = None,
    default_options: DefaultsLike = None,
    restful: bool = False,
    transport: Optional[Transport] = None,
) -> Phonebook:
    """Create a root :class:`Phonebook`."""
    return Phonebook.open(
        url_fragment=url_fragment,
        default_data=default_data,
        default_options=default_options,
        restful=restful,
        transport=transport,
    )
