"""URL fragment composition and placeholder substitution.

Every node in a book contributes a relative URL fragment. The helpers here
join those fragments, add the nested-resource placeholders used by RESTful
books, and fill placeholders from the merged request data.

A placeholder is a ``{name}`` token made of word characters. In a RESTful
book a chapter attached to the root expects ``{id}`` after its own
fragment, and a chapter attached below that expects ``{<name>Id}``::

    /api/users/{id}/posts/{postsId}

Filling that template with ``{"id": 7}`` and then normalising gives
``/api/users/7/posts``: the unfilled ``{postsId}`` collapses away together
with its trailing separator, which turns an item URL back into the
collection URL.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

SEPARATOR = "/"

PLACEHOLDER_PATTERN = re.compile(r"\{(\w*)\}")
_SEPARATOR_RUN = re.compile(r"/{2,}")


def collapse_separators(url: str) -> str:
    """Replace every run of ``/`` in *url* with a single ``/``."""
    return _SEPARATOR_RUN.sub(SEPARATOR, url)


def join_fragments(*fragments: str) -> str:
    """Concatenate fragments in order and collapse doubled separators.

    Example::

        >>> join_fragments("/1/", "/2", "3")
        '/1/2/3'

    Note that fragments are concatenated verbatim: ``"/1"`` followed by
    ``"2"`` gives ``"/12"``.
    """
    return collapse_separators("".join(fragment or "" for fragment in fragments))


def nested_placeholder(name: str | None, parent_is_root: bool) -> str:
    """Return the identifier segment a RESTful chapter appends to its URL."""
    if parent_is_root or not name:
        return "/{id}"
    return "/{" + name + "Id}"


def substitute_placeholders(url: str, data: Mapping[str, Any]) -> str:
    """Fill ``{name}`` tokens in *url* from *data*.

    Tokens are replaced left to right. After each replacement the scan
    resumes just past the inserted value, so a value that itself looks like
    a placeholder is left alone. Missing keys, ``None`` and ``False`` become
    the empty string, ``True`` becomes ``"true"`` and anything else is
    rendered with ``str``.
    """
    position = 0
    while True:
        match = PLACEHOLDER_PATTERN.search(url, position)
        if match is None:
            return url
        value = data.get(match.group(1))
        replacement = _render(value)
        url = url[: match.start()] + replacement + url[match.end():]
        position = match.start() + len(replacement)


def _render(value: Any) -> str:
    if value is None or value is False:
        return ""
    if value is True:
        return "true"
    return str(value)


def placeholder_names(url: str) -> list[str]:
    """Names of the placeholders in *url*, in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(url)


def finalize_url(url: str, data: Mapping[str, Any], restful: bool) -> str:
    """Produce the request URL from a composed template.

    RESTful books substitute placeholders, collapse separators and drop one
    trailing ``/``. Other books only collapse separators; their placeholders
    are passed through untouched.
    """
    if not restful:
        return collapse_separators(url)
    url = collapse_separators(substitute_placeholders(url, data))
    if url.endswith(SEPARATOR):
        url = url[:-1]
    return url
