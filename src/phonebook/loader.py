"""Build books from declarative JSON or YAML definitions.

A book file describes a root and, recursively, its chapters and routes::

    url: /api
    restful: true
    options:
      headers: {Accept: application/json}
    chapters:
      - name: users
        url: /users
        routes:
          - {name: search, url: /search, method: GET}

Public functions:

* :func:`load_definition` -- read a raw mapping from a file, URL or stdin.
* :func:`parse_definition` -- validate it into a
  :class:`~phonebook.models.BookDefinition`.
* :func:`build_book` -- turn a definition into a live
  :class:`~phonebook.book.Phonebook`.
* :func:`load_book` -- all three in one call.

Duplicate names inside a definition are not errors: the first entry wins,
exactly as with :meth:`~phonebook.book.Phonebook.add_chapter`, and each
refused entry is reported as a warning.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Optional

import httpx
import yaml
from pydantic import ValidationError

from phonebook.book import Phonebook
from phonebook.exceptions import BookParseError
from phonebook.models import BookDefinition, ChapterDefinition, RouteDefinition
from phonebook.output import warning
from phonebook.transport.base import Transport


def load_definition(source: str) -> dict[str, Any]:
    """Load a raw book definition from a URL, a file path, or ``-`` (stdin).

    Raises:
        BookParseError: If the source cannot be read or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    if source.startswith(("http://", "https://")):
        return _load_from_url(source)
    return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    content = sys.stdin.read()
    if not content.strip():
        raise BookParseError("No input received from stdin")
    return _parse_content(content)


def _load_from_url(url: str) -> dict[str, Any]:
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise BookParseError(
            f"HTTP {exc.response.status_code} fetching book from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise BookParseError(f"Failed to fetch book from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = "json" if "json" in content_type else "yaml" if "yaml" in content_type else ""
    return _parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.is_file():
        raise BookParseError(f"Book file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise BookParseError(f"Failed to read book file {path}: {exc}") from exc
    if not content.strip():
        raise BookParseError(f"Book file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = "json" if suffix == ".json" else "yaml" if suffix in (".yaml", ".yml") else ""
    return _parse_content(content, hint=hint)


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse *content* as JSON, then YAML, unless *hint* pins one format."""
    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise BookParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise BookParseError(f"Failed to parse book as JSON or YAML: {exc}") from exc
    return _require_mapping(result)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        kind = type(result).__name__ if result is not None else "empty document"
        raise BookParseError(f"Book must be a JSON/YAML object (got {kind})")
    return result


def parse_definition(raw: dict[str, Any]) -> BookDefinition:
    """Validate a raw mapping into a :class:`BookDefinition`.

    Raises:
        BookParseError: If the mapping does not match the book schema.
    """
    try:
        return BookDefinition.model_validate(raw)
    except ValidationError as exc:
        raise BookParseError(f"Invalid book definition: {exc}") from exc


def build_book(
    definition: BookDefinition,
    transport: Optional[Transport] = None,
) -> Phonebook:
    """Create a root book and install every chapter and route it declares."""
    book = Phonebook.open(
        url_fragment=definition.url_fragment,
        default_data=definition.default_data,
        default_options=definition.default_options,
        restful=definition.restful,
        transport=transport,
    )
    _install(book, definition.chapters, definition.routes)
    return book


def _install(
    node: Phonebook,
    chapters: list[ChapterDefinition],
    routes: list[RouteDefinition],
) -> None:
    for chapter in chapters:
        added = node.add_chapter(
            chapter.name,
            url_fragment=chapter.url_fragment,
            default_data=chapter.default_data,
            default_options=chapter.default_options,
        )
        if not added:
            warning(f"Skipping chapter '{_qualified(node, chapter.name)}': name already taken")
            continue
        _install(node.chapters[chapter.name], chapter.chapters, chapter.routes)

    for route in routes:
        defined = node.define(
            route.name,
            url_fragment=route.url_fragment,
            method=route.method,
            default_data=route.default_data,
            default_options=route.default_options,
        )
        if not defined:
            warning(f"Skipping route '{_qualified(node, route.name)}': name already taken")


def _qualified(node: Phonebook, name: str) -> str:
    return f"{node.path}.{name}" if node.path else name


def load_book(source: str, transport: Optional[Transport] = None) -> Phonebook:
    """Load, validate and build a book in one step."""
    return build_book(parse_definition(load_definition(source)), transport=transport)
