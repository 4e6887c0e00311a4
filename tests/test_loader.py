"""Tests for phonebook.loader -- book definitions from JSON and YAML."""

from __future__ import annotations

import io
import json
from pathlib import Path

import httpx
import pytest

from phonebook.book import Phonebook
from phonebook.exceptions import BookParseError
from phonebook.loader import build_book, load_book, load_definition, parse_definition
from phonebook.models import BookDefinition, HTTPMethod
from phonebook.output import OutputManager, set_output


BOOK_YAML = """
url: /api
restful: true
data:
  shared: book
options:
  headers:
    Accept: application/json
chapters:
  - name: users
    url: /users
    data:
      shared: users
    chapters:
      - name: posts
        url: /posts
    routes:
      - name: search
        url: /search
        type: get
        data:
          limit: 10
routes:
  - name: health
    url: /health
"""


# ---------------------------------------------------------------------------
# Loading raw definitions
# ---------------------------------------------------------------------------


class TestLoadDefinition:
    def test_yaml_file(self, book_writer) -> None:
        raw = load_definition(str(book_writer(BOOK_YAML)))
        assert raw["url"] == "/api"
        assert raw["chapters"][0]["name"] == "users"

    def test_json_file(self, book_writer) -> None:
        path = book_writer(json.dumps({"url": "/v1"}), name="book.json")
        assert load_definition(str(path)) == {"url": "/v1"}

    def test_unknown_extension_detected_by_content(self, book_writer) -> None:
        path = book_writer("url: /v2\n", name="book.txt")
        assert load_definition(str(path)) == {"url": "/v2"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(BookParseError, match="not found"):
            load_definition(str(tmp_path / "nope.yaml"))

    def test_empty_file(self, book_writer) -> None:
        with pytest.raises(BookParseError, match="empty"):
            load_definition(str(book_writer("   \n")))

    def test_invalid_json(self, book_writer) -> None:
        with pytest.raises(BookParseError, match="Invalid JSON"):
            load_definition(str(book_writer("{oops", name="book.json")))

    def test_non_mapping_document(self, book_writer) -> None:
        with pytest.raises(BookParseError, match="must be a JSON/YAML object"):
            load_definition(str(book_writer("- a\n- b\n")))

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.stdin", io.StringIO('{"url": "/stdin"}'))
        assert load_definition("-") == {"url": "/stdin"}

    def test_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_get(url: str, **kwargs) -> httpx.Response:
            return httpx.Response(
                200,
                text="url: /remote\n",
                headers={"content-type": "application/yaml"},
                request=httpx.Request("GET", url),
            )

        monkeypatch.setattr("phonebook.loader.httpx.get", fake_get)
        assert load_definition("https://example.com/book.yaml") == {"url": "/remote"}

    def test_url_http_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_get(url: str, **kwargs) -> httpx.Response:
            return httpx.Response(404, request=httpx.Request("GET", url))

        monkeypatch.setattr("phonebook.loader.httpx.get", fake_get)
        with pytest.raises(BookParseError, match="HTTP 404"):
            load_definition("https://example.com/book.yaml")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestParseDefinition:
    def test_short_and_long_keys(self) -> None:
        short = parse_definition({"url": "/a", "data": {"x": 1}, "options": {"y": 2}})
        long = parse_definition(
            {"url_fragment": "/a", "default_data": {"x": 1}, "default_options": {"y": 2}}
        )
        assert short == long

    def test_route_method_normalised(self) -> None:
        definition = parse_definition({"routes": [{"name": "r", "type": "post"}]})
        assert definition.routes[0].method is HTTPMethod.POST

    def test_route_method_defaults_to_get(self) -> None:
        definition = parse_definition({"routes": [{"name": "r"}]})
        assert definition.routes[0].method is HTTPMethod.GET

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(BookParseError, match="Invalid book definition"):
            parse_definition({"urll": "/typo"})

    def test_chapter_without_name_rejected(self) -> None:
        with pytest.raises(BookParseError):
            parse_definition({"chapters": [{"url": "/users"}]})


# ---------------------------------------------------------------------------
# Building
# ---------------------------------------------------------------------------


class TestBuildBook:
    def test_builds_full_tree(self, book_writer, recorder) -> None:
        book = load_book(str(book_writer(BOOK_YAML)), transport=recorder)

        assert isinstance(book, Phonebook)
        assert book.restful is True
        assert book.users.posts.resolve_url() == "/api/users/{id}/posts/{postsId}"

        result = book.users.search({"q": "ada"})
        assert result.url == "/api/users/search"
        assert result.data == {"shared": "users", "limit": 10, "q": "ada"}
        assert result.options == {"headers": {"Accept": "application/json"}}

        assert book.health().url == "/api/health"

    def test_duplicates_skipped_with_warning(
        self, recorder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        set_output(OutputManager(no_color=True))
        definition = BookDefinition.model_validate(
            {
                "chapters": [
                    {"name": "users", "url": "/users"},
                    {"name": "users", "url": "/people"},
                ],
                "routes": [{"name": "get", "url": "/shadow"}],
            }
        )
        book = build_book(definition, transport=recorder)

        assert book.users.url_fragment == "/users"
        assert "get" not in book.routes
        err = capsys.readouterr().err
        assert "Skipping chapter 'users'" in err
        assert "Skipping route 'get'" in err
