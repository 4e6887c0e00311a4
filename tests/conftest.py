"""Shared test fixtures for phonebook.

Provides a recording transport that captures prepared requests instead of
sending them, ready-made books, environment isolation for configuration
tests, and a Typer CLI runner. Global state (output manager and default
transport) is reset after every test.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from phonebook.book import Phonebook
from phonebook.output import OutputFormat, OutputManager, reset_output, set_output
from phonebook.transport import PreparedRequest, reset_default_transport


# ---------------------------------------------------------------------------
# Auto-reset global state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_globals() -> None:
    """Drop the global OutputManager and default transport after every test.

    The OutputManager caches sys.stdout/sys.stderr at creation time; when
    CliRunner swaps those streams the cached references go stale.
    """
    yield
    reset_output()
    reset_default_transport()


# ---------------------------------------------------------------------------
# Recording transport
# ---------------------------------------------------------------------------


class RecordingTransport:
    """Transport double that returns the prepared request it receives."""

    def __init__(self) -> None:
        self.requests: list[PreparedRequest] = []

    def perform(self, request: PreparedRequest) -> PreparedRequest:
        self.requests.append(request)
        return request

    @property
    def last(self) -> PreparedRequest:
        return self.requests[-1]


@pytest.fixture
def recorder() -> RecordingTransport:
    return RecordingTransport()


# ---------------------------------------------------------------------------
# Book fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def api_book(recorder: RecordingTransport) -> Phonebook:
    """A plain book rooted at ``/api`` that records instead of sending."""
    return Phonebook.open(url_fragment="/api", transport=recorder)


@pytest.fixture
def restful_book(recorder: RecordingTransport) -> Phonebook:
    """A RESTful book with ``users`` and ``users.posts`` chapters."""
    book = Phonebook.open(url_fragment="/api", restful=True, transport=recorder)
    book.add_chapter("users", url_fragment="/users")
    book.users.add_chapter("posts", url_fragment="/posts")
    return book


# ---------------------------------------------------------------------------
# Environment isolation
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty working directory with no PHONEBOOK_* variables.

    XDG_DATA_HOME points inside tmp_path so crash logs never touch the real
    home directory.
    """
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    for var in ("PHONEBOOK_BASE_URL", "PHONEBOOK_TIMEOUT", "PHONEBOOK_VERIFY_SSL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def verbose_output() -> OutputManager:
    """Plain, colourless, verbose output so debug lines reach stderr."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
    set_output(output)
    return output


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def book_writer(tmp_path: Path):
    """Write a book definition into tmp_path and return its path."""

    def _write(content: str, name: str = "book.yaml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write