"""Tests for phonebook.transport.response helpers."""

from __future__ import annotations

import httpx
import pytest

from phonebook.exceptions import AuthError, NotFoundError, ServerError
from phonebook.output import OutputFormat, OutputManager, set_output
from phonebook.transport.response import (
    extract_response_data,
    format_api_response,
    raise_for_api_status,
)


def _response(status: int = 200, **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://api.example.com/x"), **kwargs)


class TestExtractResponseData:
    def test_json(self) -> None:
        assert extract_response_data(_response(json={"a": 1})) == {"a": 1}

    def test_text(self) -> None:
        assert extract_response_data(_response(text="hello")) == "hello"

    def test_empty(self) -> None:
        assert extract_response_data(_response(204)) is None


class TestRaiseForApiStatus:
    def test_success_passes(self) -> None:
        raise_for_api_status(_response(201, json={}))

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth(self, status: int) -> None:
        with pytest.raises(AuthError, match=f"HTTP {status}"):
            raise_for_api_status(_response(status))

    def test_not_found_with_message(self) -> None:
        with pytest.raises(NotFoundError, match="HTTP 404: no such user"):
            raise_for_api_status(_response(404, json={"message": "no such user"}))

    @pytest.mark.parametrize("status", [400, 422, 500, 503])
    def test_other_errors(self, status: int) -> None:
        with pytest.raises(ServerError):
            raise_for_api_status(_response(status, text="bad"))


class TestFormatApiResponse:
    def test_status_to_stderr_body_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True))
        format_api_response(_response(json={"a": 1}))
        captured = capsys.readouterr()
        assert "HTTP 200 OK" in captured.err
        assert '"a": 1' in captured.out
