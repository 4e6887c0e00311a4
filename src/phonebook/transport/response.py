"""Helpers for interpreting :class:`httpx.Response` objects.

The request tree never inspects what a transport returns. These helpers
are for callers that do, chiefly the ``phonebook call`` command: decoding
the body, mapping error statuses to typed exceptions, and printing the
result through the output layer.
"""

from __future__ import annotations

from typing import Any

import httpx

from phonebook.exceptions import AuthError, NotFoundError, ServerError
from phonebook.output import get_output


def extract_response_data(response: httpx.Response) -> Any:
    """Decode the body as JSON, falling back to text; ``None`` when empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def raise_for_api_status(response: httpx.Response) -> None:
    """Raise a typed error for 4xx and 5xx responses.

    The message carries the status and, when the body has one, the API's
    own ``message``/``error``/``detail`` field.

    Raises:
        AuthError: On 401 / 403.
        NotFoundError: On 404.
        ServerError: On any other status >= 400.
    """
    status = response.status_code
    if status < 400:
        return

    detail = extract_response_data(response)
    if isinstance(detail, dict):
        msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
    elif detail is None:
        msg = ""
    else:
        msg = str(detail)[:200]

    full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)


def format_api_response(response: httpx.Response) -> None:
    """Print the status line to stderr and the decoded body to stdout."""
    output = get_output()
    output.info(f"HTTP {response.status_code} {response.reason_phrase or ''}".rstrip())
    data = extract_response_data(response)
    if data is not None:
        output.format_response(data)
