"""Transport that previews requests instead of sending them.

Used by ``phonebook call --dry-run``. The request is printed to stderr and a
synthetic ``200`` response is returned so callers can carry on without
special-casing a missing response.
"""

from __future__ import annotations

import json

import httpx

from phonebook.output import get_output
from phonebook.transport.base import PreparedRequest, build_httpx_kwargs


class DryRunTransport:
    """Print each request to stderr and answer with a synthetic response.

    Args:
        base_url: Shown in front of the request URL so the preview matches
            what a real transport would contact.
    """

    def __init__(self, base_url: str = "") -> None:
        self._base_url = base_url

    def perform(self, request: PreparedRequest) -> httpx.Response:
        output = get_output()
        url = f"{self._base_url}{request.url}"
        kwargs = build_httpx_kwargs(request)

        output.info(f"[dry-run] {request.method} {url}")
        for key, value in (kwargs.get("headers") or {}).items():
            output.info(f"  Header: {key}: {value}")
        for key, value in (kwargs.get("params") or {}).items():
            output.info(f"  Param: {key}={value}")
        if "content" in kwargs:
            output.info(f"  Body: {kwargs['content']}")
        elif "data" in kwargs:
            output.info(f"  Body (form): {json.dumps(kwargs['data'], indent=2, default=str)}")

        return httpx.Response(
            status_code=200,
            headers={"content-type": "application/json"},
            json={"dry_run": True, "method": request.method, "url": url},
            request=httpx.Request(method=request.method, url=url or "/"),
        )
