"""Pydantic models shared across phonebook modules.

Two groups live here:

**Configuration** -- :class:`TransportConfig` and :class:`ProjectConfig`,
read from ``./phonebook.json`` and the environment by
:mod:`phonebook.config`.

**Book definitions** -- :class:`BookDefinition`, :class:`ChapterDefinition`
and :class:`RouteDefinition`, the validated shape of a declarative book file
consumed by :mod:`phonebook.loader`. Definition fields accept the short
keys used in book files (``url``, ``data``, ``options``, ``type``) as well
as the long attribute names.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class HTTPMethod(str, enum.Enum):
    """HTTP methods a route can be bound to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


# --- Configuration ---


class TransportConfig(BaseModel):
    """Settings for the HTTP transport used by the command line."""

    base_url: Optional[str] = Field(
        default=None, description="Scheme and host prefixed to every request URL"
    )
    timeout: float = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers sent with every request"
    )


class ProjectConfig(BaseModel):
    """Contents of the project-local ``phonebook.json``."""

    model_config = ConfigDict(extra="allow")

    transport: TransportConfig = Field(default_factory=TransportConfig)


# --- Book definitions ---


class _NodeFields(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    url_fragment: str = Field(
        default="", validation_alias=AliasChoices("url_fragment", "url")
    )
    default_data: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("default_data", "data")
    )
    default_options: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("default_options", "options"),
    )


class RouteDefinition(_NodeFields):
    """A custom route installed with :meth:`~phonebook.book.Phonebook.define`."""

    name: str
    method: HTTPMethod = Field(
        default=HTTPMethod.GET, validation_alias=AliasChoices("method", "type")
    )

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value


class ChapterDefinition(_NodeFields):
    """A chapter and, recursively, everything declared inside it."""

    name: str
    chapters: list[ChapterDefinition] = Field(default_factory=list)
    routes: list[RouteDefinition] = Field(default_factory=list)


class BookDefinition(_NodeFields):
    """Top-level book file: root settings plus its chapters and routes."""

    restful: bool = Field(
        default=False, validation_alias=AliasChoices("restful", "isRestful")
    )
    chapters: list[ChapterDefinition] = Field(default_factory=list)
    routes: list[RouteDefinition] = Field(default_factory=list)
