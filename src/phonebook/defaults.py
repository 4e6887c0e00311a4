"""Function-or-value default fields.

A book, a chapter or a route may carry its default data and default
options either as a plain mapping or as a zero-argument callable that
produces one. Both shapes are wrapped in a small tagged variant so the merge
code can resolve them uniformly:

* :class:`StaticDefaults` -- a mapping captured at definition time.
* :class:`ComputedDefaults` -- a factory invoked on *every* resolution.

Resolution always returns a fresh ``dict``; callers may mutate the result
without touching the stored defaults.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

DefaultsFactory = Callable[[], Union[Mapping[str, Any], None]]


@dataclass(frozen=True)
class StaticDefaults:
    """Defaults given as a plain mapping."""

    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze a private copy so later edits to the caller's dict do not leak in.
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def resolve(self) -> dict[str, Any]:
        return dict(self.values)


@dataclass(frozen=True)
class ComputedDefaults:
    """Defaults produced by a zero-argument factory on each resolution."""

    factory: DefaultsFactory

    def resolve(self) -> dict[str, Any]:
        produced = self.factory()
        return dict(produced) if produced is not None else {}


Defaults = Union[StaticDefaults, ComputedDefaults]

DefaultsLike = Union[Defaults, Mapping[str, Any], DefaultsFactory, None]
"""Anything accepted where a defaults field is expected."""


def as_defaults(value: DefaultsLike) -> Defaults:
    """Coerce *value* into a :data:`Defaults` variant.

    Args:
        value: ``None``, a mapping, a zero-argument callable, or an existing
            variant (returned unchanged).

    Returns:
        The wrapped defaults.

    Raises:
        TypeError: If *value* is neither a mapping nor callable.
    """
    if isinstance(value, (StaticDefaults, ComputedDefaults)):
        return value
    if value is None:
        return StaticDefaults()
    if isinstance(value, Mapping):
        return StaticDefaults(value)
    if callable(value):
        return ComputedDefaults(value)
    raise TypeError(
        f"defaults must be a mapping or a zero-argument callable, got {type(value).__name__}"
    )


def resolve_defaults(value: DefaultsLike) -> dict[str, Any]:
    """Shortcut for ``as_defaults(value).resolve()``."""
    return as_defaults(value).resolve()
