"""Registration of a value's fields as independent components.

``Binder.expand(settings)`` takes an already-built value, typically a
configuration dataclass, and registers each of its fields as an instance
under the field's declared type, so components can depend on the pieces
rather than on the whole.

Example::

    @dataclass
    class Settings:
        database: DatabaseSettings
        http: HttpSettings = nested_expansion()
        secret_key: str = ignore_expansion()

    binder.expand(Settings(...))

Fields can be marked with :func:`ignore_expansion` (skipped),
:func:`nested_expansion` (expanded recursively instead of registered) or
:func:`forced_expansion` (a shallow copy is registered). Types that need
something else can define ``expand(binder)`` themselves.
"""

import copy
import dataclasses
from typing import Any, Protocol, get_type_hints, runtime_checkable

from bindery.errors import DependencyError
from bindery.keys import type_name

__all__ = [
    "Expander",
    "expand",
    "ignore_expansion",
    "nested_expansion",
    "forced_expansion",
]

EXPANSION = "bindery.expansion"

IGNORE = "ignore"
NESTED = "nested"
FORCED = "forced"


@runtime_checkable
class Expander(Protocol):
    """A value that knows how to register its own parts on a binder."""

    def expand(self, binder: Any) -> Any:
        ...


def ignore_expansion(**kwargs) -> Any:
    """A dataclass field that expansion leaves out."""
    return _marked_field(IGNORE, kwargs)


def nested_expansion(**kwargs) -> Any:
    """A dataclass field whose own fields are expanded in its place, unless it is None."""
    return _marked_field(NESTED, kwargs)


def forced_expansion(**kwargs) -> Any:
    """A dataclass field registered as a shallow copy, leaving the original untouched."""
    return _marked_field(FORCED, kwargs)


def expand(value: Any, binder: Any) -> Any:
    """Register the parts of ``value`` on ``binder`` and return the binder.

    Raises:
        DependencyError: If ``value`` is neither an :class:`Expander` nor a
            dataclass instance.
    """
    if isinstance(value, Expander):
        return value.expand(binder)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _expand_fields(value, binder)
    raise DependencyError(
        f"{type_name(type(value))} cannot be expanded: "
        "it is neither a dataclass nor does it define expand()"
    )


def _expand_fields(value: Any, binder: Any) -> Any:
    try:
        hints = get_type_hints(type(value), include_extras=True)
    except NameError as exc:
        raise DependencyError(
            f"Cannot resolve annotations of {type_name(type(value))}: {exc}"
        ) from exc

    by_mode: dict[Any, list[dataclasses.Field]] = {None: [], FORCED: [], NESTED: []}
    for field in dataclasses.fields(value):
        mode = field.metadata.get(EXPANSION)
        if mode != IGNORE:
            by_mode[mode].append(field)

    for field in by_mode[None]:
        binder = binder.instance(getattr(value, field.name), as_type=hints[field.name])
    for field in by_mode[FORCED]:
        binder = binder.instance(copy.copy(getattr(value, field.name)), as_type=hints[field.name])
    for field in by_mode[NESTED]:
        nested = getattr(value, field.name)
        if nested is not None:
            binder = binder.expand(nested)
    return binder


def _marked_field(mode: str, kwargs: dict) -> Any:
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[EXPANSION] = mode
    return dataclasses.field(metadata=metadata, **kwargs)
