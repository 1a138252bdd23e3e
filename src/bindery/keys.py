"""Type identities used as map keys throughout the container."""

import inspect
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Hashable

__all__ = ["TypeKey", "key_of", "type_name"]


@total_ordering
@dataclass(frozen=True)
class TypeKey:
    """Opaque identity of a component type.

    Two keys are equal when their tokens are equal. A token is whatever the
    caller used to name the type: a class, or a parameterised alias such as
    ``Lazy[Service]`` or ``Annotated[int, "port"]``. Parameterised aliases
    compare by origin and arguments, so ``Pair[int]`` and ``Pair[str]`` get
    different keys.

    Attributes:
        token: The hashable type object this key stands for.
        name: Human-readable name, used only in diagnostics.
    """

    token: Hashable
    name: str = field(compare=False)

    def __lt__(self, other: "TypeKey") -> bool:
        if not isinstance(other, TypeKey):
            return NotImplemented
        return (self.name, repr(self.token)) < (other.name, repr(other.token))

    def __str__(self) -> str:
        return self.name


def type_name(target: Any) -> str:
    """Render a type the way it should appear in error messages.

    Example:
        >>> type_name(int)
        'int'
        >>> type_name(Database)
        'app.storage.Database'
        >>> type_name(Lazy[Database])
        'bindery.lazy.Lazy[app.storage.Database]'
    """
    if isinstance(target, TypeKey):
        return target.name
    if inspect.isclass(target) and not hasattr(target, "__origin__"):
        if target.__module__ == "builtins":
            return target.__qualname__
        return f"{target.__module__}.{target.__qualname__}"
    return repr(target)


def key_of(target: Any) -> TypeKey:
    """Return the :class:`TypeKey` for a type, alias or existing key."""
    if isinstance(target, TypeKey):
        return target
    try:
        hash(target)
    except TypeError:
        raise TypeError(f"{target!r} cannot be used as a component type") from None
    return TypeKey(target, type_name(target))
