"""The built container: a thread-safe store of constructed components."""

import inspect
from threading import RLock
from typing import Any, Optional, Type, TypeVar, Union

from bindery.errors import MissingValueError, TypeMismatchError
from bindery.keys import TypeKey, key_of

__all__ = ["Registry", "ComponentType", "conforms"]

T = TypeVar("T")

_NUMERIC_PROMOTIONS = {float: (float, int), complex: (complex, float, int)}

ComponentType = Union[type, TypeKey, Any]
"""Anything that names a component: a class, a parameterised alias or a key.

Example:
    >>> registry[Database]
    >>> registry[Lazy[Database]]
    >>> registry[key_of(Database)]
"""


class Registry:
    """Fully constructed components, addressable by type.

    A registry is created once, at the end of ``Binder.build()``, seeded with
    the binder's static values and then filled in dependency order. After it
    has been returned it is shared by reference: lazy values built into it
    keep a handle to it and read from it when first forced, possibly on
    another thread. Every read and write holds the registry's lock.

    Values are returned as stored. The registry keeps its own reference, so
    a caller never holds the only copy of a component.
    """

    __slots__ = ("_lock", "_values")

    def __init__(self, values: Optional[dict[TypeKey, Any]] = None) -> None:
        self._values: dict[TypeKey, Any] = dict(values or {})
        self._lock = RLock()

    def get(self, component_type: Union[Type[T], ComponentType]) -> T:
        """Look up a component by type.

        Args:
            component_type: The class, alias or key the component was
                registered under.

        Returns:
            The stored component.

        Raises:
            MissingValueError: If nothing is registered under the type.
            TypeMismatchError: If the stored value is not an instance of the
                requested class.
        """
        key = key_of(component_type)
        with self._lock:
            if key not in self._values:
                raise MissingValueError(key.name)
            value = self._values[key]

        if not conforms(value, key.token):
            raise TypeMismatchError(key.name, type(value))
        return value

    def get_tuple(self, *component_types: ComponentType) -> tuple:
        """Read several components at once, failing on the first missing one.

        Example:
            >>> database, cache = registry.get_tuple(Database, Cache)
        """
        return tuple(self.get(component_type) for component_type in component_types)

    def insert(self, key: TypeKey, value: Any) -> None:
        """Store a value, replacing any value already held under ``key``."""
        with self._lock:
            self._values[key] = value

    def __getitem__(self, component_type: ComponentType) -> Any:
        return self.get(component_type)

    def __contains__(self, component_type: ComponentType) -> bool:
        key = key_of(component_type)
        with self._lock:
            return key in self._values

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


def conforms(value: Any, token: Any) -> bool:
    """Whether ``value`` may be stored under the type ``token``.

    Follows the numeric tower of type annotations: an ``int`` is an
    acceptable ``float``, and both are acceptable as ``complex``.
    """
    # Aliases, NewTypes and protocols without runtime support can't be checked.
    if not inspect.isclass(token) or hasattr(token, "__origin__"):
        return True
    try:
        return isinstance(value, _NUMERIC_PROMOTIONS.get(token, token))
    except TypeError:
        return True
