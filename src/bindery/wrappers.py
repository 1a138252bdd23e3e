"""Generic holders that give an existing component a new, distinct type."""

import copy
from typing import Generic, TypeVar

__all__ = ["Box", "Arc", "Tagged"]

T = TypeVar("T")
Tag = TypeVar("Tag")


class _Holder(Generic[T]):
    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        self._value = value

    @property
    def value(self) -> T:
        return self._value

    def __getattr__(self, item: str):
        # Only reached for attributes the holder itself doesn't define.
        if item.startswith("_"):
            raise AttributeError(item)
        return getattr(self._value, item)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._value == other._value

    __hash__ = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"


class Box(_Holder[T]):
    """An owned handle to its own shallow copy of a component.

    Registered by ``Binder.auto_box()``; a dependency on ``Box[Service]`` is
    satisfied independently of ``Service``.
    """

    __slots__ = ()

    @classmethod
    def of(cls, value: T) -> "Box[T]":
        return cls(copy.copy(value))


class Arc(_Holder[T]):
    """A shared handle: every holder sees the same underlying component.

    Registered by ``Binder.auto_arc()``.
    """

    __slots__ = ()


class Tagged(_Holder[T], Generic[T, Tag]):
    """A value marked with a phantom tag type.

    ``Tagged[int, HttpPort]`` and ``Tagged[int, AdminPort]`` are different
    component types, so two ``int`` settings can be registered side by side.
    The tag exists only in the type used to register and look up the value.

    Example::

        class HttpPort: ...

        binder.instance(Tagged(8080), as_type=Tagged[int, HttpPort])
        registry.get(Tagged[int, HttpPort]).untag()  # 8080
    """

    __slots__ = ()

    @classmethod
    def pure(cls, value: T) -> "Tagged[T, None]":
        return cls(value)

    def untag(self) -> T:
        return self._value
