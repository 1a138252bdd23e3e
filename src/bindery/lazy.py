"""Deferred values used to break dependency cycles."""

import threading
from typing import Callable, Generic, TypeVar

__all__ = ["Lazy"]

T = TypeVar("T")

_UNSET = object()


class Lazy(Generic[T]):
    """A value computed on first use and remembered afterwards.

    Declaring a dependency on ``Lazy[Service]`` instead of ``Service`` lets two
    components refer to each other: the binder builds every lazy value before
    anything else, and the real lookup only happens when the value is first
    forced, by which time the registry is complete.

    Example::

        @dataclass
        class Parent:
            child: Lazy["Child"]

        @dataclass
        class Child:
            parent: Parent

        registry = Binder().inject(Parent).inject(Lazy[Child]).inject(Child).build()
        registry.get(Parent).child.get()  # the Child instance

    Forcing is thread-safe: the factory runs at most once, on whichever
    thread gets there first. If it raises, nothing is remembered and the
    next call tries again.
    """

    __slots__ = ("_factory", "_value", "_lock")

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._value = _UNSET
        self._lock = threading.Lock()

    def get(self) -> T:
        """Force the value, computing it if this is the first call."""
        value = self._value
        if value is not _UNSET:
            return value
        with self._lock:
            if self._value is _UNSET:
                self._value = self._factory()
            return self._value

    @property
    def value(self) -> T:
        return self.get()

    @property
    def forced(self) -> bool:
        return self._value is not _UNSET

    def __repr__(self) -> str:
        if self.forced:
            return f"Lazy({self._value!r})"
        return "Lazy(<unforced>)"
