"""Domain models used throughout the container."""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from bindery.keys import TypeKey

__all__ = ["Registration", "StaticValue", "ComponentMeta", "MissingDependency"]


Builder = Callable[[Any], Any]
"""Builds a component from a partially filled :class:`~bindery.registry.Registry`."""


@dataclass(frozen=True)
class Registration:
    """A single entry in a binder's dependency graph.

    Attributes:
        key: The type this registration produces.
        dependencies: Keys that must be available before ``builder`` runs.
        builder: Produces the value from the registry, or None for a value
            supplied up front with ``Binder.instance``.
        debug_site: Where the component was declared, as ``path:line``.
        lazy: True for deferred values that break dependency cycles.
    """

    key: TypeKey
    dependencies: tuple[TypeKey, ...]
    builder: Optional[Builder] = None
    debug_site: Optional[str] = None
    lazy: bool = False


@dataclass(frozen=True)
class StaticValue:
    """A value supplied up front, needing no builder invocation."""

    key: TypeKey
    value: Any


@dataclass(frozen=True)
class ComponentMeta:
    """Everything the binder needs to know to register an injectable type.

    Classes may provide this by hand from a ``__component_meta__`` classmethod;
    otherwise :func:`bindery.component.component_meta` derives it from the
    constructor's annotations.

    Attributes:
        key: Identity of the component type.
        dependencies: Ordered keys of the components the constructor reads.
        build: Constructs the component from the registry.
        debug_site: Source location of the declaration, if known.
        lazy: Whether this is a deferred wrapper type.
    """

    key: TypeKey
    dependencies: tuple[TypeKey, ...]
    build: Builder
    debug_site: Optional[str] = None
    lazy: bool = False

    @property
    def name(self) -> str:
        return self.key.name


@dataclass(frozen=True)
class MissingDependency:
    """One component's unsatisfied dependencies, as reported by validation."""

    name: str
    debug_site: Optional[str]
    missing: list[str]
