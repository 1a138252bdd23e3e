"""Bindery dependency injection container.

Bindery builds an application's components in dependency order. Components
are registered explicitly on a :class:`Binder`, each declaring the types it
needs through ordinary constructor annotations. ``build()`` validates the
whole graph up front, then constructs every component exactly once and
returns a thread-safe :class:`Registry` to look them up by type.

Key Features:
    - Explicit registration: instances, classes, and builder functions
    - Dependencies read from standard type hints, including generics
    - Up-front validation reporting every duplicate, missing dependency and
      cycle at once, with the offending declaration's source location
    - ``Lazy[T]`` dependencies to break cycles
    - Merging of independently assembled binders

Basic Usage:
    >>> from dataclasses import dataclass
    >>> from bindery import Binder
    >>>
    >>> @dataclass
    ... class Database:
    ...     dsn: str
    >>>
    >>> @dataclass
    ... class UserService:
    ...     database: Database
    >>>
    >>> registry = Binder().instance("sqlite://").inject(Database).inject(UserService).build()
    >>> registry.get(UserService).database.dsn
    'sqlite://'

The package consists of several modules:
    - binder: Registration and the build entry point
    - graph: Validation passes and build ordering
    - registry: The built, thread-safe container
    - component: Metadata derivation from constructors and functions
    - lazy, wrappers: Deferred values and type-distinguishing holders
    - expansion: Registering a value's fields as separate components
    - keys, domain, errors, diagnostics: Supporting types and reporting
"""

from bindery.binder import Binder
from bindery.component import component_meta
from bindery.domain import ComponentMeta, MissingDependency, Registration, StaticValue
from bindery.errors import (
    ComponentBuildError,
    DependencyCycleError,
    DependencyError,
    DuplicateRegistrationError,
    IllegalLazyNestingError,
    MissingDependenciesError,
    MissingValueError,
    TypeMismatchError,
)
from bindery.expansion import Expander, forced_expansion, ignore_expansion, nested_expansion
from bindery.keys import TypeKey, key_of, type_name
from bindery.lazy import Lazy
from bindery.registry import Registry
from bindery.wrappers import Arc, Box, Tagged

__all__ = [
    "Arc",
    "Binder",
    "Box",
    "ComponentBuildError",
    "ComponentMeta",
    "DependencyCycleError",
    "DependencyError",
    "DuplicateRegistrationError",
    "Expander",
    "IllegalLazyNestingError",
    "Lazy",
    "MissingDependenciesError",
    "MissingDependency",
    "MissingValueError",
    "Registration",
    "Registry",
    "StaticValue",
    "Tagged",
    "TypeKey",
    "TypeMismatchError",
    "component_meta",
    "forced_expansion",
    "ignore_expansion",
    "key_of",
    "nested_expansion",
    "type_name",
]
