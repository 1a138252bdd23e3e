"""Accumulation of component registrations, and the build entry point."""

import logging
from typing import Any, Callable, Iterable, Optional

from bindery.component import component_meta, function_dependencies, invoke, provided_type
from bindery.domain import Builder, Registration, StaticValue
from bindery.errors import ComponentBuildError, DependencyError, TypeMismatchError
from bindery.expansion import expand
from bindery.graph import UNRESOLVABLE_MESSAGE, DependencyGraph
from bindery.keys import TypeKey, key_of
from bindery.registry import ComponentType, Registry, conforms
from bindery.wrappers import Arc, Box

__all__ = ["Binder"]

logger = logging.getLogger(__name__)


class Binder:
    """Collects registrations, then validates and builds them into a :class:`Registry`.

    Every registering method mutates the binder and returns it, so calls can
    be chained. The binder also remembers the type most recently produced
    (:attr:`last`): :meth:`auto`, :meth:`auto_box` and :meth:`auto_arc` derive
    a new component from it.

    Example:
        >>> registry = (
        ...     Binder()
        ...     .instance(Settings(dsn="sqlite://"))
        ...     .inject(Database)
        ...     .inject(UserService).auto(lambda s: s, provides=Service)
        ...     .build()
        ... )
        >>> registry.get(Service)

    Registration order doesn't matter: components are built in dependency
    order when :meth:`build` is called.
    """

    def __init__(self):
        self._static_values: dict[TypeKey, Any] = {}
        self._registrations: list[Registration] = []
        self._last: Optional[TypeKey] = None

    @property
    def last(self) -> Optional[TypeKey]:
        """Key of the type most recently produced by a registration, if any."""
        return self._last

    @property
    def registrations(self) -> tuple[Registration, ...]:
        return tuple(self._registrations)

    @property
    def static_values(self) -> tuple[StaticValue, ...]:
        return tuple(StaticValue(key, value) for key, value in self._static_values.items())

    def instance(self, value: Any, as_type: Optional[ComponentType] = None) -> "Binder":
        """Register a ready-made value.

        Supplying another instance of the same type later replaces this one.

        Args:
            value: The component itself.
            as_type: Type to register it under; defaults to ``type(value)``.

        Raises:
            TypeMismatchError: If ``value`` is not an instance of ``as_type``.
        """
        key = key_of(as_type if as_type is not None else type(value))
        if not conforms(value, key.token):
            raise TypeMismatchError(key.name, type(value))
        if key in self._static_values:
            logger.debug("Overriding instance of %s", key.name)
        self._static_values[key] = value
        self._registrations.append(Registration(key, ()))
        return self

    def inject(self, component_type: ComponentType) -> "Binder":
        """Register a type to be constructed from its declared dependencies.

        The dependencies come from :func:`bindery.component.component_meta`:
        the annotated constructor parameters for ordinary classes, the target
        type for ``Lazy[...]``.
        """
        meta = component_meta(component_type)
        return self._register(
            meta.key,
            meta.dependencies,
            _reporting_failures(meta.key, meta.build),
            meta.debug_site,
            meta.lazy,
        )

    def inject_fn(self, func: Callable, provides: Optional[ComponentType] = None) -> "Binder":
        """Register the result of calling ``func`` with its dependencies.

        Each annotated parameter of ``func`` without a default is a
        dependency. The produced type is ``provides`` or else the function's
        return annotation. Exceptions raised by ``func`` propagate unchanged.
        """
        return self._register_function(func, provides, fallible=False)

    def inject_fn_ok(self, func: Callable, provides: Optional[ComponentType] = None) -> "Binder":
        """Like :meth:`inject_fn`, for builders that are expected to fail.

        An exception raised by ``func`` during :meth:`build` is reported as
        a :class:`ComponentBuildError` naming the component, with the
        original exception as its cause.
        """
        return self._register_function(func, provides, fallible=True)

    def auto(self, func: Callable[[Any], Any], provides: Optional[ComponentType] = None) -> "Binder":
        """Register ``func(last)`` as a new component.

        Commonly used to expose a component under an interface:

        >>> binder.inject(PostgresRepository).auto(lambda repo: repo, provides=Repository)

        :attr:`last` is left pointing at the original component.
        """
        source = self._require_last("auto")
        key = key_of(provided_type(func, provides))
        self._register(key, (source,), lambda registry: func(registry.get(source)))
        self._last = source
        return self

    def auto_box(self) -> "Binder":
        """Register ``Box[last]``, holding its own shallow copy of the last component."""
        source = self._require_last("auto_box")
        self._register(key_of(Box[source.token]), (source,), lambda registry: Box.of(registry.get(source)))
        self._last = source
        return self

    def auto_arc(self) -> "Binder":
        """Register ``Arc[last]``, sharing the last component."""
        source = self._require_last("auto_arc")
        self._register(key_of(Arc[source.token]), (source,), lambda registry: Arc(registry.get(source)))
        self._last = source
        return self

    def void(self) -> "Binder":
        """Forget the last produced type."""
        self._last = None
        return self

    def merge(self, other: "Binder") -> "Binder":
        """Add every registration and instance of ``other`` to this binder.

        Useful for assembling independently defined parts of an application
        before a single :meth:`build`.
        """
        self._static_values.update(other._static_values)
        self._registrations.extend(other._registrations)
        return self

    def expand(self, value: Any) -> "Binder":
        """Register the fields of ``value`` as separate instances.

        See :mod:`bindery.expansion`.
        """
        return expand(value, self)

    def verify(
        self, extra_known: Iterable[ComponentType] = (), short_names: bool = False
    ) -> None:
        """Validate the registrations without building anything.

        Args:
            extra_known: Types that will be available from elsewhere.
            short_names: Render type names without their module path.

        Raises:
            DuplicateRegistrationError: If a type is built by two registrations.
            IllegalLazyNestingError: If a lazy component depends on a lazy component.
            MissingDependenciesError: If a dependency is not provided.
            DependencyCycleError: If components depend on each other with no
                lazy dependency to break the cycle.
        """
        known = {key_of(component_type) for component_type in extra_known}
        known.update(self._static_values)
        DependencyGraph(self._registrations).verify(known, short_names)

    def build(self, short_names: bool = False) -> Registry:
        """Validate the registrations and construct every component.

        Lazy components are built first, then every other component once its
        dependencies exist.

        Returns:
            A registry holding every instance and every constructed component.

        Raises:
            DependencyError: If validation fails (see :meth:`verify`).
            ComponentBuildError: If a component's builder fails.
        """
        known = set(self._static_values)
        graph = DependencyGraph(self._registrations)
        try:
            graph.verify(known, short_names)
        except DependencyError as exc:
            logger.warning("Dependency validation failed: %s", exc)
            raise

        registry = Registry(self._static_values)
        builders: dict[TypeKey, Builder] = {
            registration.key: registration.builder
            for registration in self._registrations
            if registration.builder is not None
        }

        for key in graph.traverse(known, short_names, UNRESOLVABLE_MESSAGE):
            builder = builders.get(key)
            if builder is not None:
                registry.insert(key, builder(registry))

        logger.debug("Built registry with %d components", len(registry))
        return registry

    def _register_function(
        self, func: Callable, provides: Optional[ComponentType], fallible: bool
    ) -> "Binder":
        key = key_of(provided_type(func, provides))
        parameters = function_dependencies(func)
        dependencies = tuple(key_of(parameter.annotation) for parameter in parameters)

        def build(registry: Registry) -> Any:
            return invoke(func, parameters, registry.get_tuple(*dependencies))

        return self._register(key, dependencies, _reporting_failures(key, build) if fallible else build)

    def _register(
        self,
        key: TypeKey,
        dependencies: tuple[TypeKey, ...],
        builder: Builder,
        debug_site: Optional[str] = None,
        lazy: bool = False,
    ) -> "Binder":
        self._registrations.append(Registration(key, dependencies, builder, debug_site, lazy))
        logger.debug("Registered %s with %d dependencies", key.name, len(dependencies))
        self._last = key
        return self

    def _require_last(self, operation: str) -> TypeKey:
        if self._last is None:
            raise DependencyError(
                f"{operation}() needs a previously registered component to act on"
            )
        return self._last


def _reporting_failures(key: TypeKey, build: Builder) -> Builder:
    def build_reporting_failures(registry: Registry) -> Any:
        try:
            return build(registry)
        except ComponentBuildError:
            raise
        except Exception as exc:
            raise ComponentBuildError(key.name, exc) from exc

    return build_reporting_failures
