"""Validation and ordering of a binder's dependency graph.

A :class:`DependencyGraph` is built from the registrations a binder has
accumulated. It answers two questions: is the graph sound (no duplicate
builders, no lazy-of-lazy, nothing missing, no unbroken cycle), and in which
order can its components be built.

Ordering works in waves. Lazy components come first: a lazy value only
captures the registry, so it can be built before the thing it points to
exists, and that is what lets it break a cycle. After that, each wave
resolves every remaining component whose dependencies are all available,
until either nothing remains or a wave makes no progress. Whatever is left
over at that point depends, directly or not, on a cycle.
"""

import logging
from collections.abc import Iterator, Sequence
from typing import AbstractSet

from bindery.diagnostics import format_missing_dependencies, render_names
from bindery.domain import MissingDependency, Registration
from bindery.errors import (
    DependencyCycleError,
    DuplicateRegistrationError,
    IllegalLazyNestingError,
    MissingDependenciesError,
)
from bindery.keys import TypeKey

__all__ = ["DependencyGraph", "CYCLE_MESSAGE", "UNRESOLVABLE_MESSAGE"]

logger = logging.getLogger(__name__)

CYCLE_MESSAGE = "Dependencies cycle (one or more) found: "
UNRESOLVABLE_MESSAGE = "Can't resolve dependencies of types: "


class DependencyGraph:
    """The registrations of one binder, viewed as a graph of type keys."""

    def __init__(self, registrations: Sequence[Registration]):
        self._registrations = list(registrations)
        self._lazy_keys = {
            registration.key for registration in self._registrations if registration.lazy
        }

    def verify(self, known_keys: AbstractSet[TypeKey], short_names: bool = False) -> None:
        """Run every validation pass, stopping at the first that fails.

        The order matters: the cycle check is a dry run of :meth:`traverse`,
        which would also report components whose dependencies are simply
        missing, so missing dependencies are reported first.

        Args:
            known_keys: Keys already available before anything is built.
            short_names: Render type names without their module path.

        Raises:
            DuplicateRegistrationError: A key is built by two registrations.
            IllegalLazyNestingError: A lazy component depends on a lazy one.
            MissingDependenciesError: Dependencies nothing provides.
            DependencyCycleError: Components that can never be ordered.
        """
        self._verify_duplicates(known_keys, short_names)
        self._verify_nested_lazy(short_names)
        self._verify_missing(known_keys, short_names)
        for _ in self.traverse(known_keys, short_names):
            pass

    def traverse(
        self,
        known_keys: AbstractSet[TypeKey],
        short_names: bool = False,
        error_message: str = CYCLE_MESSAGE,
    ) -> Iterator[TypeKey]:
        """Yield keys in an order where every dependency precedes its dependant.

        Lazy keys are yielded first, then one wave at a time. Keys within a
        wave depend only on keys from earlier waves, so the caller may build
        each one as it is yielded. Each key is yielded once.

        Raises:
            DependencyCycleError: If some keys can never become available.
        """
        available = set(known_keys)

        for key in dict.fromkeys(
            registration.key for registration in self._registrations if registration.lazy
        ):
            available.add(key)
            yield key

        remaining: dict[TypeKey, tuple[TypeKey, ...]] = {
            registration.key: registration.dependencies
            for registration in self._registrations
            if registration.key not in self._lazy_keys
        }

        waves = 0
        eager = 0
        while remaining:
            ready = [
                key
                for key, dependencies in remaining.items()
                if all(dependency in available for dependency in dependencies)
            ]
            if not ready:
                names = [key.name for key in remaining]
                raise DependencyCycleError(
                    f"{error_message}{render_names(names, short_names)}", names
                )

            waves += 1
            eager += len(ready)
            logger.debug("Wave %d resolves %d components", waves, len(ready))
            for key in ready:
                del remaining[key]
                yield key
            available.update(ready)

        logger.debug(
            "Resolved %d lazy and %d eager components in %d waves",
            len(self._lazy_keys),
            eager,
            waves,
        )

    def _verify_duplicates(self, known_keys: AbstractSet[TypeKey], short_names: bool) -> None:
        # Registrations without dependencies are plain instances, which may be overridden.
        seen = set(known_keys)
        duplicates: dict[TypeKey, None] = {}
        for registration in self._registrations:
            if not registration.dependencies:
                continue
            if registration.key in seen:
                duplicates[registration.key] = None
            seen.add(registration.key)

        if duplicates:
            names = [key.name for key in duplicates]
            raise DuplicateRegistrationError(
                f"Dependencies duplications found: {render_names(names, short_names)}",
                names,
            )

    def _verify_nested_lazy(self, short_names: bool) -> None:
        nested = dict.fromkeys(
            registration.key
            for registration in self._registrations
            if registration.lazy
            and any(dependency in self._lazy_keys for dependency in registration.dependencies)
        )

        if nested:
            names = [key.name for key in nested]
            raise IllegalLazyNestingError(
                f"Nested lazy dependencies: {render_names(names, short_names)}", names
            )

    def _verify_missing(self, known_keys: AbstractSet[TypeKey], short_names: bool) -> None:
        available = set(known_keys)
        available.update(registration.key for registration in self._registrations)

        per_component = []
        for registration in self._registrations:
            missing = [
                dependency.name
                for dependency in registration.dependencies
                if dependency not in available
            ]
            if missing:
                per_component.append(
                    MissingDependency(registration.key.name, registration.debug_site, missing)
                )

        if per_component:
            raise MissingDependenciesError(
                format_missing_dependencies(per_component, short_names), per_component
            )
