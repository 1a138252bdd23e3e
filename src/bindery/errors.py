"""Exceptions raised while validating, building and reading from a registry."""

from typing import Optional

__all__ = [
    "DependencyError",
    "DuplicateRegistrationError",
    "IllegalLazyNestingError",
    "MissingDependenciesError",
    "DependencyCycleError",
    "ComponentBuildError",
    "MissingValueError",
    "TypeMismatchError",
]


class DependencyError(Exception):
    """Raised when a component's dependency cannot be resolved or is misannotated."""

    pass


class DuplicateRegistrationError(DependencyError):
    """The same component type is built by more than one registration."""

    def __init__(self, message: str, types: list[str]):
        super().__init__(message)
        self.types = types


class IllegalLazyNestingError(DependencyError):
    """A lazy component depends on another lazy component."""

    def __init__(self, message: str, types: list[str]):
        super().__init__(message)
        self.types = types


class MissingDependenciesError(DependencyError):
    """One or more components depend on types that nothing provides.

    Attributes:
        per_component: One :class:`~bindery.domain.MissingDependency` per
            offending component, in registration order.
    """

    def __init__(self, message: str, per_component: list):
        super().__init__(message)
        self.per_component = per_component


class DependencyCycleError(DependencyError):
    """Components that could not be ordered because they depend on each other."""

    def __init__(self, message: str, types: list[str]):
        super().__init__(message)
        self.types = types


class ComponentBuildError(DependencyError):
    """A component's builder failed while the registry was being built."""

    def __init__(self, type_name: str, cause: Optional[BaseException] = None):
        message = f"Failed to build component of type {type_name}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.type_name = type_name


class MissingValueError(DependencyError, LookupError):
    """Raised by a registry lookup for a type that was never registered."""

    def __init__(self, type_name: str, message: Optional[str] = None):
        super().__init__(message or f"Missing value of type {type_name}")
        self.type_name = type_name


class TypeMismatchError(MissingValueError):
    """The value stored under a type's key is not an instance of that type."""

    def __init__(self, type_name: str, actual: type):
        super().__init__(
            type_name,
            f"Value stored for type {type_name} is of unexpected type "
            f"{actual.__qualname__}",
        )
        self.actual = actual
