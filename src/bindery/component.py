"""Derivation of component metadata from constructors and functions.

The binder never inspects a type itself: it asks :func:`component_meta` for a
:class:`~bindery.domain.ComponentMeta` describing what the type needs and how
to build it. For ordinary classes that description comes from the
constructor's annotations, in the same way for dataclasses and hand-written
``__init__`` methods. Wrapper types (``Lazy``, ``Box``, ``Arc``, ``Tagged``)
get metadata derived from the type they wrap, and a class may opt out of
introspection entirely by defining a ``__component_meta__`` classmethod.
"""

import dataclasses
import inspect
from functools import partial
from typing import (
    Any,
    Callable,
    Generic,
    Optional,
    Protocol,
    Sequence,
    TypeVar,
    get_args,
    get_origin,
    get_type_hints,
)

from bindery.domain import ComponentMeta
from bindery.errors import DependencyError
from bindery.keys import TypeKey, key_of, type_name
from bindery.lazy import Lazy
from bindery.wrappers import Arc, Box, Tagged

__all__ = [
    "component_meta",
    "function_dependencies",
    "provided_type",
    "invoke",
]

_WRAPPERS = (Box, Arc, Tagged)


def component_meta(component_type: Any) -> ComponentMeta:
    """Describe how to inject a type.

    Args:
        component_type: A class, a parameterised generic such as
            ``Pair[int]`` or ``Lazy[Service]``, or a :class:`TypeKey`.

    Returns:
        The component's key, ordered dependencies, builder, declaration site
        and laziness flag.

    Raises:
        DependencyError: If the type can't be introspected: a constructor
            parameter is unannotated, an annotation can't be resolved, or
            the type is not a class at all.

    Example:
        >>> @dataclass
        ... class Service:
        ...     database: Database
        ...     retries: int = 3
        >>> meta = component_meta(Service)
        >>> # meta.dependencies == (key_of(Database),)
    """
    key = key_of(component_type)
    target = key.token
    origin = get_origin(target) or target
    arguments = get_args(target)

    if origin is Lazy or origin in _WRAPPERS:
        if not arguments:
            raise DependencyError(
                f"{key.name} must be parameterised with the type it holds"
            )
        if origin is Lazy:
            return _lazy_meta(key, arguments[0])
        return _wrapper_meta(key, origin, arguments[0])

    if not inspect.isclass(origin):
        raise DependencyError(f"{key.name} is not a class and cannot be injected")

    hand_written = getattr(origin, "__component_meta__", None)
    if hand_written is not None:
        return hand_written()

    return _class_meta(key, origin, arguments)


def function_dependencies(func: Callable) -> list[inspect.Parameter]:
    """Parameters of ``func`` that must be supplied from the registry.

    Each returned parameter's ``annotation`` is the resolved dependency type.
    Parameters with defaults, ``*args`` and ``**kwargs`` are left out.
    """
    return _injected_parameters(func, {})


def provided_type(func: Callable, provides: Optional[Any] = None) -> Any:
    """Determine the component type a builder function produces.

    Raises:
        DependencyError: If ``provides`` is not given and the function has no
            annotated return type.
    """
    if provides is not None:
        return provides
    return_type = _type_hints(func).get("return", None)
    if return_type is not None:
        return return_type
    raise DependencyError(
        f"Function {getattr(func, '__name__', func)!r} is registered without "
        "an explicit type but does not have an annotated return type"
    )


def invoke(target: Callable, parameters: Sequence[inspect.Parameter], values: Sequence[Any]) -> Any:
    """Call ``target`` with looked-up dependency values, respecting parameter kinds."""
    args = []
    kwargs = {}
    for parameter, value in zip(parameters, values):
        if parameter.kind is inspect.Parameter.POSITIONAL_ONLY:
            args.append(value)
        else:
            kwargs[parameter.name] = value
    return target(*args, **kwargs)


def _class_meta(key: TypeKey, cls: type, arguments: tuple) -> ComponentMeta:
    parameters = _injected_parameters(cls, _type_arguments(cls, arguments))
    dependencies = tuple(key_of(parameter.annotation) for parameter in parameters)

    def build(registry):
        values = [registry.get(dependency) for dependency in dependencies]
        return invoke(cls, parameters, values)

    return ComponentMeta(key, dependencies, build, _debug_site(cls))


def _lazy_meta(key: TypeKey, target: Any) -> ComponentMeta:
    dependency = key_of(target)

    def build(registry):
        return Lazy(partial(registry.get, dependency))

    return ComponentMeta(key, (dependency,), build, None, lazy=True)


def _wrapper_meta(key: TypeKey, wrapper: type, target: Any) -> ComponentMeta:
    inner = component_meta(target)

    def build(registry):
        return wrapper(inner.build(registry))

    return ComponentMeta(key, inner.dependencies, build, inner.debug_site)


def _injected_parameters(target: Callable, substitutions: dict) -> list[inspect.Parameter]:
    """Extract dependency information from a callable's signature and annotations.

    Example:
        >>> def service(db: Database, cache: Annotated[Cache, "redis"], retries=3) -> Service:
        ...     pass
        >>> [p.annotation for p in _injected_parameters(service, {})]
        [Database, Annotated[Cache, "redis"]]
    """
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError) as exc:
        raise DependencyError(
            f"Cannot inspect the constructor of {type_name(target)}: {exc}"
        ) from exc
    hints = _type_hints(target)

    result = []
    for name, parameter in signature.parameters.items():
        if parameter.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        if parameter.default is not inspect.Parameter.empty:
            continue
        if name not in hints:
            raise DependencyError(
                "Dependency <%s> of provider <%s> is not annotated"
                % (name, getattr(target, "__qualname__", target))
            )
        result.append(parameter.replace(annotation=_substitute(hints[name], substitutions)))
    return result


def _type_hints(target: Callable) -> dict[str, Any]:
    try:
        return get_type_hints(_annotated(target), include_extras=True)
    except (NameError, TypeError) as exc:
        raise DependencyError(
            f"Cannot resolve annotations of {type_name(target)}: {exc}"
        ) from exc


def _annotated(target: Callable) -> Callable:
    """The object whose ``__annotations__`` describe calling ``target``."""
    if isinstance(target, partial):
        return _annotated(target.func)
    if inspect.isclass(target):
        # Dataclass fields carry the annotations; other classes annotate __init__.
        return target if dataclasses.is_dataclass(target) else target.__init__
    if inspect.isroutine(target) or not callable(target):
        return target
    return type(target).__call__


def _type_arguments(cls: type, arguments: tuple) -> dict:
    """Map every type variable of ``cls`` and its generic bases to a concrete type.

    ``Pair[int]`` binds ``Pair``'s own parameters from the subscript;
    ``class IntPair(Pair[int])`` binds them from its declared bases.
    """
    substitutions = dict(zip(getattr(cls, "__parameters__", ()), arguments))
    for klass in cls.__mro__:
        for base in klass.__dict__.get("__orig_bases__", ()):
            origin = get_origin(base)
            if origin is None or origin is Generic or origin is Protocol:
                continue
            for parameter, argument in zip(getattr(origin, "__parameters__", ()), get_args(base)):
                substitutions.setdefault(parameter, _substitute(argument, substitutions))
    return substitutions


def _substitute(hint: Any, substitutions: dict) -> Any:
    if isinstance(hint, TypeVar):
        return substitutions.get(hint, hint)
    parameters = getattr(hint, "__parameters__", ())
    if substitutions and parameters and get_origin(hint) is not None:
        return hint[tuple(substitutions.get(parameter, parameter) for parameter in parameters)]
    return hint


def _debug_site(cls: type) -> Optional[str]:
    try:
        path = inspect.getsourcefile(cls)
        _, line = inspect.getsourcelines(cls)
    except (OSError, TypeError):
        return None
    if path is None:
        return None
    return f"{path}:{line}"
