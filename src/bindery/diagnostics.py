"""Rendering of resolution failures into readable reports."""

from typing import Iterable

from bindery.domain import MissingDependency

__all__ = ["short_name", "render_name", "render_names", "format_missing_dependencies"]


def short_name(name: str) -> str:
    """Strip the module path from the outermost part of a type name.

    Only dots outside square brackets count, so type arguments keep their
    full names.

    Example:
        >>> short_name("app.storage.Database")
        'Database'
        >>> short_name("bindery.lazy.Lazy[app.storage.Database]")
        'Lazy[app.storage.Database]'
    """
    depth = 0
    for index in range(len(name) - 1, -1, -1):
        char = name[index]
        if char == "]":
            depth += 1
        elif char == "[":
            depth -= 1
        elif char == "." and depth == 0:
            return name[index + 1:]
    return name


def render_name(name: str, short: bool) -> str:
    return short_name(name) if short else name


def render_names(names: Iterable[str], short: bool) -> str:
    return ", ".join(render_name(name, short) for name in names)


def format_missing_dependencies(entries: list[MissingDependency], short: bool) -> str:
    """Build the multi-component report for unsatisfied dependencies.

    Each component gets its own block, naming the component, where it was
    declared (when known) and every dependency nothing provides.
    """
    lines = ["Missing injection values:"]
    for entry in entries:
        lines.append(f"for type {render_name(entry.name, short)}")
        if entry.debug_site:
            lines.append(f" at {entry.debug_site}")
        lines.append(f"missing dependencies: {render_names(entry.missing, short)}")
        lines.append("")
    return "\n".join(lines)
