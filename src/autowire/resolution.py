from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, Final, Union, final

from autowire.points import InjectionDependency, InjectionPoint
from autowire.registry import ComponentDescriptor


@dataclass(frozen=True, slots=True)
class SingleResolution:
    """A dependency bound to exactly one component.

    Also used for a whole-container component injected as-is into a sequence
    or mapping target.
    """

    component: ComponentDescriptor

    def value(self) -> Any:
        return self.component.value


@dataclass(frozen=True, slots=True)
class SequenceResolution:
    """A dependency bound to every matching element, in aggregation order."""

    components: tuple[ComponentDescriptor, ...]
    factory: Callable[[Iterable[Any]], Any] = field(default=list, compare=False)
    """Builds the injected container from the ordered element values."""

    def value(self) -> Any:
        return self.factory(component.value for component in self.components)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(component.name for component in self.components)


@dataclass(frozen=True, slots=True)
class MappingResolution:
    """A dependency bound to every matching element, keyed by logical name."""

    components: tuple[ComponentDescriptor, ...]

    def value(self) -> dict[str, Any]:
        return {component.name: component.value for component in self.components}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(component.name for component in self.components)


@final
class _Absent:
    __slots__ = ()

    def value(self) -> None:
        return None

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "ABSENT"

    def __reduce__(self) -> str:
        return "ABSENT"


ABSENT: Final = _Absent()
"""Outcome of an optional dependency with no matching component."""

ResolutionResult = Union[SingleResolution, SequenceResolution, MappingResolution, _Absent]  # noqa: UP007


@dataclass(frozen=True, slots=True)
class PointResolution:
    """Resolution plan for one injection point.

    Holds one result per dependency, in parameter order. It is only built when
    every dependency resolved, so it never carries a partial binding.
    """

    point: InjectionPoint
    results: tuple[ResolutionResult, ...]

    @property
    def skipped(self) -> bool:
        """Return True when the member must not be assigned or invoked.

        This happens when a dependency that is optional only through
        ``required=False`` (not nullable and without a default) found nothing.
        """
        return any(
            result is ABSENT and not dependency.nullable and not dependency.has_default
            for dependency, result in self.bindings()
        )

    def bindings(self) -> tuple[tuple[InjectionDependency, ResolutionResult], ...]:
        return tuple(zip(self.point.dependencies, self.results, strict=True))

    def arguments(self) -> dict[str, Any]:
        """Return injectable values by dependency name.

        Absent dependencies with a default are omitted so the default applies;
        other absent dependencies map to ``None``.
        """
        arguments: dict[str, Any] = {}
        for dependency, result in self.bindings():
            if result is ABSENT and dependency.has_default:
                continue
            arguments[dependency.name] = result.value()
        return arguments
