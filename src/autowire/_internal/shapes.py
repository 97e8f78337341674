from __future__ import annotations

import collections.abc
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, get_args, get_origin

from autowire._internal.type_checks import unwrap_annotated
from autowire.markers import Qualifier, find_metadata

_SEQUENCE_FACTORIES: dict[Any, Callable[[Iterable[Any]], Any]] = {
    list: list,
    set: set,
    frozenset: frozenset,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
}
_MAPPING_ORIGINS: frozenset[Any] = frozenset(
    {dict, collections.abc.Mapping, collections.abc.MutableMapping},
)
_VARIADIC_TUPLE_ARGS = 2


class ShapeKind(str, Enum):
    """Aggregation shape of an injection target."""

    SEQUENCE = "sequence"
    """Every matching element, ordered."""

    MAPPING = "mapping"
    """Every matching element keyed by its logical name."""


@dataclass(frozen=True, slots=True)
class ContainerShape:
    """A sequence-of-T or name-keyed mapping-of-T injection target."""

    kind: ShapeKind
    container: Any
    """The full target type, matched against whole-container components."""
    element: Any
    """Element type T with ``Annotated`` metadata removed."""
    element_qualifier: str | None
    factory: Callable[[Iterable[Any]], Any]


def container_shape_of(target: Any) -> ContainerShape | None:
    """Return the aggregation shape of ``target``, or ``None`` for plain targets.

    Mappings only aggregate when keyed by ``str`` because keys are component
    names. Tuples only aggregate in their variadic ``tuple[T, ...]`` form.

    Args:
        target: Declared type of an injection point.

    """
    origin = get_origin(target)
    args = get_args(target)
    if origin is None or not args:
        return None

    if origin in _MAPPING_ORIGINS:
        if len(args) != 2 or unwrap_annotated(args[0]) is not str:  # noqa: PLR2004
            return None
        return _build_shape(ShapeKind.MAPPING, container=target, element=args[1], factory=dict)

    if origin is tuple:
        if len(args) != _VARIADIC_TUPLE_ARGS or args[1] is not Ellipsis:
            return None
        return _build_shape(ShapeKind.SEQUENCE, container=target, element=args[0], factory=tuple)

    factory = _SEQUENCE_FACTORIES.get(origin)
    if factory is None or len(args) != 1:
        return None
    return _build_shape(ShapeKind.SEQUENCE, container=target, element=args[0], factory=factory)


def _build_shape(
    kind: ShapeKind,
    *,
    container: Any,
    element: Any,
    factory: Callable[[Iterable[Any]], Any],
) -> ContainerShape:
    qualifier = find_metadata(element, Qualifier)
    return ContainerShape(
        kind=kind,
        container=container,
        element=unwrap_annotated(element),
        element_qualifier=qualifier.value if qualifier is not None else None,
        factory=factory,
    )
