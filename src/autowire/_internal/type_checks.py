from __future__ import annotations

import types
from typing import Annotated, Any, TypeGuard, TypeVar, Union, get_args, get_origin

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_union(annotation: Any) -> bool:
    """Return true for ``Union[...]``, ``Optional[...]`` and ``X | Y`` annotations."""
    return get_origin(annotation) in _UNION_ORIGINS


def unwrap_annotated(annotation: Any) -> Any:
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def is_assignable(source: Any, target: Any) -> bool:
    """Return whether a component declared as ``source`` can be injected into ``target``.

    Plain classes follow ``issubclass``. Parameterized targets additionally
    require compatible type arguments, looked up on the source itself or on its
    generic base classes (``class StrRepo(Repo[str])`` is a ``Repo[str]``).
    Arguments are compared covariantly. A raw generic source such as ``list`` is
    not assignable to a parameterized target such as ``list[Logger]``.

    Args:
        source: Declared type of a registered component.
        target: Declared type of an injection point.

    """
    source = unwrap_annotated(source)
    target = unwrap_annotated(target)
    if target is Any or target is object:
        return True
    if source == target:
        return True
    if is_union(target):
        return any(is_assignable(source, member) for member in get_args(target))
    if is_union(source):
        return all(is_assignable(member, target) for member in get_args(source))

    target_origin = get_origin(target)
    if target_origin is None:
        return _is_subclass(get_origin(source) or source, target)

    target_args = get_args(target)
    return any(
        _arguments_compatible(view, target_origin=target_origin, target_args=target_args)
        for view in _parameterized_views(source)
    )


def _arguments_compatible(view: Any, *, target_origin: Any, target_args: tuple[Any, ...]) -> bool:
    if not _is_subclass(get_origin(view), target_origin):
        return False
    view_args = _variadic_tuple_args(get_args(view))
    target_args = _variadic_tuple_args(target_args)
    if not view_args or len(view_args) != len(target_args):
        return False
    return all(
        _argument_compatible(view_arg, target_arg)
        for view_arg, target_arg in zip(view_args, target_args, strict=True)
    )


def _argument_compatible(source_arg: Any, target_arg: Any) -> bool:
    if target_arg is Any or isinstance(target_arg, TypeVar):
        return True
    if isinstance(source_arg, TypeVar):
        return False
    return is_assignable(source_arg, target_arg)


def _variadic_tuple_args(args: tuple[Any, ...]) -> tuple[Any, ...]:
    # tuple[T, ...] compares like a single-argument sequence.
    if len(args) == 2 and args[1] is Ellipsis:  # noqa: PLR2004
        return args[:1]
    return args


def _parameterized_views(source: Any) -> list[Any]:
    if get_origin(source) is not None:
        return [source]
    if not is_runtime_class(source):
        return []
    views: list[Any] = []
    for klass in source.__mro__:
        views.extend(
            base for base in getattr(klass, "__orig_bases__", ()) if get_origin(base) is not None
        )
    return views


def _is_subclass(source: Any, target: Any) -> bool:
    if not isinstance(source, type) or not isinstance(target, type):
        return False
    try:
        return issubclass(source, target)
    except TypeError:
        # Non runtime-checkable protocols and similar special forms.
        return False


__all__ = ["is_assignable", "is_runtime_class", "is_union", "unwrap_annotated"]
