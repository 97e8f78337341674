from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Annotated, Any, NamedTuple, TypeVar, Union, get_args, get_origin, overload

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])
M = TypeVar("M")

AUTOWIRED_ATTR = "__autowired__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class Autowired(NamedTuple):
    """Mark a field as an injection point.

    Attach ``Autowired`` metadata to ``typing.Annotated`` on a class-level
    attribute annotation. ``Inject[T]`` is the shorthand for
    ``Annotated[T, Autowired()]``.

    Examples:
        .. code-block:: python

            class ReportService:
                logger: Inject[Logger]
                audit: Annotated[AuditSink, Autowired(required=False)]

    """

    required: bool = True


class Qualifier(NamedTuple):
    """Pick among same-typed components by tag.

    A component is eligible for a qualified injection point only when its
    qualifier tags include ``value``.

    Examples:
        .. code-block:: python

            PrimaryDb = Annotated[Database, Qualifier("primary")]


            class Repo:
                db: Inject[PrimaryDb]

    """

    value: str


class MaybeMarker:
    """Marker that indicates a dependency is optional and may resolve to ``None``."""


if TYPE_CHECKING:
    Inject = Union[T, T]  # noqa: UP007,PYI016
    """Mark a field or callable parameter for injection.

    At runtime ``Inject[T]`` becomes ``Annotated[T, Autowired()]``.
    """

    Maybe = T | None  # type: ignore[misc]
    """Mark a dependency as explicitly optional.

    At runtime ``Maybe[T]`` becomes ``Annotated[T, MaybeMarker()]``.
    """

else:

    class Inject:
        """Mark a field or callable parameter for injection.

        At runtime ``Inject[T]`` resolves to ``Annotated[T, Autowired()]``.
        Metadata of an ``Annotated`` item (for example a ``Qualifier``) is
        preserved.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, Autowired]:
            return _append_metadata(item, Autowired())

    class Maybe:
        """Mark a dependency as explicitly optional.

        At runtime ``Maybe[T]`` resolves to ``Annotated[T, MaybeMarker()]``.
        A missing component is injected as ``None``.
        """

        def __class_getitem__(cls, item: T) -> Annotated[T, MaybeMarker]:
            return _append_metadata(item, MaybeMarker())


@overload
def autowired(func: F, /) -> F: ...


@overload
def autowired(*, required: bool = True) -> Callable[[F], F]: ...


def autowired(func: F | None = None, /, *, required: bool = True) -> F | Callable[[F], F]:
    """Mark a constructor or configuration method as an injection point.

    Every parameter of the decorated callable (except ``self``) is resolved
    from the registry. ``required`` applies to all parameters; individual
    parameters may still be declared optional with ``Maybe[T]``, ``T | None``
    or a default value.

    Examples:
        .. code-block:: python

            class Notifier:
                @autowired
                def __init__(self, transport: Transport) -> None: ...

                @autowired(required=False)
                def use_metrics(self, metrics: Metrics) -> None: ...

    Args:
        func: The callable to mark when used as a bare decorator.
        required: Whether a missing component fails the injection point.

    """

    def decorator(target: F) -> F:
        setattr(target, AUTOWIRED_ATTR, Autowired(required=required))
        return target

    if func is not None:
        return decorator(func)
    return decorator


def autowired_marker(member: object) -> Autowired | None:
    """Return the ``Autowired`` marker set by ``@autowired`` on a callable, if any."""
    marker = getattr(member, AUTOWIRED_ATTR, None)
    if isinstance(marker, Autowired):
        return marker
    return None


def find_metadata(annotation: Any, marker_type: type[M]) -> M | None:
    """Return the first ``Annotated`` metadata item of ``marker_type``."""
    if get_origin(annotation) is not Annotated:
        return None
    annotation_args = get_args(annotation)
    if len(annotation_args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None
    return next(
        (item for item in annotation_args[1:] if isinstance(item, marker_type)),
        None,
    )


def is_maybe_annotation(annotation: Any) -> bool:
    """Return True when annotation is Annotated[..., MaybeMarker()]."""
    return find_metadata(annotation, MaybeMarker) is not None


def _append_metadata(item: Any, marker: object) -> Any:
    if get_origin(item) is Annotated:
        args = get_args(item)
        return build_annotated_key((args[0], *args[1:], marker))
    return build_annotated_key((item, marker))


def build_annotated_key(params: tuple[object, ...]) -> Any:
    """Return Annotated[...] with a pre-built params tuple (Py 3.10+ compatible)."""
    try:
        return Annotated.__class_getitem__(params)  # type: ignore[attr-defined]
    except AttributeError:
        return Annotated.__getitem__(params)  # type: ignore[attr-defined]
