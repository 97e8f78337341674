from __future__ import annotations

import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass, field
from inspect import Parameter
from typing import Any, ClassVar, Protocol, TypeVar, Union, get_args, get_type_hints

from autowire._internal.type_checks import is_union, unwrap_annotated
from autowire.exceptions import AutowireInjectionPointError
from autowire.markers import (
    Autowired,
    Qualifier,
    autowired_marker,
    find_metadata,
    is_maybe_annotation,
)
from autowire.points import InjectionDependency, InjectionPoint, InjectionPointKind, Requirement

_MISSING_ANNOTATION: Any = object()
_VARIADIC_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)

M = TypeVar("M")


class MetadataProtocol(Protocol):
    """Source of injection points for a component class."""

    def injection_points_of(self, component_type: type[Any]) -> tuple[InjectionPoint, ...]:
        """Return field, constructor and method points, in that order."""
        ...


@dataclass(frozen=True, slots=True)
class InjectedCallableInspection:
    """Injection metadata derived from a plain callable."""

    point: InjectionPoint
    signature: inspect.Signature
    public_signature: inspect.Signature
    """The signature with ``Inject[...]`` parameters hidden."""


@dataclass(slots=True)
class InjectionPointInspector:
    """Discover injection points from ``Inject``/``Autowired`` markers.

    Fields are class-level annotations carrying ``Autowired`` metadata. The
    constructor and configuration methods are marked with ``@autowired``.
    Superclass members come before subclass members; an overriding method is
    injected only when the override itself is marked. Results are cached per
    class.
    """

    _cache: dict[type[Any], tuple[InjectionPoint, ...]] = field(default_factory=dict)

    _SKIPPED_METHOD_NAMES: ClassVar[frozenset[str]] = frozenset({"__init__", "__new__"})

    def injection_points_of(self, component_type: type[Any]) -> tuple[InjectionPoint, ...]:
        """Return field, constructor and method points of ``component_type``.

        Args:
            component_type: Component class to inspect.

        """
        cached = self._cache.get(component_type)
        if cached is not None:
            return cached

        points = (
            *self.field_points(component_type),
            *self.constructor_points(component_type),
            *self.method_points(component_type),
        )
        self._cache[component_type] = points
        return points

    def field_points(self, component_type: type[Any]) -> tuple[InjectionPoint, ...]:
        """Return one point per ``Autowired``-annotated class attribute."""
        try:
            hints = get_type_hints(component_type, include_extras=True)
        except (AttributeError, NameError, TypeError) as error:
            msg = (
                f"Unable to evaluate annotations of '{component_type.__qualname__}'. "
                f"Original annotation error: {error}"
            )
            raise AutowireInjectionPointError(msg) from error

        points: list[InjectionPoint] = []
        for name in _annotated_names_base_first(component_type):
            annotation = hints.get(name, _MISSING_ANNOTATION)
            marker = _dependency_metadata(annotation, Autowired)
            if marker is None:
                continue
            dependency = self._build_dependency(
                name=name,
                annotation=annotation,
                ordinal=0,
                point_required=marker.required,
                has_default=_has_class_default(component_type, name),
            )
            points.append(
                InjectionPoint(
                    kind=InjectionPointKind.FIELD,
                    owner=component_type,
                    member_name=name,
                    dependencies=(dependency,),
                    required=marker.required,
                ),
            )
        return tuple(points)

    def constructor_points(self, component_type: type[Any]) -> tuple[InjectionPoint, ...]:
        """Return the ``@autowired`` constructor point, if the class has one."""
        init = component_type.__init__
        marker = autowired_marker(init)
        if marker is None:
            return ()
        dependencies = self._callable_dependencies(
            init,
            owner_name=f"{component_type.__qualname__}.__init__",
            point_required=marker.required,
            skip_first_parameter=True,
            injected_only=False,
        )
        return (
            InjectionPoint(
                kind=InjectionPointKind.CONSTRUCTOR,
                owner=component_type,
                member_name="__init__",
                dependencies=dependencies,
                required=marker.required,
            ),
        )

    def method_points(self, component_type: type[Any]) -> tuple[InjectionPoint, ...]:
        """Return points for ``@autowired`` configuration methods, superclass first."""
        points: list[InjectionPoint] = []
        for name in _member_names_base_first(component_type):
            if name in self._SKIPPED_METHOD_NAMES:
                continue
            member = inspect.getattr_static(component_type, name)
            if isinstance(member, (staticmethod, classmethod)) or not inspect.isfunction(member):
                continue
            marker = autowired_marker(member)
            if marker is None:
                continue
            dependencies = self._callable_dependencies(
                member,
                owner_name=f"{component_type.__qualname__}.{name}",
                point_required=marker.required,
                skip_first_parameter=True,
                injected_only=False,
            )
            points.append(
                InjectionPoint(
                    kind=InjectionPointKind.METHOD,
                    owner=component_type,
                    member_name=name,
                    dependencies=dependencies,
                    required=marker.required,
                ),
            )
        return tuple(points)

    def inspect_callable(self, callable_obj: Callable[..., Any]) -> InjectedCallableInspection:
        """Build a method point from the ``Inject[...]`` parameters of a plain callable.

        Args:
            callable_obj: Function whose ``Inject[...]`` parameters are resolved.

        """
        signature = inspect.signature(callable_obj)
        name = getattr(callable_obj, "__qualname__", repr(callable_obj))
        dependencies = self._callable_dependencies(
            callable_obj,
            owner_name=name,
            point_required=True,
            skip_first_parameter=False,
            injected_only=True,
        )
        hidden = {dependency.name for dependency in dependencies}
        public_signature = signature.replace(
            parameters=[
                parameter
                for parameter in signature.parameters.values()
                if parameter.name not in hidden
            ],
        )
        return InjectedCallableInspection(
            point=InjectionPoint(
                kind=InjectionPointKind.METHOD,
                owner=callable_obj,
                member_name=name,
                dependencies=dependencies,
            ),
            signature=signature,
            public_signature=public_signature,
        )

    def _callable_dependencies(
        self,
        callable_obj: Callable[..., Any],
        *,
        owner_name: str,
        point_required: bool,
        skip_first_parameter: bool,
        injected_only: bool,
    ) -> tuple[InjectionDependency, ...]:
        parameters = tuple(inspect.signature(callable_obj).parameters.values())
        if skip_first_parameter and parameters:
            parameters = parameters[1:]
        annotations, annotation_error = _resolved_type_hints(callable_obj)

        dependencies: list[InjectionDependency] = []
        for parameter in parameters:
            if parameter.kind in _VARIADIC_KINDS:
                continue
            annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
            if annotation is _MISSING_ANNOTATION:
                raw_annotation = parameter.annotation
                if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
                    annotation = raw_annotation
            if injected_only and _dependency_metadata(annotation, Autowired) is None:
                continue
            if annotation is _MISSING_ANNOTATION:
                if parameter.default is not Parameter.empty:
                    continue
                error_message = (
                    f"Unable to infer dependency for parameter '{parameter.name}' "
                    f"of '{owner_name}'. Add a type annotation."
                )
                if annotation_error is None:
                    raise AutowireInjectionPointError(error_message)
                msg = f"{error_message} Original annotation error: {annotation_error}"
                raise AutowireInjectionPointError(msg) from annotation_error

            dependencies.append(
                self._build_dependency(
                    name=parameter.name,
                    annotation=annotation,
                    ordinal=len(dependencies),
                    point_required=point_required,
                    parameter=parameter,
                ),
            )
        return tuple(dependencies)

    def _build_dependency(
        self,
        *,
        name: str,
        annotation: Any,
        ordinal: int,
        point_required: bool,
        parameter: Parameter | None = None,
        has_default: bool = False,
    ) -> InjectionDependency:
        member, is_optional_union = _strip_optional(unwrap_annotated(annotation))
        qualifier = _dependency_metadata(annotation, Qualifier)
        parameter_marker = _dependency_metadata(annotation, Autowired)
        target = unwrap_annotated(member)
        nullable = (
            is_maybe_annotation(annotation) or is_maybe_annotation(member) or is_optional_union
        )
        if parameter is not None:
            has_default = parameter.default is not Parameter.empty
        required = (
            point_required
            and (parameter_marker is None or parameter_marker.required)
            and not nullable
            and not has_default
        )
        return InjectionDependency(
            name=name,
            target=target,
            ordinal=ordinal,
            requirement=Requirement.REQUIRED if required else Requirement.OPTIONAL,
            qualifier=qualifier.value if qualifier is not None else None,
            nullable=nullable,
            has_default=has_default,
        )


def _dependency_metadata(annotation: Any, marker_type: type[M]) -> M | None:
    """Return marker metadata of ``annotation`` or of its ``None``-stripped member.

    ``Inject[PrimaryLogger | None]`` and ``Optional[PrimaryLogger]`` keep the
    qualifier of the ``PrimaryLogger`` alias.
    """
    found = find_metadata(annotation, marker_type)
    if found is not None:
        return found
    member, is_optional_union = _strip_optional(unwrap_annotated(annotation))
    if not is_optional_union:
        return None
    return find_metadata(member, marker_type)


def _strip_optional(annotation: Any) -> tuple[Any, bool]:
    if not is_union(annotation):
        return annotation, False
    members = tuple(member for member in get_args(annotation) if member is not type(None))
    if len(members) == len(get_args(annotation)):
        return annotation, False
    if len(members) == 1:
        return members[0], True
    return Union[members], True


def _resolved_type_hints(callable_obj: Callable[..., Any]) -> tuple[dict[str, Any], Exception | None]:
    try:
        return get_type_hints(callable_obj, include_extras=True), None
    except (AttributeError, NameError, TypeError) as error:
        return {}, error


def _has_class_default(component_type: type[Any], name: str) -> bool:
    value = inspect.getattr_static(component_type, name, _MISSING_ANNOTATION)
    return value is not _MISSING_ANNOTATION and not isinstance(value, types.MemberDescriptorType)


def _annotated_names_base_first(component_type: type[Any]) -> list[str]:
    names: list[str] = []
    for klass in reversed(component_type.__mro__):
        for name in inspect.get_annotations(klass):
            if name not in names:
                names.append(name)
    return names


def _member_names_base_first(component_type: type[Any]) -> list[str]:
    names: list[str] = []
    for klass in reversed(component_type.__mro__):
        if klass is object:
            continue
        for name in klass.__dict__:
            if name not in names:
                names.append(name)
    return names
