from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from inspect import Parameter
from typing import Any, TypeVar

from autowire._internal.introspection import InjectionPointInspector, MetadataProtocol
from autowire._internal.resolver import InjectionPointResolver
from autowire.exceptions import AutowireComponentInjectionError, AutowireResolutionError
from autowire.points import InjectionPoint, InjectionPointKind
from autowire.policies import FailurePolicy
from autowire.registry import RegistryProtocol, RegistrySnapshot
from autowire.resolution import PointResolution

T = TypeVar("T")

logger = logging.getLogger(__name__)

ResolutionPlan = dict[InjectionPoint, PointResolution | AutowireResolutionError]
"""Outcome per injection point, in resolution order."""

_KIND_ORDER = (
    InjectionPointKind.FIELD,
    InjectionPointKind.CONSTRUCTOR,
    InjectionPointKind.METHOD,
)


class AutowiredPostProcessor:
    """Resolve and apply the injection points of components.

    The processor is the caller-facing surface of the resolver. Each call takes
    one registry snapshot, resolves every injection point of the component
    against it, and only then assigns fields and invokes configuration methods,
    so a failing component is never partially injected.

    Points are handled in a fixed order: fields, then the constructor (only when
    the component is not constructed yet), then configuration methods.
    """

    def __init__(
        self,
        registry: RegistryProtocol,
        metadata: MetadataProtocol | None = None,
        *,
        name_fallback: bool = True,
        failure_policy: FailurePolicy = FailurePolicy.RAISE_FIRST,
    ) -> None:
        """Initialize a post processor.

        Args:
            registry: Source of component descriptors. A fresh snapshot is taken
                for every call.
            metadata: Source of injection points. Defaults to an
                ``InjectionPointInspector`` reading ``Inject``/``@autowired``
                markers.
            name_fallback: Pick a candidate whose logical name equals the field or
                parameter name when several candidates match.
            failure_policy: Whether ``inject``/``create`` raise the first failure or
                one error listing all failures.

        """
        self._registry = registry
        self._inspector = InjectionPointInspector()
        self._metadata: MetadataProtocol = metadata if metadata is not None else self._inspector
        self._resolver = InjectionPointResolver(name_fallback=name_fallback)
        self._failure_policy = failure_policy

    def resolve_all(self, component: Any, *, constructed: bool = True) -> ResolutionPlan:
        """Resolve every injection point of a component without applying it.

        Failures are returned as exception instances instead of being raised.

        Args:
            component: Component instance or class.
            constructed: Whether the constructor already ran. Constructor points
                are only resolved when ``False``.

        """
        component_type = component if isinstance(component, type) else type(component)
        return self._resolve_plan(
            self._registry.snapshot(),
            component_type,
            constructed=constructed,
        )

    def inject(self, instance: T) -> T:
        """Assign fields and invoke configuration methods of a constructed component.

        Args:
            instance: Component to inject into.

        Raises:
            AutowireResolutionError: A point failed under ``FailurePolicy.RAISE_FIRST``.
            AutowireComponentInjectionError: Points failed under
                ``FailurePolicy.RAISE_ALL``.

        """
        plan = self.resolve_all(instance, constructed=True)
        resolutions = self._successful_resolutions(type(instance), plan)
        self._apply(instance, resolutions)
        return instance

    def create(self, component_type: type[T]) -> T:
        """Resolve the constructor, instantiate, then inject fields and methods.

        All points are resolved against one snapshot before the constructor
        runs.

        Args:
            component_type: Component class to build.

        """
        plan = self._resolve_plan(
            self._registry.snapshot(),
            component_type,
            constructed=False,
        )
        resolutions = self._successful_resolutions(component_type, plan)

        constructor = next(
            (
                resolution
                for resolution in resolutions
                if resolution.point.kind is InjectionPointKind.CONSTRUCTOR
            ),
            None,
        )
        if constructor is None:
            instance = component_type()
        else:
            args, kwargs = _call_arguments(
                inspect.signature(component_type),
                constructor.arguments(),
            )
            instance = component_type(*args, **kwargs)

        self._apply(
            instance,
            [
                resolution
                for resolution in resolutions
                if resolution.point.kind is not InjectionPointKind.CONSTRUCTOR
            ],
        )
        return instance

    def invoke(self, func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Call ``func`` with its ``Inject[...]`` parameters resolved.

        Positional and keyword arguments bind against the signature with the
        injected parameters hidden. An injected parameter passed by keyword is
        used as-is instead of being resolved.

        Args:
            func: Callable declaring ``Inject[...]`` parameters.
            *args: Positional arguments for the non-injected parameters.
            **kwargs: Keyword arguments forwarded to ``func``.

        """
        inspection = self._inspector.inspect_callable(func)
        injected = {dependency.name for dependency in inspection.point.dependencies}
        overrides = {name: value for name, value in kwargs.items() if name in injected}
        explicit = inspection.public_signature.bind_partial(
            *args,
            **{name: value for name, value in kwargs.items() if name not in injected},
        )
        dependencies = tuple(
            dependency
            for dependency in inspection.point.dependencies
            if dependency.name not in overrides
        )

        resolved: dict[str, Any] = {}
        if dependencies:
            point = InjectionPoint(
                kind=inspection.point.kind,
                owner=inspection.point.owner,
                member_name=inspection.point.member_name,
                dependencies=dependencies,
                required=inspection.point.required,
            )
            resolved = self._resolver.resolve_point(self._registry.snapshot(), point).arguments()

        call_args, call_kwargs = _call_arguments(
            inspection.signature,
            {**explicit.arguments, **resolved, **overrides},
        )
        return func(*call_args, **call_kwargs)

    def _resolve_plan(
        self,
        snapshot: RegistrySnapshot,
        component_type: type[Any],
        *,
        constructed: bool,
    ) -> ResolutionPlan:
        points = self._metadata.injection_points_of(component_type)
        plan: ResolutionPlan = {}
        for kind in _KIND_ORDER:
            if kind is InjectionPointKind.CONSTRUCTOR and constructed:
                continue
            for point in points:
                if point.kind is not kind:
                    continue
                try:
                    plan[point] = self._resolver.resolve_point(snapshot, point)
                except AutowireResolutionError as error:
                    plan[point] = error

        failed = sum(1 for outcome in plan.values() if isinstance(outcome, Exception))
        logger.info(
            "Resolved %d injection point(s) for %s against %d component(s): %d failed",
            len(plan),
            component_type.__qualname__,
            len(snapshot),
            failed,
        )
        return plan

    def _successful_resolutions(
        self,
        component_type: type[Any],
        plan: Mapping[InjectionPoint, PointResolution | AutowireResolutionError],
    ) -> list[PointResolution]:
        failures = {
            point: outcome
            for point, outcome in plan.items()
            if isinstance(outcome, AutowireResolutionError)
        }
        if failures:
            if self._failure_policy is FailurePolicy.RAISE_ALL:
                raise AutowireComponentInjectionError(component_type, failures)
            raise next(iter(failures.values()))
        return [outcome for outcome in plan.values() if isinstance(outcome, PointResolution)]

    def _apply(self, instance: Any, resolutions: list[PointResolution]) -> None:
        for resolution in resolutions:
            point = resolution.point
            if resolution.skipped:
                logger.debug("Skipping optional injection point %s", point.describe())
                continue
            if point.kind is InjectionPointKind.FIELD:
                for name, value in resolution.arguments().items():
                    setattr(instance, name, value)
            elif point.kind is InjectionPointKind.METHOD:
                method = getattr(instance, point.member_name)
                args, kwargs = _call_arguments(inspect.signature(method), resolution.arguments())
                method(*args, **kwargs)


def _call_arguments(
    signature: inspect.Signature,
    values: Mapping[str, Any],
) -> tuple[list[Any], dict[str, Any]]:
    """Split values keyed by parameter name into call arguments for ``signature``.

    Positional parameters are passed positionally while no gap occurs; a
    missing positional parameter with a default is filled with that default.
    Variadic values come from ``BoundArguments.arguments``.
    """
    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    positional = True
    for parameter in signature.parameters.values():
        if parameter.kind is Parameter.VAR_POSITIONAL:
            if positional:
                args.extend(values.get(parameter.name, ()))
            continue
        if parameter.kind is Parameter.VAR_KEYWORD:
            kwargs.update(values.get(parameter.name, {}))
            continue
        if parameter.kind is Parameter.KEYWORD_ONLY:
            if parameter.name in values:
                kwargs[parameter.name] = values[parameter.name]
            continue
        if parameter.name in values:
            if positional:
                args.append(values[parameter.name])
            else:
                kwargs[parameter.name] = values[parameter.name]
        elif positional and parameter.default is not Parameter.empty:
            args.append(parameter.default)
        else:
            positional = False
    return args, kwargs
