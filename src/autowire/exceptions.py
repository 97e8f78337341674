from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from autowire.points import InjectionDependency, InjectionPoint
    from autowire.registry import ComponentDescriptor


class AutowireError(Exception):
    """Represent a base class for all autowire-specific failures.

    Catch this type when you want to handle any autowire error path without
    matching each concrete exception class individually.
    """


class AutowireInvalidRegistrationError(AutowireError):
    """Signal an invalid component registration.

    Raised by ``ComponentRegistry.add_instance`` and ``ComponentRegistry.add``
    when a component name is empty or already taken, when ``order`` is not an
    integer, or when qualifier tags are not strings.

    Typical fixes include choosing a unique ``name`` per component and passing
    qualifiers as a collection of strings.
    """


class AutowireRegistryFrozenError(AutowireError):
    """Signal a registry mutation while a resolution phase is active.

    Raised by registration APIs between entering and leaving
    ``ComponentRegistry.resolution_phase()``. Resolutions running in parallel
    rely on one finalized snapshot for the whole phase.

    Typical fix is completing all registrations before resolution starts.
    """


class AutowireInjectionPointError(AutowireError):
    """Signal a marked member that cannot be turned into an injection point.

    Raised by ``InjectionPointInspector`` when an ``@autowired`` method or an
    ``Inject[...]`` attribute has an annotation that cannot be evaluated, or
    when a parameter without default carries no annotation at all.

    Typical fixes include importing the annotated types at module level and
    annotating every parameter of an ``@autowired`` method.
    """


class AutowireResolutionError(AutowireError):
    """Represent a deterministic failure to resolve an injection point.

    All resolution errors are pure functions of the registry snapshot used for
    the call. Retrying against the same snapshot fails the same way.

    Attributes:
        dependency: The dependency that failed, when the failure is bound to a
            single parameter or field.
        point: The owning injection point, once known.

    """

    def __init__(
        self,
        msg: str,
        *,
        dependency: InjectionDependency | None = None,
        point: InjectionPoint | None = None,
    ) -> None:
        super().__init__(msg)
        self.dependency = dependency
        self.point = point


class AutowireNoCandidateError(AutowireResolutionError):
    """Signal that a required dependency has no matching component.

    Raised when neither a direct type match nor (after qualifier filtering) any
    eligible candidate exists for a required field or parameter.

    Typical fixes include registering a component of the requested type,
    checking the requested ``Qualifier`` tag, or marking the dependency as
    optional with ``Maybe[T]``, ``T | None`` or ``@autowired(required=False)``.
    """

    def __init__(
        self,
        dependency: InjectionDependency,
        *,
        point: InjectionPoint | None = None,
    ) -> None:
        msg = f"No component satisfies required dependency {dependency.describe()}."
        if dependency.qualifier is not None:
            msg = (
                f"No component tagged '{dependency.qualifier}' satisfies required "
                f"dependency {dependency.describe()}."
            )
        super().__init__(msg, dependency=dependency, point=point)


class AutowireAmbiguousCandidatesError(AutowireResolutionError):
    """Signal that several components survive disambiguation.

    Ambiguity is always fatal, even for optional dependencies. The resolver
    never picks one of several equally eligible components on its own.

    Typical fixes include adding a ``Qualifier`` to the injection point and a
    matching tag to one component, or renaming the field/parameter to the
    logical name of the intended component.

    Attributes:
        candidates: The components left after qualifier and name matching.

    """

    def __init__(
        self,
        dependency: InjectionDependency,
        candidates: Sequence[ComponentDescriptor],
        *,
        point: InjectionPoint | None = None,
    ) -> None:
        names = ", ".join(f"'{candidate.name}'" for candidate in candidates)
        msg = (
            f"Dependency {dependency.describe()} is ambiguous: {len(candidates)} components "
            f"match ({names}). Add a qualifier or rename the injection point to one of them."
        )
        super().__init__(msg, dependency=dependency, point=point)
        self.candidates = tuple(candidates)


class AutowirePartialInjectionError(AutowireResolutionError):
    """Signal that a multi-parameter injection point could not be fully bound.

    Raised for constructors and configuration methods with several parameters
    when at least one parameter fails. None of the successfully resolved
    parameters are exposed.

    Attributes:
        failures: Per-parameter failures in parameter order.

    """

    def __init__(
        self,
        point: InjectionPoint,
        failures: Sequence[AutowireResolutionError],
    ) -> None:
        details = "; ".join(str(failure) for failure in failures)
        msg = (
            f"Injection point {point.describe()} failed for {len(failures)} of "
            f"{len(point.dependencies)} parameters: {details}"
        )
        super().__init__(msg, point=point)
        self.failures = tuple(failures)


class AutowireComponentInjectionError(AutowireError):
    """Signal that one or more injection points of a component failed.

    Raised by ``AutowiredPostProcessor.inject`` and ``create`` when the
    processor runs with ``FailurePolicy.RAISE_ALL``.

    Attributes:
        component_type: The class whose injection points were resolved.
        failures: Failing injection points mapped to their errors.

    """

    def __init__(
        self,
        component_type: type[Any],
        failures: Mapping[InjectionPoint, AutowireResolutionError],
    ) -> None:
        points = ", ".join(point.describe() for point in failures)
        msg = (
            f"Cannot inject component '{component_type.__qualname__}': "
            f"{len(failures)} injection point(s) failed ({points})."
        )
        super().__init__(msg)
        self.component_type = component_type
        self.failures = dict(failures)
