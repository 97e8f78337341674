from __future__ import annotations

import pytest

from autowire._internal.resolver import InjectionPointResolver
from autowire.exceptions import (
    AutowireAmbiguousCandidatesError,
    AutowireNoCandidateError,
    AutowirePartialInjectionError,
)
from autowire.points import InjectionDependency, InjectionPoint, InjectionPointKind, Requirement
from autowire.registry import ComponentRegistry
from autowire.resolution import ABSENT, SequenceResolution, SingleResolution


class _Logger:
    pass


class _ConsoleLogger(_Logger):
    pass


class _FileLogger(_Logger):
    pass


class _Clock:
    pass


class _Cache:
    pass


def _point(*dependencies: InjectionDependency) -> InjectionPoint:
    return InjectionPoint(
        kind=InjectionPointKind.METHOD,
        owner=_Logger,
        member_name="configure",
        dependencies=dependencies,
    )


@pytest.fixture()
def loggers() -> ComponentRegistry:
    registry = ComponentRegistry()
    registry.add_instance(_FileLogger(), name="fileLogger", order=2, qualifiers={"primary"})
    registry.add_instance(_ConsoleLogger(), name="consoleLogger", order=1)
    return registry


def test_unique_candidate_binds(resolver: InjectionPointResolver, loggers: ComponentRegistry) -> None:
    result = resolver.resolve_dependency(
        loggers.snapshot(),
        InjectionDependency(name="logger", target=_FileLogger),
    )

    assert isinstance(result, SingleResolution)
    assert result.component.name == "fileLogger"


def test_missing_required_dependency_fails(resolver: InjectionPointResolver) -> None:
    dependency = InjectionDependency(name="clock", target=_Clock)

    with pytest.raises(AutowireNoCandidateError) as exc_info:
        resolver.resolve_dependency(ComponentRegistry().snapshot(), dependency)

    assert exc_info.value.dependency is dependency
    assert "'clock: _Clock'" in str(exc_info.value)


def test_missing_optional_dependency_is_absent(resolver: InjectionPointResolver) -> None:
    result = resolver.resolve_dependency(
        ComponentRegistry().snapshot(),
        InjectionDependency(name="clock", target=_Clock, requirement=Requirement.OPTIONAL),
    )

    assert result is ABSENT


def test_ambiguous_dependency_fails_even_when_optional(
    resolver: InjectionPointResolver,
    loggers: ComponentRegistry,
) -> None:
    dependency = InjectionDependency(name="logger", target=_Logger, requirement=Requirement.OPTIONAL)

    with pytest.raises(AutowireAmbiguousCandidatesError) as exc_info:
        resolver.resolve_dependency(loggers.snapshot(), dependency)

    assert [c.name for c in exc_info.value.candidates] == ["fileLogger", "consoleLogger"]


def test_declared_name_resolves_ambiguity(
    resolver: InjectionPointResolver,
    loggers: ComponentRegistry,
) -> None:
    result = resolver.resolve_dependency(
        loggers.snapshot(),
        InjectionDependency(name="consoleLogger", target=_Logger),
    )

    assert isinstance(result, SingleResolution)
    assert result.component.name == "consoleLogger"


def test_qualifier_resolves_ambiguity(
    resolver: InjectionPointResolver,
    loggers: ComponentRegistry,
) -> None:
    result = resolver.resolve_dependency(
        loggers.snapshot(),
        InjectionDependency(name="consoleLogger", target=_Logger, qualifier="primary"),
    )

    assert isinstance(result, SingleResolution)
    assert result.component.name == "fileLogger"


def test_qualifier_makes_untagged_single_candidate_ineligible(
    resolver: InjectionPointResolver,
) -> None:
    registry = ComponentRegistry()
    registry.add_instance(_ConsoleLogger())

    with pytest.raises(AutowireNoCandidateError, match="tagged 'primary'"):
        resolver.resolve_dependency(
            registry.snapshot(),
            InjectionDependency(name="logger", target=_Logger, qualifier="primary"),
        )


def test_name_fallback_disabled_keeps_ambiguity(loggers: ComponentRegistry) -> None:
    resolver = InjectionPointResolver(name_fallback=False)

    with pytest.raises(AutowireAmbiguousCandidatesError):
        resolver.resolve_dependency(
            loggers.snapshot(),
            InjectionDependency(name="consoleLogger", target=_Logger),
        )


def test_sequence_dependency_aggregates(
    resolver: InjectionPointResolver,
    loggers: ComponentRegistry,
) -> None:
    result = resolver.resolve_dependency(
        loggers.snapshot(),
        InjectionDependency(name="loggers", target=list[_Logger]),
    )

    assert isinstance(result, SequenceResolution)
    assert result.names == ("consoleLogger", "fileLogger")


def test_single_parameter_point_raises_the_underlying_error(
    resolver: InjectionPointResolver,
) -> None:
    point = _point(InjectionDependency(name="clock", target=_Clock))

    with pytest.raises(AutowireNoCandidateError) as exc_info:
        resolver.resolve_point(ComponentRegistry().snapshot(), point)

    assert exc_info.value.point is point


def test_multi_parameter_point_fails_as_a_whole(resolver: InjectionPointResolver) -> None:
    registry = ComponentRegistry()
    registry.add_instance(_Logger())
    point = _point(
        InjectionDependency(name="logger", target=_Logger),
        InjectionDependency(name="clock", target=_Clock, ordinal=1),
        InjectionDependency(name="cache", target=_Cache, ordinal=2),
    )

    with pytest.raises(AutowirePartialInjectionError) as exc_info:
        resolver.resolve_point(registry.snapshot(), point)

    failures = exc_info.value.failures
    assert [failure.dependency.name for failure in failures if failure.dependency] == [
        "clock",
        "cache",
    ]
    assert all(isinstance(failure, AutowireNoCandidateError) for failure in failures)
    assert exc_info.value.point is point


def test_one_unresolvable_parameter_fails_the_whole_point(resolver: InjectionPointResolver) -> None:
    registry = ComponentRegistry()
    registry.add_instance(_Logger())
    registry.add_instance(_Cache())
    point = _point(
        InjectionDependency(name="logger", target=_Logger),
        InjectionDependency(name="clock", target=_Clock, ordinal=1),
        InjectionDependency(name="cache", target=_Cache, ordinal=2),
    )

    with pytest.raises(AutowirePartialInjectionError) as exc_info:
        resolver.resolve_point(registry.snapshot(), point)

    error = exc_info.value
    (failure,) = error.failures
    assert isinstance(failure, AutowireNoCandidateError)
    assert failure.dependency is not None
    assert failure.dependency.name == "clock"
    assert "failed for 1 of 3 parameters" in str(error)
    assert not any(isinstance(value, SingleResolution) for value in vars(error).values())
    assert not any(isinstance(value, SingleResolution) for value in vars(failure).values())


def test_resolved_point_carries_one_result_per_dependency(
    resolver: InjectionPointResolver,
) -> None:
    registry = ComponentRegistry()
    logger = _Logger()
    registry.add_instance(logger)
    point = _point(
        InjectionDependency(name="logger", target=_Logger),
        InjectionDependency(name="clock", target=_Clock, ordinal=1, nullable=True, requirement=Requirement.OPTIONAL),
    )

    resolution = resolver.resolve_point(registry.snapshot(), point)

    assert resolution.results[1] is ABSENT
    assert resolution.arguments() == {"logger": logger, "clock": None}
    assert not resolution.skipped
