from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Optional

import pytest

from autowire import (
    ABSENT,
    AutowireAmbiguousCandidatesError,
    AutowireComponentInjectionError,
    AutowiredPostProcessor,
    AutowireNoCandidateError,
    AutowirePartialInjectionError,
    Autowired,
    ComponentRegistry,
    FailurePolicy,
    Inject,
    InjectionPointKind,
    Maybe,
    PointResolution,
    Qualifier,
    autowired,
)


class _Logger:
    pass


class _ConsoleLogger(_Logger):
    pass


class _FileLogger(_Logger):
    pass


class _Clock:
    pass


class _Metrics:
    pass


class _ReportService:
    loggers: Inject[list[_Logger]]
    by_name: Inject[Mapping[str, _Logger]]
    primary: Inject[Annotated[_Logger, Qualifier("primary")]]

    def __init__(self) -> None:
        self.calls: list[str] = []

    @autowired
    def configure(self, consoleLogger: _Logger) -> None:  # noqa: N803
        self.calls.append("configure")
        self.console = consoleLogger


class _Clocked:
    clock: Inject[_Clock]

    @autowired
    def __init__(self, logger: _ConsoleLogger, clock: _Clock) -> None:
        self.logger = logger
        self.clock_from_init = clock
        self.seen_at_init = getattr(self, "clock", None)

    @autowired
    def after(self, clock: _Clock) -> None:
        self.clock_in_method = clock
        self.field_before_method = self.clock


class _Optional:
    metrics: Annotated[_Metrics, Autowired(required=False)]
    maybe: Inject[Maybe[_Metrics]]
    fallback: Inject[_Metrics | None]

    def __init__(self) -> None:
        self.configured = False

    @autowired(required=False)
    def use_metrics(self, metrics: _Metrics) -> None:
        self.configured = True

    @autowired
    def use_defaults(self, clock: _Clock, metrics: _Metrics | None, label: str = "report") -> None:
        self.label = label
        self.nullable_metrics = metrics


class _Broken:
    clock: Inject[_Clock]
    metrics: Inject[_Metrics]

    @autowired
    def configure(self, logger: _Logger, clock: _Clock) -> None:
        pass


_PrimaryLogger = Annotated[_Logger, Qualifier("primary")]


class _NullableQualified:
    logger: Inject[_PrimaryLogger | None]

    @autowired
    def configure(self, logger: Optional[_PrimaryLogger]) -> None:
        self.configured = logger


@pytest.fixture()
def populated(registry: ComponentRegistry) -> ComponentRegistry:
    registry.add_instance(_FileLogger(), name="fileLogger", order=1, qualifiers={"primary"})
    registry.add_instance(_ConsoleLogger(), name="consoleLogger")
    registry.add_instance(_Clock())
    return registry


def test_inject_assigns_fields_and_calls_methods(populated: ComponentRegistry) -> None:
    service = AutowiredPostProcessor(populated).inject(_ReportService())

    assert [type(logger) for logger in service.loggers] == [_FileLogger, _ConsoleLogger]
    assert list(service.by_name) == ["fileLogger", "consoleLogger"]
    assert isinstance(service.primary, _FileLogger)
    assert isinstance(service.console, _ConsoleLogger)
    assert service.calls == ["configure"]


def test_create_runs_constructor_before_fields_and_methods(populated: ComponentRegistry) -> None:
    clock = populated.snapshot().find_by_name("_Clock")
    assert clock is not None

    instance = AutowiredPostProcessor(populated).create(_Clocked)

    assert isinstance(instance.logger, _ConsoleLogger)
    assert instance.clock_from_init is clock.value
    assert instance.seen_at_init is None
    assert instance.clock is clock.value
    assert instance.field_before_method is clock.value
    assert instance.clock_in_method is clock.value


def test_resolve_all_orders_fields_then_constructor_then_methods(
    populated: ComponentRegistry,
) -> None:
    plan = AutowiredPostProcessor(populated).resolve_all(_Clocked, constructed=False)

    assert [point.kind for point in plan] == [
        InjectionPointKind.FIELD,
        InjectionPointKind.CONSTRUCTOR,
        InjectionPointKind.METHOD,
    ]
    assert all(isinstance(outcome, PointResolution) for outcome in plan.values())


def test_resolve_all_skips_constructor_of_constructed_components(
    populated: ComponentRegistry,
) -> None:
    plan = AutowiredPostProcessor(populated).resolve_all(_Clocked)

    assert InjectionPointKind.CONSTRUCTOR not in {point.kind for point in plan}


def test_resolve_all_reports_failures_as_values(registry: ComponentRegistry) -> None:
    registry.add_instance(_Clock())

    plan = AutowiredPostProcessor(registry).resolve_all(_Broken())

    outcomes = {point.member_name: outcome for point, outcome in plan.items()}
    assert isinstance(outcomes["clock"], PointResolution)
    assert isinstance(outcomes["metrics"], AutowireNoCandidateError)
    assert isinstance(outcomes["configure"], AutowirePartialInjectionError)


def test_optional_points_are_skipped_or_nulled(registry: ComponentRegistry) -> None:
    registry.add_instance(_Clock())

    instance = AutowiredPostProcessor(registry).inject(_Optional())

    assert not hasattr(instance, "metrics")
    assert instance.maybe is None
    assert instance.fallback is None
    assert instance.configured is False
    assert instance.label == "report"
    assert instance.nullable_metrics is None


def test_optional_points_bind_when_available(registry: ComponentRegistry) -> None:
    metrics = _Metrics()
    registry.add_instance(_Clock())
    registry.add_instance(metrics)

    instance = AutowiredPostProcessor(registry).inject(_Optional())

    assert instance.metrics is metrics
    assert instance.maybe is metrics
    assert instance.configured is True
    assert instance.nullable_metrics is metrics


def test_inject_raises_first_failure_and_leaves_instance_untouched(
    registry: ComponentRegistry,
) -> None:
    registry.add_instance(_Clock())
    instance = _Broken()

    with pytest.raises(AutowireNoCandidateError):
        AutowiredPostProcessor(registry).inject(instance)

    assert not hasattr(instance, "clock")


def test_raise_all_policy_reports_every_failing_point(registry: ComponentRegistry) -> None:
    registry.add_instance(_Clock())
    processor = AutowiredPostProcessor(registry, failure_policy=FailurePolicy.RAISE_ALL)

    with pytest.raises(AutowireComponentInjectionError) as exc_info:
        processor.inject(_Broken())

    assert exc_info.value.component_type is _Broken
    assert sorted(point.member_name for point in exc_info.value.failures) == ["configure", "metrics"]


def test_ambiguous_method_parameter_fails_the_whole_method(registry: ComponentRegistry) -> None:
    registry.add_instance(_FileLogger())
    registry.add_instance(_ConsoleLogger(), name="consoleLogger")
    registry.add_instance(_Clock())
    registry.add_instance(_Metrics())

    with pytest.raises(AutowirePartialInjectionError) as exc_info:
        AutowiredPostProcessor(registry).inject(_Broken())

    (failure,) = exc_info.value.failures
    assert isinstance(failure, AutowireAmbiguousCandidatesError)
    assert failure.dependency is not None
    assert failure.dependency.name == "logger"


def test_invoke_resolves_injected_parameters(populated: ComponentRegistry) -> None:
    def handler(
        suffix: str,
        clock: Inject[_Clock],
        *,
        primary: Inject[Annotated[_Logger, Qualifier("primary")]],
    ) -> Any:
        return clock, suffix, primary

    clock, suffix, primary = AutowiredPostProcessor(populated).invoke(handler, "x")

    assert isinstance(clock, _Clock)
    assert suffix == "x"
    assert isinstance(primary, _FileLogger)


def test_invoke_prefers_explicit_arguments(registry: ComponentRegistry) -> None:
    def handler(clock: Inject[_Clock]) -> _Clock:
        return clock

    explicit = _Clock()

    assert AutowiredPostProcessor(registry).invoke(handler, clock=explicit) is explicit


def test_invoke_binds_positional_arguments_past_injected_parameters(
    populated: ComponentRegistry,
) -> None:
    def handler(clock: Inject[_Clock], suffix: str, /, *rest: str, label: str = "-") -> Any:
        return clock, suffix, rest, label

    clock, suffix, rest, label = AutowiredPostProcessor(populated).invoke(
        handler,
        "x",
        "y",
        "z",
        label="l",
    )

    assert isinstance(clock, _Clock)
    assert suffix == "x"
    assert rest == ("y", "z")
    assert label == "l"


def test_invoke_rejects_extra_positional_arguments(populated: ComponentRegistry) -> None:
    def handler(clock: Inject[_Clock]) -> _Clock:
        return clock

    with pytest.raises(TypeError):
        AutowiredPostProcessor(populated).invoke(handler, _Clock())


def test_qualifier_inside_nullable_union_keeps_untagged_components_out(
    registry: ComponentRegistry,
) -> None:
    registry.add_instance(_ConsoleLogger(), name="console")

    instance = AutowiredPostProcessor(registry).inject(_NullableQualified())

    assert instance.logger is None
    assert instance.configured is None


def test_qualifier_inside_nullable_union_selects_tagged_component(
    registry: ComponentRegistry,
) -> None:
    registry.add_instance(_ConsoleLogger(), name="console")
    file_logger = _FileLogger()
    registry.add_instance(file_logger, name="file", qualifiers={"primary"})

    instance = AutowiredPostProcessor(registry).inject(_NullableQualified())

    assert instance.logger is file_logger
    assert instance.configured is file_logger


def test_name_fallback_can_be_disabled(populated: ComponentRegistry) -> None:
    processor = AutowiredPostProcessor(populated, name_fallback=False)

    with pytest.raises(AutowireAmbiguousCandidatesError):
        processor.inject(_ReportService())


def test_plan_summary_is_logged(populated: ComponentRegistry, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="autowire.processor"):
        AutowiredPostProcessor(populated).resolve_all(_ReportService)

    assert "Resolved 4 injection point(s) for _ReportService against 3 component(s): 0 failed" in caplog.text


def test_absent_is_falsy_and_resolves_to_none() -> None:
    assert not ABSENT
    assert ABSENT.value() is None
    assert repr(ABSENT) == "ABSENT"
