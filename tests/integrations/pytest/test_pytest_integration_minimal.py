from __future__ import annotations

from typing import Annotated

import pytest

from autowire import AutowiredPostProcessor, ComponentRegistry, Inject, Qualifier

pytest_plugins = ["autowire.integrations.pytest_plugin"]


class _Logger:
    pass


class _FileLogger(_Logger):
    pass


class _ConsoleLogger(_Logger):
    pass


@pytest.fixture()
def autowire_registry() -> ComponentRegistry:
    registry = ComponentRegistry()
    registry.add_instance(_FileLogger(), qualifiers={"primary"}, order=1)
    registry.add_instance(_ConsoleLogger(), name="console")
    return registry


@pytest.fixture()
def value() -> int:
    return 42


def test_injected_parameters_are_resolved_from_autowire_registry(
    value: int,
    primary: Inject[Annotated[_Logger, Qualifier("primary")]],
    console: Inject[_Logger],
) -> None:
    assert value == 42
    assert isinstance(primary, _FileLogger)
    assert isinstance(console, _ConsoleLogger)


def test_injected_sequences_are_aggregated(loggers: Inject[list[_Logger]]) -> None:
    assert [type(logger) for logger in loggers] == [_FileLogger, _ConsoleLogger]


def test_regular_fixture_resolution_still_works_without_injected_parameters(value: int) -> None:
    assert value == 42


def test_public_autowire_processor_fixture_is_available(
    autowire_processor: AutowiredPostProcessor,
) -> None:
    assert isinstance(autowire_processor, AutowiredPostProcessor)
