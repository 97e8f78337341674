"""Shared pytest fixtures for autowire tests."""

import pytest

from autowire._internal.resolver import InjectionPointResolver
from autowire.processor import AutowiredPostProcessor
from autowire.registry import ComponentRegistry


@pytest.fixture()
def registry() -> ComponentRegistry:
    """Empty component registry."""
    return ComponentRegistry()


@pytest.fixture()
def processor(registry: ComponentRegistry) -> AutowiredPostProcessor:
    """Post processor bound to the ``registry`` fixture."""
    return AutowiredPostProcessor(registry)


@pytest.fixture()
def resolver() -> InjectionPointResolver:
    """Resolver with default collaborators."""
    return InjectionPointResolver()
