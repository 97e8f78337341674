from __future__ import annotations

import functools
import inspect
from collections.abc import Callable, Iterator
from typing import Any, cast

import pytest

from autowire._internal.introspection import InjectionPointInspector
from autowire.processor import AutowiredPostProcessor
from autowire.registry import ComponentRegistry

_AUTOWIRE_PROCESSOR_ATTR = "_autowire_processor"
_AUTOWIRE_ORIGINAL_SIGNATURE_ATTR = "__autowire_pytest_original_signature__"
_INSPECTOR = InjectionPointInspector()


@pytest.fixture()
def autowire_registry() -> ComponentRegistry:
    """Create a per-test component registry used by the plugin.

    Override this fixture to register the components ``Inject[...]`` test
    parameters resolve to. The fixture is function-scoped, so registrations are
    isolated between tests unless users override fixture scope explicitly.

    Returns:
        A new, empty ``ComponentRegistry``.

    """
    return ComponentRegistry()


@pytest.fixture()
def autowire_processor(autowire_registry: ComponentRegistry) -> AutowiredPostProcessor:
    """Create a post processor bound to ``autowire_registry``."""
    return AutowiredPostProcessor(autowire_registry)


@pytest.fixture(autouse=True)
def _autowire_state(
    request: pytest.FixtureRequest,
    autowire_processor: AutowiredPostProcessor,
) -> None:
    """Store plugin state on the test node for hook access."""
    node = cast("Any", request.node)
    setattr(node, _AUTOWIRE_PROCESSOR_ATTR, autowire_processor)


def pytest_pycollect_makeitem(
    collector: Any,
    name: str,
    obj: object,
) -> Any | None:
    """Hide ``Inject[...]`` parameters from pytest fixture name matching.

    Pytest treats test function parameters as fixture names. This hook rewrites
    signatures of test functions with ``Inject[...]`` parameters so they are not
    interpreted as missing fixtures.

    Args:
        collector: Pytest collector instance.
        name: Collected object name.
        obj: Candidate object.

    Returns:
        ``None`` to continue default collection flow.

    """
    if not callable(obj):
        return None
    if not collector.istestfunction(obj, name):
        return None

    inspection = _INSPECTOR.inspect_callable(cast("Callable[..., Any]", obj))
    if not inspection.point.dependencies:
        return None

    obj_as_any = cast("Any", obj)
    obj_as_any.__dict__[_AUTOWIRE_ORIGINAL_SIGNATURE_ATTR] = inspection.signature
    obj_as_any.__signature__ = inspection.public_signature
    return None


@pytest.hookimpl(hookwrapper=True, tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Iterator[None]:
    """Wrap test function execution to resolve ``Inject[...]`` parameters.

    The wrapper swaps the test callable for one that resolves injected
    parameters through ``autowire_processor`` for the duration of the call.
    Tests without injected parameters are left untouched.

    Args:
        pyfuncitem: Collected pytest function item.

    Yields:
        Control back to pytest around test execution.

    """
    original_callable = cast("Callable[..., Any]", pyfuncitem.obj)
    original_as_any = cast("Any", original_callable)
    original_signature = cast(
        "inspect.Signature | None",
        getattr(original_as_any, _AUTOWIRE_ORIGINAL_SIGNATURE_ATTR, None),
    )
    processor = cast(
        "AutowiredPostProcessor | None",
        getattr(pyfuncitem, _AUTOWIRE_PROCESSOR_ATTR, None),
    )
    if original_signature is None or processor is None:
        yield
        return

    @functools.wraps(original_callable)
    def _injected(**kwargs: Any) -> Any:
        public_signature = original_as_any.__signature__
        original_as_any.__signature__ = original_signature
        try:
            return processor.invoke(original_callable, **kwargs)
        finally:
            original_as_any.__signature__ = public_signature

    pyfuncitem.obj = _injected
    try:
        yield
    finally:
        pyfuncitem.obj = original_callable
