from autowire.integrations.pytest_plugin.plugin import (
    _autowire_state,
    autowire_processor,
    autowire_registry,
    pytest_pycollect_makeitem,
    pytest_pyfunc_call,
)

__all__ = [
    "_autowire_state",
    "autowire_processor",
    "autowire_registry",
    "pytest_pycollect_makeitem",
    "pytest_pyfunc_call",
]
