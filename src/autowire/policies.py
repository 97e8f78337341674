from __future__ import annotations

from enum import Enum


class FailurePolicy(str, Enum):
    """Policy for reporting failed injection points of one component."""

    RAISE_FIRST = "raise_first"
    """Raise the error of the first failing point, in resolution order."""

    RAISE_ALL = "raise_all"
    """Raise one ``AutowireComponentInjectionError`` listing every failing point."""
