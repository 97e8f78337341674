from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from autowire._internal.type_checks import is_assignable
from autowire.registry import ComponentDescriptor, RegistrySnapshot


@dataclass(slots=True)
class CandidateMatcher:
    """Find registered components whose declared type is assignable to a target."""

    def match(self, snapshot: RegistrySnapshot, target: Any) -> tuple[ComponentDescriptor, ...]:
        """Return matching descriptors in registration order.

        An empty tuple means nothing matches; absence is not an error here.

        Args:
            snapshot: Registry state to query.
            target: Declared injection target type.

        """
        return tuple(
            descriptor for descriptor in snapshot if is_assignable(descriptor.provides, target)
        )


def filter_qualified(
    candidates: Iterable[ComponentDescriptor],
    qualifier: str | None,
) -> tuple[ComponentDescriptor, ...]:
    """Keep candidates tagged with ``qualifier``; keep all when no qualifier is requested."""
    if qualifier is None:
        return tuple(candidates)
    return tuple(candidate for candidate in candidates if qualifier in candidate.qualifiers)
