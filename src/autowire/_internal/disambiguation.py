from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from autowire._internal.matching import filter_qualified
from autowire.registry import ComponentDescriptor


@dataclass(slots=True)
class QualifierDisambiguator:
    """Narrow several same-typed candidates to one.

    The qualifier is checked first and is authoritative. The name tie-break
    only runs when no qualifier was requested or the qualifier left more than
    one candidate. A result with more than one element means the candidates
    are genuinely ambiguous; no choice is made among them.
    """

    name_fallback: bool = True

    def disambiguate(
        self,
        candidates: Sequence[ComponentDescriptor],
        *,
        qualifier: str | None,
        declared_name: str | None,
    ) -> tuple[ComponentDescriptor, ...]:
        """Return a single-element tuple when one candidate wins, else the input.

        Args:
            candidates: Components matching the injection target.
            qualifier: Tag requested by the injection point.
            declared_name: Field or parameter identifier of the injection point.

        """
        candidates = tuple(candidates)
        if len(candidates) <= 1:
            return candidates

        pool = candidates
        if qualifier is not None:
            qualified = filter_qualified(candidates, qualifier)
            if len(qualified) == 1:
                return qualified
            if qualified:
                pool = qualified

        if self.name_fallback and declared_name is not None:
            named = tuple(candidate for candidate in pool if candidate.name == declared_name)
            if len(named) == 1:
                return named

        return candidates
