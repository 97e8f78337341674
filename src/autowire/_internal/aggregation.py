from __future__ import annotations

import logging
from dataclasses import dataclass, field

from autowire._internal.disambiguation import QualifierDisambiguator
from autowire._internal.matching import CandidateMatcher, filter_qualified
from autowire._internal.shapes import ContainerShape, ShapeKind
from autowire.registry import RegistrySnapshot
from autowire.resolution import MappingResolution, SequenceResolution, SingleResolution

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AggregationResolver:
    """Bind sequence and name-keyed mapping targets.

    A single registered component whose own declared type is the requested
    container wins and is injected as-is. Otherwise every component matching
    the element type is collected: explicitly ordered ones first by ascending
    order, then unordered ones, ties broken by registration order. Zero
    matches produce an empty container, never a failure.
    """

    matcher: CandidateMatcher = field(default_factory=CandidateMatcher)
    disambiguator: QualifierDisambiguator = field(default_factory=QualifierDisambiguator)

    def aggregate(
        self,
        snapshot: RegistrySnapshot,
        shape: ContainerShape,
        *,
        qualifier: str | None = None,
        declared_name: str | None = None,
    ) -> SingleResolution | SequenceResolution | MappingResolution:
        """Resolve a container-shaped target.

        Args:
            snapshot: Registry state to query.
            shape: Container shape of the injection target.
            qualifier: Tag requested by the injection point. Elements and a
                whole-container component must carry it. Elements default to
                the element type's own ``Qualifier`` metadata.
            declared_name: Field or parameter identifier, used only to pick
                among several whole-container components.

        """
        element_qualifier = qualifier if qualifier is not None else shape.element_qualifier

        whole = self._whole_container_match(
            snapshot,
            shape,
            qualifier=qualifier,
            declared_name=declared_name,
        )
        if whole is not None:
            return whole

        elements = filter_qualified(
            self.matcher.match(snapshot, shape.element),
            element_qualifier,
        )
        ordered = tuple(sorted(elements, key=lambda descriptor: descriptor.sort_key))
        if shape.kind is ShapeKind.MAPPING:
            return MappingResolution(components=ordered)
        return SequenceResolution(components=ordered, factory=shape.factory)

    def _whole_container_match(
        self,
        snapshot: RegistrySnapshot,
        shape: ContainerShape,
        *,
        qualifier: str | None,
        declared_name: str | None,
    ) -> SingleResolution | None:
        candidates = filter_qualified(self.matcher.match(snapshot, shape.container), qualifier)
        if not candidates:
            return None
        if len(candidates) > 1:
            candidates = self.disambiguator.disambiguate(
                candidates,
                qualifier=qualifier,
                declared_name=declared_name,
            )
        if len(candidates) == 1:
            return SingleResolution(component=candidates[0])

        logger.warning(
            "Ignoring %d ambiguous whole-container components for %r (%s); "
            "aggregating elements instead",
            len(candidates),
            shape.container,
            ", ".join(candidate.name for candidate in candidates),
        )
        return None
