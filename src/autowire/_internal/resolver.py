from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from typing_extensions import Self

from autowire._internal.aggregation import AggregationResolver
from autowire._internal.disambiguation import QualifierDisambiguator
from autowire._internal.matching import CandidateMatcher, filter_qualified
from autowire._internal.shapes import container_shape_of
from autowire.exceptions import (
    AutowireAmbiguousCandidatesError,
    AutowireNoCandidateError,
    AutowirePartialInjectionError,
    AutowireResolutionError,
)
from autowire.points import InjectionDependency, InjectionPoint, Requirement
from autowire.registry import RegistrySnapshot
from autowire.resolution import ABSENT, PointResolution, ResolutionResult, SingleResolution

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ResolutionRequest:
    """Per-call view of a dependency: effective target, requirement and qualifier."""

    target: Any
    requirement: Requirement
    qualifier: str | None
    declared_name: str

    @classmethod
    def from_dependency(cls, dependency: InjectionDependency) -> Self:
        return cls(
            target=dependency.target,
            requirement=dependency.requirement,
            qualifier=dependency.qualifier,
            declared_name=dependency.name,
        )


class InjectionPointResolver:
    """Resolve injection points against a registry snapshot.

    The snapshot is an explicit argument of every call, so one resolver may
    serve many threads at once. Results are pure functions of the snapshot:
    nothing is cached, retried or defaulted.
    """

    def __init__(
        self,
        *,
        matcher: CandidateMatcher | None = None,
        disambiguator: QualifierDisambiguator | None = None,
        aggregator: AggregationResolver | None = None,
        name_fallback: bool = True,
    ) -> None:
        """Initialize a resolver from its collaborators.

        Args:
            matcher: Candidate matcher; a default one is created when omitted.
            disambiguator: Qualifier/name disambiguator. ``name_fallback`` is
                used to build the default one.
            aggregator: Resolver for sequence and mapping targets.
            name_fallback: Enable the declared-name tie-break when no
                ``disambiguator`` is passed.

        """
        self._matcher = matcher or CandidateMatcher()
        self._disambiguator = disambiguator or QualifierDisambiguator(name_fallback=name_fallback)
        self._aggregator = aggregator or AggregationResolver(
            matcher=self._matcher,
            disambiguator=self._disambiguator,
        )

    def resolve_point(self, snapshot: RegistrySnapshot, point: InjectionPoint) -> PointResolution:
        """Resolve every dependency of ``point`` independently.

        Args:
            snapshot: Registry state to query.
            point: Injection point to resolve.

        Raises:
            AutowireNoCandidateError: A single-dependency point has a required
                dependency without match.
            AutowireAmbiguousCandidatesError: A single-dependency point is
                ambiguous.
            AutowirePartialInjectionError: A multi-parameter point has one or
                more failing parameters.

        """
        results: list[ResolutionResult] = []
        failures: list[AutowireResolutionError] = []
        for dependency in point.dependencies:
            try:
                results.append(self.resolve_dependency(snapshot, dependency))
            except AutowireResolutionError as error:
                error.point = point
                failures.append(error)

        if failures:
            logger.debug("Injection point %s failed: %s", point.describe(), failures)
            if point.is_multi_parameter:
                raise AutowirePartialInjectionError(point, failures)
            raise failures[0]

        return PointResolution(point=point, results=tuple(results))

    def resolve_dependency(
        self,
        snapshot: RegistrySnapshot,
        dependency: InjectionDependency,
    ) -> ResolutionResult:
        """Resolve one field or parameter.

        Args:
            snapshot: Registry state to query.
            dependency: Field or parameter to resolve.

        """
        request = ResolutionRequest.from_dependency(dependency)

        shape = container_shape_of(request.target)
        if shape is not None:
            result = self._aggregator.aggregate(
                snapshot,
                shape,
                qualifier=request.qualifier,
                declared_name=request.declared_name,
            )
            logger.debug("Aggregated %s into %r", dependency.describe(), result)
            return result

        candidates = filter_qualified(
            self._matcher.match(snapshot, request.target),
            request.qualifier,
        )
        if not candidates:
            if request.requirement is Requirement.REQUIRED:
                raise AutowireNoCandidateError(dependency)
            logger.debug("Optional dependency %s resolved to ABSENT", dependency.describe())
            return ABSENT

        if len(candidates) > 1:
            candidates = self._disambiguator.disambiguate(
                candidates,
                qualifier=request.qualifier,
                declared_name=request.declared_name,
            )
        if len(candidates) > 1:
            raise AutowireAmbiguousCandidatesError(dependency, candidates)

        logger.debug("Bound %s to component '%s'", dependency.describe(), candidates[0].name)
        return SingleResolution(component=candidates[0])
