from autowire._internal.introspection import InjectionPointInspector, MetadataProtocol
from autowire.exceptions import (
    AutowireAmbiguousCandidatesError,
    AutowireComponentInjectionError,
    AutowireError,
    AutowireInjectionPointError,
    AutowireInvalidRegistrationError,
    AutowireNoCandidateError,
    AutowirePartialInjectionError,
    AutowireRegistryFrozenError,
    AutowireResolutionError,
)
from autowire.markers import Autowired, Inject, Maybe, Qualifier, autowired
from autowire.points import InjectionDependency, InjectionPoint, InjectionPointKind, Requirement
from autowire.policies import FailurePolicy
from autowire.processor import AutowiredPostProcessor
from autowire.registry import ComponentDescriptor, ComponentRegistry, RegistrySnapshot
from autowire.resolution import (
    ABSENT,
    MappingResolution,
    PointResolution,
    SequenceResolution,
    SingleResolution,
)

__all__ = [
    "ABSENT",
    "AutowireAmbiguousCandidatesError",
    "AutowireComponentInjectionError",
    "AutowireError",
    "AutowireInjectionPointError",
    "AutowireInvalidRegistrationError",
    "AutowireNoCandidateError",
    "AutowirePartialInjectionError",
    "AutowireRegistryFrozenError",
    "AutowireResolutionError",
    "Autowired",
    "AutowiredPostProcessor",
    "ComponentDescriptor",
    "ComponentRegistry",
    "FailurePolicy",
    "Inject",
    "InjectionDependency",
    "InjectionPoint",
    "InjectionPointInspector",
    "InjectionPointKind",
    "MappingResolution",
    "Maybe",
    "MetadataProtocol",
    "PointResolution",
    "Qualifier",
    "RegistrySnapshot",
    "Requirement",
    "SequenceResolution",
    "SingleResolution",
    "autowired",
]
