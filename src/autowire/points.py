from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class InjectionPointKind(str, Enum):
    """Kind of member an injection point was discovered on."""

    FIELD = "field"
    """A class attribute assigned after construction."""

    CONSTRUCTOR = "constructor"
    """The ``__init__`` of the component, resolved before instantiation."""

    METHOD = "method"
    """A setter or arbitrary configuration method invoked after field injection."""


class Requirement(str, Enum):
    """Whether a missing component fails the dependency."""

    REQUIRED = "required"
    """No match is a ``AutowireNoCandidateError``."""

    OPTIONAL = "optional"
    """No match resolves to ``ABSENT``."""


@dataclass(frozen=True, slots=True)
class InjectionDependency:
    """One field or parameter of an injection point."""

    name: str
    """Declared identifier, used for the name tie-break."""
    target: Any
    """Declared target type with markers stripped."""
    ordinal: int = 0
    """Parameter position inside the owning point."""
    requirement: Requirement = Requirement.REQUIRED
    """Effective requirement, decided once at discovery."""
    qualifier: str | None = None
    """Tag a candidate must carry to stay eligible."""
    nullable: bool = False
    """Typed as an optional wrapper, so absence injects ``None``."""
    has_default: bool = False
    """The parameter declares a default, so absence omits the argument."""

    @property
    def required(self) -> bool:
        return self.requirement is Requirement.REQUIRED

    def describe(self) -> str:
        target_name = getattr(self.target, "__qualname__", None) or repr(self.target)
        return f"'{self.name}: {target_name}'"


@dataclass(frozen=True, slots=True)
class InjectionPoint:
    """A constructor, field or method marked for injection.

    Points are immutable once discovered. They hash by identity of their
    fields, so they can key resolution plans.
    """

    kind: InjectionPointKind
    owner: Any
    """Declaring class, or the callable itself for plain function injection."""
    member_name: str
    dependencies: tuple[InjectionDependency, ...]
    required: bool = True

    @property
    def is_multi_parameter(self) -> bool:
        return len(self.dependencies) > 1

    def describe(self) -> str:
        if isinstance(self.owner, type):
            return f"'{self.owner.__qualname__}.{self.member_name}' ({self.kind.value})"
        return f"'{self.member_name}' ({self.kind.value})"
