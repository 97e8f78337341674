from __future__ import annotations

import logging
import threading
from collections.abc import Collection, Generator, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Protocol

from autowire.exceptions import AutowireInvalidRegistrationError, AutowireRegistryFrozenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ComponentDescriptor:
    """Describe one registered component that injection points may bind to.

    Descriptors are created by ``ComponentRegistry`` and are read-only for the
    resolution components.
    """

    name: str
    """Logical name, unique within a registry."""
    provides: Any
    """Declared type matched against injection point targets."""
    value: Any = field(compare=False)
    """The component object injected when this descriptor is bound."""
    order: int | None = None
    """Sort key for aggregation; lower first, ``None`` after all ordered ones."""
    qualifiers: frozenset[str] = frozenset()
    """Tags consulted by qualified injection points."""
    registration_index: int = 0
    """Position in registration order, assigned by the registry."""

    @property
    def sort_key(self) -> tuple[bool, int, int]:
        """Return the aggregation sort key: ordered first, by order, then registration."""
        return (self.order is None, self.order or 0, self.registration_index)


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Immutable registration-ordered view of a registry."""

    descriptors: tuple[ComponentDescriptor, ...] = ()

    def __iter__(self) -> Iterator[ComponentDescriptor]:
        return iter(self.descriptors)

    def __len__(self) -> int:
        return len(self.descriptors)

    def find_by_name(self, name: str) -> ComponentDescriptor | None:
        """Return the descriptor registered under ``name``, if any.

        Args:
            name: Logical component name to look up.

        """
        return next((descriptor for descriptor in self.descriptors if descriptor.name == name), None)


class RegistryProtocol(Protocol):
    """Source of component descriptors consumed by the resolver."""

    def snapshot(self) -> RegistrySnapshot:
        """Return the registered descriptors in registration order."""
        ...


class ComponentRegistry:
    """Store component descriptors indexed by name in registration order.

    Names are unique: registering an existing name is an error rather than a
    replacement, so aggregated mappings never lose entries. Snapshots are
    cached until the next mutation.
    """

    def __init__(self) -> None:
        self._descriptors_by_name: dict[str, ComponentDescriptor] = {}
        self._next_index = 0
        self._lock = threading.Lock()
        self._active_phases = 0
        self._snapshot: RegistrySnapshot | None = None

    def add_instance(
        self,
        value: Any,
        *,
        name: str | None = None,
        provides: Any = None,
        order: int | None = None,
        qualifiers: Collection[str] = (),
    ) -> ComponentDescriptor:
        """Register an already-built component.

        Args:
            value: Component object to inject.
            name: Logical name; defaults to the class name with a lowercase
                first letter (``ConsoleLogger`` becomes ``consoleLogger``).
            provides: Declared type; defaults to ``type(value)``.
            order: Aggregation order, lower first.
            qualifiers: Tags for qualified injection points.

        """
        declared = type(value) if provides is None else provides
        return self.add(
            name=name if name is not None else default_component_name(type(value)),
            provides=declared,
            value=value,
            order=order,
            qualifiers=qualifiers,
        )

    def add(
        self,
        *,
        name: str,
        provides: Any,
        value: Any,
        order: int | None = None,
        qualifiers: Collection[str] = (),
    ) -> ComponentDescriptor:
        """Register a component with explicit metadata.

        Args:
            name: Logical name, unique in the registry.
            provides: Declared type matched against injection targets.
            value: Component object to inject.
            order: Aggregation order, lower first.
            qualifiers: Tags for qualified injection points.

        """
        self._validate(name=name, order=order, qualifiers=qualifiers)
        with self._lock:
            if self._active_phases:
                msg = f"Cannot register component '{name}' while a resolution phase is active."
                raise AutowireRegistryFrozenError(msg)
            if name in self._descriptors_by_name:
                msg = f"Component name '{name}' is already registered."
                raise AutowireInvalidRegistrationError(msg)
            descriptor = ComponentDescriptor(
                name=name,
                provides=provides,
                value=value,
                order=order,
                qualifiers=frozenset(qualifiers),
                registration_index=self._next_index,
            )
            self._next_index += 1
            self._descriptors_by_name[name] = descriptor
            self._snapshot = None

        logger.debug(
            "Registered component name=%s provides=%r order=%s qualifiers=%s",
            name,
            provides,
            order,
            sorted(descriptor.qualifiers),
        )
        return descriptor

    def remove(self, name: str) -> ComponentDescriptor:
        """Unregister a component by name.

        Args:
            name: Logical name of the component to remove.

        """
        with self._lock:
            if self._active_phases:
                msg = f"Cannot remove component '{name}' while a resolution phase is active."
                raise AutowireRegistryFrozenError(msg)
            try:
                descriptor = self._descriptors_by_name.pop(name)
            except KeyError:
                msg = f"Component name '{name}' is not registered."
                raise AutowireInvalidRegistrationError(msg) from None
            self._snapshot = None
        return descriptor

    def snapshot(self) -> RegistrySnapshot:
        """Return an immutable view of the registrations in registration order."""
        with self._lock:
            if self._snapshot is None:
                self._snapshot = RegistrySnapshot(
                    descriptors=tuple(self._descriptors_by_name.values()),
                )
            return self._snapshot

    @contextmanager
    def resolution_phase(self) -> Generator[RegistrySnapshot, None, None]:
        """Freeze registrations for the duration of a resolution phase.

        Phases nest and may be entered from several threads; registrations
        are rejected until the last phase exits.
        """
        with self._lock:
            self._active_phases += 1
        try:
            yield self.snapshot()
        finally:
            with self._lock:
                self._active_phases -= 1

    def __contains__(self, name: object) -> bool:
        return name in self._descriptors_by_name

    def __len__(self) -> int:
        return len(self._descriptors_by_name)

    def _validate(
        self,
        *,
        name: str,
        order: int | None,
        qualifiers: Collection[str],
    ) -> None:
        if not isinstance(name, str) or not name:
            msg = f"Component name must be a non-empty string, got {name!r}."
            raise AutowireInvalidRegistrationError(msg)
        if order is not None and (not isinstance(order, int) or isinstance(order, bool)):
            msg = f"Order of component '{name}' must be an int or None, got {order!r}."
            raise AutowireInvalidRegistrationError(msg)
        if isinstance(qualifiers, str) or not all(isinstance(tag, str) for tag in qualifiers):
            msg = (
                f"Qualifiers of component '{name}' must be a collection of strings, "
                f"got {qualifiers!r}."
            )
            raise AutowireInvalidRegistrationError(msg)


def default_component_name(component_type: type[Any]) -> str:
    """Derive a logical component name from a class name."""
    class_name = component_type.__name__
    return class_name[:1].lower() + class_name[1:]
