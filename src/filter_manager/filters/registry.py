"""Process-wide catalog of filter definitions, frozen after startup."""

from __future__ import annotations

from threading import Lock
from types import MappingProxyType
from typing import Iterator, Mapping

from filter_manager.filters.definition import CapabilityName, FilterDefinition
from filter_manager.filters.errors import (
    DuplicateFilterNameError,
    RegistrationClosedError,
    UnknownFilterError,
)
from filter_manager.logging import get_logger

logger = get_logger("filters.registry")


class FilterRegistry:
    """
    Named filter definitions indexed by name and by capability.

    Definitions are registered during startup and the registry is frozen once
    the application is ready; reads after `freeze()` need no synchronisation.
    """

    def __init__(self) -> None:
        self._definitions: dict[str, FilterDefinition] = {}
        self._by_capability: dict[CapabilityName, list[FilterDefinition]] = {}
        self._frozen = False
        self._lock = Lock()

    def register(self, definition: FilterDefinition) -> FilterDefinition:
        """
        Add a definition to the registry.

        Raises:
            RegistrationClosedError: The registry has been frozen.
            DuplicateFilterNameError: A definition with the same name exists.
        """
        with self._lock:
            if self._frozen:
                raise RegistrationClosedError(definition.name)
            if definition.name in self._definitions:
                raise DuplicateFilterNameError(definition.name)
            self._definitions[definition.name] = definition
            self._by_capability.setdefault(definition.capability, []).append(
                definition
            )
        logger.debug(
            "registered filter",
            context={
                "filter": definition.name,
                "capability": definition.capability,
                "default_enabled": definition.default_enabled,
            },
        )
        return definition

    def freeze(self) -> None:
        """Close the registry for further registrations. Calling it twice is harmless."""
        with self._lock:
            if self._frozen:
                return
            self._frozen = True
        logger.info(
            "filter registry frozen",
            context={"filters": list(self._definitions)},
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, name: str) -> FilterDefinition:
        """Return the definition registered as `name` or raise UnknownFilterError."""
        try:
            return self._definitions[name]
        except KeyError:
            raise UnknownFilterError(name) from None

    def definitions_for(
        self, capability: CapabilityName
    ) -> tuple[FilterDefinition, ...]:
        """Return every definition declared against `capability`, in registration order."""
        return tuple(self._by_capability.get(capability, ()))

    def definitions(self) -> tuple[FilterDefinition, ...]:
        return tuple(self._definitions.values())

    def names(self) -> tuple[str, ...]:
        return tuple(self._definitions)

    def snapshot(self) -> Mapping[str, FilterDefinition]:
        """Expose a read-only view of the registered definitions."""
        return MappingProxyType(dict(self._definitions))

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __iter__(self) -> Iterator[FilterDefinition]:
        return iter(self.definitions())

    def __len__(self) -> int:
        return len(self._definitions)


_default_registry = FilterRegistry()


def get_filter_registry() -> FilterRegistry:
    """Return the process-wide registry populated at application startup."""
    return _default_registry


def register_filter(definition: FilterDefinition) -> FilterDefinition:
    """Register a custom filter on the process-wide registry (startup only)."""
    return _default_registry.register(definition)


__all__ = ["FilterRegistry", "get_filter_registry", "register_filter"]
