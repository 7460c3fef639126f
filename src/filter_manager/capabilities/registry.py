"""Static table of the filter capabilities each model declares."""

from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from django.db import models

from filter_manager.filters.definition import CapabilityName
from filter_manager.filters.errors import UnknownCapabilityError
from filter_manager.logging import get_logger

logger = get_logger("capabilities.registry")

CapabilityDeclarations = Mapping[CapabilityName, Mapping[str, str]]
"""Capability name -> {field role: model field name}."""


@dataclass(frozen=True, slots=True)
class CapabilityBinding:
    """A capability declared by a model together with its field accessors."""

    capability: CapabilityName
    fields: Mapping[str, str]

    def __post_init__(self) -> None:
        if not isinstance(self.capability, str) or not self.capability:
            raise UnknownCapabilityError(self.capability)
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def field(self, role: str) -> str | None:
        return self.fields.get(role)


class EntityCapabilityRegistry:
    """In-memory registry mapping model classes to their capability bindings."""

    def __init__(self) -> None:
        self._bindings: dict[type[models.Model], dict[CapabilityName, CapabilityBinding]] = {}
        self._lock = Lock()

    def declare(
        self,
        model: type[models.Model],
        capability: CapabilityName,
        **fields: str,
    ) -> CapabilityBinding:
        """
        Declare that `model` exposes `capability` through the given fields.

        Declaring the same capability again replaces its field mapping.

        Parameters:
            model: Model class receiving the capability.
            capability: Capability name, e.g. "soft_deletable".
            **fields: Field role to model field name, e.g. ``deleted="is_deleted"``.
        """
        binding = CapabilityBinding(capability, fields)
        with self._lock:
            self._bindings.setdefault(model, {})[capability] = binding
        logger.debug(
            "declared capability",
            context={
                "model": model.__name__,
                "capability": capability,
                "fields": dict(fields),
            },
        )
        return binding

    def declare_many(
        self,
        model: type[models.Model],
        declarations: CapabilityDeclarations,
    ) -> None:
        for capability, fields in declarations.items():
            self.declare(model, capability, **dict(fields))

    def forget(self, model: type[models.Model]) -> None:
        """Drop every binding of `model`."""
        with self._lock:
            self._bindings.pop(model, None)

    def bindings(self, model: type[models.Model]) -> tuple[CapabilityBinding, ...]:
        """Return the bindings of `model` (empty when it declares none)."""
        return tuple(self._bindings.get(self._concrete(model), {}).values())

    def get(self, model: type[models.Model]) -> frozenset[CapabilityName]:
        """Return the capability names declared by `model`."""
        return frozenset(self._bindings.get(self._concrete(model), {}))

    def binding(
        self, model: type[models.Model], capability: CapabilityName
    ) -> CapabilityBinding | None:
        return self._bindings.get(self._concrete(model), {}).get(capability)

    def has(self, model: type[models.Model], capability: CapabilityName) -> bool:
        return self.binding(model, capability) is not None

    def snapshot(self) -> Mapping[type[models.Model], frozenset[CapabilityName]]:
        """Expose a read-only copy of the registry contents."""
        return MappingProxyType(
            {model: frozenset(bindings) for model, bindings in self._bindings.items()}
        )

    @staticmethod
    def _concrete(model: Any) -> Any:
        # proxy models share the capabilities of the model they proxy
        meta = getattr(model, "_meta", None)
        if meta is not None and getattr(meta, "proxy", False):
            return meta.concrete_model
        return model


def collect_declarations(model: type[models.Model]) -> dict[CapabilityName, dict[str, str]]:
    """
    Merge the `filter_capabilities` class attributes found along the MRO.

    Subclasses override the field mapping of a capability declared by a parent.
    """
    merged: dict[CapabilityName, dict[str, str]] = {}
    for klass in reversed(model.__mro__):
        declared = klass.__dict__.get("filter_capabilities")
        if not declared:
            continue
        for capability, fields in declared.items():
            merged.setdefault(capability, {}).update(fields)
    return merged


def _iter_models(models_: Iterable[type[models.Model]]) -> Iterable[type[models.Model]]:
    for model in models_:
        if not model._meta.abstract:
            yield model


_default_registry = EntityCapabilityRegistry()


def get_capability_registry() -> EntityCapabilityRegistry:
    """Return the process-wide entity capability table."""
    return _default_registry


def declare_capabilities(
    model: type[models.Model],
    capability: CapabilityName,
    **fields: str,
) -> CapabilityBinding:
    """Declare a capability of `model` on the process-wide table."""
    return _default_registry.declare(model, capability, **fields)


def register_models(
    models_: Iterable[type[models.Model]],
    registry: EntityCapabilityRegistry | None = None,
) -> None:
    """Declare the `filter_capabilities` of concrete models on a registry."""
    target = registry if registry is not None else _default_registry
    for model in _iter_models(models_):
        declarations = collect_declarations(model)
        if declarations:
            target.declare_many(model, declarations)


__all__ = [
    "CapabilityBinding",
    "CapabilityDeclarations",
    "EntityCapabilityRegistry",
    "collect_declarations",
    "declare_capabilities",
    "get_capability_registry",
    "register_models",
]
