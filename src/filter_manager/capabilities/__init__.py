"""Capability declarations of filterable models."""

from __future__ import annotations

from typing import TYPE_CHECKING

__all__ = [
    "CapabilityBinding",
    "EntityCapabilityRegistry",
    "declare_capabilities",
    "get_capability_registry",
]

if TYPE_CHECKING:  # pragma: no cover
    from .registry import (
        CapabilityBinding,
        EntityCapabilityRegistry,
        declare_capabilities,
        get_capability_registry,
    )


def __getattr__(name: str) -> object:
    if name in __all__:
        from . import registry

        return getattr(registry, name)
    raise AttributeError(name)
