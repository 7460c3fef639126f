"""Soft delete entry points: flag rows as deleted instead of removing them."""

from __future__ import annotations

from typing import Any

from django.db import models
from django.utils import timezone

from filter_manager.capabilities.registry import (
    CapabilityBinding,
    EntityCapabilityRegistry,
    get_capability_registry,
)
from filter_manager.filters.errors import NotSoftDeletableError
from filter_manager.logging import get_logger

logger = get_logger("capabilities.soft_delete")

SOFT_DELETABLE = "soft_deletable"


def _binding(
    model: type[models.Model], registry: EntityCapabilityRegistry | None
) -> CapabilityBinding:
    table = registry if registry is not None else get_capability_registry()
    binding = table.binding(model, SOFT_DELETABLE)
    if binding is None or binding.field("deleted") is None:
        raise NotSoftDeletableError(model.__name__)
    return binding


def _deletion_values(binding: CapabilityBinding, deleted: bool) -> dict[str, Any]:
    values: dict[str, Any] = {binding.fields["deleted"]: deleted}
    deleted_at = binding.field("deleted_at")
    if deleted_at is not None:
        values[deleted_at] = timezone.now() if deleted else None
    return values


def _mark(
    instance: models.Model,
    deleted: bool,
    registry: EntityCapabilityRegistry | None,
) -> models.Model:
    binding = _binding(type(instance), registry)
    values = _deletion_values(binding, deleted)
    for field_name, value in values.items():
        setattr(instance, field_name, value)
    instance.save(update_fields=list(values))
    logger.debug(
        "soft delete flag changed",
        context={
            "model": type(instance).__name__,
            "pk": instance.pk,
            "deleted": deleted,
        },
    )
    return instance


def soft_delete(
    instance: models.Model,
    *,
    registry: EntityCapabilityRegistry | None = None,
) -> models.Model:
    """
    Mark `instance` as deleted without removing its row.

    Sets the deleted flag (and the deletion timestamp when the model declares a
    `deleted_at` field role) and saves only those fields.

    Raises:
        NotSoftDeletableError: The model does not declare `soft_deletable`.
    """
    return _mark(instance, True, registry)


def restore(
    instance: models.Model,
    *,
    registry: EntityCapabilityRegistry | None = None,
) -> models.Model:
    """Clear the deleted flag of a soft-deleted instance."""
    return _mark(instance, False, registry)


def soft_delete_queryset(
    queryset: models.QuerySet,
    *,
    registry: EntityCapabilityRegistry | None = None,
) -> int:
    """Soft-delete every row of `queryset` with a single UPDATE; return the row count."""
    binding = _binding(queryset.model, registry)
    return queryset.update(**_deletion_values(binding, True))


__all__ = ["SOFT_DELETABLE", "restore", "soft_delete", "soft_delete_queryset"]
