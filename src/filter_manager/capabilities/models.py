"""Abstract model mixins that declare the built-in filter capabilities."""

from __future__ import annotations

from typing import Any, ClassVar

from django.db import models
from django.db.models.signals import class_prepared
from django.dispatch import receiver

from filter_manager.capabilities.registry import (
    CapabilityDeclarations,
    get_capability_registry,
    register_models,
)
from filter_manager.capabilities.soft_delete import (
    restore,
    soft_delete,
    soft_delete_queryset,
)


@receiver(class_prepared, dispatch_uid="filter_manager_declare_capabilities")
def _declare_model_capabilities(sender: type[models.Model], **kwargs: Any) -> None:
    if sender._meta.proxy:
        return
    register_models([sender], get_capability_registry())


class SoftDeleteQuerySet(models.QuerySet):
    """QuerySet whose `delete()` flags rows instead of removing them."""

    def delete(self) -> tuple[int, dict[str, int]]:  # type: ignore[override]
        count = soft_delete_queryset(self)
        return count, {self.model._meta.label: count}

    def hard_delete(self) -> tuple[int, dict[str, int]]:
        return super().delete()


class SoftDeleteModel(models.Model):
    """Entity whose rows are hidden by the `SoftDelete` filter once deleted."""

    is_deleted = models.BooleanField(default=False, db_index=True)
    deleted_at = models.DateTimeField(null=True, blank=True)

    objects = SoftDeleteQuerySet.as_manager()

    filter_capabilities: ClassVar[CapabilityDeclarations] = {
        "soft_deletable": {"deleted": "is_deleted", "deleted_at": "deleted_at"},
    }

    class Meta:
        abstract = True

    def delete(  # type: ignore[override]
        self, using: Any = None, keep_parents: bool = False
    ) -> tuple[int, dict[str, int]]:
        soft_delete(self)
        return 1, {self._meta.label: 1}

    def hard_delete(
        self, using: Any = None, keep_parents: bool = False
    ) -> tuple[int, dict[str, int]]:
        return super().delete(using=using, keep_parents=keep_parents)

    def restore(self) -> None:
        restore(self)


class MustHaveTenantModel(models.Model):
    """Entity that always belongs to exactly one tenant."""

    tenant_id = models.IntegerField(db_index=True)

    filter_capabilities: ClassVar[CapabilityDeclarations] = {
        "tenant_bound": {"tenant": "tenant_id"},
    }

    class Meta:
        abstract = True


class MayHaveTenantModel(models.Model):
    """Entity owned by a tenant, or by the host when `tenant_id` is null."""

    tenant_id = models.IntegerField(null=True, blank=True, db_index=True)

    filter_capabilities: ClassVar[CapabilityDeclarations] = {
        "tenant_optional": {"tenant": "tenant_id"},
    }

    class Meta:
        abstract = True


__all__ = [
    "MayHaveTenantModel",
    "MustHaveTenantModel",
    "SoftDeleteModel",
    "SoftDeleteQuerySet",
]
