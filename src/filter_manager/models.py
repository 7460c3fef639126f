"""Filter manager model mixins."""

from filter_manager.capabilities.models import (
    MayHaveTenantModel,
    MustHaveTenantModel,
    SoftDeleteModel,
    SoftDeleteQuerySet,
)

__all__ = [
    "MayHaveTenantModel",
    "MustHaveTenantModel",
    "SoftDeleteModel",
    "SoftDeleteQuerySet",
]
