"""Built-in filters: soft delete exclusion and tenant isolation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping
from uuid import UUID

from django.db.models import Q

from filter_manager.filters.definition import FilterDefinition, FilterParameter
from filter_manager.filters.registry import FilterRegistry

if TYPE_CHECKING:  # pragma: no cover
    from filter_manager.session import SessionProvider

SOFT_DELETE = "SoftDelete"
MUST_HAVE_TENANT = "MustHaveTenant"
MAY_HAVE_TENANT = "MayHaveTenant"

TENANT_ID_PARAMETER = "tenant_id"


def _soft_delete_predicate(fields: Mapping[str, str], params: Mapping[str, Any]) -> Q:
    return Q(**{fields["deleted"]: False})


def _must_have_tenant_predicate(
    fields: Mapping[str, str], params: Mapping[str, Any]
) -> Q:
    tenant_id = params.get(TENANT_ID_PARAMETER)
    if tenant_id is None:
        return Q(**{f"{fields['tenant']}__isnull": True})
    return Q(**{fields["tenant"]: tenant_id})


def _may_have_tenant_predicate(
    fields: Mapping[str, str], params: Mapping[str, Any]
) -> Q:
    host_owned = Q(**{f"{fields['tenant']}__isnull": True})
    tenant_id = params.get(TENANT_ID_PARAMETER)
    if tenant_id is None:
        return host_owned
    return Q(**{fields["tenant"]: tenant_id}) | host_owned


def _has_tenant_context(session: "SessionProvider") -> bool:
    return not session.is_host_actor() and session.current_tenant_id() is not None


def _tenant_parameters(session: "SessionProvider") -> Mapping[str, Any]:
    return {TENANT_ID_PARAMETER: session.current_tenant_id()}


def _tenant_parameter() -> FilterParameter:
    return FilterParameter(
        TENANT_ID_PARAMETER, (int, str, UUID), default=None, nullable=True
    )


SOFT_DELETE_FILTER = FilterDefinition(
    name=SOFT_DELETE,
    capability="soft_deletable",
    predicate=_soft_delete_predicate,
    required_fields=("deleted",),
    description="Hide rows whose deleted flag is set.",
)

MUST_HAVE_TENANT_FILTER = FilterDefinition(
    name=MUST_HAVE_TENANT,
    capability="tenant_bound",
    predicate=_must_have_tenant_predicate,
    parameters=(_tenant_parameter(),),
    required_fields=("tenant",),
    session_condition=_has_tenant_context,
    session_parameters=_tenant_parameters,
    description=(
        "Restrict tenant-bound rows to the current tenant; off for host actors "
        "and sessions without a tenant."
    ),
)

MAY_HAVE_TENANT_FILTER = FilterDefinition(
    name=MAY_HAVE_TENANT,
    capability="tenant_optional",
    predicate=_may_have_tenant_predicate,
    parameters=(_tenant_parameter(),),
    required_fields=("tenant",),
    session_parameters=_tenant_parameters,
    description="Restrict rows to the current tenant plus host-owned rows.",
)

BUILTIN_FILTERS: tuple[FilterDefinition, ...] = (
    SOFT_DELETE_FILTER,
    MUST_HAVE_TENANT_FILTER,
    MAY_HAVE_TENANT_FILTER,
)


def register_builtin_filters(
    registry: FilterRegistry,
    overrides: Mapping[str, bool] | None = None,
) -> None:
    """Register the built-in filters, applying `default_enabled` overrides by name."""
    overrides = overrides or {}
    for definition in BUILTIN_FILTERS:
        if definition.name in overrides:
            definition = definition.with_default(overrides[definition.name])
        registry.register(definition)


__all__ = [
    "BUILTIN_FILTERS",
    "MAY_HAVE_TENANT",
    "MAY_HAVE_TENANT_FILTER",
    "MUST_HAVE_TENANT",
    "MUST_HAVE_TENANT_FILTER",
    "SOFT_DELETE",
    "SOFT_DELETE_FILTER",
    "TENANT_ID_PARAMETER",
    "register_builtin_filters",
]
