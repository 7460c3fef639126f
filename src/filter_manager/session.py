"""Session providers: who is the current actor and which tenant do they act for."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, TypeAlias, runtime_checkable
from uuid import UUID

from django.db import models

from filter_manager.config import host_attribute, tenant_attribute

TenantId: TypeAlias = int | str | UUID


@runtime_checkable
class SessionProvider(Protocol):
    """Supplies the identity of the actor a unit of work runs for."""

    def current_tenant_id(self) -> TenantId | None:
        """Return the tenant the actor belongs to, or None without tenant context."""

    def is_host_actor(self) -> bool:
        """Return True for actors not bound to any single tenant."""


@dataclass(frozen=True)
class StaticSession:
    """Session with fixed values, for scripts, management commands and tests."""

    tenant_id: TenantId | None = None
    host: bool = False

    def current_tenant_id(self) -> TenantId | None:
        return self.tenant_id

    def is_host_actor(self) -> bool:
        return self.host


ANONYMOUS_SESSION = StaticSession()
"""No tenant, not a host: tenant-bound data stays unfiltered by tenant."""


class UserSessionProvider:
    """
    Derive the session from a Django user.

    Anonymous users carry no tenant. The tenant id is read from
    `tenant_attribute` (a model instance stands for its primary key) and host
    status from `host_attribute`, both configurable through the FILTER_MANAGER
    setting.
    """

    def __init__(
        self,
        user: Any,
        *,
        tenant_attr: str | None = None,
        host_attr: str | None = None,
    ) -> None:
        self.user = user
        self.tenant_attr = tenant_attr or tenant_attribute()
        self.host_attr = host_attr or host_attribute()

    @classmethod
    def from_request(cls, request: Any) -> "UserSessionProvider":
        return cls(getattr(request, "user", None))

    def _authenticated(self) -> bool:
        return self.user is not None and bool(
            getattr(self.user, "is_authenticated", False)
        )

    def current_tenant_id(self) -> TenantId | None:
        if not self._authenticated():
            return None
        tenant = getattr(self.user, self.tenant_attr, None)
        if isinstance(tenant, models.Model):
            # a tenant relation resolves to the related row's primary key
            return tenant.pk
        return tenant

    def is_host_actor(self) -> bool:
        if not self._authenticated():
            return False
        return bool(getattr(self.user, self.host_attr, False))

    def __repr__(self) -> str:
        return (
            f"<UserSessionProvider tenant={self.current_tenant_id()!r} "
            f"host={self.is_host_actor()!r}>"
        )


def session_from_request(request: Any) -> UserSessionProvider:
    """Default FILTER_MANAGER['SESSION_PROVIDER'] factory."""
    return UserSessionProvider.from_request(request)


__all__ = [
    "ANONYMOUS_SESSION",
    "SessionProvider",
    "StaticSession",
    "TenantId",
    "UserSessionProvider",
    "session_from_request",
]
