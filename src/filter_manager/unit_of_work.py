"""Unit of work: one isolated filter scope routing every retrieval through the interceptor."""

from __future__ import annotations

from types import TracebackType
from typing import Any, TypeVar

from django.db import models
from django.db.models import Prefetch
from django.db.models.constants import LOOKUP_SEP
from django.db.models.fields.reverse_related import ForeignObjectRel

from filter_manager.capabilities.registry import EntityCapabilityRegistry
from filter_manager.capabilities.soft_delete import restore, soft_delete
from filter_manager.filters.errors import (
    FilterStateRegistryMismatchError,
    UnitOfWorkClosedError,
    UnknownRelationError,
)
from filter_manager.filters.guard import ScopeGuard
from filter_manager.filters.interceptor import QueryInterceptor
from filter_manager.filters.registry import FilterRegistry, get_filter_registry
from filter_manager.filters.state import UnitOfWorkFilterState
from filter_manager.logging import get_logger
from filter_manager.session import ANONYMOUS_SESSION, SessionProvider

logger = get_logger("unit_of_work")

ModelT = TypeVar("ModelT", bound=models.Model)

_TENANT_CAPABILITIES = ("tenant_bound", "tenant_optional")


class UnitOfWork:
    """
    One logical scope of data operations with its own filter state.

    Retrievals issued through the unit of work (list, get, count, exists and
    relation traversal) see the predicates of every enabled filter matching the
    queried model. The filter state is discarded on `close()`; nothing carries
    over to the next unit of work.

    Example:
        with UnitOfWork(StaticSession(tenant_id=7)) as uow:
            people = uow.query(Person)
            with uow.disable_filter("SoftDelete"):
                everyone = uow.query(Person)
    """

    def __init__(
        self,
        session: SessionProvider | None = None,
        *,
        registry: FilterRegistry | None = None,
        capabilities: EntityCapabilityRegistry | None = None,
        filter_state: UnitOfWorkFilterState | None = None,
    ) -> None:
        self.session: SessionProvider = session if session is not None else ANONYMOUS_SESSION
        if filter_state is not None:
            if registry is not None and registry is not filter_state.registry:
                raise FilterStateRegistryMismatchError()
            registry = filter_state.registry
        self._registry = registry if registry is not None else get_filter_registry()
        self._interceptor = QueryInterceptor(self._registry, capabilities)
        self._filters: UnitOfWorkFilterState | None = (
            filter_state
            if filter_state is not None
            else UnitOfWorkFilterState(self._registry, self.session)
        )
        logger.debug(
            "unit of work opened",
            context={
                "tenant_id": self.session.current_tenant_id(),
                "host": self.session.is_host_actor(),
                "enabled": list(self._filters.enabled_filters()),
            },
        )

    # lifecycle

    @property
    def closed(self) -> bool:
        return self._filters is None

    @property
    def filters(self) -> UnitOfWorkFilterState:
        if self._filters is None:
            raise UnitOfWorkClosedError()
        return self._filters

    @property
    def interceptor(self) -> QueryInterceptor:
        return self._interceptor

    def close(self) -> None:
        """Discard the filter state. Closing twice is harmless."""
        if self._filters is None:
            return
        self._filters = None
        logger.debug("unit of work closed")

    def fork(self) -> "UnitOfWork":
        """Start an independent unit of work that copies the current filter state."""
        return UnitOfWork(
            self.session,
            registry=self._registry,
            capabilities=self._interceptor.capabilities,
            filter_state=self.filters.fork(),
        )

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    # filter toggles

    def disable_filter(self, *names: str) -> ScopeGuard:
        return self.filters.disable(*names)

    def enable_filter(self, *names: str) -> ScopeGuard:
        return self.filters.enable(*names)

    def is_filter_enabled(self, name: str) -> bool:
        return self.filters.is_enabled(name)

    def set_filter_parameter(self, name: str, param_name: str, value: Any) -> None:
        self.filters.set_parameter(name, param_name, value)

    # retrieval

    def apply(self, queryset: models.QuerySet) -> models.QuerySet:
        """Filter an arbitrary queryset with the current filter state."""
        return self._interceptor.apply(queryset, queryset.model, self.filters)

    def query(self, model: type[ModelT]) -> models.QuerySet[ModelT]:
        """Return every visible row of `model`."""
        return self._interceptor.apply(model._default_manager.all(), model, self.filters)

    def filter(
        self, model: type[ModelT], *args: Any, **kwargs: Any
    ) -> models.QuerySet[ModelT]:
        return self.query(model).filter(*args, **kwargs)

    def get(self, model: type[ModelT], *args: Any, **kwargs: Any) -> ModelT:
        """
        Return the single visible row matching the lookup.

        Raises:
            model.DoesNotExist: No visible row matches, including rows hidden by a filter.
            model.MultipleObjectsReturned: More than one visible row matches.
        """
        return self.query(model).get(*args, **kwargs)

    def first(self, model: type[ModelT], *args: Any, **kwargs: Any) -> ModelT | None:
        return self.filter(model, *args, **kwargs).first()

    def count(self, model: type[models.Model], *args: Any, **kwargs: Any) -> int:
        return self.filter(model, *args, **kwargs).count()

    def exists(self, model: type[models.Model], *args: Any, **kwargs: Any) -> bool:
        return self.filter(model, *args, **kwargs).exists()

    def related(self, instance: models.Model, name: str) -> Any:
        """
        Traverse the relation `name` of `instance` with filters applied to the target.

        Forward foreign keys and one-to-one relations return the related instance,
        or None when it is missing or hidden. Reverse foreign keys and many-to-many
        relations return a filtered queryset.

        Parameters:
            instance (models.Model): Source instance.
            name (str): Field name, related name or reverse accessor name.

        Raises:
            UnknownRelationError: `name` is not a relation of the model.
        """
        relation = self._resolve_relation(type(instance), name)
        target = relation.related_model
        if relation.many_to_many or relation.one_to_many:
            accessor = (
                relation.get_accessor_name()
                if isinstance(relation, ForeignObjectRel)
                else relation.name
            )
            manager = getattr(instance, accessor)
            return self._interceptor.apply(manager.all(), target, self.filters)
        if isinstance(relation, ForeignObjectRel):
            # reverse one-to-one
            return self.first(target, **{relation.field.name: instance})
        value = getattr(instance, relation.attname)
        if value is None:
            return None
        return self.first(target, **{relation.target_field.attname: value})

    def prefetch(self, queryset: models.QuerySet, *lookups: str) -> models.QuerySet:
        """
        Prefetch relations of `queryset` with filters applied to every level.

        Nested lookups such as "people__notes" filter each intermediate relation
        too. A plain `prefetch_related()` bypasses the filters.

        Raises:
            UnknownRelationError: A lookup segment is not a relation.
        """
        prefetches: dict[str, Prefetch] = {}
        for lookup in lookups:
            model = queryset.model
            path: list[str] = []
            for segment in lookup.split(LOOKUP_SEP):
                target = self._resolve_relation(model, segment).related_model
                path.append(segment)
                key = LOOKUP_SEP.join(path)
                if key not in prefetches:
                    prefetches[key] = Prefetch(
                        key,
                        queryset=self._interceptor.apply(
                            target._default_manager.all(), target, self.filters
                        ),
                    )
                model = target
        return queryset.prefetch_related(*prefetches.values())

    @staticmethod
    def _resolve_relation(model: type[models.Model], name: str) -> Any:
        for field in model._meta.get_fields():
            if not field.is_relation or field.related_model is None:
                continue
            names = {field.name}
            if isinstance(field, ForeignObjectRel):
                names.add(field.get_accessor_name())
            if name in names:
                return field
        raise UnknownRelationError(name, model.__name__)

    # writes

    def save(self, instance: ModelT, **save_kwargs: Any) -> ModelT:
        """
        Save `instance`, filling an unset tenant field from the session first.

        An explicitly set tenant is never overwritten.
        """
        tenant_id = self.session.current_tenant_id()
        if tenant_id is not None:
            table = self._interceptor.capabilities
            for capability in _TENANT_CAPABILITIES:
                binding = table.binding(type(instance), capability)
                field_name = binding.field("tenant") if binding is not None else None
                if field_name is not None and getattr(instance, field_name) is None:
                    setattr(instance, field_name, tenant_id)
        instance.save(**save_kwargs)
        return instance

    def soft_delete(self, instance: ModelT) -> ModelT:
        """Flag `instance` as deleted; the row stays in the table."""
        soft_delete(instance, registry=self._interceptor.capabilities)
        return instance

    def restore(self, instance: ModelT) -> ModelT:
        restore(instance, registry=self._interceptor.capabilities)
        return instance

    def __repr__(self) -> str:
        status = "closed" if self.closed else "open"
        return f"<UnitOfWork {status} session={self.session!r}>"


__all__ = ["UnitOfWork"]
