"""Inject the predicates of enabled filters into querysets."""

from __future__ import annotations

from typing import Iterator

from django.db import models
from django.db.models import Q

from filter_manager.capabilities.registry import (
    EntityCapabilityRegistry,
    get_capability_registry,
)
from filter_manager.filters.definition import FilterDefinition
from filter_manager.filters.registry import FilterRegistry
from filter_manager.filters.state import UnitOfWorkFilterState
from filter_manager.logging import get_logger

logger = get_logger("filters.interceptor")


class QueryInterceptor:
    """
    Conjoin the predicates of every enabled filter matching a model's capabilities.

    The filter catalog is taken from the unit-of-work state unless an explicit
    registry is given; capabilities come from the static capability table.
    """

    def __init__(
        self,
        registry: FilterRegistry | None = None,
        capabilities: EntityCapabilityRegistry | None = None,
    ) -> None:
        self._registry = registry
        self._capabilities = (
            capabilities if capabilities is not None else get_capability_registry()
        )

    @property
    def capabilities(self) -> EntityCapabilityRegistry:
        return self._capabilities

    def _applicable(
        self,
        model: type[models.Model],
        state: UnitOfWorkFilterState,
    ) -> Iterator[tuple[FilterDefinition, dict[str, str]]]:
        registry = self._registry if self._registry is not None else state.registry
        for binding in self._capabilities.bindings(model):
            for definition in registry.definitions_for(binding.capability):
                if state.is_enabled(definition.name):
                    yield definition, dict(binding.fields)

    def active_filters(
        self,
        model: type[models.Model],
        state: UnitOfWorkFilterState,
    ) -> tuple[str, ...]:
        """Names of the filters that would be applied to `model` right now."""
        return tuple(definition.name for definition, _ in self._applicable(model, state))

    def build_predicate(
        self,
        model: type[models.Model],
        state: UnitOfWorkFilterState,
    ) -> Q | None:
        """
        Combine the bound predicates of every applicable filter with AND.

        Returns:
            Q | None: The combined predicate, or None when no filter applies.
        """
        return self._combine(model, state)[0]

    def _combine(
        self,
        model: type[models.Model],
        state: UnitOfWorkFilterState,
    ) -> tuple[Q | None, list[str]]:
        combined: Q | None = None
        applied: list[str] = []
        for definition, fields in self._applicable(model, state):
            predicate = definition.bind(fields, state.parameters(definition.name))
            combined = predicate if combined is None else combined & predicate
            applied.append(definition.name)
        return combined, applied

    def apply(
        self,
        queryset: models.QuerySet,
        model: type[models.Model] | None,
        state: UnitOfWorkFilterState,
    ) -> models.QuerySet:
        """
        Attach the combined predicate to `queryset`.

        Parameters:
            queryset: Base queryset of the retrieval.
            model: Entity type queried; defaults to `queryset.model`.
            state: Filter state of the current unit of work.

        Returns:
            QuerySet: The filtered queryset, or `queryset` itself when no filter applies.
        """
        target = model if model is not None else queryset.model
        predicate, applied = self._combine(target, state)
        if predicate is None:
            return queryset
        logger.debug(
            "filters applied",
            context={"model": target.__name__, "filters": applied},
        )
        return queryset.filter(predicate)


__all__ = ["QueryInterceptor"]
