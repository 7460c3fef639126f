"""Custom filter registered through FILTER_MANAGER['FILTERS']."""

from __future__ import annotations

from typing import Any, Mapping

from django.db.models import Q

from filter_manager.filters.definition import FilterDefinition, FilterParameter


def _minimum_priority(fields: Mapping[str, str], params: Mapping[str, Any]) -> Q:
    return Q(**{f"{fields['priority']}__gte": params["level"]})


MINIMUM_PRIORITY_FILTER = FilterDefinition(
    name="MinimumPriority",
    capability="prioritized",
    predicate=_minimum_priority,
    parameters=(FilterParameter("level", (int,), default=0),),
    default_enabled=False,
    required_fields=("priority",),
    description="Hide notes below a priority level.",
)


def _status_filter(name: str) -> FilterDefinition:
    return FilterDefinition(
        name=name,
        capability="has_status",
        predicate=lambda fields, params: Q(**{fields["status"]: params["status"]}),
        parameters=(FilterParameter("status", (str,), default="active"),),
        required_fields=("status",),
    )


STATUS_FILTERS = [_status_filter("Draft"), _status_filter("Archived")]


def status_filter_factory() -> FilterDefinition:
    return _status_filter("Factory")


def not_a_filter() -> dict[str, str]:
    return {"name": "Nope"}
