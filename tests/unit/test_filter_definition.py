"""Tests for filter definitions and parameters."""

from __future__ import annotations

from uuid import uuid4

import pytest
from django.db.models import Q

from filter_manager.filters.definition import FilterDefinition, FilterParameter
from filter_manager.filters.errors import (
    InvalidFilterDefinitionError,
    InvalidPredicateError,
    MissingCapabilityFieldError,
    UnknownCapabilityError,
    UnknownParameterError,
)
from tests.utils.filters import make_status_filter


def test_parameter_accepts_declared_types():
    parameter = FilterParameter("tenant_id", (int, str), default=None, nullable=True)

    assert parameter.accepts(5)
    assert parameter.accepts("acme")
    assert parameter.accepts(None)
    assert not parameter.accepts(uuid4())


def test_parameter_rejects_bool_for_int():
    parameter = FilterParameter("level", (int,), default=0)

    assert not parameter.accepts(True)
    assert FilterParameter("flag", (bool,), default=False).accepts(True)


def test_parameter_rejects_none_unless_nullable():
    assert not FilterParameter("level", (int,), default=0).accepts(None)


def test_parameter_accepts_a_single_type():
    parameter = FilterParameter("level", int, default=1)  # type: ignore[arg-type]

    assert parameter.types == (int,)


def test_parameter_default_must_match_type():
    with pytest.raises(InvalidFilterDefinitionError):
        FilterParameter("level", (int,), default="high")


def test_definition_rejects_duplicate_parameters():
    with pytest.raises(InvalidFilterDefinitionError):
        FilterDefinition(
            name="Twice",
            capability="has_status",
            predicate=lambda fields, params: Q(),
            parameters=(
                FilterParameter("level", (int,), default=0),
                FilterParameter("level", (int,), default=1),
            ),
        )


@pytest.mark.parametrize("capability", ["", None, 3])
def test_definition_rejects_invalid_capability(capability):
    with pytest.raises(UnknownCapabilityError):
        FilterDefinition(
            name="Broken",
            capability=capability,  # type: ignore[arg-type]
            predicate=lambda fields, params: Q(),
        )


def test_definition_rejects_empty_name():
    with pytest.raises(InvalidFilterDefinitionError):
        FilterDefinition(
            name="", capability="x", predicate=lambda fields, params: Q()
        )


def test_parameter_lookup():
    definition = make_status_filter()

    assert definition.parameter("status").default == "active"
    assert definition.has_parameter("status")
    with pytest.raises(UnknownParameterError):
        definition.parameter("colour")


def test_default_parameters_returns_fresh_mapping():
    definition = make_status_filter()
    values = definition.default_parameters()
    values["status"] = "mutated"

    assert definition.default_parameters() == {"status": "active"}


def test_bind_uses_fields_and_parameters():
    definition = make_status_filter()

    predicate = definition.bind({"status": "state"}, {"status": "archived"})

    assert predicate == Q(state="archived")


def test_bind_requires_declared_field_roles():
    with pytest.raises(MissingCapabilityFieldError):
        make_status_filter().bind({}, {"status": "active"})


def test_bind_rejects_non_q_predicates():
    definition = FilterDefinition(
        name="Raw",
        capability="raw",
        predicate=lambda fields, params: {"state": "x"},  # type: ignore[arg-type,return-value]
    )

    with pytest.raises(InvalidPredicateError):
        definition.bind({}, {})


def test_with_default_copies_everything_else():
    definition = make_status_filter()

    disabled = definition.with_default(False)

    assert disabled.default_enabled is False
    assert disabled.name == definition.name
    assert disabled.parameters == definition.parameters
    assert disabled.predicate is definition.predicate


def test_definition_is_immutable():
    definition = make_status_filter()

    with pytest.raises(AttributeError):
        definition.name = "Other"  # type: ignore[misc]
