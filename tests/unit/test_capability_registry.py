"""Tests for the static entity capability table."""

from __future__ import annotations

import pytest

from filter_manager.capabilities.registry import (
    CapabilityBinding,
    EntityCapabilityRegistry,
    collect_declarations,
    get_capability_registry,
    register_models,
)
from filter_manager.filters.errors import UnknownCapabilityError
from tests.testapp.models import Country, LegacyRecord, Note, Passport, Person


def test_registry_initialization():
    registry = EntityCapabilityRegistry()

    assert registry.get(Person) == frozenset()
    assert registry.bindings(Person) == ()


def test_declare_and_lookup_binding():
    registry = EntityCapabilityRegistry()
    binding = registry.declare(Country, "soft_deletable", deleted="archived")

    assert registry.binding(Country, "soft_deletable") is binding
    assert binding.field("deleted") == "archived"
    assert registry.has(Country, "soft_deletable")
    assert not registry.has(Country, "tenant_bound")


def test_declare_again_replaces_fields():
    registry = EntityCapabilityRegistry()
    registry.declare(Country, "soft_deletable", deleted="archived")
    registry.declare(Country, "soft_deletable", deleted="removed")

    assert registry.binding(Country, "soft_deletable").field("deleted") == "removed"
    assert len(registry.bindings(Country)) == 1


def test_binding_fields_are_read_only():
    binding = CapabilityBinding("soft_deletable", {"deleted": "is_deleted"})

    with pytest.raises(TypeError):
        binding.fields["deleted"] = "other"  # type: ignore[index]


def test_binding_rejects_empty_capability():
    with pytest.raises(UnknownCapabilityError):
        CapabilityBinding("", {})


def test_forget_drops_model():
    registry = EntityCapabilityRegistry()
    registry.declare(Country, "soft_deletable", deleted="archived")

    registry.forget(Country)

    assert registry.get(Country) == frozenset()


def test_collect_declarations_merges_mixins():
    assert collect_declarations(Person) == {
        "soft_deletable": {"deleted": "is_deleted", "deleted_at": "deleted_at"},
        "tenant_bound": {"tenant": "tenant_id"},
    }
    assert collect_declarations(Note)["prioritized"] == {"priority": "priority"}
    assert collect_declarations(Country) == {}


def test_register_models_uses_class_attributes():
    registry = EntityCapabilityRegistry()

    register_models([Person, Country, Passport], registry)

    assert registry.get(Person) == frozenset({"soft_deletable", "tenant_bound"})
    assert registry.get(Passport) == frozenset({"soft_deletable"})
    assert registry.get(Country) == frozenset()


def test_default_registry_holds_prepared_models():
    registry = get_capability_registry()

    assert registry.get(Person) == frozenset({"soft_deletable", "tenant_bound"})
    assert registry.get(Note) == frozenset(
        {"soft_deletable", "tenant_optional", "prioritized"}
    )


def test_explicit_declarations_reach_the_default_registry():
    registry = get_capability_registry()

    assert registry.binding(LegacyRecord, "soft_deletable").field("deleted") == "removed"
    assert registry.binding(LegacyRecord, "tenant_bound").field("tenant") == "owner"


def test_snapshot_is_read_only():
    registry = EntityCapabilityRegistry()
    registry.declare(Country, "soft_deletable", deleted="archived")

    snapshot = registry.snapshot()

    assert snapshot[Country] == frozenset({"soft_deletable"})
    with pytest.raises(TypeError):
        snapshot[Person] = frozenset()  # type: ignore[index]
