# tests/conftest.py

from __future__ import annotations

import pytest

from filter_manager.filters.builtin import register_builtin_filters
from filter_manager.filters.registry import FilterRegistry
from filter_manager.filters.state import UnitOfWorkFilterState
from tests.utils.filters import make_status_filter


@pytest.fixture
def registry() -> FilterRegistry:
    """Fresh, frozen registry holding the built-ins and the Status filter."""
    fresh = FilterRegistry()
    register_builtin_filters(fresh)
    fresh.register(make_status_filter())
    fresh.freeze()
    return fresh


@pytest.fixture
def state(registry: FilterRegistry) -> UnitOfWorkFilterState:
    """Filter state seeded without a session (registry defaults only)."""
    return UnitOfWorkFilterState(registry)
