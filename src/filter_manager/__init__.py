"""Convenience access to FilterManager core components."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "FilterDefinition",
    "FilterParameter",
    "FilterRegistry",
    "QueryInterceptor",
    "ScopeGuard",
    "UnitOfWork",
    "UnitOfWorkFilterState",
    "StaticSession",
    "UserSessionProvider",
    "declare_capabilities",
    "get_filter_registry",
    "register_filter",
    "soft_delete",
]

_MODULE_MAP = {
    "FilterDefinition": ("filter_manager.filters.definition", "FilterDefinition"),
    "FilterParameter": ("filter_manager.filters.definition", "FilterParameter"),
    "FilterRegistry": ("filter_manager.filters.registry", "FilterRegistry"),
    "get_filter_registry": ("filter_manager.filters.registry", "get_filter_registry"),
    "register_filter": ("filter_manager.filters.registry", "register_filter"),
    "QueryInterceptor": ("filter_manager.filters.interceptor", "QueryInterceptor"),
    "ScopeGuard": ("filter_manager.filters.guard", "ScopeGuard"),
    "UnitOfWorkFilterState": ("filter_manager.filters.state", "UnitOfWorkFilterState"),
    "UnitOfWork": ("filter_manager.unit_of_work", "UnitOfWork"),
    "StaticSession": ("filter_manager.session", "StaticSession"),
    "UserSessionProvider": ("filter_manager.session", "UserSessionProvider"),
    "declare_capabilities": (
        "filter_manager.capabilities.registry",
        "declare_capabilities",
    ),
    "soft_delete": ("filter_manager.capabilities.soft_delete", "soft_delete"),
}


def __getattr__(name: str) -> Any:
    if name not in __all__:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_path, attr = _MODULE_MAP[name]
    module = import_module(module_path)
    value = getattr(module, attr)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)
