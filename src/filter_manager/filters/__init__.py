"""Filter engine exports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "FilterDefinition",
    "FilterParameter",
    "FilterRegistry",
    "QueryInterceptor",
    "ScopeGuard",
    "UnitOfWorkFilterState",
    "get_filter_registry",
    "register_filter",
]

_MODULE_MAP = {
    "FilterDefinition": "definition",
    "FilterParameter": "definition",
    "FilterRegistry": "registry",
    "get_filter_registry": "registry",
    "register_filter": "registry",
    "QueryInterceptor": "interceptor",
    "ScopeGuard": "guard",
    "UnitOfWorkFilterState": "state",
}


def __getattr__(name: str) -> Any:
    if name not in __all__:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = import_module(f"{__name__}.{_MODULE_MAP[name]}")
    value = getattr(module, name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + __all__)
