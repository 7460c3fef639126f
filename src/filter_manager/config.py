"""Configuration helpers reading the FILTER_MANAGER Django setting."""

from __future__ import annotations

from typing import Any, Callable, Mapping

from django.conf import settings
from django.utils.module_loading import import_string

_SETTINGS_KEY = "FILTER_MANAGER"

DEFAULT_TENANT_ATTRIBUTE = "tenant_id"
DEFAULT_HOST_ATTRIBUTE = "is_superuser"
DEFAULT_REQUEST_ATTRIBUTE = "unit_of_work"
DEFAULT_SESSION_PROVIDER = "filter_manager.session.session_from_request"


class InvalidFilterSettingError(TypeError):
    """Raised when a FILTER_MANAGER entry has the wrong shape."""

    def __init__(self, key: str, expected: str) -> None:
        super().__init__(f"FILTER_MANAGER['{key}'] must be {expected}.")


def _config(django_settings: Any = settings) -> Mapping[str, Any]:
    value = getattr(django_settings, _SETTINGS_KEY, {})
    if isinstance(value, Mapping):
        return value
    return {}


def builtin_filters_enabled(django_settings: Any = settings) -> bool:
    return bool(_config(django_settings).get("BUILTIN_FILTERS", True))


def freeze_registry_enabled(django_settings: Any = settings) -> bool:
    return bool(_config(django_settings).get("FREEZE_REGISTRY", True))


def custom_filter_paths(django_settings: Any = settings) -> tuple[str, ...]:
    raw = _config(django_settings).get("FILTERS", ())
    if isinstance(raw, str) or not all(isinstance(item, str) for item in raw):
        raise InvalidFilterSettingError("FILTERS", "a list of dotted paths")
    return tuple(raw)


def filter_default_overrides(django_settings: Any = settings) -> dict[str, bool]:
    raw = _config(django_settings).get("FILTER_DEFAULTS", {})
    if not isinstance(raw, Mapping):
        raise InvalidFilterSettingError("FILTER_DEFAULTS", "a mapping of name to bool")
    return {str(name): bool(enabled) for name, enabled in raw.items()}


def tenant_attribute(django_settings: Any = settings) -> str:
    return str(
        _config(django_settings).get("TENANT_ATTRIBUTE", DEFAULT_TENANT_ATTRIBUTE)
    )


def host_attribute(django_settings: Any = settings) -> str:
    return str(_config(django_settings).get("HOST_ATTRIBUTE", DEFAULT_HOST_ATTRIBUTE))


def request_attribute(django_settings: Any = settings) -> str:
    return str(
        _config(django_settings).get("REQUEST_ATTRIBUTE", DEFAULT_REQUEST_ATTRIBUTE)
    )


def session_provider_factory(django_settings: Any = settings) -> Callable[[Any], Any]:
    """Resolve the `(request) -> SessionProvider` factory used by the middleware."""
    value = _config(django_settings).get("SESSION_PROVIDER", DEFAULT_SESSION_PROVIDER)
    factory = import_string(value) if isinstance(value, str) else value
    if not callable(factory):
        raise InvalidFilterSettingError("SESSION_PROVIDER", "a callable or dotted path")
    return factory


__all__ = [
    "InvalidFilterSettingError",
    "builtin_filters_enabled",
    "custom_filter_paths",
    "filter_default_overrides",
    "freeze_registry_enabled",
    "host_attribute",
    "request_attribute",
    "session_provider_factory",
    "tenant_attribute",
]
