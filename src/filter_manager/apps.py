from __future__ import annotations

from typing import Any, Iterable

from django.apps import AppConfig, apps
from django.conf import settings
from django.utils.module_loading import import_string

from filter_manager.capabilities.registry import get_capability_registry, register_models
from filter_manager.config import (
    builtin_filters_enabled,
    custom_filter_paths,
    filter_default_overrides,
    freeze_registry_enabled,
)
from filter_manager.filters.builtin import register_builtin_filters
from filter_manager.filters.definition import FilterDefinition
from filter_manager.filters.errors import InvalidFilterDefinitionError
from filter_manager.filters.registry import FilterRegistry, get_filter_registry
from filter_manager.logging import get_logger

logger = get_logger("apps")


class FilterManagerConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "filter_manager"

    def ready(self) -> None:
        self.initialize_capabilities()
        registry = get_filter_registry()
        if not registry.frozen:
            self.initialize_filter_registry(registry, settings)

    @staticmethod
    def initialize_capabilities() -> None:
        logger.debug("declaring model capabilities...")
        register_models(apps.get_models(), get_capability_registry())

    @staticmethod
    def initialize_filter_registry(registry: FilterRegistry, django_settings: Any) -> None:
        """
        Register the built-in and configured filters, then freeze the registry.

        Misconfiguration (duplicate names, unresolvable paths, objects that are
        not filter definitions) propagates and aborts startup.
        """
        overrides = filter_default_overrides(django_settings)
        if builtin_filters_enabled(django_settings):
            register_builtin_filters(registry, overrides)
        for path in custom_filter_paths(django_settings):
            for definition in FilterManagerConfig.load_filter_definitions(path):
                if definition.name in overrides:
                    definition = definition.with_default(overrides[definition.name])
                registry.register(definition)
        if freeze_registry_enabled(django_settings):
            registry.freeze()

    @staticmethod
    def load_filter_definitions(path: str) -> tuple[FilterDefinition, ...]:
        """Resolve a dotted path to a definition, an iterable of them, or a factory."""
        value = import_string(path)
        if callable(value) and not isinstance(value, FilterDefinition):
            value = value()
        if isinstance(value, FilterDefinition):
            return (value,)
        definitions: Iterable[Any] = value if isinstance(value, (list, tuple)) else ()
        resolved = tuple(definitions)
        if not resolved or not all(
            isinstance(item, FilterDefinition) for item in resolved
        ):
            raise InvalidFilterDefinitionError(
                path, "the path does not resolve to filter definitions"
            )
        return resolved
