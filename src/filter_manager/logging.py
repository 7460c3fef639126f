"""Logging helpers that namespace FilterManager loggers and carry structured context."""

from __future__ import annotations

import logging
from typing import Any, Mapping, MutableMapping

__all__ = ["FilterManagerLoggerAdapter", "get_logger"]

_ROOT_LOGGER_NAME = "filter_manager"


class InvalidLogContextError(TypeError):
    """Raised when a log call passes a non-mapping `context` argument."""

    def __init__(self, value: object) -> None:
        super().__init__(
            f"Log context must be a mapping, got {type(value).__name__}."
        )


class FilterManagerLoggerAdapter(logging.LoggerAdapter):
    """
    Logger adapter that stamps the component name on every record.

    Callers may pass `context={...}`; it is merged with any `extra["context"]`
    and exposed as `record.context` for structured handlers.
    """

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        context = kwargs.pop("context", None)
        if context is not None and not isinstance(context, Mapping):
            raise InvalidLogContextError(context)

        extra: dict[str, Any] = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})

        merged: dict[str, Any] = {}
        existing = extra.get("context")
        if isinstance(existing, Mapping):
            merged.update(existing)
        if context:
            merged.update(context)
        if merged:
            extra["context"] = merged

        kwargs["extra"] = extra
        return msg, kwargs


def get_logger(component: str | None = None) -> FilterManagerLoggerAdapter:
    """
    Return the adapter for `filter_manager.<component>`.

    Parameters:
        component (str | None): Dotted sub-namespace such as "filters.registry".
            When omitted the package root logger is used.

    Returns:
        FilterManagerLoggerAdapter: Adapter whose records carry `component`.
    """
    name = f"{_ROOT_LOGGER_NAME}.{component}" if component else _ROOT_LOGGER_NAME
    return FilterManagerLoggerAdapter(
        logging.getLogger(name), {"component": component or _ROOT_LOGGER_NAME}
    )
