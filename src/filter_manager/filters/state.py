"""Per-unit-of-work filter flags and parameter values."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from filter_manager.filters.definition import FilterDefinition
from filter_manager.filters.errors import (
    ParameterTypeMismatchError,
    UnknownFilterError,
)
from filter_manager.filters.guard import ScopeGuard
from filter_manager.filters.registry import FilterRegistry, get_filter_registry
from filter_manager.logging import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from filter_manager.session import SessionProvider

logger = get_logger("filters.state")


class UnitOfWorkFilterState:
    """
    Mutable filter state owned by exactly one unit of work.

    The state is seeded from the registry: each filter starts with its
    `default_enabled` flag and its declared parameter defaults. When a session
    is supplied, filters whose session condition rejects it start disabled and
    session-provided parameter values override the defaults.
    """

    def __init__(
        self,
        registry: FilterRegistry | None = None,
        session: "SessionProvider | None" = None,
    ) -> None:
        self._registry = registry if registry is not None else get_filter_registry()
        self._session = session
        self._enabled: dict[str, bool] = {}
        self._parameters: dict[str, dict[str, Any]] = {}
        for definition in self._registry.definitions():
            self._seed(definition)

    def _seed(self, definition: FilterDefinition) -> None:
        session = self._session
        enabled = definition.default_enabled
        if (
            enabled
            and session is not None
            and definition.session_condition is not None
            and not definition.session_condition(session)
        ):
            enabled = False
        self._enabled[definition.name] = enabled
        self._parameters[definition.name] = definition.default_parameters()
        if session is not None and definition.session_parameters is not None:
            for param_name, value in definition.session_parameters(session).items():
                self.set_parameter(definition.name, param_name, value)

    @property
    def registry(self) -> FilterRegistry:
        return self._registry

    def _require(self, name: str) -> None:
        if name in self._enabled:
            return
        if name not in self._registry:
            raise UnknownFilterError(name)
        # registered after this state was created (unfrozen registry)
        self._seed(self._registry.lookup(name))

    def is_enabled(self, name: str) -> bool:
        """Return whether filter `name` is active in this unit of work."""
        self._require(name)
        return self._enabled[name]

    def enabled_filters(self) -> tuple[str, ...]:
        """Names of the currently enabled filters, in registration order."""
        return tuple(name for name, enabled in self._enabled.items() if enabled)

    def get_parameter(self, name: str, param_name: str) -> Any:
        self._require(name)
        self._registry.lookup(name).parameter(param_name)
        return self._parameters[name][param_name]

    def parameters(self, name: str) -> dict[str, Any]:
        """Return a copy of the current parameter values of filter `name`."""
        self._require(name)
        return dict(self._parameters[name])

    def set_parameter(self, name: str, param_name: str, value: Any) -> None:
        """
        Overwrite a parameter value for the rest of the unit of work.

        Parameter values are independent of toggling: scope guards never restore
        them.

        Raises:
            UnknownFilterError: `name` is not registered.
            UnknownParameterError: The filter does not declare `param_name`.
            ParameterTypeMismatchError: `value` does not match the declared type.
                The previous value is kept.
        """
        self._require(name)
        parameter = self._registry.lookup(name).parameter(param_name)
        if not parameter.accepts(value):
            raise ParameterTypeMismatchError(name, param_name, parameter.types, value)
        self._parameters[name][param_name] = value
        logger.debug(
            "filter parameter set",
            context={"filter": name, "parameter": param_name},
        )

    def disable(self, *names: str) -> ScopeGuard:
        """Disable the given filters and return a guard restoring their prior flags."""
        return self._toggle(names, False)

    def enable(self, *names: str) -> ScopeGuard:
        """Enable the given filters and return a guard restoring their prior flags."""
        return self._toggle(names, True)

    def _toggle(self, names: Iterable[str], value: bool) -> ScopeGuard:
        names = tuple(names)
        for name in names:
            self._require(name)
        captured: dict[str, bool] = {}
        for name in names:
            captured.setdefault(name, self._enabled[name])
            self._enabled[name] = value
        logger.debug(
            "filters toggled",
            context={"filters": list(captured), "enabled": value},
        )
        return ScopeGuard(self, captured)

    def _restore(self, captured: Mapping[str, bool]) -> None:
        for name, value in captured.items():
            self._enabled[name] = value
        logger.debug(
            "filters restored",
            context={"filters": dict(captured)},
        )

    def fork(self) -> "UnitOfWorkFilterState":
        """Return an independent copy of the current flags and parameters."""
        clone = object.__new__(UnitOfWorkFilterState)
        clone._registry = self._registry
        clone._session = self._session
        clone._enabled = dict(self._enabled)
        clone._parameters = {
            name: dict(values) for name, values in self._parameters.items()
        }
        return clone

    def __repr__(self) -> str:
        return f"<UnitOfWorkFilterState enabled={list(self.enabled_filters())!r}>"


__all__ = ["UnitOfWorkFilterState"]
