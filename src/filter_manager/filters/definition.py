"""Filter definitions and their declared parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Literal,
    Mapping,
    TypeAlias,
)

from django.db.models import Q

from filter_manager.filters.errors import (
    InvalidFilterDefinitionError,
    InvalidPredicateError,
    MissingCapabilityFieldError,
    UnknownCapabilityError,
    UnknownParameterError,
)

if TYPE_CHECKING:  # pragma: no cover
    from filter_manager.session import SessionProvider

BuiltinCapabilityName = Literal["soft_deletable", "tenant_bound", "tenant_optional"]
"""Capabilities shipped with the built-in filters."""

CapabilityName: TypeAlias = str
"""Any capability identifier, built-in or user defined."""

PredicateTemplate: TypeAlias = Callable[[Mapping[str, str], Mapping[str, Any]], Q]
"""Builds a Q from (capability field names by role, parameter values)."""

SessionCondition: TypeAlias = Callable[["SessionProvider"], bool]
SessionParameters: TypeAlias = Callable[["SessionProvider"], Mapping[str, Any]]


@dataclass(frozen=True, slots=True)
class FilterParameter:
    """A named, typed parameter of a filter."""

    name: str
    types: tuple[type, ...]
    default: Any = None
    nullable: bool = False

    def __post_init__(self) -> None:
        types = self.types if isinstance(self.types, tuple) else (self.types,)
        object.__setattr__(self, "types", types)
        if not self.name:
            raise InvalidFilterDefinitionError(
                "<parameter>", "parameter names must not be empty"
            )
        if not self.accepts(self.default):
            raise InvalidFilterDefinitionError(
                self.name,
                f"default {self.default!r} does not match the declared type",
            )

    def accepts(self, value: Any) -> bool:
        """Return True when `value` satisfies the declared type."""
        if value is None:
            return self.nullable
        if isinstance(value, bool) and bool not in self.types:
            return False
        return isinstance(value, self.types)


@dataclass(frozen=True, slots=True)
class FilterDefinition:
    """
    One named filter: the capability it targets, its predicate and parameters.

    The predicate receives the entity's capability fields keyed by role (for
    example ``{"deleted": "is_deleted"}``) and the current parameter values of
    the unit of work, and returns the Q to AND into the query.
    """

    name: str
    capability: CapabilityName
    predicate: PredicateTemplate
    parameters: tuple[FilterParameter, ...] = ()
    default_enabled: bool = True
    required_fields: tuple[str, ...] = ()
    session_condition: SessionCondition | None = None
    session_parameters: SessionParameters | None = None
    description: str = ""
    _parameter_index: dict[str, FilterParameter] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidFilterDefinitionError(
                repr(self.name), "names must be non-empty strings"
            )
        if not isinstance(self.capability, str) or not self.capability:
            raise UnknownCapabilityError(self.capability)
        if not callable(self.predicate):
            raise InvalidFilterDefinitionError(self.name, "predicate is not callable")
        object.__setattr__(self, "parameters", tuple(self.parameters))
        object.__setattr__(self, "required_fields", tuple(self.required_fields))
        index: dict[str, FilterParameter] = {}
        for parameter in self.parameters:
            if parameter.name in index:
                raise InvalidFilterDefinitionError(
                    self.name, f"parameter '{parameter.name}' is declared twice"
                )
            index[parameter.name] = parameter
        object.__setattr__(self, "_parameter_index", index)

    def parameter(self, name: str) -> FilterParameter:
        """Return the declared parameter `name` or raise UnknownParameterError."""
        try:
            return self._parameter_index[name]
        except KeyError:
            raise UnknownParameterError(self.name, name) from None

    def has_parameter(self, name: str) -> bool:
        return name in self._parameter_index

    def default_parameters(self) -> dict[str, Any]:
        """Return a fresh mapping of every parameter to its default."""
        return {parameter.name: parameter.default for parameter in self.parameters}

    def bind(self, fields: Mapping[str, str], params: Mapping[str, Any]) -> Q:
        """
        Bind the predicate template to an entity's fields and parameter values.

        Parameters:
            fields (Mapping[str, str]): Model field names keyed by capability role.
            params (Mapping[str, Any]): Current parameter values for this filter.

        Returns:
            Q: The concrete predicate over the entity's fields.

        Raises:
            MissingCapabilityFieldError: A required field role is not declared.
            InvalidPredicateError: The template returned something other than a Q.
        """
        for role in self.required_fields:
            if role not in fields:
                raise MissingCapabilityFieldError(self.name, self.capability, role)
        result = self.predicate(fields, params)
        if not isinstance(result, Q):
            raise InvalidPredicateError(self.name, result)
        return result

    def with_default(self, enabled: bool) -> "FilterDefinition":
        """Return a copy with a different `default_enabled`."""
        return FilterDefinition(
            name=self.name,
            capability=self.capability,
            predicate=self.predicate,
            parameters=self.parameters,
            default_enabled=enabled,
            required_fields=self.required_fields,
            session_condition=self.session_condition,
            session_parameters=self.session_parameters,
            description=self.description,
        )


__all__ = [
    "BuiltinCapabilityName",
    "CapabilityName",
    "FilterDefinition",
    "FilterParameter",
    "PredicateTemplate",
    "SessionCondition",
    "SessionParameters",
]
