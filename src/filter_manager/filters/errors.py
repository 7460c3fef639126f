"""Exception types raised by the filter engine."""

from __future__ import annotations

__all__ = [
    "DuplicateFilterNameError",
    "FilterStateRegistryMismatchError",
    "InvalidFilterDefinitionError",
    "InvalidPredicateError",
    "MissingCapabilityFieldError",
    "NotSoftDeletableError",
    "ParameterTypeMismatchError",
    "RegistrationClosedError",
    "UnitOfWorkClosedError",
    "UnknownCapabilityError",
    "UnknownFilterError",
    "UnknownParameterError",
    "UnknownRelationError",
]


class UnknownFilterError(LookupError):
    """Raised when a filter name is not present in the registry."""

    def __init__(self, name: str) -> None:
        self.filter_name = name
        super().__init__(f"Filter '{name}' is not registered.")


class UnknownParameterError(LookupError):
    """Raised when a filter does not declare the requested parameter."""

    def __init__(self, filter_name: str, parameter_name: str) -> None:
        self.filter_name = filter_name
        self.parameter_name = parameter_name
        super().__init__(
            f"Filter '{filter_name}' has no parameter named '{parameter_name}'."
        )


class ParameterTypeMismatchError(TypeError):
    """Raised when a parameter value does not match its declared type."""

    def __init__(
        self,
        filter_name: str,
        parameter_name: str,
        expected: tuple[type, ...],
        value: object,
    ) -> None:
        self.filter_name = filter_name
        self.parameter_name = parameter_name
        expected_names = " | ".join(item.__name__ for item in expected)
        super().__init__(
            f"Parameter '{parameter_name}' of filter '{filter_name}' expects "
            f"{expected_names}, got {type(value).__name__}."
        )


class DuplicateFilterNameError(ValueError):
    """Raised when registering a filter whose name is already taken."""

    def __init__(self, name: str) -> None:
        self.filter_name = name
        super().__init__(f"A filter named '{name}' is already registered.")


class RegistrationClosedError(RuntimeError):
    """Raised when registering a filter after the registry was frozen."""

    def __init__(self, name: str) -> None:
        self.filter_name = name
        super().__init__(
            f"Cannot register filter '{name}': the filter registry is frozen."
        )


class InvalidFilterDefinitionError(ValueError):
    """Raised when a filter definition is internally inconsistent."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Invalid filter definition '{name}': {reason}.")


class UnknownCapabilityError(ValueError):
    """Raised when a capability name is empty or not a string."""

    def __init__(self, capability: object) -> None:
        super().__init__(f"Invalid capability name: {capability!r}.")


class MissingCapabilityFieldError(LookupError):
    """Raised when an entity does not expose a field a filter requires."""

    def __init__(self, filter_name: str, capability: str, role: str) -> None:
        super().__init__(
            f"Filter '{filter_name}' requires the '{role}' field of capability "
            f"'{capability}', but the entity does not declare it."
        )


class InvalidPredicateError(TypeError):
    """Raised when a predicate template does not return a Django Q object."""

    def __init__(self, filter_name: str, result: object) -> None:
        super().__init__(
            f"Predicate of filter '{filter_name}' must return a Q object, "
            f"got {type(result).__name__}."
        )


class NotSoftDeletableError(TypeError):
    """Raised when soft-deleting an instance whose model is not soft-deletable."""

    def __init__(self, model_name: str) -> None:
        super().__init__(f"{model_name} does not declare the 'soft_deletable' capability.")


class UnitOfWorkClosedError(RuntimeError):
    """Raised when a unit of work is used after it has been closed."""

    def __init__(self) -> None:
        super().__init__("The unit of work has already been closed.")


class UnknownRelationError(LookupError):
    """Raised when traversing a relation the model does not define."""

    def __init__(self, relation: str, model_name: str) -> None:
        super().__init__(f"{relation} is not a relation of {model_name}.")


class FilterStateRegistryMismatchError(ValueError):
    """Raised when a unit of work receives filter state built on another registry."""

    def __init__(self) -> None:
        super().__init__(
            "The filter state was created from a different filter registry."
        )
