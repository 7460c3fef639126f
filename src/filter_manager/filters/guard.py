"""Scope guards returned by filter toggles."""

from __future__ import annotations

from types import MappingProxyType, TracebackType
from typing import TYPE_CHECKING, Mapping

if TYPE_CHECKING:  # pragma: no cover
    from filter_manager.filters.state import UnitOfWorkFilterState


class ScopeGuard:
    """
    Handle that restores the enabled flags captured when a toggle was issued.

    Releasing restores each captured filter to the value it had right before the
    toggle, even if an unrelated toggle changed it in between. Release is
    idempotent; use the guard as a context manager to release it on every exit
    path.
    """

    __slots__ = ("_state", "_captured", "_released")

    def __init__(
        self,
        state: "UnitOfWorkFilterState",
        captured: Mapping[str, bool],
    ) -> None:
        self._state = state
        self._captured = dict(captured)
        self._released = False

    @property
    def captured(self) -> Mapping[str, bool]:
        """Prior enabled flag of each filter touched by the toggle."""
        return MappingProxyType(self._captured)

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        """Restore the captured flags. Further calls do nothing."""
        if self._released:
            return
        self._released = True
        self._state._restore(self._captured)

    def __enter__(self) -> "ScopeGuard":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()

    def __repr__(self) -> str:
        status = "released" if self._released else "active"
        return f"<ScopeGuard {status} {self._captured!r}>"


__all__ = ["ScopeGuard"]
