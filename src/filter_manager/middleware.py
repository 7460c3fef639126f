"""Request middleware opening one unit of work per request."""

from __future__ import annotations

from typing import Any, Callable

from filter_manager.config import request_attribute, session_provider_factory
from filter_manager.unit_of_work import UnitOfWork


class UnitOfWorkMiddleware:
    """
    Attach a fresh `UnitOfWork` to every request.

    The session comes from FILTER_MANAGER['SESSION_PROVIDER'] and the unit of
    work is stored on the request under FILTER_MANAGER['REQUEST_ATTRIBUTE']
    (default `request.unit_of_work`). It is closed once the response is built,
    also when the view raises.
    """

    def __init__(self, get_response: Callable[[Any], Any]) -> None:
        self.get_response = get_response
        self.session_factory = session_provider_factory()
        self.attribute = request_attribute()

    def __call__(self, request: Any) -> Any:
        with UnitOfWork(self.session_factory(request)) as unit_of_work:
            setattr(request, self.attribute, unit_of_work)
            return self.get_response(request)


__all__ = ["UnitOfWorkMiddleware"]
