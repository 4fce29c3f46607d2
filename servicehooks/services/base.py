"""Base class for hook services.

A service is registered once at boot and shared by every request, so the
instance holds only boot-time state. Request data travels as arguments.
"""

import logging
from typing import Any, Callable, Dict, NoReturn

from servicehooks.errors import ConfigurationError, MissingError


class Service:
    """A pluggable webhook handler.

    Subclasses set ``hook_name`` and ``title`` and implement
    ``receive_<event>(data, payload)`` for each event they handle, or
    ``receive_event(event, data, payload)`` to handle every event.
    """

    hook_name: str = ""
    title: str = ""
    # The self-test service: exempt from slow-hook reports, may leak its payload into reports
    diagnostic: bool = False

    def __init__(self) -> None:
        if not self.hook_name:
            raise ValueError(f"{type(self).__name__} has no hook_name")
        self.log = logging.getLogger(f"servicehooks.services.{self.hook_name}")

    def responds_to(self, event: str) -> bool:
        """True if this service has a handler for ``event``."""
        return self._handler_for(event) is not None

    def receive(self, event: str, data: Dict[str, Any], payload: Dict[str, Any]) -> "Service | None":
        """Run the handler for ``event``.

        Returns the service itself when the event was handled, None when the
        service does not respond to it. Failures propagate to the caller.
        """
        handler = self._handler_for(event)
        if handler is None:
            return None
        handler(data, payload)
        return self

    def _handler_for(self, event: str) -> Callable[[Dict[str, Any], Dict[str, Any]], Any] | None:
        if event.isidentifier() and event != "event":
            method = getattr(self, f"receive_{event}", None)
            if callable(method):
                return method
        generic = getattr(self, "receive_event", None)
        if callable(generic):
            return lambda data, payload: generic(event, data, payload)
        return None

    def raise_config_error(self, message: str = "Invalid configuration") -> NoReturn:
        raise ConfigurationError(message)

    def raise_missing_error(self, message: str = "Remote resource is missing") -> NoReturn:
        raise MissingError(message)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} hook_name={self.hook_name!r}>"
