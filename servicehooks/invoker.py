"""Call a service and time the call.

The duration is measured in retrospect only: a hung service is never
interrupted here.
"""

import time
from typing import Any, Callable

from servicehooks.models import InboundEvent
from servicehooks.registry import ServiceDescriptor

Clock = Callable[[], float]


class Invocation:
    """Result of one service call: handle or error, plus duration in seconds."""

    def __init__(self, handle: Any = None, duration: float = 0.0, error: Exception | None = None) -> None:
        self.handle = handle
        self.duration = duration
        self.error = error

    @property
    def responded(self) -> bool:
        return self.error is None and bool(self.handle)

    def __repr__(self) -> str:
        return f"Invocation(handle={self.handle!r}, duration={self.duration:.3f}, error={self.error!r})"


def invoke(service: ServiceDescriptor, event: InboundEvent, clock: Clock = time.monotonic) -> Invocation:
    """Call ``service.receive`` with the event and measure it.

    Any Exception raised by the service is captured on the result, not
    classified. BaseException subclasses (SystemExit, KeyboardInterrupt)
    raised by a service are not caught and end the worker thread.
    """
    start = clock()
    try:
        handle = service.receive(event.event_name, event.data, event.payload)
    except Exception as e:
        return Invocation(error=e, duration=clock() - start)
    return Invocation(handle=handle, duration=clock() - start)
