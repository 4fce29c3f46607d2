"""Dispatch engine: parse, invoke, classify, report.

Every request ends in exactly one DispatchOutcome. Failures raised by a
service (or by parsing) are classified here and never reach the HTTP layer.
"""

import logging
import time
from typing import Any

from servicehooks.classifier import ErrorKind, classify_error, outcome_for, success_outcome
from servicehooks.errors import ServiceTimeout
from servicehooks.invoker import Clock, Invocation, invoke
from servicehooks.models import DispatchOutcome, InboundEvent
from servicehooks.parser import RawRequest, parse_request
from servicehooks.registry import ServiceDescriptor, ServiceRegistry, is_diagnostic
from servicehooks.reporter import ExceptionReporter

LOG = logging.getLogger("servicehooks.dispatcher")

DEFAULT_SLOW_HOOK_SECONDS = 9.0
LONG_HOOK_MESSAGE = "Long Service Hook"


class Dispatcher:
    """Runs hook requests against a frozen service registry."""

    def __init__(
        self,
        registry: ServiceRegistry,
        reporter: ExceptionReporter,
        slow_hook_seconds: float = DEFAULT_SLOW_HOOK_SECONDS,
        clock: Clock = time.monotonic,
    ) -> None:
        self.registry = registry
        self.reporter = reporter
        self.slow_hook_seconds = slow_hook_seconds
        self._clock = clock

    def title(self, hook_name: str) -> DispatchOutcome:
        """Discovery route: the service title."""
        service = self.registry.lookup(hook_name)
        return DispatchOutcome(status_code=200, body=service.title)

    def dispatch(self, hook_name: str, event_name: str, request: RawRequest) -> DispatchOutcome:
        """Event route: run ``request`` through the service bound to ``hook_name``."""
        service = self.registry.lookup(hook_name)
        event: InboundEvent | None = None
        try:
            event = parse_request(request, event_name)
        except Exception as e:
            invocation = Invocation(error=e)
        else:
            invocation = invoke(service, event, clock=self._clock)

        if invocation.error is None:
            outcome = success_outcome(hook_name, event_name, invocation.handle)
        else:
            kind = classify_error(invocation.error)
            outcome = outcome_for(kind, invocation.error)
            if kind is ErrorKind.UNCLASSIFIED:
                self._report(service, event, event_name, invocation.error)

        LOG.info(
            "%s/%s -> %s (%.3fs)",
            hook_name,
            event_name,
            outcome.status_code,
            invocation.duration,
        )
        if not is_diagnostic(service) and invocation.duration > self.slow_hook_seconds:
            error = invocation.error or ServiceTimeout(LONG_HOOK_MESSAGE)
            self._report(service, event, event_name, error, duration=f"{invocation.duration}s")
        return outcome

    def _report(
        self,
        service: ServiceDescriptor,
        event: InboundEvent | None,
        event_name: str,
        error: BaseException,
        **extra: Any,
    ) -> None:
        data = event.data if event is not None else None
        payload = event.payload if event is not None else None
        self.reporter.report(service, data, error, event=event_name, payload=payload, **extra)
