"""Report unexpected failures to the diagnostics collector.

Reports are sent once, best effort. On production hosts they are POSTed to
the collector as ``json=<url-encoded JSON>``; elsewhere message and
backtrace are written to a local stream. Nothing raised while reporting
ever reaches the caller.
"""

import hashlib
import json
import logging
import re
import socket
import sys
import traceback
from typing import Any, List, TextIO

import requests

from servicehooks.config import ReporterConfig
from servicehooks.models import ExceptionReport
from servicehooks.registry import ServiceDescriptor, is_diagnostic

LOG = logging.getLogger("servicehooks.reporter")

MAX_MESSAGE_CHARS = 255
MAX_BACKTRACE_FRAMES = 501


def unwrap_error(error: BaseException) -> BaseException:
    """Return the wrapped original exception when ``error`` carries one."""
    original = getattr(error, "original_exception", None)
    if isinstance(original, BaseException):
        return original
    return error


def error_class_name(error: BaseException) -> str:
    cls = type(error)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def backtrace_frames(error: BaseException) -> List[str]:
    """Frames of ``error``'s traceback, innermost (raise site) first."""
    frames = traceback.extract_tb(error.__traceback__)
    lines = [f"{f.filename}:{f.lineno}:in `{f.name}'" for f in reversed(frames)]
    return lines[:MAX_BACKTRACE_FRAMES]


def rollup_hash(error_class: str, backtrace: List[str]) -> str:
    """Grouping key for recurring failures: class name + top frame."""
    top = backtrace[0] if backtrace else ""
    return hashlib.md5(f"{error_class}{top}".encode("utf-8")).hexdigest()


class ExceptionReporter:
    """Builds ExceptionReports and sends them to the collector or a local stream."""

    def __init__(
        self,
        config: ReporterConfig | None = None,
        session: requests.Session | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self._config = config or ReporterConfig()
        self._session = session or requests.Session()
        self._stream = stream
        self._production = re.compile(self._config.production_host_pattern)
        self.hostname = self._config.hostname or socket.gethostname()

    @property
    def is_production(self) -> bool:
        return bool(self._production.match(self.hostname))

    def build_report(
        self,
        service: ServiceDescriptor,
        service_data: Any,
        error: BaseException,
        **extra: Any,
    ) -> ExceptionReport:
        """Assemble the report for ``error`` raised by ``service``.

        service_data and payload are kept only for the diagnostic service;
        other services report metadata only.
        """
        error = unwrap_error(error)
        backtrace = backtrace_frames(error)
        error_class = error_class_name(error)
        fields = {k: (v if v is None or isinstance(v, str) else repr(v)) for k, v in extra.items()}
        if is_diagnostic(service):
            fields["service_data"] = repr(service_data)
        else:
            fields.pop("payload", None)
            fields.pop("service_data", None)
        return ExceptionReport(
            app=self._config.app,
            error_class=error_class,
            server=self.hostname,
            message=str(error)[:MAX_MESSAGE_CHARS],
            backtrace="\n".join(backtrace),
            rollup=rollup_hash(error_class, backtrace),
            service=service.hook_name,
            **fields,
        )

    def report(self, service: ServiceDescriptor, service_data: Any, error: BaseException, **extra: Any) -> None:
        """Build and deliver a report. Never raises."""
        try:
            report = self.build_report(service, service_data, error, **extra)
            if self.is_production:
                self._post(report)
            else:
                self._write_local(report)
        except Exception:
            LOG.exception("reporting exception failed")

    def _post(self, report: ExceptionReport) -> None:
        body = {"json": json.dumps(report.to_wire())}
        resp = self._session.post(self._config.collector_url, data=body, timeout=self._config.timeout)
        LOG.debug("Reported %s to collector (%s)", report.error_class, resp.status_code)

    def _write_local(self, report: ExceptionReport) -> None:
        stream = self._stream or sys.stderr
        stream.write(report.message + "\n")
        stream.write(report.backtrace + "\n")
        stream.flush()
