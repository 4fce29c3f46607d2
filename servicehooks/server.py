"""HTTP server for service hooks.

Routes, one pair per registered service:
- GET /                      -> 200 "ok"
- GET /<hook_name>           -> 200 service title
- POST /<hook_name>/<event>  -> dispatch outcome
"""

import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import unquote, urlsplit

from servicehooks.dispatcher import Dispatcher
from servicehooks.models import DispatchOutcome
from servicehooks.parser import RawRequest

LOG = logging.getLogger("servicehooks.server")

NOT_FOUND = DispatchOutcome(status_code=404, body="Not Found")
BAD_REQUEST = DispatchOutcome(status_code=400, body="Bad Request")
INTERNAL_ERROR = DispatchOutcome(status_code=500, body="ERROR")


class HookRequestHandler(BaseHTTPRequestHandler):
    """Route GET/POST requests to the dispatcher."""

    dispatcher: Dispatcher
    protocol_version = "HTTP/1.1"

    def _segments(self) -> tuple[list[str], str]:
        parts = urlsplit(self.path)
        segments = [unquote(s) for s in parts.path.split("/") if s]
        return segments, parts.query

    def do_GET(self) -> None:
        segments, _ = self._segments()
        if not segments:
            self._send(DispatchOutcome(status_code=200, body="ok"))
            return
        if len(segments) == 1 and segments[0] in self.dispatcher.registry:
            self._send(self.dispatcher.title(segments[0]))
            return
        self._send(NOT_FOUND)

    def do_POST(self) -> None:
        segments, query = self._segments()
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            length = -1
        if length < 0:
            self.close_connection = True
            self._send(BAD_REQUEST)
            return
        body = self.rfile.read(length) if length else b""
        if len(segments) != 2 or segments[0] not in self.dispatcher.registry:
            self._send(NOT_FOUND)
            return
        hook_name, event_name = segments
        request = RawRequest(
            content_type=self.headers.get("Content-Type", ""),
            body=body,
            query=query,
        )
        try:
            outcome = self.dispatcher.dispatch(hook_name, event_name, request)
        except Exception:
            LOG.exception("Dispatch of %s/%s failed", hook_name, event_name)
            outcome = INTERNAL_ERROR
        self._send(outcome)

    def _send(self, outcome: DispatchOutcome) -> None:
        data = outcome.body.encode("utf-8")
        self.send_response(outcome.status_code)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def make_server(dispatcher: Dispatcher, host: str = "0.0.0.0", port: int = 8080) -> ThreadingHTTPServer:
    """Bind a threaded HTTP server with a handler class bound to ``dispatcher``."""
    handler = type("BoundHookRequestHandler", (HookRequestHandler,), {"dispatcher": dispatcher})
    server = ThreadingHTTPServer((host, port), handler)
    server.daemon_threads = True
    return server


def run_server(dispatcher: Dispatcher, host: str = "0.0.0.0", port: int = 8080) -> None:
    """Serve hooks until interrupted."""
    server = make_server(dispatcher, host, port)
    LOG.info(
        "Service hooks listening on %s:%s (%s services: %s)",
        host,
        server.server_address[1],
        len(dispatcher.registry),
        ", ".join(dispatcher.registry.names()),
    )
    try:
        server.serve_forever()
    finally:
        server.server_close()
