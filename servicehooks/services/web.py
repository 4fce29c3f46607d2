"""Web: the diagnostic service. Forwards every event to a user URL."""

import json
from typing import Any, Dict

import requests

from servicehooks.services.base import Service

DEFAULT_TIMEOUT = 10


class Web(Service):
    """POST each event to ``data["url"]``.

    ``data["content_type"] == "form"`` sends ``payload=<json>`` form-encoded;
    otherwise the body is JSON ``{"event": ..., "payload": ...}``.
    """

    hook_name = "web"
    title = "Web"
    diagnostic = True

    def __init__(self, session: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT) -> None:
        super().__init__()
        self._session = session or requests.Session()
        self._timeout = timeout

    def receive_event(self, event: str, data: Dict[str, Any], payload: Dict[str, Any]) -> None:
        url = (data.get("url") or "").strip()
        if not url:
            self.raise_config_error("Missing 'url' in service data")
        if not url.startswith(("http://", "https://")):
            self.raise_config_error(f"Invalid url: {url}")

        headers = {"X-GitHub-Event": event}
        if data.get("content_type") == "form":
            resp = self._session.post(
                url,
                data={"payload": json.dumps(payload)},
                headers=headers,
                timeout=self._timeout,
            )
        else:
            resp = self._session.post(
                url,
                json={"event": event, "payload": payload},
                headers=headers,
                timeout=self._timeout,
            )
        if resp.status_code == 404:
            self.raise_missing_error(f"Not found: {url}")
        self.log.debug("Delivered %s to %s (%s)", event, url, resp.status_code)
