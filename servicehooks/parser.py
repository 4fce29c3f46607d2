"""Turn a raw hook request into an InboundEvent.

Two body shapes are accepted:
- application/vnd.github-services+json: one JSON document {"data": ..., "payload": ...}
- anything else (form-encoded): "data" and "payload" parameters, each a JSON string

The event name always comes from the route, never from the body.
"""

import json
from typing import Any, Dict, List
from urllib.parse import parse_qs

from servicehooks.errors import ParseError
from servicehooks.models import InboundEvent

JSON_TYPE = "application/vnd.github-services+json"


class RawRequest:
    """The parts of an HTTP request the parser reads."""

    def __init__(self, content_type: str = "", body: bytes = b"", query: str = "") -> None:
        self.content_type = content_type or ""
        self.body = body or b""
        self.query = query or ""


def media_type(content_type: str) -> str:
    """Content-Type without parameters, lowercased ("text/plain; charset=x" -> "text/plain")."""
    return content_type.split(";", 1)[0].strip().lower()


def _as_mapping(value: Any, name: str) -> Dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"'{name}' must be a JSON object, got {type(value).__name__}")
    return value


def _loads(raw: str | bytes, name: str) -> Any:
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(f"Invalid JSON in {name}: {e}") from e


def parse_json_request(request: RawRequest, event_name: str) -> InboundEvent:
    doc = _loads(request.body, "request body")
    doc = _as_mapping(doc, "request body")
    return InboundEvent(
        event_name=event_name,
        data=_as_mapping(doc.get("data"), "data"),
        payload=_as_mapping(doc.get("payload"), "payload"),
    )


def _params(request: RawRequest) -> Dict[str, List[str]]:
    """Form body parameters, with query string parameters as fallback."""
    params = parse_qs(request.query, keep_blank_values=True)
    if request.body:
        form = parse_qs(request.body.decode("utf-8", errors="replace"), keep_blank_values=True)
        params.update(form)
    return params


def parse_http_request(request: RawRequest, event_name: str) -> InboundEvent:
    params = _params(request)
    values = {}
    for name in ("data", "payload"):
        raw = (params.get(name) or [None])[0]
        if raw is None:
            raise ParseError(f"Missing '{name}' parameter")
        values[name] = _as_mapping(_loads(raw, name), name)
    return InboundEvent(event_name=event_name, data=values["data"], payload=values["payload"])


def parse_request(request: RawRequest, event_name: str) -> InboundEvent:
    """Parse ``request`` by its declared content type.

    Raises ParseError on malformed JSON or a missing parameter.
    """
    if media_type(request.content_type) == JSON_TYPE:
        return parse_json_request(request, event_name)
    return parse_http_request(request, event_name)
