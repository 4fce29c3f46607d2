"""Tests for request parsing (JSON and form-encoded bodies)."""

import json
from urllib.parse import urlencode

import pytest

from servicehooks.errors import ParseError
from servicehooks.models import InboundEvent
from servicehooks.parser import JSON_TYPE, RawRequest, media_type, parse_request

DATA = {"url": "http://example.com/hook", "active": True}
PAYLOAD = {"ref": "refs/heads/main", "commits": [{"id": "abc", "message": "Fix"}]}


def _json_request(data: object = DATA, payload: object = PAYLOAD, content_type: str = JSON_TYPE) -> RawRequest:
    body = json.dumps({"data": data, "payload": payload}).encode()
    return RawRequest(content_type=content_type, body=body)


def _form_request(data: object = DATA, payload: object = PAYLOAD) -> RawRequest:
    body = urlencode({"data": json.dumps(data), "payload": json.dumps(payload)}).encode()
    return RawRequest(content_type="application/x-www-form-urlencoded", body=body)


def test_json_request_parsed() -> None:
    """JSON content type: data and payload come from one document."""
    event = parse_request(_json_request(), "push")
    assert event == InboundEvent(event_name="push", data=DATA, payload=PAYLOAD)


def test_json_content_type_with_charset() -> None:
    """Content-Type parameters and case do not change the branch."""
    req = _json_request(content_type="Application/VND.github-services+json; charset=utf-8")
    event = parse_request(req, "push")
    assert event.data == DATA


def test_event_name_comes_from_route_not_body() -> None:
    body = json.dumps({"event": "issues", "data": {}, "payload": {}}).encode()
    event = parse_request(RawRequest(content_type=JSON_TYPE, body=body), "push")
    assert event.event_name == "push"


def test_json_request_parse_is_idempotent() -> None:
    req = _json_request()
    assert parse_request(req, "push") == parse_request(req, "push")


def test_form_request_parsed() -> None:
    event = parse_request(_form_request(), "push")
    assert event.data == DATA
    assert event.payload == PAYLOAD


def test_json_and_form_requests_are_equivalent() -> None:
    """Same logical data/payload/event gives the same InboundEvent."""
    assert parse_request(_json_request(), "push") == parse_request(_form_request(), "push")


def test_form_request_reads_query_string() -> None:
    query = urlencode({"data": json.dumps(DATA), "payload": json.dumps(PAYLOAD)})
    event = parse_request(RawRequest(query=query), "push")
    assert event.payload == PAYLOAD


def test_json_missing_keys_default_to_empty() -> None:
    event = parse_request(RawRequest(content_type=JSON_TYPE, body=b"{}"), "ping")
    assert event.data == {}
    assert event.payload == {}


@pytest.mark.parametrize(
    "request_",
    [
        RawRequest(content_type=JSON_TYPE, body=b"{not json"),
        RawRequest(content_type=JSON_TYPE, body=b"[1, 2]"),
        RawRequest(content_type=JSON_TYPE, body=b'{"data": "x", "payload": {}}'),
        RawRequest(content_type="application/x-www-form-urlencoded", body=b"data=%7B%7D&payload=nope"),
        RawRequest(content_type="application/x-www-form-urlencoded", body=b"data=%7B%7D"),
        RawRequest(),
    ],
)
def test_malformed_requests_raise_parse_error(request_: RawRequest) -> None:
    with pytest.raises(ParseError):
        parse_request(request_, "push")


def test_media_type_strips_parameters() -> None:
    assert media_type("text/plain; charset=utf-8") == "text/plain"
    assert media_type("") == ""
