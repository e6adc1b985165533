from __future__ import annotations

import json

import pytest

from gelfsink.core.render import PayloadRenderer, escape_json_string, render


def test_render_minimal_document() -> None:
    payload = render("web-1", [], "hello")
    assert payload == b'{"version" : "1.1","host" : "web-1","short_message" : "hello"}'


def test_static_fields_follow_host_in_order() -> None:
    renderer = PayloadRenderer("web-1", [("_env", "prod"), ("_app", "billing")])
    document = json.loads(renderer.render("started"))
    assert list(document) == ["version", "host", "_env", "_app", "short_message"]
    assert document["_env"] == "prod"
    assert document["_app"] == "billing"


def test_mapping_static_fields_are_accepted() -> None:
    renderer = PayloadRenderer("web-1", {"_zone": "eu-1"})
    assert json.loads(renderer.render("x"))["_zone"] == "eu-1"


@pytest.mark.parametrize(
    "message",
    [
        'say "hi"',
        "C:\\temp\\new",
        "line one\nline two\r\n\ttabbed",
        "nul\x00bell\x07esc\x1b unit\x1f",
        "ünïcødé ✓ \u2028 \U0001f600",
        "lone \udc80 surrogate",
        "\\\"\\\"",
    ],
)
def test_escaped_message_round_trips(message: str) -> None:
    payload = render("host", [], message)
    assert b"\n" not in payload
    assert json.loads(payload)["short_message"] == message


def test_host_is_escaped() -> None:
    document = json.loads(render('odd"host\\name', [], "x"))
    assert document["host"] == 'odd"host\\name'


def test_static_fields_are_escaped_once() -> None:
    renderer = PayloadRenderer("h", [('_q"uote', 'va\\lue\n')])
    first = renderer.render("one")
    for _ in range(5):
        renderer.render("again")
    last = renderer.render("one")
    assert first == last
    document = json.loads(last)
    assert document['_q"uote'] == 'va\\lue\n'
    assert renderer.static_fields[0].value == escape_json_string('va\\lue\n')


@pytest.mark.parametrize("key", ["version", "host", "short_message", ""])
def test_reserved_or_empty_keys_are_rejected(key: str) -> None:
    with pytest.raises(ValueError):
        PayloadRenderer("h", [(key, "v")])


def test_escape_json_string_has_no_surrounding_quotes() -> None:
    assert escape_json_string('a"b') == 'a\\"b'
    assert escape_json_string("\x01") == "\\u0001"
