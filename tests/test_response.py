from __future__ import annotations

import json

import pytest

from fnstdio.errors import TerminalStateError
from fnstdio.response import Response
from fnstdio.schemas import ValueKind, value_kind


def test_response_defaults() -> None:
    res = Response()
    assert res.protocol == "http"
    assert res.code == 200
    assert res.headers is None
    assert res.body == ""
    assert res.finished is False
    assert res.snapshot().model_dump() == {"code": 200, "headers": None, "body": ""}


def test_set_replaces_headers_wholesale() -> None:
    res = Response()
    res.set({"a": "1"})
    res.set({"b": "2"})
    assert res.headers == {"b": "2"}


def test_set_single_header_lowercases_name_and_value() -> None:
    res = Response()
    res.set({"keep": "me"})
    res.set("X-Powered-By", "FnStdio")
    assert res.headers == {"x-powered-by": "fnstdio"}


def test_set_rejects_unknown_kinds_without_side_effects() -> None:
    res = Response()
    res.set({"a": "1"})
    with pytest.raises(TypeError):
        res.set(42)  # type: ignore[arg-type]
    with pytest.raises(TypeError):
        res.set("x-header", None)
    assert res.headers == {"a": "1"}


def test_send_serializes_json_and_finishes() -> None:
    res = Response()
    res.send({"pong": True})
    assert res.finished is True
    assert res.body == '{"pong":true}'
    assert res.headers == {"content-type": "application/json", "content-length": 13}


def test_send_round_trips_objects() -> None:
    obj = {"name": "ünïcode", "items": [1, 2.5, None, {"nested": False}]}
    res = Response()
    res.send(obj)
    assert json.loads(res.body) == obj
    assert res.headers is not None
    assert res.headers["content-length"] == len(res.body.encode("utf-8"))


def test_send_rejects_unserializable_value() -> None:
    res = Response()
    with pytest.raises(TypeError):
        res.send({"when": object()})
    assert res.finished is False
    assert res.body == ""


def test_write_stores_text_verbatim() -> None:
    res = Response()
    res.write("Function not found")
    assert res.finished is True
    assert res.body == "Function not found"
    assert res.headers == {"content-type": "plain/text", "content-length": 18}


def test_write_requires_text() -> None:
    res = Response()
    with pytest.raises(TypeError, match="use send"):
        res.write({"a": 1})  # type: ignore[arg-type]
    assert res.finished is False


def test_mutators_fail_after_finish() -> None:
    res = Response()
    res.send({"a": 1})
    with pytest.raises(TerminalStateError):
        res.write("x")
    with pytest.raises(TerminalStateError):
        res.send({"b": 2})
    with pytest.raises(TerminalStateError):
        res.set({"c": "3"})
    assert res.body == '{"a":1}'
    assert res.headers == {"content-type": "application/json", "content-length": 7}


def test_code_is_settable_until_finished() -> None:
    res = Response()
    res.code = 999
    res.code = 201
    res.write("created")
    with pytest.raises(TerminalStateError):
        res.code = 500
    assert res.snapshot().code == 201


def test_value_kind() -> None:
    assert value_kind("a") is ValueKind.TEXT
    assert value_kind({"a": 1}) is ValueKind.MAPPING
    assert value_kind(b"a") is ValueKind.OTHER
    assert value_kind(None) is ValueKind.OTHER


def test_set_mapping_requires_string_names_and_json_values() -> None:
    res = Response()
    res.set({"a": "1"})
    with pytest.raises(TypeError, match="names"):
        res.set({1: "one"})  # type: ignore[dict-item]
    with pytest.raises(TypeError, match="JSON-serializable"):
        res.set({"x-obj": object()})
    with pytest.raises(TypeError, match="JSON-serializable"):
        res.set({"x-ratio": float("nan")})
    assert res.headers == {"a": "1"}
    assert res.finished is False


def test_send_rejects_nan() -> None:
    res = Response()
    with pytest.raises(TypeError):
        res.send({"value": float("inf")})
    assert res.finished is False
