from __future__ import annotations

import json
from dataclasses import dataclass

import pytest

from src.rpc_server.jsonrpc.codec import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonSerializer,
    SerializationContext,
    decode_request,
    encode_error,
    is_notification,
    standard_error,
    validate_envelope,
)
from src.rpc_server.jsonrpc.models import JsonRpcError, JsonRpcResponse


def test_decode_request_ok() -> None:
    raw = decode_request('{"jsonrpc":"2.0","id":1,"method":"ping","params":{"a":1}}')
    assert raw == {"jsonrpc": "2.0", "id": 1, "method": "ping", "params": {"a": 1}}


@pytest.mark.parametrize("body", ["{not json", "", "   ", None, b"\xff\xfe", "null"])
def test_decode_request_unparseable_is_none(body) -> None:
    assert decode_request(body) is None


def test_decode_request_accepts_bytes() -> None:
    assert decode_request(b'{"a": "\xc3\xa9"}') == {"a": "é"}


def test_decode_request_does_not_validate_shape() -> None:
    assert decode_request("[1, 2]") == [1, 2]
    assert decode_request("42") == 42


def test_validate_envelope() -> None:
    req = validate_envelope({"jsonrpc": "2.0", "method": "add", "params": [1], "id": "a"})
    assert req is not None
    assert req.method == "add" and req.params == [1] and req.id == "a"
    assert req.is_notification is False

    note = validate_envelope({"jsonrpc": "2.0", "method": "add"})
    assert note is not None and note.is_notification and note.id is None

    assert validate_envelope({"jsonrpc": "1.0", "method": "add"}) is None
    assert validate_envelope({"jsonrpc": "2.0"}) is None
    assert validate_envelope({"jsonrpc": "2.0", "method": ""}) is None
    assert validate_envelope({"jsonrpc": "2.0", "method": 5}) is None
    assert validate_envelope([{"jsonrpc": "2.0", "method": "x"}]) is None


def test_is_notification() -> None:
    assert is_notification({"jsonrpc": "2.0", "method": "x"})
    assert not is_notification({"jsonrpc": "2.0", "method": "x", "id": None})
    assert not is_notification({"method": "x"})
    assert not is_notification(None)


def test_standard_messages() -> None:
    assert standard_error(PARSE_ERROR).message == "Parse error"
    assert standard_error(INVALID_REQUEST).message == "Invalid request"
    assert standard_error(METHOD_NOT_FOUND).message == "Method not found"
    assert standard_error(INVALID_PARAMS).message == "Invalid params"
    assert standard_error(INTERNAL_ERROR).message == "Internal error"


def test_encode_error_shape() -> None:
    s = encode_error(1, -32000, "bad", {"x": 1})
    obj = json.loads(s)
    assert obj == {"jsonrpc": "2.0", "error": {"code": -32000, "message": "bad", "data": {"x": 1}}, "id": 1}


def test_encode_error_uses_standard_message() -> None:
    obj = json.loads(encode_error(None, METHOD_NOT_FOUND))
    assert obj["error"] == {"code": METHOD_NOT_FOUND, "message": "Method not found"}
    assert obj["id"] is None


@pytest.mark.parametrize("data", [None, [], {}, ""])
def test_error_data_omitted_when_empty(data) -> None:
    assert "data" not in JsonRpcError(INVALID_PARAMS, "Invalid params", data).to_dict()


def test_error_data_kept_when_falsy_scalar() -> None:
    assert JsonRpcError(1, "m", 0).to_dict()["data"] == 0


def test_success_response_has_no_error_key() -> None:
    d = JsonRpcResponse(id=7, result=None).to_dict()
    assert d == {"jsonrpc": "2.0", "result": None, "id": 7}


@dataclass
class _Point:
    x: int
    y: int


def test_json_serializer_default_and_context() -> None:
    ser = JsonSerializer()
    out = ser.encode(JsonRpcResponse(id=1, result={"p": _Point(1, 2), "name": "é"}))
    assert json.loads(out) == {"jsonrpc": "2.0", "result": {"p": {"x": 1, "y": 2}, "name": "é"}, "id": 1}
    assert "é".encode("utf-8") in out

    ascii_out = ser.encode(JsonRpcResponse(id=1, result="é"), SerializationContext(ensure_ascii=True))
    assert b"\\u00e9" in ascii_out


def test_json_serializer_context_default_hook() -> None:
    ctx = SerializationContext(default=lambda o: "<obj>")
    out = JsonSerializer().encode(JsonRpcResponse(id=1, result=object()), ctx)
    assert json.loads(out)["result"] == "<obj>"


def test_json_serializer_rejects_unknown_objects() -> None:
    with pytest.raises(TypeError):
        JsonSerializer().encode(JsonRpcResponse(id=1, result=object()))
