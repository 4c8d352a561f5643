from __future__ import annotations

import io
import json

from src.rpc_server.jsonrpc.codec import INTERNAL_ERROR, PARSE_ERROR, SerializationContext
from src.rpc_server.jsonrpc.dispatcher import Dispatcher
from src.rpc_server.jsonrpc.registry import MethodRegistry
from src.rpc_server.jsonrpc.stdio_transport import StdioTransport


def _dispatcher(calls: list) -> Dispatcher:
    reg = MethodRegistry()
    reg.register("add", lambda a, b: a + b)
    reg.register("log", lambda msg: calls.append(msg))
    reg.register("opaque", lambda: object())
    return Dispatcher(registry=reg.freeze())


def _serve(lines: list[str], calls: list | None = None, context=None) -> list[dict]:
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    stdout = io.StringIO()
    transport = StdioTransport(stdin=stdin, stdout=stdout)
    transport.set_serialization_context(context)
    transport.serve(_dispatcher(calls if calls is not None else []))
    return [json.loads(x) for x in stdout.getvalue().splitlines()]


def test_one_response_line_per_request() -> None:
    out = _serve(
        [
            '{"jsonrpc":"2.0","method":"add","params":[1,2],"id":1}',
            "",
            "{broken",
            '{"jsonrpc":"2.0","method":"add","params":{"a":"x","b":"y"},"id":"s"}',
        ]
    )
    assert out[0] == {"jsonrpc": "2.0", "result": 3, "id": 1}
    assert out[1]["error"]["code"] == PARSE_ERROR and out[1]["id"] is None
    assert out[2] == {"jsonrpc": "2.0", "result": "xy", "id": "s"}
    assert len(out) == 3


def test_notification_runs_without_output() -> None:
    calls: list = []
    out = _serve(['{"jsonrpc":"2.0","method":"log","params":["hi"]}'], calls)
    assert calls == ["hi"]
    assert out == []


def test_invalid_request_without_id_is_answered() -> None:
    out = _serve(['{"method":"log"}'])
    assert out[0]["error"]["code"] == -32600 and out[0]["id"] is None


def test_unserializable_result_becomes_internal_error() -> None:
    out = _serve(['{"jsonrpc":"2.0","method":"opaque","id":5}'])
    assert out[0]["error"]["code"] == INTERNAL_ERROR
    assert out[0]["id"] == 5


def test_serialization_context_is_applied() -> None:
    stdin = io.StringIO('{"jsonrpc":"2.0","method":"add","params":["\\u00e9",""],"id":1}\n')
    stdout = io.StringIO()
    StdioTransport(stdin=stdin, stdout=stdout, context=SerializationContext(ensure_ascii=True)).serve(_dispatcher([]))
    assert "\\u00e9" in stdout.getvalue()
