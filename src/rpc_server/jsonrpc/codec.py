from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import asdict, dataclass, is_dataclass
from pathlib import Path
from typing import Any, Callable, Protocol

from .models import JSONRPC_VERSION, JsonRpcError, JsonRpcRequest, JsonRpcResponse


# JSON-RPC 2.0 standard error codes.
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

STANDARD_MESSAGES: dict[int, str] = {
    PARSE_ERROR: "Parse error",
    INVALID_REQUEST: "Invalid request",
    METHOD_NOT_FOUND: "Method not found",
    INVALID_PARAMS: "Invalid params",
    INTERNAL_ERROR: "Internal error",
}


def standard_error(code: int, data: Any | None = None) -> JsonRpcError:
    """Build an error object for one of the protocol codes with its fixed message."""
    return JsonRpcError(code=code, message=STANDARD_MESSAGES.get(code, ""), data=data)


def error_response(code: int, req_id: Any | None, data: Any | None = None) -> JsonRpcResponse:
    return JsonRpcResponse(id=req_id, error=standard_error(code, data))


def decode_request(body: str | bytes | None) -> Any | None:
    """
    Decode a raw request body.

    Returns the decoded JSON value, or None when the body is empty or not valid
    JSON. No envelope validation happens here: the dispatcher must tolerate any
    shape, including a literal `null`.
    """
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not body.strip():
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


def request_id_of(raw: Any) -> Any | None:
    if isinstance(raw, Mapping):
        return raw.get("id")
    return None


def validate_envelope(raw: Any) -> JsonRpcRequest | None:
    """Return the validated request, or None if `jsonrpc`/`method` are unusable."""
    if not isinstance(raw, Mapping):
        return None
    if raw.get("jsonrpc") != JSONRPC_VERSION:
        return None
    method = raw.get("method")
    if not isinstance(method, str) or not method:
        return None
    return JsonRpcRequest(
        jsonrpc=JSONRPC_VERSION,
        method=method,
        params=raw.get("params"),
        id=raw.get("id"),
        has_id="id" in raw,
    )


def is_notification(raw: Any) -> bool:
    req = validate_envelope(raw)
    return req is not None and req.is_notification


def _to_jsonable(obj: Any) -> Any:
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, Path):
        return str(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


@dataclass(frozen=True)
class SerializationContext:
    """Options handed to a serializer alongside the response object."""

    ensure_ascii: bool = False
    sort_keys: bool = False
    indent: int | None = None
    default: Callable[[Any], Any] | None = None


class Serializer(Protocol):
    def encode(self, resp: JsonRpcResponse, context: SerializationContext | None = None) -> bytes: ...


class JsonSerializer:
    """Default serializer: stdlib json, UTF-8 bytes."""

    def encode(self, resp: JsonRpcResponse, context: SerializationContext | None = None) -> bytes:
        ctx = context or SerializationContext()
        separators = None if ctx.indent is not None else (",", ":")
        text = json.dumps(
            resp.to_dict(),
            ensure_ascii=ctx.ensure_ascii,
            sort_keys=ctx.sort_keys,
            indent=ctx.indent,
            separators=separators,
            default=ctx.default or _to_jsonable,
        )
        return text.encode("utf-8")


def encode_response(resp: JsonRpcResponse) -> str:
    return JsonSerializer().encode(resp).decode("utf-8")


def encode_error(req_id: Any | None, code: int, message: str | None = None, data: Any | None = None) -> str:
    if message is None:
        message = STANDARD_MESSAGES.get(code, "")
    resp = JsonRpcResponse(id=req_id, error=JsonRpcError(code=code, message=message, data=data))
    return encode_response(resp)
