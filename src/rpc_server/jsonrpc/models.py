from __future__ import annotations

from collections.abc import Sized
from dataclasses import dataclass
from typing import Any


JsonDict = dict[str, Any]

JSONRPC_VERSION = "2.0"


def _has_payload(data: Any) -> bool:
    if data is None:
        return False
    if isinstance(data, Sized) and len(data) == 0:
        return False
    return True


@dataclass(frozen=True)
class JsonRpcRequest:
    """A request that passed the envelope check."""

    jsonrpc: str
    method: str
    params: Any | None
    id: Any | None  # JSON-RPC allows string|number|null; keep as Any
    has_id: bool = True

    @property
    def is_notification(self) -> bool:
        return not self.has_id


@dataclass(frozen=True)
class JsonRpcError:
    code: int
    message: str
    data: Any | None = None

    def to_dict(self) -> JsonDict:
        d: JsonDict = {"code": int(self.code), "message": str(self.message)}
        # None and empty containers/strings are treated as "no data".
        if _has_payload(self.data):
            d["data"] = self.data
        return d


@dataclass(frozen=True)
class JsonRpcResponse:
    jsonrpc: str = JSONRPC_VERSION
    id: Any | None = None
    result: Any | None = None
    error: JsonRpcError | None = None

    def to_dict(self) -> JsonDict:
        d: JsonDict = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        d["id"] = self.id
        return d
