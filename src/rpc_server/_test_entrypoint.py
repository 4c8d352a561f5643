from __future__ import annotations

from .jsonrpc.dispatcher import Dispatcher, JsonRpcAppError
from .jsonrpc.registry import MethodRegistry
from .jsonrpc.stdio_transport import StdioTransport


def main() -> None:
    registry = MethodRegistry()

    @registry.method("add")
    def add(a, b):
        return a + b

    @registry.method("fail")
    def fail():
        raise JsonRpcAppError(1001, "bad state", ["x"])

    StdioTransport().serve(Dispatcher(registry=registry.freeze()))


if __name__ == "__main__":  # pragma: no cover
    main()
