"""ASGI endpoint: one JSON-RPC request per POST body, always HTTP 200."""

from __future__ import annotations

from dataclasses import dataclass, field

from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response
from starlette.routing import Route

from ...observability.obs import api as obs
from ...observability.trace.context import TraceContext
from .codec import INTERNAL_ERROR, JsonSerializer, SerializationContext, Serializer, encode_error
from .dispatcher import Dispatcher
from .models import JsonRpcResponse

JSON_MEDIA_TYPE = "application/json"


@dataclass
class HttpTransport:
    dispatcher: Dispatcher
    serializer: Serializer = field(default_factory=JsonSerializer)
    path: str = "/jsonrpc"
    context: SerializationContext | None = None

    def set_serialization_context(self, context: SerializationContext | None) -> None:
        self.context = context

    def encode(self, resp: JsonRpcResponse) -> bytes:
        try:
            return self.serializer.encode(resp, self.context)
        except (TypeError, ValueError) as e:
            obs.event("transport.encode_error", {"exc_type": type(e).__name__})
            return encode_error(resp.id, INTERNAL_ERROR, data={"exc_type": type(e).__name__}).encode("utf-8")

    async def endpoint(self, request: Request) -> Response:
        """Read the raw body, dispatch it off the event loop, and answer with the encoded response."""
        body = await request.body()
        ctx = TraceContext.new(trace_type="rpc.http")
        with TraceContext.activate(ctx):
            try:
                resp = await run_in_threadpool(self.dispatcher.handle_text, body)
                payload = self.encode(resp)
            finally:
                ctx.finish()
        return Response(payload, status_code=200, media_type=JSON_MEDIA_TYPE)

    def build_app(self) -> Starlette:
        return Starlette(routes=[Route(self.path, self.endpoint, methods=["POST"])])


def create_app(
    dispatcher: Dispatcher,
    *,
    path: str = "/jsonrpc",
    serializer: Serializer | None = None,
    context: SerializationContext | None = None,
) -> Starlette:
    """Create the Starlette application serving `dispatcher` at `path`."""
    transport = HttpTransport(
        dispatcher=dispatcher,
        serializer=serializer or JsonSerializer(),
        path=path,
        context=context,
    )
    return transport.build_app()
