from __future__ import annotations

import asyncio
import inspect
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Callable

from ...observability.obs import api as obs
from ...observability.trace.context import TraceContext
from ..services import ServiceLocator, ServiceNotFoundError
from ..translation import TextTransform, translate_data
from .codec import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    STANDARD_MESSAGES,
    decode_request,
    error_response,
    request_id_of,
    validate_envelope,
)
from .models import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from .params import ParameterSpec, ParamsAdaptationError, adapt_params
from .registry import MethodDescriptor, MethodRegistry


ErrorMapper = Callable[[Exception], JsonRpcError]


@dataclass(frozen=True)
class Fault:
    """Application fault returned (not raised) by a handler."""

    code: int
    message: str
    data: Any | None = None


class JsonRpcAppError(Exception):
    """Application fault raised by a handler; converted into an error response."""

    def __init__(self, code: int, message: str, data: Any | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def to_fault(self) -> Fault:
        return Fault(code=self.code, message=self.message, data=self.data)


def default_error_mapper(exc: Exception) -> JsonRpcError:
    # Keep it conservative: leak minimal info; details go to the trace.
    return JsonRpcError(code=INTERNAL_ERROR, message=STANDARD_MESSAGES[INTERNAL_ERROR], data={"exc_type": type(exc).__name__})


def fault_from_exception(exc: Exception) -> Fault | None:
    """A fault for exceptions that carry an integer `code` (and optionally `data`)."""
    if isinstance(exc, JsonRpcAppError):
        return exc.to_fault()
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool):
        return Fault(code=code, message=str(exc), data=getattr(exc, "data", None))
    return None


def _await(awaitable: Any) -> Any:
    """Wait for an awaitable handler result from synchronous code."""

    async def _run() -> Any:
        return await awaitable

    try:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(_run())
        # Called from inside a running loop: drive the coroutine on its own loop in a worker thread.
        with ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, _run()).result()
    except BaseException:
        if inspect.iscoroutine(awaitable):
            awaitable.close()
        raise


def _bind_error(target: Callable[..., Any], args: list[Any]) -> str | None:
    try:
        sig = inspect.signature(target)
    except (TypeError, ValueError):
        return None
    try:
        sig.bind(*args)
    except TypeError as e:
        return str(e)
    return None


@dataclass
class Dispatcher:
    """
    JSON-RPC 2.0 request dispatcher.

    Always produces exactly one JsonRpcResponse and never raises: protocol
    errors are returned, handler exceptions are converted.
    """

    registry: MethodRegistry = field(default_factory=MethodRegistry)
    services: ServiceLocator | None = None
    translator: TextTransform | None = None
    error_mapper: ErrorMapper | None = None

    def handle_text(self, body: str | bytes | None) -> JsonRpcResponse:
        return self.handle_rpc(decode_request(body))

    def handle(self, req: JsonRpcRequest) -> JsonRpcResponse:
        raw: dict[str, Any] = {"jsonrpc": req.jsonrpc, "method": req.method, "params": req.params}
        if req.has_id:
            raw["id"] = req.id
        return self.handle_rpc(raw)

    def handle_rpc(self, raw: Any) -> JsonRpcResponse:
        """Dispatch one decoded request object (None means it failed to parse)."""
        if TraceContext.current() is not None:
            return self._dispatch(raw)

        ctx = TraceContext.new(trace_type="rpc")
        with TraceContext.activate(ctx):
            try:
                return self._dispatch(raw)
            finally:
                ctx.finish()

    def _dispatch(self, raw: Any) -> JsonRpcResponse:
        if raw is None:
            obs.event("rpc.invalid", {"code": PARSE_ERROR})
            return error_response(PARSE_ERROR, None)

        req_id = request_id_of(raw)
        req = validate_envelope(raw)
        if req is None:
            obs.event("rpc.invalid", {"code": INVALID_REQUEST})
            return error_response(INVALID_REQUEST, req_id)

        started = time.perf_counter()
        with obs.span("rpc.dispatch", {"method": req.method, "id": req_id}):
            obs.event("rpc.request", {"method": req.method, "notification": req.is_notification})
            resp = self._route(req)
            if resp.error is None:
                obs.event("rpc.result", {"method": req.method})
            obs.metric("rpc.latency_ms", (time.perf_counter() - started) * 1000.0, {"method": req.method})
        return resp

    def _route(self, req: JsonRpcRequest) -> JsonRpcResponse:
        descriptor = self.registry.resolve(req.method)
        if descriptor is None:
            obs.event("rpc.invalid", {"code": METHOD_NOT_FOUND})
            return error_response(METHOD_NOT_FOUND, req.id)

        try:
            target = self._resolve_target(descriptor)
        except Exception as e:
            return self._exception_response(req.id, e)
        if target is None:
            obs.event("rpc.invalid", {"code": METHOD_NOT_FOUND})
            return error_response(METHOD_NOT_FOUND, req.id)

        spec = descriptor.params
        if spec is None:
            try:
                spec = ParameterSpec.from_callable(target)
            except TypeError:
                obs.event("rpc.invalid", {"code": METHOD_NOT_FOUND})
                return error_response(METHOD_NOT_FOUND, req.id)

        try:
            args = adapt_params(spec, req.params)
        except ParamsAdaptationError as e:
            obs.event("rpc.invalid", {"code": INVALID_PARAMS})
            return error_response(INVALID_PARAMS, req.id, str(e))

        bind_error = _bind_error(target, args)
        if bind_error is not None:
            obs.event("rpc.invalid", {"code": INVALID_PARAMS})
            return error_response(INVALID_PARAMS, req.id, bind_error)

        return self._invoke(req, target, args)

    def _resolve_target(self, descriptor: MethodDescriptor) -> Callable[..., Any] | None:
        """Locate the service and member; None when there is nothing invocable."""
        service = descriptor.service
        if descriptor.is_reference:
            if self.services is None:
                return None
            try:
                service = self.services.get(service)
            except ServiceNotFoundError:
                return None

        member = descriptor.member
        if member is None:
            target = service
        elif member.startswith("_"):
            return None
        else:
            target = getattr(service, member, None)
        return target if callable(target) else None

    def _invoke(self, req: JsonRpcRequest, target: Callable[..., Any], args: list[Any]) -> JsonRpcResponse:
        try:
            result = target(*args)
            if inspect.isawaitable(result):
                result = _await(result)
        except Exception as e:
            fault = fault_from_exception(e)
            if fault is not None:
                return self._fault_response(req.id, fault, exc_type=type(e).__name__)
            return self._exception_response(req.id, e)

        if isinstance(result, Fault):
            return self._fault_response(req.id, result, exc_type=None)
        return JsonRpcResponse(id=req.id, result=result)

    def _fault_response(self, req_id: Any, fault: Fault, *, exc_type: str | None) -> JsonRpcResponse:
        obs.event("rpc.fault", {"code": fault.code, "exc_type": exc_type})
        data = translate_data(fault.data, self.translator)
        return JsonRpcResponse(id=req_id, error=JsonRpcError(code=fault.code, message=fault.message, data=data))

    def _exception_response(self, req_id: Any, exc: Exception) -> JsonRpcResponse:
        mapper = self.error_mapper or default_error_mapper
        err = mapper(exc)
        obs.event("rpc.fault", {"code": err.code, "exc_type": type(exc).__name__, "message": str(exc)})
        return JsonRpcResponse(id=req_id, error=err)
