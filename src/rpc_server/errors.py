from __future__ import annotations

from .jsonrpc.codec import INTERNAL_ERROR, STANDARD_MESSAGES
from .jsonrpc.dispatcher import fault_from_exception
from .jsonrpc.models import JsonRpcError


def map_exception_to_jsonrpc(exc: Exception) -> JsonRpcError:
    """Map exceptions that are not handler faults to a JSON-RPC error object.

    Faults raised outside the handler call (e.g. by a service factory) keep
    their code/message/data; everything else is an internal error carrying
    only the exception type. Argument binding problems never get here: the
    dispatcher reports them as invalid params before the call.
    """
    fault = fault_from_exception(exc)
    if fault is not None:
        return JsonRpcError(code=fault.code, message=fault.message, data=fault.data)

    return JsonRpcError(
        code=INTERNAL_ERROR,
        message=STANDARD_MESSAGES[INTERNAL_ERROR],
        data={"exc_type": type(exc).__name__, "message": str(exc)},
    )
