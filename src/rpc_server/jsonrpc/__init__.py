from .codec import (
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
    STANDARD_MESSAGES,
    JsonSerializer,
    SerializationContext,
    Serializer,
    decode_request,
    encode_error,
    encode_response,
    standard_error,
    validate_envelope,
)
from .models import JsonRpcError, JsonRpcRequest, JsonRpcResponse
from .params import Parameter, ParameterSpec, ParamsAdaptationError, adapt_params
from .registry import MethodAlreadyRegisteredError, MethodDescriptor, MethodRegistry, MethodRegistryError
from .dispatcher import Dispatcher, Fault, JsonRpcAppError, default_error_mapper
from .stdio_transport import StdioTransport

__all__ = [
    "JsonRpcRequest",
    "JsonRpcResponse",
    "JsonRpcError",
    "Parameter",
    "ParameterSpec",
    "ParamsAdaptationError",
    "adapt_params",
    "MethodDescriptor",
    "MethodRegistry",
    "MethodRegistryError",
    "MethodAlreadyRegisteredError",
    "Dispatcher",
    "Fault",
    "JsonRpcAppError",
    "default_error_mapper",
    "JsonSerializer",
    "SerializationContext",
    "Serializer",
    "decode_request",
    "validate_envelope",
    "encode_response",
    "encode_error",
    "standard_error",
    "StdioTransport",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "METHOD_NOT_FOUND",
    "INVALID_PARAMS",
    "INTERNAL_ERROR",
    "STANDARD_MESSAGES",
]
