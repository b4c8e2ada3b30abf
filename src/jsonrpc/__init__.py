"""JSON-RPC 2.0 dispatch core."""
from .models import (
    JSONRPC_VERSION,
    JSONRPCRequest,
    JSONRPCResponse,
    JSONRPCError,
    JSONRPCFault,
    ErrorCode,
)
from .faults import (
    Fault,
    ParseError,
    InvalidRequest,
    MethodNotFound,
    InvalidParams,
    InternalError,
    ServerError,
    RegisteredExceptions,
)
from .codec import ParsedSingle, ParsedBatch, Malformed, decode, encode
from .registry import (
    MethodRegistry,
    Procedure,
    bind_arguments,
    iter_bundle_operations,
    split_procedure_name,
    join_procedure_name,
)
from .validator import RequestValidator
from .handler import JSONRPCHandler

__all__ = [
    "JSONRPC_VERSION",
    "JSONRPCRequest",
    "JSONRPCResponse",
    "JSONRPCError",
    "JSONRPCFault",
    "ErrorCode",
    "Fault",
    "ParseError",
    "InvalidRequest",
    "MethodNotFound",
    "InvalidParams",
    "InternalError",
    "ServerError",
    "RegisteredExceptions",
    "ParsedSingle",
    "ParsedBatch",
    "Malformed",
    "decode",
    "encode",
    "MethodRegistry",
    "Procedure",
    "bind_arguments",
    "iter_bundle_operations",
    "split_procedure_name",
    "join_procedure_name",
    "RequestValidator",
    "JSONRPCHandler",
]
