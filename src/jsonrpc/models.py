"""JSON-RPC 2.0 request/response models."""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Union, Literal

JSONRPC_VERSION = "2.0"


class JSONRPCRequest(BaseModel):
    """Normalized JSON-RPC 2.0 request.

    Only built by the validator, after defaults are filled in: a missing id
    becomes None (notification) and missing params become an empty list.
    """

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    method: str
    params: Union[List[Any], Dict[str, Any]] = Field(default_factory=list)
    id: Optional[Union[str, int]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class JSONRPCResponse(BaseModel):
    """JSON-RPC 2.0 success response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[Union[str, int]]
    result: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        # result and id are kept even when null
        return self.model_dump()


class JSONRPCFault(BaseModel):
    """JSON-RPC 2.0 error response."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: Optional[Union[str, int]] = None
    error: JSONRPCError

    def to_dict(self) -> Dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "error": self.error.to_dict(),
        }


class ErrorCode:
    """JSON-RPC 2.0 standard error codes and the server error range."""

    # Standard JSON-RPC 2.0 error codes
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Implementation-defined server errors
    SERVER_ERROR = -32000
    SERVER_ERROR_MIN = -32099
    SERVER_ERROR_MAX = -32000
