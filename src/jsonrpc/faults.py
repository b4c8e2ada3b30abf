"""JSON-RPC faults and the registered exception set.

A fault is an exception that knows its JSON-RPC error code, so callbacks can
raise one directly and the handler passes it through unchanged. Any other
exception reaching the handler is either hydrated into a fault (when its type
was registered as safe to expose) or masked as an internal error.
"""
import logging
from collections import abc
from typing import Any, Dict, Iterable, Optional, Type, Union

from .models import ErrorCode, JSONRPCError, JSONRPCFault
from ..utils.errors import RegistrationError

logger = logging.getLogger(__name__)


class Fault(Exception):
    """Base class for every JSON-RPC error value."""

    code: int = ErrorCode.INTERNAL_ERROR
    default_message: str = "Internal error"

    def __init__(
        self,
        message: Optional[str] = None,
        data: Optional[Any] = None,
        code: Optional[int] = None,
    ):
        self.message = message or self.default_message
        self.data = data
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_error(self) -> JSONRPCError:
        return JSONRPCError(code=self.code, message=self.message, data=self.data)

    def to_dict(self) -> Dict[str, Any]:
        """Wire error object; ``data`` only appears when the fault carries it."""
        return self.to_error().to_dict()

    def envelope(self, request_id: Optional[Union[str, int]] = None) -> JSONRPCFault:
        return JSONRPCFault(id=request_id, error=self.to_error())

    @classmethod
    def hydrate(
        cls, exc: BaseException, code: int = ErrorCode.SERVER_ERROR
    ) -> "Fault":
        """Build a fault exposing the message of a trusted application error."""
        fault = ServerError(
            message=str(exc) or type(exc).__name__,
            data={"type": type(exc).__name__},
            code=code,
        )
        fault.__cause__ = exc
        return fault

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code}, message={self.message!r})"


class ParseError(Fault):
    code = ErrorCode.PARSE_ERROR
    default_message = "Parse error"


class InvalidRequest(Fault):
    code = ErrorCode.INVALID_REQUEST
    default_message = "Invalid Request"


class MethodNotFound(Fault):
    code = ErrorCode.METHOD_NOT_FOUND
    default_message = "Method not found"


class InvalidParams(Fault):
    code = ErrorCode.INVALID_PARAMS
    default_message = "Invalid params"


class InternalError(Fault):
    code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal error"


class ServerError(Fault):
    code = ErrorCode.SERVER_ERROR
    default_message = "Server error"


ExceptionKinds = Union[Type[BaseException], Iterable[Type[BaseException]]]


class RegisteredExceptions:
    """Exception types the handler may expose to callers.

    Matching is on exact runtime type, so registering ``KeyError`` does not
    expose a subclass of it. Each type carries the fault code it is hydrated
    with.
    """

    def __init__(self, default_code: int = ErrorCode.SERVER_ERROR):
        self.default_code = default_code
        self._codes: Dict[Type[BaseException], int] = {}

    def register(self, kinds: ExceptionKinds, code: Optional[int] = None) -> None:
        if isinstance(kinds, type):
            kinds = [kinds]
        elif isinstance(kinds, (str, bytes)) or not isinstance(kinds, abc.Iterable):
            raise RegistrationError(
                "Argument must be an exception class or an iterable of exception classes"
            )

        if code is None:
            code = self.default_code
        if isinstance(code, bool) or not isinstance(code, int):
            raise RegistrationError(f"Fault code must be an int, got {code!r}")

        kinds = list(kinds)
        for kind in kinds:
            if not (isinstance(kind, type) and issubclass(kind, Exception)):
                raise RegistrationError(f"Not an exception class: {kind!r}")

        for kind in kinds:
            self._codes[kind] = code
            logger.info(f"Registered exception: {kind.__name__} -> {code}")

    def lookup(self, exc: BaseException) -> Optional[int]:
        """Return the registered code for ``exc`` or None."""
        return self._codes.get(type(exc))

    def hydrate(self, exc: BaseException) -> Optional[Fault]:
        code = self.lookup(exc)
        if code is None:
            return None
        return Fault.hydrate(exc, code=code)

    def __contains__(self, kind: object) -> bool:
        return kind in self._codes

    def __len__(self) -> int:
        return len(self._codes)
