"""JSON-RPC 2.0 request envelope validation."""
import logging
from collections.abc import Mapping
from typing import Any, Union

from .faults import InternalError, InvalidParams, InvalidRequest, MethodNotFound
from .models import JSONRPC_VERSION, JSONRPCFault, JSONRPCRequest
from .registry import MethodRegistry
from ..utils.errors import FactoryError

logger = logging.getLogger(__name__)


def is_valid_id(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, (str, int)) and not isinstance(value, bool)


class RequestValidator:
    """Checks a decoded request and fills in its defaults.

    ``validate`` never raises for bad input: it returns either the normalized
    request or the fault envelope to send back, and the first failed check
    wins.
    """

    def __init__(self, registry: MethodRegistry):
        self.registry = registry

    def validate(self, message: Any) -> Union[JSONRPCRequest, JSONRPCFault]:
        if not isinstance(message, Mapping):
            return self._reject(InvalidRequest(data="Request must be an object"))

        request_id = message.get("id")
        if not is_valid_id(request_id):
            return self._reject(
                InvalidRequest(data="Request id must be a string, an integer or null")
            )

        if message.get("jsonrpc") != JSONRPC_VERSION:
            return self._reject(
                InvalidRequest(data="Wrong or missing json-rpc version string"),
                request_id,
            )

        method = message.get("method")
        if method is None:
            return self._reject(InvalidRequest(data="Missing method name"), request_id)
        if not isinstance(method, str):
            return self._reject(
                InvalidRequest(data="Method name must be a string"), request_id
            )

        try:
            procedure = self.registry.resolve(method)
        except FactoryError:
            # already logged by the registry, the cause stays off the wire
            return self._reject(InternalError(), request_id)
        if procedure is None:
            return self._reject(MethodNotFound(data=method), request_id)

        params = message.get("params")
        if params is None:
            params = []
        elif isinstance(params, Mapping):
            params = dict(params)
        elif isinstance(params, (list, tuple)):
            params = list(params)
        else:
            return self._reject(InvalidParams(), request_id)

        return JSONRPCRequest(method=method, params=params, id=request_id)

    def _reject(self, fault, request_id=None) -> JSONRPCFault:
        logger.warning(f"Rejected request (id={request_id!r}): {fault.message} {fault.data or ''}".rstrip())
        return fault.envelope(request_id)
