"""JSON-RPC 2.0 request handler."""
import asyncio
import inspect
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Optional, Union

from .codec import Malformed, ParsedBatch, decode, encode
from .faults import Fault, InternalError, ParseError, RegisteredExceptions
from .models import ErrorCode, JSONRPCFault, JSONRPCRequest, JSONRPCResponse
from .registry import DEFAULT_SEPARATOR, MethodRegistry
from .validator import RequestValidator, is_valid_id

logger = logging.getLogger(__name__)

Message = Dict[str, Any]


class JSONRPCHandler:
    """Handles JSON-RPC 2.0 requests and routes to registered methods.

    Every callback receives a single argument, the request params: a list for
    positional params or a dict for keyed params.
    """

    def __init__(
        self,
        separator: str = DEFAULT_SEPARATOR,
        registered_error_code: int = ErrorCode.SERVER_ERROR,
    ):
        self.registry = MethodRegistry(separator)
        self.exceptions = RegisteredExceptions(registered_error_code)
        self.validator = RequestValidator(self.registry)

    # Registration API

    def register_function(
        self,
        name: str,
        callback: Callable,
        namespace: str = "",
        bind_params: bool = False,
    ) -> "JSONRPCHandler":
        self.registry.register_function(name, callback, namespace, bind_params)
        return self

    def register_method(self, method_name: str, handler: Callable) -> "JSONRPCHandler":
        """Register a JSON-RPC method handler.

        Args:
            method_name: Fully qualified name of the JSON-RPC method (e.g., "util.echo")
            handler: Callable that receives the params
        """
        namespace, name = self.registry.split(method_name)
        return self.register_function(name, handler, namespace)

    def register_object(
        self, bundle: Any, namespace: str = "", bind_params: bool = False
    ) -> "JSONRPCHandler":
        self.registry.register_object(bundle, namespace, bind_params)
        return self

    def register_factory(
        self, factory: Callable[[], Any], namespace: str = "", bind_params: bool = False
    ) -> "JSONRPCHandler":
        self.registry.register_factory(factory, namespace, bind_params)
        return self

    def register_exception(self, kinds, code: Optional[int] = None) -> "JSONRPCHandler":
        """Allow exceptions of the given type(s) to reach the caller as faults."""
        self.exceptions.register(kinds, code)
        return self

    # Dispatch

    def handle(self, raw: Union[str, bytes, None]) -> Optional[str]:
        """Handle raw request text (single or batch).

        Returns:
            Encoded response text, or None when there is nothing to send back
        """
        try:
            decoded = decode(raw)
            if isinstance(decoded, Malformed):
                logger.warning(f"Parse error: {decoded.reason}")
                return encode(ParseError().envelope().to_dict())

            if isinstance(decoded, ParsedBatch):
                responses = [self._handle_batch_item(message) for message in decoded.messages]
                return self._encode_batch(responses)

            return self._encode_single(self.handle_one(decoded.message))
        except Exception as e:
            logger.error(f"Unhandled error while handling request: {e}", exc_info=True)
            return encode(InternalError().envelope().to_dict())

    def handle_one(self, message: Any) -> Optional[Message]:
        """Handle one decoded request.

        Returns:
            Response or fault dict, or None for a notification
        """
        validated = self.validator.validate(message)
        if isinstance(validated, JSONRPCFault):
            # validation faults are emitted even for notifications
            return validated.to_dict()

        procedure = self.registry.resolve(validated.method)
        logger.debug(f"Dispatching {validated.method} (id={validated.id!r})")
        try:
            result = procedure(validated.params)
            if inspect.isawaitable(result):
                _discard_awaitable(result)
                raise TypeError(
                    f"{validated.method} returned an awaitable; use handle_async"
                )
            response = JSONRPCResponse(id=validated.id, result=result).to_dict()
        except Exception as e:
            response = self._fault_response(validated, e)

        if validated.is_notification:
            return None
        return response

    async def handle_async(self, raw: Union[str, bytes, None]) -> Optional[str]:
        """Async variant of ``handle``; batch items are dispatched concurrently."""
        try:
            decoded = decode(raw)
            if isinstance(decoded, Malformed):
                logger.warning(f"Parse error: {decoded.reason}")
                return encode(ParseError().envelope().to_dict())

            if isinstance(decoded, ParsedBatch):
                # gather keeps results in input order
                outcomes = await asyncio.gather(
                    *[self.handle_one_async(message) for message in decoded.messages],
                    return_exceptions=True,
                )
                responses = []
                for message, outcome in zip(decoded.messages, outcomes):
                    if isinstance(outcome, Exception):
                        outcome = self._batch_item_failure(message, outcome)
                    elif isinstance(outcome, BaseException):
                        raise outcome
                    responses.append(outcome)
                return self._encode_batch(responses)

            return self._encode_single(await self.handle_one_async(decoded.message))
        except Exception as e:
            logger.error(f"Unhandled error while handling request: {e}", exc_info=True)
            return encode(InternalError().envelope().to_dict())

    async def handle_one_async(self, message: Any) -> Optional[Message]:
        """Async variant of ``handle_one``; awaitable results are awaited."""
        validated = self.validator.validate(message)
        if isinstance(validated, JSONRPCFault):
            return validated.to_dict()

        procedure = self.registry.resolve(validated.method)
        logger.debug(f"Dispatching {validated.method} (id={validated.id!r})")
        try:
            result = procedure(validated.params)
            if inspect.isawaitable(result):
                result = await result
            response = JSONRPCResponse(id=validated.id, result=result).to_dict()
        except Exception as e:
            response = self._fault_response(validated, e)

        if validated.is_notification:
            return None
        return response

    def _handle_batch_item(self, message: Any) -> Optional[Message]:
        try:
            return self.handle_one(message)
        except Exception as e:
            return self._batch_item_failure(message, e)

    def _batch_item_failure(self, message: Any, exc: Exception) -> Message:
        """Answer one failed batch item without dropping its siblings."""
        logger.error(f"Unhandled error while handling batch item: {exc}", exc_info=exc)
        request_id = message.get("id") if isinstance(message, Mapping) else None
        if not is_valid_id(request_id):
            request_id = None
        return InternalError().envelope(request_id).to_dict()

    def _fault_response(self, request: JSONRPCRequest, exc: Exception) -> Message:
        if isinstance(exc, Fault):
            fault = exc
        else:
            fault = self.exceptions.hydrate(exc)
            if fault is None:
                logger.error(
                    f"Internal error handling {request.method}: {exc}", exc_info=True
                )
                fault = InternalError()
        return fault.envelope(request.id).to_dict()

    # Encoding

    def _encode_single(self, response: Optional[Message]) -> Optional[str]:
        if response is None:
            return None
        try:
            return encode(response)
        except (TypeError, ValueError) as e:
            return encode(self._unencodable(response, e))

    def _encode_batch(self, responses: List[Optional[Message]]) -> Optional[str]:
        emitted = [response for response in responses if response is not None]
        if not emitted:
            return None
        try:
            return encode(emitted)
        except (TypeError, ValueError):
            pass

        checked = []
        for response in emitted:
            try:
                encode(response)
                checked.append(response)
            except (TypeError, ValueError) as e:
                checked.append(self._unencodable(response, e))
        return encode(checked)

    def _unencodable(self, response: Message, exc: Exception) -> Message:
        logger.error(f"Cannot encode response for id={response.get('id')!r}: {exc}")
        return InternalError().envelope(response.get("id")).to_dict()


def _discard_awaitable(awaitable: Any) -> None:
    # avoids the "coroutine was never awaited" warning
    close = getattr(awaitable, "close", None)
    if close is not None:
        close()
