"""
JSON-RPC response handler

One handler is created per dispatched call. It receives the transport's raw reply
(or the transport failure), checks the envelope against the originating call,
optionally converts the result, and delivers the outcome:

- results and server errors go to the configured callback only
- internal errors (transport, parse, conversion) go to the callback and to the
  error delegation chain (handler delegate, then endpoint delegate)

The delegate is referenced weakly: once the caller drops it, delivery becomes a no-op.
"""

import asyncio
import inspect
import logging
import weakref
from enum import Enum
from typing import Any, Callable, Optional, Tuple, Union

from seam_jsonrpc.errors import (
    INTERNAL_ERRORS,
    JsonRpcError,
    TransportError,
    ParseError,
    ConversionError,
    ServerError,
)
from seam_jsonrpc.rpc.conversion import convert_node
from seam_jsonrpc.rpc.delegation import DelegationChain, weak_delegate
from seam_jsonrpc.telemetry.metrics import increment_counter
from seam_jsonrpc.utils.serialization import decode_json

logger = logging.getLogger(__name__)

Callback = Union[str, Callable[..., Any]]


class HandlerState(Enum):
    PENDING = "pending"
    DELIVERED = "delivered"  # result or server error
    FAILED = "failed"  # internal error


class ResponseHandler:
    """Mediates between the transport reply of one call and the caller

    Configure it right after dispatch, before control returns to the event loop::

        handler = endpoint.call_method_with_name_and_params("getUserDetails", "user1234")
        handler.set_delegate(self, "method_call_did_return_user", result_type=Person)

    The callback receives ``(call, result, error)``; exactly one of result/error is set
    (the result may legitimately be None).
    """

    def __init__(self, call, endpoint=None):
        self.call = call
        self.endpoint = endpoint
        self.result_type: Any = None
        self.state = HandlerState.PENDING
        self._delegate_ref: Optional[weakref.ref] = None
        self._callback: Any = None
        self._outcome: Optional[Tuple[Any, Optional[JsonRpcError]]] = None
        self._done: Optional[asyncio.Event] = None

    def __repr__(self) -> str:
        return f"<ResponseHandler {self.call} {self.state.value}>"

    # Configuration

    @property
    def delegate(self) -> Any:
        """The configured delegate, or None if unset or garbage collected"""
        return self._delegate_ref() if self._delegate_ref is not None else None

    @property
    def done(self) -> bool:
        return self.state is not HandlerState.PENDING

    def _ensure_pending(self):
        if self.done:
            raise RuntimeError(f"Response for {self.call} was already delivered")

    def set_delegate(self, delegate: Any, callback: Optional[Callback] = None,
                     result_type: Any = None) -> "ResponseHandler":
        """Set the object that receives the outcome of the call

        Args:
            delegate: Target object, held by weak reference. Instances of classes
                with ``__slots__`` must list ``"__weakref__"``.
            callback: Name of a method of ``delegate``, a bound method, or any callable
                taking ``(call, result, error)``
            result_type: Optional type to convert the result into

        Returns:
            ResponseHandler: self, for chaining

        Raises:
            TypeError: The delegate cannot be weakly referenced or the callback is invalid
        """
        self._ensure_pending()
        self._delegate_ref = weak_delegate(delegate)

        if callback is None or isinstance(callback, str):
            self._callback = callback
        elif inspect.ismethod(callback) and delegate is not None and callback.__self__ is delegate:
            # a strong bound method would keep the delegate alive
            self._callback = weakref.WeakMethod(callback)
        elif callable(callback):
            self._callback = callback
        else:
            raise TypeError(f"callback must be a method name or a callable, got {type(callback).__name__}")

        if result_type is not None:
            self.set_result_type(result_type)
        return self

    def set_result_type(self, result_type: Any) -> "ResponseHandler":
        """Convert the result into ``result_type`` instances before delivery"""
        self._ensure_pending()
        self.result_type = result_type
        return self

    # Completion (called by the endpoint)

    def handle_response(self, data: Union[bytes, str]) -> None:
        """Process the raw reply body from the transport"""
        if self.done:
            logger.warning(f"Ignoring duplicate response for {self.call}")
            return

        if isinstance(data, (bytes, bytearray)):
            raw_text = bytes(data).decode("utf-8", errors="replace")
        else:
            raw_text = data
        logger.debug(f"Response for {self.call}: {raw_text[:200]}")

        try:
            node = decode_json(data)
        except (ValueError, RecursionError) as e:
            # RecursionError: nesting deeper than the decoder supports
            self._fail(ParseError(raw_text, cause=e))
            return

        try:
            result, server_error = self._interpret(node)
        except ConversionError as e:
            self._fail(e)
            return

        if server_error is not None:
            logger.info(f"Server returned error for {self.call}: {server_error}")
            increment_counter("rpc.client.errors", 1, {"type": "server", "method": self.call.method})
            self._finish(HandlerState.DELIVERED, None, server_error)
        else:
            increment_counter("rpc.client.success", 1, {"method": self.call.method})
            self._finish(HandlerState.DELIVERED, result, None)

    def handle_transport_error(self, error: TransportError) -> None:
        """Record a transport level failure"""
        self.handle_internal_error(error)

    def handle_internal_error(self, error: JsonRpcError) -> None:
        """Record a transport, parse or conversion failure raised outside the handler

        Raises:
            TypeError: ``error`` is a server error or not a JsonRpcError
        """
        if not isinstance(error, INTERNAL_ERRORS):
            raise TypeError(f"{type(error).__name__} is not an internal error")
        if self.done:
            logger.warning(f"Ignoring {error.domain} error for completed call {self.call}: {error}")
            return
        self._fail(error)

    def _interpret(self, node: Any) -> Tuple[Any, Optional[ServerError]]:
        """Check the reply envelope and extract the result or server error

        Raises:
            ConversionError: Malformed envelope, id mismatch or result conversion failure
        """
        if not isinstance(node, dict):
            raise ConversionError(node, None, "response is not a JSON object")

        if "id" not in node or node["id"] != self.call.id:
            raise ConversionError(node, None, f"response id {node.get('id')!r} does not match request id {self.call.id!r}")

        # JSON-RPC 1.0 replies carry both members, the unused one set to null
        has_error = node.get("error") is not None
        has_result = "result" in node
        if has_error and has_result and node["result"] is not None:
            raise ConversionError(node, None, "response has both result and error")
        if has_error:
            return None, ServerError.from_node(node["error"], call=self.call)
        if not has_result:
            raise ConversionError(node, None, "response has neither result nor error")

        result = node["result"]
        if self.result_type is not None and result is not None:
            result = convert_node(result, self.result_type)
        return result, None

    def _fail(self, error: JsonRpcError) -> None:
        error.call = self.call
        logger.error(f"Call {self.call} failed: {error}")
        increment_counter("rpc.client.errors", 1, {"type": error.domain, "method": self.call.method})
        self._finish(HandlerState.FAILED, None, error)

        # a collected delegate is None and skipped like one without the capability
        fallback = self.endpoint.delegate if self.endpoint is not None else None
        DelegationChain([self.delegate, fallback]).dispatch(self.call, error)

    # Delivery

    def _resolve_callback(self) -> Optional[Callable[..., Any]]:
        callback = self._callback
        if callback is None:
            return None

        delegate = self.delegate
        if self._delegate_ref is not None and delegate is None:
            logger.debug(f"Delegate for {self.call} is gone, dropping response")
            return None

        if isinstance(callback, str):
            target = getattr(delegate, callback, None)
            if not callable(target):
                logger.warning(f"{type(delegate).__name__} has no callback named {callback!r}")
                return None
            return target
        if isinstance(callback, weakref.WeakMethod):
            return callback()
        return callback

    def _finish(self, state: HandlerState, result: Any, error: Optional[JsonRpcError]) -> None:
        self.state = state
        self._outcome = (result, error)
        if self._done is not None:
            self._done.set()

        callback = self._resolve_callback()
        if callback is None:
            return
        try:
            callback(self.call, result, error)
        except Exception:
            logger.exception(f"Callback for {self.call} raised")

    async def wait(self) -> Tuple[Any, Optional[JsonRpcError]]:
        """Wait until the outcome has been delivered

        Returns:
            Tuple: (result, error)
        """
        if self._outcome is None:
            if self._done is None:
                self._done = asyncio.Event()
            await self._done.wait()
        return self._outcome
