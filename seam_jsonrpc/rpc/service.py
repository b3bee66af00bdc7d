"""
JSON-RPC service endpoint

Owns the remote address, the transport and the default error delegate. Every
dispatch builds the request envelope, schedules the round trip on the running
event loop and immediately returns the call's response handler.
"""

import asyncio
import logging
import time
from typing import Any, Optional, Sequence, Set

from seam_jsonrpc.adapters.transport_interface import Transport
from seam_jsonrpc.adapters.transport_factory import TransportFactory
from seam_jsonrpc.config import ClientConfig, ProtocolVersion
from seam_jsonrpc.errors import ConversionError, TransportError
from seam_jsonrpc.rpc.method_call import MethodCall
from seam_jsonrpc.rpc.delegation import weak_delegate
from seam_jsonrpc.rpc.proxy import ServiceProxy
from seam_jsonrpc.rpc.response_handler import ResponseHandler
from seam_jsonrpc.telemetry.metrics import record_latency, increment_counter
from seam_jsonrpc.telemetry.tracer import create_span

logger = logging.getLogger(__name__)


class ServiceEndpoint:
    """Client side of one JSON-RPC web service

    Args:
        url: Address of the service, passed to the transport
        transport: Transport used for every call
        delegate: Default error handler, used as the fallback tier of the error
            delegation chain. It is held by weak reference, so instances of classes
            with ``__slots__`` must list ``"__weakref__"``.
        protocol_version: JSON-RPC version of the request envelopes
        enable_tracing: Record an OpenTelemetry span per call
    """

    def __init__(self,
                 url: str,
                 transport: Transport,
                 delegate: Any = None,
                 protocol_version: ProtocolVersion = ProtocolVersion.V2_0,
                 enable_tracing: bool = True):
        self.url = url
        self.transport = transport
        self.protocol_version = ProtocolVersion(protocol_version)
        self.enable_tracing = enable_tracing
        self._delegate_ref = weak_delegate(delegate)
        self._pending: Set[asyncio.Task] = set()
        self._proxy: Optional[ServiceProxy] = None
        logger.info(f"JSON-RPC {self.protocol_version.value} endpoint created for {url}")

    @classmethod
    def from_config(cls, config: ClientConfig, delegate: Any = None) -> "ServiceEndpoint":
        """Create an endpoint and its transport from a ClientConfig"""
        transport = TransportFactory.create(config.transport, config)
        return cls(
            url=config.url,
            transport=transport,
            delegate=delegate,
            protocol_version=config.protocol_version,
            enable_tracing=config.enable_tracing,
        )

    @property
    def delegate(self) -> Any:
        return self._delegate_ref() if self._delegate_ref is not None else None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def proxy(self) -> ServiceProxy:
        if self._proxy is None:
            self._proxy = ServiceProxy(self)
        return self._proxy

    def new_call(self, method: str, params: Sequence[Any] = ()) -> MethodCall:
        return MethodCall(method=method, params=tuple(params or ()))

    def call_method(self, call: MethodCall) -> ResponseHandler:
        """Dispatch ``call`` and return its response handler without waiting

        Must be called from a coroutine or callback running on an event loop; the
        outcome is delivered on that same loop.

        Raises:
            RuntimeError: No running event loop
            TypeError: A parameter is not JSON serializable
        """
        loop = asyncio.get_running_loop()
        payload = call.encode(self.protocol_version)
        handler = ResponseHandler(call, endpoint=self)

        task = loop.create_task(self._round_trip(call, payload, handler))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return handler

    def call_method_with_name(self, name: str, params: Sequence[Any] = ()) -> ResponseHandler:
        return self.call_method(self.new_call(name, params))

    def call_method_with_name_and_params(self, name: str, *params: Any) -> ResponseHandler:
        return self.call_method(self.new_call(name, params))

    async def _round_trip(self, call: MethodCall, payload: bytes, handler: ResponseHandler):
        attributes = {
            "rpc.system": "jsonrpc",
            "rpc.method": call.method,
            "rpc.jsonrpc.version": self.protocol_version.value,
            "rpc.jsonrpc.request_id": str(call.id),
        }
        with create_span(f"jsonrpc {call.method}", attributes, enabled=self.enable_tracing):
            increment_counter("rpc.client.requests", 1, {"method": call.method})
            logger.debug(f"Sending {call} to {self.url}: {payload[:200]!r}")
            start_time = time.time()

            try:
                reply = await self.transport.send(payload, self.url)
            except TransportError as e:
                handler.handle_transport_error(e)
                return
            except Exception as e:
                handler.handle_transport_error(TransportError(f"Transport failed: {e}", cause=e))
                return

            latency_ms = (time.time() - start_time) * 1000
            record_latency("rpc.client.latency", latency_ms, {"method": call.method})
            logger.debug(f"Reply for {call} after {latency_ms:.2f}ms")

            try:
                handler.handle_response(reply)
            except Exception as e:
                logger.exception(f"Processing the reply for {call} raised")
                if not handler.done:
                    handler.handle_internal_error(ConversionError(reply, None, f"reply could not be processed: {e}"))

    async def drain(self):
        """Wait until every outstanding call has been delivered"""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def close(self):
        """Deliver outstanding calls, then close the transport"""
        await self.drain()
        await self.transport.close()
        logger.info(f"JSON-RPC endpoint for {self.url} closed")

    async def __aenter__(self) -> "ServiceEndpoint":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
