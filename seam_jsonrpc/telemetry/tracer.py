"""
OpenTelemetry Trace Management

Creates client spans around JSON-RPC calls and propagates the active trace context
to transports that carry headers (W3C ``traceparent``).
"""

import logging
from typing import Dict, Any, Optional

from opentelemetry import trace, propagate
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

logger = logging.getLogger(__name__)

def setup_tracer(service_name: str, otlp_endpoint: str = "localhost:4317"):
    """Configure OpenTelemetry tracer
    
    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
        
    Returns:
        Tracer: tracer registered under the service name
    """
    provider = TracerProvider(sampler=ALWAYS_ON)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)
    
    logger.info(f"OpenTelemetry trace configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")
    
    return trace.get_tracer(service_name)

def inject_trace_context(carrier: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Write the current trace context into a header dictionary
    
    Args:
        carrier: Existing headers to extend, a new dict is created if None
        
    Returns:
        Dict[str, str]: The carrier, with ``traceparent``/``tracestate`` when a span is active
    """
    if carrier is None:
        carrier = {}
    propagate.inject(carrier)
    return carrier

def create_span(name: str, attributes: Dict[str, Any] = None, enabled: bool = True):
    """Start a client span as the current span
    
    Args:
        name: Span name
        attributes: Span attributes
        enabled: When False, the span is non-recording
        
    Returns:
        Context manager yielding the span
    """
    if not enabled:
        return trace.use_span(trace.INVALID_SPAN, end_on_exit=False)

    tracer = trace.get_tracer(__name__)
    return tracer.start_as_current_span(
        name,
        attributes=attributes or {},
        kind=trace.SpanKind.CLIENT,
    )
