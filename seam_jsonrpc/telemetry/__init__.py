"""
OpenTelemetry Integration Module

Provides tracing and metrics for JSON-RPC round trips:
- tracer: span creation and trace header propagation
- metrics: request/error counters and latency histograms
"""

from .tracer import (
    setup_tracer,
    create_span,
    inject_trace_context,
)
from .metrics import (
    setup_metrics,
    increment_counter,
    record_latency,
)

__all__ = [
    "setup_tracer",
    "create_span",
    "inject_trace_context",
    "setup_metrics",
    "increment_counter",
    "record_latency",
]
