"""
OpenTelemetry Metrics Collection

Counters and histograms for JSON-RPC client traffic. Instruments are created lazily
on first use and cached by name.
"""

import logging
from typing import Dict, Any

from opentelemetry import metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter

logger = logging.getLogger(__name__)

_counters = {}
_histograms = {}

def setup_metrics(service_name: str, otlp_endpoint: str = "localhost:4317", export_interval_ms: int = 5000):
    """Configure OpenTelemetry metrics export
    
    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
        export_interval_ms: Metrics export interval in milliseconds
    """
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint),
        export_interval_millis=export_interval_ms
    )
    metrics.set_meter_provider(MeterProvider(metric_readers=[reader]))
    
    logger.info(f"OpenTelemetry metrics configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")
    
    return metrics.get_meter(service_name)

def _counter(name: str):
    if name not in _counters:
        meter = metrics.get_meter(__name__)
        _counters[name] = meter.create_counter(name=name, description=f"Counter for {name}", unit="1")
    return _counters[name]

def _histogram(name: str):
    if name not in _histograms:
        meter = metrics.get_meter(__name__)
        _histograms[name] = meter.create_histogram(name=name, description=f"Latency histogram for {name}", unit="ms")
    return _histograms[name]

def increment_counter(name: str, amount: int = 1, attributes: Dict[str, Any] = None):
    """Increment counter value
    
    Args:
        name: Counter name
        amount: Amount to increment
        attributes: Attribute labels
    """
    _counter(name).add(amount, attributes or {})

def record_latency(name: str, value_ms: float, attributes: Dict[str, Any] = None):
    """Record a latency sample in milliseconds"""
    _histogram(name).record(value_ms, attributes or {})
