from .metrics import (
    NULL_TRACER,
    MetricsCollector,
    NullSinkTracer,
    SinkMetrics,
    SinkTracer,
    create_tracer,
)

__all__ = [
    "NULL_TRACER",
    "MetricsCollector",
    "NullSinkTracer",
    "SinkMetrics",
    "SinkTracer",
    "create_tracer",
]
