"""Services for queue_slo."""

from queue_slo.services.queue_health import QueueHealthExporter, normalised_latency

__all__ = [
    "QueueHealthExporter",
    "normalised_latency",
]
