"""Read-only access to job queue runtimes.

This module provides the QueueInspector protocol and an implementation for
Sidekiq-compatible Redis queues.
"""

from queue_slo.queue.protocol import QueueInspector
from queue_slo.queue.sidekiq_redis import SidekiqRedisInspector

__all__ = [
    "QueueInspector",
    "SidekiqRedisInspector",
]
