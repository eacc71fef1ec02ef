"""Latency-tiered job queue policy checks and queue/job metrics."""

__version__ = "0.1.0"
