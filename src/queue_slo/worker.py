"""Standalone queue health exporter process.

Runs one health tick every ``exporter_interval_seconds`` and, when
``metrics_port`` is set, serves the resulting gauges for Prometheus.

Usage:
    python -m queue_slo.worker

Environment variables:
    QUEUE_SLO_REDIS_URL: Redis holding the queues (default: redis://localhost:6379/0)
    QUEUE_SLO_EXPORTER_INTERVAL_SECONDS: Seconds between ticks (default: 30)
    QUEUE_SLO_METRICS_PORT: Prometheus exposition port (default: disabled)
"""

from __future__ import annotations

import asyncio
import signal
import sys
from collections.abc import Callable

from prometheus_client import start_http_server

from queue_slo.config import Settings, load_settings
from queue_slo.errors import ConfigurationError
from queue_slo.observability.logging import configure_logging, get_logger
from queue_slo.observability.metrics import PrometheusMetricsClient
from queue_slo.queue.sidekiq_redis import SidekiqRedisInspector
from queue_slo.services.queue_health import QueueHealthExporter

logger = get_logger(__name__)


async def run_periodically(
    tick: Callable[[], object],
    *,
    interval_seconds: float,
    stop_event: asyncio.Event,
) -> int:
    """Call ``tick`` in a thread every ``interval_seconds`` until stopped.

    Ticks never overlap: the next one is scheduled only after the previous
    one returned. A failing tick is logged and does not stop the loop.

    Returns:
        Number of ticks run.
    """
    ticks = 0
    while not stop_event.is_set():
        try:
            await asyncio.to_thread(tick)
        except Exception:
            logger.exception("exporter_tick_failed")
        ticks += 1
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass
    return ticks


async def run_exporter(settings: Settings) -> None:
    """Run the exporter until SIGINT or SIGTERM."""
    logger.info(
        "exporter_starting",
        interval_seconds=settings.exporter_interval_seconds,
        metrics_port=settings.metrics_port,
    )

    metrics = PrometheusMetricsClient()
    if settings.metrics_port:
        start_http_server(settings.metrics_port, registry=metrics.registry)

    inspector = SidekiqRedisInspector.from_url(
        settings.redis_url, namespace=settings.redis_namespace
    )
    exporter = QueueHealthExporter(inspector, settings.slo_table(), metrics)

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def handle_signal(signum: int, frame: object) -> None:
        logger.info("exporter_signal", signal=signal.Signals(signum).name)
        loop.call_soon_threadsafe(shutdown_event.set)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    ticks = await run_periodically(
        exporter.export,
        interval_seconds=settings.exporter_interval_seconds,
        stop_event=shutdown_event,
    )
    logger.info("exporter_stopped", ticks=ticks)


def main() -> None:
    """Entry point for the exporter process."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Error: {e.message}: {e.details}", file=sys.stderr)
        sys.exit(2)

    configure_logging(settings)
    try:
        asyncio.run(run_exporter(settings))
    except KeyboardInterrupt:
        logger.info("exporter_interrupted")
    sys.exit(0)


if __name__ == "__main__":
    main()
