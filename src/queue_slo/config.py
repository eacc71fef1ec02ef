"""Configuration for queue_slo."""

from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from queue_slo.domain.tiers import (
    DEFAULT_PERMITTED_LATENCY_SECONDS,
    LATENCY_TIERS,
    AllowedQueueSet,
    QueueSLOTable,
)
from queue_slo.errors import ConfigurationError

# Load .env file from the working directory into os.environ
load_dotenv(Path.cwd() / ".env")


class Settings(BaseSettings):
    """Settings loaded from environment variables (``QUEUE_SLO_*``).

    List and mapping fields are read from JSON, e.g.
    ``QUEUE_SLO_ALLOWED_QUEUES='["within_1_minute", "within_1_day"]'``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="QUEUE_SLO_",
        extra="ignore",
    )

    # Logging
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Queue naming policy
    allowed_queues: list[str] = Field(
        default_factory=lambda: list(LATENCY_TIERS),
        description="Latency-tiered queues that new job declarations may use",
    )
    baseline_path: Path = Field(
        default=Path(".queue_slo_baseline.json"),
        description="Grandfathering file listing pre-existing violations",
    )
    flag_dynamic_queues: bool = Field(
        default=False, description="Also flag declarations whose queue is not a literal"
    )
    options_call_names: list[str] = Field(
        default_factory=lambda: ["sidekiq_options"],
        description="Bare calls declaring job options with a queue= entry",
    )
    adapter_call_names: list[str] = Field(
        default_factory=lambda: ["queue_as"],
        description="Bare calls taking the queue name as their only argument",
    )

    # Queue SLOs
    permitted_latency_seconds: dict[str, float] = Field(
        default_factory=lambda: dict(LATENCY_TIERS),
        description="Permitted latency per queue (seconds)",
    )
    default_permitted_latency_seconds: float = Field(
        default=DEFAULT_PERMITTED_LATENCY_SECONDS,
        description="Permitted latency for queues missing from the table (seconds)",
    )

    # Queue runtime (Sidekiq-compatible Redis layout)
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_namespace: str | None = Field(
        default=None, description="Key prefix used by redis-namespace deployments"
    )

    # Health exporter
    exporter_interval_seconds: float = Field(
        default=30.0, gt=0, description="Interval between queue health ticks"
    )
    metrics_port: int | None = Field(
        default=None, description="Serve Prometheus metrics on this port when set"
    )

    def allowed_queue_set(self) -> AllowedQueueSet:
        return AllowedQueueSet(self.allowed_queues)

    def slo_table(self) -> QueueSLOTable:
        return QueueSLOTable(
            self.permitted_latency_seconds,
            default=self.default_permitted_latency_seconds,
        )


def load_settings(**overrides: Any) -> Settings:
    """Load settings and validate the derived allow-list and SLO table.

    Raises:
        ConfigurationError: If any setting is invalid.
    """
    try:
        loaded = Settings(**overrides)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid queue_slo settings",
            details={"errors": e.errors(include_url=False)},
        ) from e

    # Build once so bad tiers fail at startup rather than on first use
    loaded.allowed_queue_set()
    loaded.slo_table()
    return loaded
