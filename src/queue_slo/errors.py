"""Error types for queue_slo.

This module defines a small exception hierarchy for predictable failures
(bad configuration, unreadable baseline files). Job errors raised by
instrumented job bodies are never wrapped in these types.
"""

from __future__ import annotations

from typing import Any


class QueueSloError(Exception):
    """Base exception for predictable queue_slo errors.

    Note: Avoid frozen dataclasses for exceptions; some frameworks attempt to
    mutate ``__traceback__`` and other attributes during handling, which breaks
    with frozen/slots dataclass exceptions.
    """

    def __init__(
        self,
        message: str,
        *,
        code: str = "UNKNOWN",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.message


class ConfigurationError(QueueSloError):
    """Invalid allow-list, SLO table or other startup configuration."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "CONFIGURATION_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, code=code, details=details)


class BaselineError(QueueSloError):
    """Grandfathering baseline file could not be read or written."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "BASELINE_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message=message, code=code, details=details)
