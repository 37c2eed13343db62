"""Observability: logging."""

from pod_lifecycle.observability.logging import (
    LOG_TAG_LIFECYCLE,
    LOG_TAG_PROBE,
    get_logger,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "LOG_TAG_LIFECYCLE",
    "LOG_TAG_PROBE",
]
