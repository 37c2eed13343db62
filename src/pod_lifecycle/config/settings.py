"""
Settings management using Pydantic.

Defaults live on the models; environment variables override them.
Nested sections use ``__`` as delimiter (e.g. ``LOGGING__LEVEL=DEBUG``).
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings

DEFAULT_PROBE_SERVER_PORT = 8066
DEFAULT_MAX_STARTUP_MS = 60_000
DEFAULT_MAX_SHUTDOWN_MS = 30_000


class LoggingSettings(BaseModel):
    """Logging settings."""

    level: str = "INFO"
    json_enabled: bool = False
    json_file: str = "logs/pod_lifecycle.jsonl"


class LifecycleSettings(BaseSettings):
    """
    Main settings container.

    Every field can be overridden from the environment. The workload identity
    is read from ``POD_NAME`` and falls back to ``HOSTNAME``, which Kubernetes
    sets to the pod name for StatefulSet replicas.
    """

    probe_server_host: str = "0.0.0.0"
    probe_server_port: int = Field(default=DEFAULT_PROBE_SERVER_PORT, ge=0, le=65535)

    max_startup_ms: int = Field(default=DEFAULT_MAX_STARTUP_MS, ge=0)
    max_shutdown_ms: int = Field(default=DEFAULT_MAX_SHUTDOWN_MS, ge=0)

    config_path: Path | None = None
    pod_name: str = Field(default="", validation_alias=AliasChoices("pod_name", "POD_NAME", "HOSTNAME"))

    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = {
        "env_nested_delimiter": "__",
        "extra": "ignore",
        "populate_by_name": True,
    }

    def summary(self) -> dict[str, object]:
        """Flat view for startup banners and ``pod-lifecycle check``."""
        return {
            "probe_server": f"{self.probe_server_host}:{self.probe_server_port}",
            "max_startup_ms": self.max_startup_ms,
            "max_shutdown_ms": self.max_shutdown_ms,
            "config_path": str(self.config_path) if self.config_path else None,
            "pod_name": self.pod_name or None,
            "log_level": self.logging.level,
        }


@lru_cache(maxsize=4)
def get_settings() -> LifecycleSettings:
    """Get cached settings instance."""
    return LifecycleSettings()
