"""Configuration: environment settings and the user config document."""

from pod_lifecycle.config.document import load_config_document, read_config_document
from pod_lifecycle.config.settings import LifecycleSettings, LoggingSettings, get_settings

__all__ = [
    "LifecycleSettings",
    "LoggingSettings",
    "get_settings",
    "load_config_document",
    "read_config_document",
]
