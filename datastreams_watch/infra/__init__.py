"""Infrastructure utilities for configuration, logging, and counters."""

from .config import AppConfig, ConfigError, load_config
from .logging import configure_logging
from .metrics import StreamCounters

__all__ = [
    "AppConfig",
    "ConfigError",
    "configure_logging",
    "load_config",
    "StreamCounters",
]
