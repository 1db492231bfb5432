"""Config loading for the Data Streams watcher.

Credentials and endpoints come from the environment (optionally seeded from a
``.env`` file). Non-secret display knobs may be placed in a YAML settings file.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = "config/settings.yaml"

REQUIRED_ENV_VARS = (
    "DATASTREAMS_API_KEY",
    "DATASTREAMS_API_SECRET",
    "DATASTREAMS_REST_URL",
    "DATASTREAMS_WS_URL",
    "DATASTREAMS_FEED_ID",
)


class ConfigError(RuntimeError):
    """Raised when required configuration is absent or malformed."""


@dataclass(frozen=True)
class CredentialsConfig:
    api_key: str
    api_secret: str


@dataclass(frozen=True)
class EndpointConfig:
    rest_url: str
    ws_url: str


@dataclass(frozen=True)
class FeedConfig:
    feed_id: str
    feed_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Return ``name (id)`` when a name is configured, else the raw id."""

        if self.feed_name:
            return f"{self.feed_name} ({self.feed_id})"
        return self.feed_id


@dataclass(frozen=True)
class DisplayConfig:
    price_scale: float = 1e18
    price_decimals: int = 2
    show_fields: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    format: str = "json"  # noqa: A003 - mirrors the LOG_FORMAT name


@dataclass(frozen=True)
class AppConfig:
    credentials: CredentialsConfig
    endpoints: EndpointConfig
    feed: FeedConfig
    display: DisplayConfig
    logging: LoggingConfig


def require_env(key: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """Return a non-empty environment value or raise :class:`ConfigError`."""

    env = os.environ if environ is None else environ
    value = env.get(key)
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    return value


def load_settings(path: str | Path) -> Dict[str, Any]:
    """Load YAML settings, defaulting to an empty dict when missing."""

    resolved = Path(path).expanduser()
    if not resolved.exists():
        logging.getLogger(__name__).debug("Settings file %s not found, using defaults", resolved)
        return {}
    with resolved.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Settings file {resolved} must contain a mapping")
    return raw


def _section(raw: Mapping[str, Any], name: str, path: str | Path) -> Mapping[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"Section '{name}' in {path} must be a mapping")
    return section


def load_config(
    settings_path: str | Path | None = None,
    environ: Optional[Mapping[str, str]] = None,
    use_dotenv: bool = True,
) -> AppConfig:
    """Build the application config.

    Required variables are checked in a fixed order before anything else runs,
    so the first missing key is the one reported.
    """

    if use_dotenv and environ is None:
        load_dotenv(override=False)
    env = os.environ if environ is None else environ

    api_key, api_secret, rest_url, ws_url, feed_id = (require_env(key, env) for key in REQUIRED_ENV_VARS)
    credentials = CredentialsConfig(api_key=api_key, api_secret=api_secret)
    endpoints = EndpointConfig(rest_url=rest_url, ws_url=ws_url)
    feed = FeedConfig(feed_id=feed_id, feed_name=env.get("DATASTREAMS_FEED_NAME") or None)

    path = settings_path or env.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)
    raw = load_settings(path)
    display_raw = _section(raw, "display", path)
    logging_raw = _section(raw, "logging", path)

    try:
        display = DisplayConfig(
            price_scale=float(display_raw.get("price_scale", DisplayConfig.price_scale)),
            price_decimals=int(display_raw.get("price_decimals", DisplayConfig.price_decimals)),
            show_fields=bool(display_raw.get("show_fields", DisplayConfig.show_fields)),
        )
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid display settings in {path}: {exc}") from exc
    if not display.price_scale > 0 or math.isinf(display.price_scale):
        raise ConfigError(f"display.price_scale must be a positive number, got {display.price_scale}")
    if display.price_decimals < 0:
        raise ConfigError(f"display.price_decimals must not be negative, got {display.price_decimals}")

    logging_config = LoggingConfig(
        level=env.get("LOG_LEVEL") or logging_raw.get("level", LoggingConfig.level),
        format=env.get("LOG_FORMAT") or logging_raw.get("format", LoggingConfig.format),
    )

    return AppConfig(
        credentials=credentials,
        endpoints=endpoints,
        feed=feed,
        display=display,
        logging=logging_config,
    )


__all__ = [
    "AppConfig",
    "ConfigError",
    "CredentialsConfig",
    "DisplayConfig",
    "EndpointConfig",
    "FeedConfig",
    "LoggingConfig",
    "REQUIRED_ENV_VARS",
    "load_config",
    "load_settings",
    "require_env",
]
