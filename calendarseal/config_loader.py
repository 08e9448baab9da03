"""calendarseal.config_loader

Configuration for a calendarseal run.

- Values come from an optional YAML (or JSON) file, overridden by environment
  variables (``CALENDAR_1``, ``CALENDAR_2``, ... and ``CAL_KEY``).
- Exposes a typed dataclass `Config` and a `load_config()` helper; the
  resulting Config is passed explicitly into the pipeline.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from .exceptions import ConfigurationError
from .timezone_utils import get_local_timezone, load_zone

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = "calendarseal.yaml"
DEFAULT_OUTPUT_PATH = "docs/cal.aes"
DEFAULT_WINDOW_DAYS = 7
DEFAULT_REQUEST_TIMEOUT = 30.0

ENV_FEED_PREFIX = "CALENDAR_"
ENV_KEY = "CAL_KEY"
ENV_OUTPUT = "CALENDARSEAL_OUTPUT"
ENV_WINDOW_DAYS = "CALENDARSEAL_WINDOW_DAYS"
ENV_TIMEZONE = "CALENDARSEAL_TIMEZONE"
ENV_LOG_LEVEL = "CALENDARSEAL_LOG_LEVEL"


@dataclass
class Config:
    """Typed configuration for calendarseal.

    Fields:
        feeds: ICS feed URLs, processed in order (at least one)
        key_hex: AES key as hexadecimal text
        output_path: where the encrypted artifact is written
        window_days: length of the forward-looking window
        timezone: reference timezone name; None means the local zone
        request_timeout: HTTP read timeout in seconds
        log_level: logging level name
    """

    feeds: list[str]
    key_hex: str = field(repr=False)
    output_path: str = DEFAULT_OUTPUT_PATH
    window_days: int = DEFAULT_WINDOW_DAYS
    timezone: Optional[str] = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Raises:
            ConfigurationError: If feeds or key are missing, or a value is malformed
        """
        feeds_raw = data.get("feeds") or []
        if isinstance(feeds_raw, str):
            feeds_raw = [feeds_raw]
        if not isinstance(feeds_raw, (list, tuple)):
            raise ConfigurationError("Config `feeds` must be a list of URLs")
        feeds = [str(f).strip() for f in feeds_raw]
        if not feeds:
            raise ConfigurationError(
                f"No calendar feeds configured; set {ENV_FEED_PREFIX}1 or `feeds` in the config file"
            )
        if any(not f for f in feeds):
            raise ConfigurationError("Config `feeds` contains an empty URL")

        key_hex = data.get("key")
        if key_hex is None or not str(key_hex).strip():
            raise ConfigurationError(f"No encryption key configured; set {ENV_KEY}")
        if not isinstance(key_hex, str):
            # An unquoted all-digit key in YAML loads as a number and loses leading zeros
            raise ConfigurationError("Config `key` must be a quoted hexadecimal string")

        window_days = _coerce_positive(data, "window_days", DEFAULT_WINDOW_DAYS, int)
        request_timeout = _coerce_positive(
            data, "request_timeout", DEFAULT_REQUEST_TIMEOUT, float
        )

        output_path = data.get("output_path") or DEFAULT_OUTPUT_PATH
        timezone = data.get("timezone") or None
        log_level = str(data.get("log_level") or "INFO").upper()

        return cls(
            feeds=feeds,
            key_hex=str(key_hex).strip(),
            output_path=str(output_path),
            window_days=window_days,
            timezone=str(timezone) if timezone else None,
            request_timeout=request_timeout,
            log_level=log_level,
        )

    def reference_zone(self) -> ZoneInfo:
        """Return the reference timezone: the configured one, else the local zone.

        Raises:
            ConfigurationError: If the configured timezone is unknown
        """
        name = self.timezone or get_local_timezone()
        try:
            return load_zone(name)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ConfigurationError(f"Unknown timezone {name!r}") from e


def _coerce_positive(data: Mapping[str, Any], key: str, default: Any, kind: type) -> Any:
    raw = data.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = kind(raw)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Config {key}={raw!r} is not a valid {kind.__name__}") from e
    if value <= 0:
        raise ConfigurationError(f"Config {key}={raw!r} must be positive")
    return value


def feeds_from_env(environ: Mapping[str, str]) -> list[str]:
    """Return CALENDAR_1, CALENDAR_2, ... in order, stopping at the first missing one."""
    feeds = []
    index = 1
    while f"{ENV_FEED_PREFIX}{index}" in environ:
        feeds.append(environ[f"{ENV_FEED_PREFIX}{index}"])
        index += 1
    return feeds


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    feeds = feeds_from_env(environ)
    if feeds:
        overrides["feeds"] = feeds

    for env_name, key in (
        (ENV_KEY, "key"),
        (ENV_OUTPUT, "output_path"),
        (ENV_WINDOW_DAYS, "window_days"),
        (ENV_TIMEZONE, "timezone"),
        (ENV_LOG_LEVEL, "log_level"),
    ):
        value = environ.get(env_name)
        if value:
            overrides[key] = value
    return overrides


def _load_file(path: Path) -> dict[str, Any]:
    """Load a mapping from a YAML or JSON file (JSON is parsed as YAML)."""
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse config file {path}: {e}") from e

    # safe_load returns None for empty files
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping at top level")
    return loaded


def load_config(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Config:
    """Load configuration from file and environment.

    Args:
        path: Optional config file. Without it, ./calendarseal.yaml is used when present.
        environ: Environment mapping; defaults to os.environ

    Returns:
        Config with file values overridden by environment variables

    Raises:
        ConfigurationError: If an explicit file is missing or the result is invalid
    """
    environ = os.environ if environ is None else environ

    data: dict[str, Any] = {}
    if path:
        p = Path(path)
        if not p.exists():
            raise ConfigurationError(f"Config file {p} not found")
        data = _load_file(p)
        logger.info("Loaded configuration from %s", p)
    else:
        p = Path.cwd() / DEFAULT_CONFIG_FILENAME
        if p.exists():
            data = _load_file(p)
            logger.info("Loaded configuration from %s", p)
        else:
            logger.debug("Config file %s not found; using environment only", p)

    data.update(_env_overrides(environ))
    cfg = Config.from_dict(data)
    logger.debug("Configuration values: %s", cfg)
    return cfg


def load_key(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Load only the encryption key, for commands that do not need feeds.

    Raises:
        ConfigurationError: If no key is configured
    """
    environ = os.environ if environ is None else environ
    if environ.get(ENV_KEY):
        return environ[ENV_KEY].strip()

    p = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_FILENAME
    key = _load_file(p).get("key") if p.exists() else None
    if not isinstance(key, str) or not key.strip():
        raise ConfigurationError(f"No encryption key configured; set {ENV_KEY}")
    return key.strip()
