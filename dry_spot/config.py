"""
Configuration for Dry Spot Finder.

All settings come from environment variables, optionally loaded from a
.env file in the working directory. Defaults are tuned for a handful of
interactive searches against free public APIs.
"""

import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from dry_spot.errors import InvalidInput

logger = logging.getLogger(__name__)

FORECAST_SOURCES = ("wttr", "open-meteo")

DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_MAX_CONCURRENCY = 4
DEFAULT_MAX_RETRIES = 2
DEFAULT_USER_AGENT = "DrySpotFinder/1.0"


@dataclass(frozen=True)
class Settings:
    """Runtime settings shared by the transport, providers and search."""
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    proxy_prefix: str = ""
    forecast_source: str = "wttr"
    forecast_window: Optional[int] = None
    geocoding_language: str = "de"
    max_retries: int = DEFAULT_MAX_RETRIES
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from the environment.

        Args:
            environ: Mapping to read instead of os.environ (no .env loading
                happens when given)

        Returns:
            Settings with defaults for every unset variable
        """
        if environ is None:
            load_dotenv(find_dotenv(usecwd=True))
            environ = os.environ

        timeout = _parse_float(environ, "DRY_SPOT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
        if timeout <= 0:
            raise InvalidInput(f"DRY_SPOT_TIMEOUT_SECONDS must be positive, got {timeout}")

        concurrency = _parse_int(environ, "DRY_SPOT_MAX_CONCURRENCY", DEFAULT_MAX_CONCURRENCY)
        if concurrency < 1:
            raise InvalidInput(f"DRY_SPOT_MAX_CONCURRENCY must be at least 1, got {concurrency}")

        retries = _parse_int(environ, "DRY_SPOT_MAX_RETRIES", DEFAULT_MAX_RETRIES)
        if retries < 0:
            raise InvalidInput(f"DRY_SPOT_MAX_RETRIES must not be negative, got {retries}")

        window = None
        if environ.get("DRY_SPOT_FORECAST_WINDOW", "").strip():
            window = _parse_int(environ, "DRY_SPOT_FORECAST_WINDOW", 0)
            if window < 1:
                raise InvalidInput(f"DRY_SPOT_FORECAST_WINDOW must be at least 1, got {window}")

        source = environ.get("DRY_SPOT_FORECAST_SOURCE", "wttr").strip().lower()
        if source not in FORECAST_SOURCES:
            raise InvalidInput(
                f"DRY_SPOT_FORECAST_SOURCE must be one of {', '.join(FORECAST_SOURCES)}, got {source!r}"
            )

        log_level = environ.get("LOG_LEVEL", "INFO").strip().upper() or "INFO"
        if not isinstance(logging.getLevelName(log_level), int):
            raise InvalidInput(f"LOG_LEVEL is not a logging level: {log_level!r}")

        settings = cls(
            timeout_seconds=timeout,
            max_concurrency=concurrency,
            proxy_prefix=environ.get("DRY_SPOT_PROXY_PREFIX", "").strip(),
            forecast_source=source,
            forecast_window=window,
            geocoding_language=environ.get("DRY_SPOT_GEOCODING_LANGUAGE", "de").strip() or "de",
            max_retries=retries,
            user_agent=environ.get("DRY_SPOT_USER_AGENT", DEFAULT_USER_AGENT).strip() or DEFAULT_USER_AGENT,
            log_level=log_level,
        )
        logger.debug(f"[Settings] Loaded: {settings}")
        return settings


def _parse_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be a number, got {raw!r}") from None
    if not math.isfinite(value):
        raise InvalidInput(f"{name} must be finite, got {raw!r}")
    return value


def _parse_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise InvalidInput(f"{name} must be an integer, got {raw!r}") from None
