from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from radiocode.core.errors import ConfigError

DEFAULT_API_URL = "https://www.pelock.com/api/radio-code-calculator/v1"


@dataclass(frozen=True)
class Settings:
    api_key: str | None
    api_url: str
    timeout_s: float | None
    log_level: str


def _timeout_from_env() -> float | None:
    raw = os.getenv("RADIOCODE_TIMEOUT_S", "").strip()
    if not raw:
        return None
    try:
        timeout_s = float(raw)
    except ValueError:
        raise ConfigError(f"RADIOCODE_TIMEOUT_S must be a number of seconds, got {raw!r}") from None
    if timeout_s <= 0:
        raise ConfigError(f"RADIOCODE_TIMEOUT_S must be greater than 0, got {raw!r}")
    return timeout_s


def load_settings() -> Settings:
    load_dotenv(override=False)

    api_key = os.getenv("RADIOCODE_API_KEY") or None
    api_url = os.getenv("RADIOCODE_API_URL", DEFAULT_API_URL)
    timeout_s = _timeout_from_env()
    log_level = os.getenv("RADIOCODE_LOG_LEVEL", "WARNING")

    return Settings(
        api_key=api_key,
        api_url=api_url,
        timeout_s=timeout_s,
        log_level=log_level,
    )
