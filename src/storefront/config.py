"""Runtime settings for the storefront client, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_API_URL = "http://localhost:4000/v1"
DEFAULT_STORAGE_PATH = Path.home() / ".storefront" / "storage.json"


def _get_env(*keys: str, default: str | None = None) -> str | None:
    for k in keys:
        v = os.getenv(k)
        if v is not None and str(v).strip() != "":
            return v.strip()
    return default


def _get_float(*keys: str, default: float) -> float:
    v = _get_env(*keys, default=None)
    if v is None:
        return default
    return float(v)


@dataclass(frozen=True)
class Settings:
    environment: str = "development"
    api_base_url: str = DEFAULT_API_URL
    request_timeout: float = 10.0
    poll_interval: float = 3.0
    expiry_tick: float = 1.0
    storage_path: str = str(DEFAULT_STORAGE_PATH)
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> Settings:
        environment = _get_env("STOREFRONT_ENV", default="development") or "development"
        if environment == "production":
            api_base_url = _get_env("STOREFRONT_API_URL_PRODUCTION", "STOREFRONT_API_URL", default=DEFAULT_API_URL)
        else:
            api_base_url = _get_env("STOREFRONT_API_URL", default=DEFAULT_API_URL)

        settings = cls(
            environment=environment,
            api_base_url=(api_base_url or DEFAULT_API_URL).rstrip("/"),
            request_timeout=_get_float("STOREFRONT_REQUEST_TIMEOUT", default=10.0),
            poll_interval=_get_float("STOREFRONT_POLL_INTERVAL", default=3.0),
            expiry_tick=_get_float("STOREFRONT_EXPIRY_TICK", default=1.0),
            storage_path=_get_env("STOREFRONT_STORAGE_PATH", default=str(DEFAULT_STORAGE_PATH))
            or str(DEFAULT_STORAGE_PATH),
            log_level=_get_env("STOREFRONT_LOG_LEVEL", default="INFO") or "INFO",
        )

        if settings.poll_interval <= 0:
            raise RuntimeError("STOREFRONT_POLL_INTERVAL must be > 0")
        if settings.expiry_tick <= 0:
            raise RuntimeError("STOREFRONT_EXPIRY_TICK must be > 0")
        return settings
