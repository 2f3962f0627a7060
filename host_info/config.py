"""Runtime configuration helpers."""
from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

PORT = 3333


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = PORT
    log_level: str = "info"
    cpu_sample_seconds: float = 0.1
    cache_ttl_seconds: float = 60.0
    history_length: int = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults.

    The listen port is fixed at ``PORT`` and is not read from the environment.
    """
    host = os.getenv("HOST_INFO_HOST", "0.0.0.0")
    log_level = os.getenv("HOST_INFO_LOG_LEVEL", "info").lower()
    cpu_sample_seconds = float(os.getenv("HOST_INFO_CPU_SAMPLE_SECONDS", "0.1"))
    return Settings(host=host, log_level=log_level, cpu_sample_seconds=cpu_sample_seconds)
