from __future__ import annotations

import os
from dataclasses import dataclass


def _get_env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be an int, got: {raw!r}") from e
    return value


def _get_env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw


@dataclass(frozen=True)
class Settings:
    # Server (used by seqtask.main when starting uvicorn programmatically)
    host: str
    port: int
    log_level: str


def load_settings() -> Settings:
    """
    Loads settings from env vars with sane defaults.

    Env vars:
      - SEQTASK_HOST (default: 127.0.0.1)
      - SEQTASK_PORT (default: 8000)
      - SEQTASK_LOG_LEVEL (default: info)
    """
    host = _get_env_str("SEQTASK_HOST", "127.0.0.1")
    port = _get_env_int("SEQTASK_PORT", 8000)
    if not (1 <= port <= 65535):
        raise ValueError("SEQTASK_PORT must be between 1 and 65535")

    log_level = _get_env_str("SEQTASK_LOG_LEVEL", "info").lower()

    return Settings(
        host=host,
        port=port,
        log_level=log_level,
    )
