from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Tuple


_MAX_BODY_ENV = "INGEST_MAX_BODY_BYTES"
_CORS_ORIGINS_ENV = "CORS_ALLOW_ORIGINS"
_HOST_ENV = "SERVER_HOST"
_PORT_ENV = "SERVER_PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_MAX_BODY_BYTES = 256 * 1024


@dataclass(frozen=True)
class Settings:
    max_body_bytes: int
    cors_allow_origins: Tuple[str, ...]
    server_host: str
    server_port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_positive_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_origins(default: Tuple[str, ...]) -> Tuple[str, ...]:
    value = os.getenv(_CORS_ORIGINS_ENV)
    if value is None:
        return default
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        max_body_bytes=_read_positive_int(_MAX_BODY_ENV, DEFAULT_MAX_BODY_BYTES),
        cors_allow_origins=_read_origins(("*",)),
        server_host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        server_port=_read_positive_int(_PORT_ENV, 3000),
        log_level=_read_log_level("INFO"),
    )
