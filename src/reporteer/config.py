"""Service configuration.

Loads from environment (after .env via python-dotenv). An invalid endpoint URL
or server port is a ConfigError; load_config() then falls back to full defaults
rather than failing the process.
"""
from __future__ import annotations

import math
import os
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import BaseModel

from .errors import ConfigError
from .utils.logging import get_logger

DEFAULT_ENDPOINT_URL = "http://127.0.0.1:8006/derived_key"
DEFAULT_SERVER_PORT = 3000
DEFAULT_LOG_LEVEL = "info"
DEFAULT_ATTEST_MESSAGE = "reporteer"
DEFAULT_FETCH_TIMEOUT_SEC = 10.0


class ReporteerConfig(BaseModel):
    endpoint_url: str = DEFAULT_ENDPOINT_URL
    server_port: int = DEFAULT_SERVER_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    verify_at_start: bool = False

    bind_host: str = "0.0.0.0"
    attest_message: str = DEFAULT_ATTEST_MESSAGE
    fetch_timeout_sec: float = DEFAULT_FETCH_TIMEOUT_SEC
    provider: str = "simulated"
    sim_seed: str = "reporteer-simulated"

    @classmethod
    def from_env(cls) -> "ReporteerConfig":
        endpoint_url = _parse_url(os.getenv("REPORTEER_ENDPOINT_URL", DEFAULT_ENDPOINT_URL))
        server_port = parse_port(os.getenv("REPORTEER_SERVER_PORT", str(DEFAULT_SERVER_PORT)))
        fetch_timeout = _parse_timeout(os.getenv("REPORTEER_FETCH_TIMEOUT_SEC", str(DEFAULT_FETCH_TIMEOUT_SEC)))
        return cls(
            endpoint_url=endpoint_url,
            server_port=server_port,
            log_level=os.getenv("REPORTEER_LOG_LEVEL", DEFAULT_LOG_LEVEL),
            verify_at_start=os.getenv("VERIFY_AT_START", "false").lower() == "true",
            bind_host=os.getenv("REPORTEER_BIND_HOST", "0.0.0.0"),
            attest_message=os.getenv("REPORTEER_ATTEST_MESSAGE", DEFAULT_ATTEST_MESSAGE),
            fetch_timeout_sec=fetch_timeout,
            provider=os.getenv("REPORTEER_PROVIDER", "simulated"),
            sim_seed=os.getenv("REPORTEER_SIM_SEED", "reporteer-simulated"),
        )


def _parse_url(raw: str) -> str:
    parts = urlsplit(raw.strip())
    if not parts.scheme or not parts.netloc:
        raise ConfigError(f"Invalid endpoint URL: {raw!r}")
    return raw.strip()


def parse_port(raw: str) -> int:
    try:
        port = int(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid server port: {raw!r}") from e
    if not 0 <= port <= 65535:
        raise ConfigError(f"Invalid server port: {raw!r} out of range")
    return port


def _parse_timeout(raw: str) -> float:
    # not a config error; a bad timeout only reverts itself
    try:
        timeout = float(raw)
    except ValueError:
        return DEFAULT_FETCH_TIMEOUT_SEC
    if not math.isfinite(timeout) or timeout <= 0:
        return DEFAULT_FETCH_TIMEOUT_SEC
    return timeout


def load_config() -> ReporteerConfig:
    load_dotenv()
    try:
        return ReporteerConfig.from_env()
    except ConfigError as e:
        get_logger().warning("Failed to load configuration: %s. Using defaults.", e)
        return ReporteerConfig()
