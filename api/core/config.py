"""
Process settings, read from environment variables.

Required:
- HTTP_SERVER_PORT
- DB_USER, DB_PASS, DB_NAME, DB_HOST, DB_PORT, DB_SSL_MODE

Optional:
- HTTP_SERVER_SHUTDOWN_TIMEOUT (seconds, default 10)
- LOG_LEVEL (default INFO)
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

DEFAULT_SHUTDOWN_TIMEOUT_S = 10
DEFAULT_LOG_LEVEL = "INFO"


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class HTTPServerConfig:
    port: int
    shutdown_timeout_s: int = DEFAULT_SHUTDOWN_TIMEOUT_S


@dataclass(frozen=True)
class DatabaseConfig:
    user: str
    password: str
    name: str
    host: str
    port: int
    ssl_mode: str


@dataclass(frozen=True)
class Settings:
    http: HTTPServerConfig
    database: DatabaseConfig


class _EnvReader:
    """
    Collects every missing/invalid variable so one error names all of them.
    """

    def __init__(self, environ: Mapping[str, str]) -> None:
        self._environ = environ
        self.problems: list[str] = []

    def required_str(self, name: str) -> str:
        raw = self._environ.get(name, "").strip()
        if not raw:
            self.problems.append(f"{name} is not set")
        return raw

    def required_int(self, name: str) -> int:
        raw = self.required_str(name)
        if not raw:
            return 0
        try:
            return int(raw)
        except ValueError:
            self.problems.append(f"{name} must be an integer, got {raw!r}")
            return 0

    def optional_int(self, name: str, default: int) -> int:
        raw = self._environ.get(name, "").strip()
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError:
            self.problems.append(f"{name} must be an integer, got {raw!r}")
            return default


def log_level(environ: Mapping[str, str] | None = None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get("LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper() or DEFAULT_LOG_LEVEL


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = _EnvReader(os.environ if environ is None else environ)

    http = HTTPServerConfig(
        port=env.required_int("HTTP_SERVER_PORT"),
        shutdown_timeout_s=env.optional_int("HTTP_SERVER_SHUTDOWN_TIMEOUT", DEFAULT_SHUTDOWN_TIMEOUT_S),
    )
    database = DatabaseConfig(
        user=env.required_str("DB_USER"),
        password=env.required_str("DB_PASS"),
        name=env.required_str("DB_NAME"),
        host=env.required_str("DB_HOST"),
        port=env.required_int("DB_PORT"),
        ssl_mode=env.required_str("DB_SSL_MODE"),
    )

    if env.problems:
        raise ConfigError("Invalid configuration: " + "; ".join(env.problems) + ".")
    return Settings(http=http, database=database)
