"""Printer connection settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from .client import DEFAULT_COMMAND_TIMEOUT, DEFAULT_CONNECT_TIMEOUT
from .transport.tcp_connection import DEFAULT_PORT


@dataclass(frozen=True)
class DtpSettings:
    """Connection and runtime settings.

    ======================= ============================ ============
    Variable                Meaning                      Default
    ======================= ============================ ============
    ``DTP_HOST``            printer address              127.0.0.1
    ``DTP_PORT``            printer TCP port             3010
    ``DTP_CONNECT_TIMEOUT`` TCP connect timeout (s)      3.0
    ``DTP_COMMAND_TIMEOUT`` per-command timeout (s)      10.0
    ``DTP_STORE_NAME``      store line on invoices       N/A
    ``DTP_LOG_LEVEL``       logging level name           INFO
    ======================= ============================ ============
    """

    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    command_timeout: float = DEFAULT_COMMAND_TIMEOUT
    store_name: str = "N/A"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> DtpSettings:
        """Build settings from ``environ`` (``os.environ`` by default).

        Raises:
            ValueError: If a numeric variable cannot be parsed or is out of range.
        """
        env = os.environ if environ is None else environ
        defaults = cls()

        port = _parse(env, "DTP_PORT", int, defaults.port)
        if not 1 <= port <= 65535:
            raise ValueError(f"DTP_PORT must be 1-65535, got {port}")

        connect_timeout = _parse(env, "DTP_CONNECT_TIMEOUT", float, defaults.connect_timeout)
        command_timeout = _parse(env, "DTP_COMMAND_TIMEOUT", float, defaults.command_timeout)
        if connect_timeout <= 0 or command_timeout <= 0:
            raise ValueError("DTP_CONNECT_TIMEOUT and DTP_COMMAND_TIMEOUT must be positive")

        return cls(
            host=env.get("DTP_HOST", defaults.host),
            port=port,
            connect_timeout=connect_timeout,
            command_timeout=command_timeout,
            store_name=env.get("DTP_STORE_NAME", defaults.store_name),
            log_level=env.get("DTP_LOG_LEVEL", defaults.log_level).upper(),
        )


def _parse(env: Mapping[str, str], name: str, convert, default):
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return convert(raw)
    except ValueError as e:
        raise ValueError(f"{name} has an invalid value: {raw!r}") from e
