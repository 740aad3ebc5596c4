from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

__version__ = "0.1.0"

DEFAULT_USER_AGENT = f"networker/{__version__}"

log = logging.getLogger("networker")


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad input."""

    raw = os.environ.get(name, "").strip()
    if not raw:
        return int(default)
    try:
        return int(raw)
    except Exception:
        return int(default)


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except Exception:
        return default
    # 0 or negative disables the transport timeout.
    return value if value > 0 else None


@dataclass(frozen=True, slots=True)
class TransportConfig:
    """Configuration for the bundled transports.

    The timeout is opaque to networker: it is handed to the transport as-is
    and never enforced here.

    Env vars:
    - NETWORKER_MAX_WORKERS (default 8)
    - NETWORKER_TIMEOUT_SEC (default 60, <= 0 disables)
    - NETWORKER_USER_AGENT (default "networker/<version>")
    """

    max_workers: int = 8
    timeout_sec: Optional[float] = 60.0
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if int(self.max_workers) < 1:
            raise ValueError("max_workers must be >= 1")
        object.__setattr__(self, "max_workers", int(self.max_workers))

    @staticmethod
    def from_env() -> "TransportConfig":
        return TransportConfig(
            max_workers=max(1, _env_int("NETWORKER_MAX_WORKERS", 8)),
            timeout_sec=_env_float("NETWORKER_TIMEOUT_SEC", 60.0),
            user_agent=(os.environ.get("NETWORKER_USER_AGENT") or "").strip() or DEFAULT_USER_AGENT,
        )


def configure_logging_from_env() -> None:
    """Apply NETWORKER_LOG_LEVEL to the package logger.

    Handlers are left to the host application.
    """

    level = os.environ.get("NETWORKER_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    try:
        log.setLevel(level)
    except ValueError:
        log.setLevel(logging.WARNING)
