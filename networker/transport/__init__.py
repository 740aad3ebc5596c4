"""Transports: the injected capability that moves bytes over the network.

Anything with a `dispatch(request, on_complete) -> Future` method is a
transport. Test doubles implement that one method.
"""

from __future__ import annotations

from threading import Lock
from typing import Optional

from networker.config import TransportConfig, configure_logging_from_env

from .base import ThreadedTransport, TransferCallback, TransferOutcome, Transport
from .httpx_transport import HTTPXTransport
from .urllib_transport import URLLibTransport

_default: Optional[Transport] = None
_default_lock = Lock()


def default_transport() -> Transport:
    """Return the process-wide transport used when none is injected.

    Built lazily from environment configuration on first use.
    """

    global _default
    with _default_lock:
        if _default is None:
            configure_logging_from_env()
            _default = URLLibTransport(TransportConfig.from_env())
        return _default


__all__ = [
    "Transport",
    "TransferCallback",
    "TransferOutcome",
    "ThreadedTransport",
    "URLLibTransport",
    "HTTPXTransport",
    "default_transport",
]
