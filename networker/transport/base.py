from __future__ import annotations

import logging
from concurrent.futures import CancelledError, Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Callable, Optional, Protocol, Tuple

from networker.config import TransportConfig
from networker.responses import ResponseMetadata

if TYPE_CHECKING:
    from networker.request import PreparedRequest

log = logging.getLogger("networker.transport")

# (data, response, error): what one finished transfer reports.
TransferCallback = Callable[[Optional[bytes], Optional[ResponseMetadata], Optional[BaseException]], None]
TransferOutcome = Tuple[Optional[bytes], Optional[ResponseMetadata], Optional[BaseException]]


class Transport(Protocol):
    """
    Anything that can run one asynchronous byte fetch.

    `dispatch` must return immediately with a handle for the running
    transfer and later call `on_complete` exactly once. Implementations are
    shared across requests and must be safe for concurrent dispatches.
    """

    def dispatch(self, request: "PreparedRequest", on_complete: TransferCallback) -> Future:
        ...


class ThreadedTransport:
    """Base for transports that run a blocking fetch on a worker pool.

    Subclasses implement `perform`, returning the (data, response, error)
    triple. `on_complete` runs on the worker thread before the returned
    Future resolves, so a done handle means the completion has run.

    Security notes:
    - Exceptions raised by `on_complete` are logged and stored on the Future;
      they never take down the worker pool.
    """

    def __init__(self, config: Optional[TransportConfig] = None):
        self.config = config or TransportConfig()
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.max_workers,
            thread_name_prefix=f"networker-{type(self).__name__}",
        )

    def perform(self, request: "PreparedRequest") -> TransferOutcome:
        raise NotImplementedError

    def dispatch(self, request: "PreparedRequest", on_complete: TransferCallback) -> Future:
        log.debug(
            "transfer_dispatch",
            extra={"transport": type(self).__name__, "method": request.method, "url": request.url},
        )
        future = self._pool.submit(self._run, request, on_complete)

        def _on_cancel(f: Future) -> None:
            # A transfer cancelled before it started still completes once.
            if f.cancelled():
                on_complete(None, None, CancelledError())

        future.add_done_callback(_on_cancel)
        return future

    def _run(self, request: "PreparedRequest", on_complete: TransferCallback) -> None:
        try:
            data, response, error = self.perform(request)
        except Exception as e:
            # perform() should report errors in the triple; treat a raise the same way.
            data, response, error = None, None, e

        if error is not None:
            log.warning(
                "transfer_failed",
                extra={"url": request.url, "error_type": type(error).__name__},
            )

        try:
            on_complete(data, response, error)
        except Exception:
            log.exception("completion_failed", extra={"url": request.url})
            raise

    def close(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        self.close()
