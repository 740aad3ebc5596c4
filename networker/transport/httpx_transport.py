from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import httpx

from networker.config import TransportConfig
from networker.responses import HTTPResponse
from networker.transport.base import ThreadedTransport, TransferOutcome

if TYPE_CHECKING:
    from networker.request import PreparedRequest


class HTTPXTransport(ThreadedTransport):
    """Transport backed by a shared `httpx.Client`.

    Every `httpx.HTTPError` (connect, read, timeout, protocol) is handed back
    as the transfer error, unmodified. Status codes are never raised on.

    Pass your own client to control pooling, proxies, TLS or to mount an
    `httpx.MockTransport` in tests. A client passed in is not closed by
    `close()`.
    """

    def __init__(self, config: Optional[TransportConfig] = None, *, client: Optional[httpx.Client] = None):
        super().__init__(config)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(self.config.timeout_sec),
            follow_redirects=True,
            headers={"User-Agent": self.config.user_agent},
        )

    @property
    def client(self) -> httpx.Client:
        return self._client

    def perform(self, request: "PreparedRequest") -> TransferOutcome:
        kwargs: dict = {"headers": dict(request.headers)}
        if request.body is not None:
            kwargs["content"] = request.body
        if request.timeout is not None:
            kwargs["timeout"] = request.timeout

        try:
            resp = self._client.request(request.method, request.url, **kwargs)
        except httpx.HTTPError as e:
            return None, None, e

        meta = HTTPResponse(
            url=str(resp.url),
            status_code=resp.status_code,
            headers={k: v for k, v in resp.headers.items()},
        )
        return resp.content, meta, None

    def close(self, wait: bool = True) -> None:
        super().close(wait=wait)
        if self._owns_client:
            self._client.close()
