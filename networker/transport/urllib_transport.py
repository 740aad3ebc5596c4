from __future__ import annotations

import ssl
from typing import TYPE_CHECKING, Any, Optional
from urllib.error import HTTPError
from urllib.parse import urlsplit
from urllib.request import Request, urlopen

from networker.config import TransportConfig
from networker.responses import HTTPResponse, ResponseMetadata, URLResponse
from networker.transport.base import ThreadedTransport, TransferOutcome

if TYPE_CHECKING:
    from networker.request import PreparedRequest

_HTTP_SCHEMES = frozenset({"http", "https"})


class URLLibTransport(ThreadedTransport):
    """Stdlib-only transport built on `urllib.request`.

    - 4xx/5xx answers are delivered as HTTP responses, not errors.
    - Network, DNS, TLS and timeout failures are handed back unmodified.
    - `file:` and `data:` loads report a non-HTTP URLResponse.

    Security notes:
    - Uses the default SSL context (verification ON).
    - Redirects are followed by urllib; the reported url is the final one.
    """

    def __init__(self, config: Optional[TransportConfig] = None, *, ssl_context: Optional[ssl.SSLContext] = None):
        super().__init__(config)
        self._ssl_context = ssl_context or ssl.create_default_context()

    def perform(self, request: "PreparedRequest") -> TransferOutcome:
        req = Request(url=request.url, data=request.body, method=request.method)
        for name, value in request.headers.items():
            req.add_header(name, value)
        if not req.has_header("User-agent"):
            req.add_header("User-Agent", self.config.user_agent)

        timeout = request.timeout if request.timeout is not None else self.config.timeout_sec
        kwargs: dict = {"context": self._ssl_context}
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            with urlopen(req, **kwargs) as resp:
                body = resp.read()
                return body, _metadata(resp, request.url), None
        except HTTPError as e:
            try:
                body = e.read() if e.fp is not None else b""
            finally:
                e.close()
            headers = {k: v for k, v in (e.headers or {}).items()}
            meta = HTTPResponse(url=e.geturl() or request.url, status_code=int(e.code), headers=headers)
            return body, meta, None
        except (OSError, ValueError) as e:
            # URLError, socket timeouts and ssl errors are OSError; a malformed
            # url is ValueError.
            return None, None, e


def _metadata(resp: Any, requested_url: str) -> ResponseMetadata:
    url = resp.geturl() or requested_url
    headers = {k: v for k, v in resp.headers.items()} if resp.headers is not None else {}
    status = getattr(resp, "status", None)

    if urlsplit(url).scheme.lower() in _HTTP_SCHEMES and status is not None:
        return HTTPResponse(url=url, status_code=int(status), headers=headers)

    ct = headers.get("Content-type") or headers.get("Content-Type")
    mime = ct.split(";", 1)[0].strip().lower() if ct else None
    return URLResponse(url=url, mime_type=mime)
