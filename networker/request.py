"""Prepared requests and the HTTPRequest wrapper that dispatches them.

Example:

    request = HTTPRequest.from_path("https://example.com/products/1")
    request.fetch_decoded(Product, lambda result: print(result.success))

Each fetch makes exactly one transport call and returns a handle (a
`concurrent.futures.Future`) right away. The handle is done only once the
completion has run, wherever it runs, and carries any exception the completion
raised. Cancelling it cancels the transfer. The completion receives a
`Success` or `Failure`; it never raises for network or status problems.

Security notes:
- Response bodies are untrusted. Nothing in this module logs them.
"""

from __future__ import annotations

import logging
import string
from concurrent.futures import Future, InvalidStateError
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Iterable, Optional, Type, TypeVar
from urllib.parse import urlsplit

from networker.decoding import DecoderConfig, JSONReadingOptions
from networker.errors import EmptyPathError, InvalidPathError, NetworkerError
from networker.handler import DataTaskHandler
from networker.headers import HTTPHeader
from networker.imaging import HAS_IMAGE_CODEC
from networker.responses import DataResponse, DecodableResponse, JSONResponse, ResponseMetadata
from networker.result import Failure, Result, Success
from networker.transport import Transport, default_transport

if HAS_IMAGE_CODEC:
    from networker.responses import ImageResponse

log = logging.getLogger("networker.request")

T = TypeVar("T")

# Where completions run when the caller opts in: a concurrent.futures
# Executor (e.g. a single-thread "main" executor) or an asyncio event loop.
CompletionTarget = Any

Completion = Callable[["Result[DataResponse, BaseException]"], None]
JSONCompletion = Callable[["Result[JSONResponse, BaseException]"], None]
DecodableCompletion = Callable[["Result[DecodableResponse[Any], BaseException]"], None]
ImageCompletion = Callable[["Result[ImageResponse, BaseException]"], None]

_NON_URL_CHARS = frozenset(string.whitespace) | frozenset(chr(c) for c in range(0x20)) | {"\x7f"}
_NETLOC_SCHEMES = frozenset({"http", "https", "ftp", "ws", "wss"})


def parse_url(path: str) -> Optional[str]:
    """Return `path` if it is a usable absolute URL, else None.

    Rejects whitespace and control characters, a missing scheme, a missing
    host for network schemes, and malformed ports or IPv6 literals.
    """

    if not path or any(ch in _NON_URL_CHARS for ch in path):
        return None
    try:
        parts = urlsplit(path)
        parts.port  # raises ValueError on a malformed port
    except ValueError:
        return None

    scheme = parts.scheme.lower()
    if not scheme:
        return None
    if scheme in _NETLOC_SCHEMES and not parts.hostname:
        return None
    if not (parts.netloc or parts.path):
        return None
    return path


@dataclass
class PreparedRequest:
    """Method, URL, headers and body, ready to hand to a transport.

    Header names are case insensitive: setting a header replaces any field
    with the same name regardless of case (last write wins).
    `timeout` is passed to the transport untouched.
    """

    url: str
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        initial = self.headers
        self.headers = {}
        for name, value in initial.items():
            self.set_header(HTTPHeader(name, value))

    def set_header(self, header: HTTPHeader) -> None:
        for existing in [k for k in self.headers if k.lower() == header.key]:
            del self.headers[existing]
        if header.value is not None:
            self.headers[header.name] = header.value

    def set_headers(self, headers: Iterable[HTTPHeader]) -> None:
        for header in headers:
            self.set_header(header)

    def header(self, name: str) -> Optional[str]:
        key = name.lower()
        for k, v in self.headers.items():
            if k.lower() == key:
                return v
        return None

    def copy(self) -> "PreparedRequest":
        return replace(self, headers=dict(self.headers))


class HTTPRequest:
    """A prepared request bound to the transport that will send it.

    `transport` defaults to `default_transport()`; inject any object with a
    matching `dispatch` to substitute a test double. `executor` is the
    default target for completions (see `fetch_bytes`).
    """

    def __init__(
        self,
        request: PreparedRequest,
        transport: Optional[Transport] = None,
        *,
        executor: Optional[CompletionTarget] = None,
    ):
        self._request = request.copy()
        self.transport = transport if transport is not None else default_transport()
        self.executor = executor

    @property
    def request(self) -> PreparedRequest:
        """A copy of the request this wrapper sends; it cannot be changed in place."""
        return self._request.copy()

    @classmethod
    def from_url(
        cls,
        url: str,
        transport: Optional[Transport] = None,
        *,
        executor: Optional[CompletionTarget] = None,
    ) -> "HTTPRequest":
        """GET request for an already valid URL."""
        return cls(PreparedRequest(url=url), transport, executor=executor)

    @classmethod
    def from_path(
        cls,
        path: str,
        transport: Optional[Transport] = None,
        *,
        executor: Optional[CompletionTarget] = None,
    ) -> "HTTPRequest":
        """GET request for a URL string.

        Raises EmptyPathError for an empty or blank path and
        InvalidPathError (carrying the stripped path) when it does not parse.
        """

        path = path.strip()
        if not path:
            raise EmptyPathError()
        url = parse_url(path)
        if url is None:
            raise InvalidPathError(path)
        return cls.from_url(url, transport, executor=executor)

    @classmethod
    def create(
        cls,
        path: str,
        transport: Optional[Transport] = None,
        *,
        executor: Optional[CompletionTarget] = None,
    ) -> "Result[HTTPRequest, NetworkerError]":
        """Like `from_path`, but returns the error instead of raising it."""
        try:
            return Success(cls.from_path(path, transport, executor=executor))
        except NetworkerError as e:
            return Failure(e)

    def fetch_bytes(self, completion: Completion, *, executor: Optional[CompletionTarget] = None) -> Future:
        """Send the request and report the classified body bytes.

        The completion runs on the transport's thread, or on `executor`
        (falling back to the wrapper's default executor) when one is given.
        """
        return self._fetch(None, completion, executor)

    def fetch_json(
        self,
        completion: JSONCompletion,
        *,
        options: JSONReadingOptions = JSONReadingOptions(),
        executor: Optional[CompletionTarget] = None,
    ) -> Future:
        """Send the request and parse a successful body as JSON."""
        return self._fetch(lambda dr: dr.json(options), completion, executor)

    def fetch_decoded(
        self,
        schema: Type[T],
        completion: DecodableCompletion,
        *,
        config: DecoderConfig = DecoderConfig(),
        executor: Optional[CompletionTarget] = None,
    ) -> Future:
        """Send the request and decode a successful JSON body into `schema`."""
        return self._fetch(lambda dr: dr.decoding(schema, config), completion, executor)

    if HAS_IMAGE_CODEC:

        def fetch_image(self, completion: ImageCompletion, *, executor: Optional[CompletionTarget] = None) -> Future:
            """Send the request and decode a successful body as an image."""
            return self._fetch(lambda dr: dr.image(), completion, executor)

    def _fetch(
        self,
        transform: Optional[Callable[[DataResponse], "Result[Any, Exception]"]],
        completion: Callable[[Any], None],
        executor: Optional[CompletionTarget],
    ) -> Future:
        target = executor if executor is not None else self.executor
        handle: Future = Future()

        def finish(outcome: "Result[DataResponse, BaseException]") -> None:
            if transform is not None:
                outcome = outcome.flat_map(transform)
            delivered = _deliver(completion, outcome, target)
            delivered.add_done_callback(lambda f: _settle(handle, f))

        def on_complete(
            data: Optional[bytes],
            response: Optional[ResponseMetadata],
            error: Optional[BaseException],
        ) -> None:
            DataTaskHandler(data=data, response=response, error=error, completion=finish).execute()

        log.debug(
            "request_dispatch",
            extra={"method": self._request.method, "url": self._request.url},
        )
        transfer = self.transport.dispatch(self._request.copy(), on_complete)

        def on_transfer_done(f: Future) -> None:
            # A transport that fails without calling back still settles the handle.
            if not f.cancelled() and f.exception() is not None:
                _settle(handle, f)

        def on_handle_done(f: Future) -> None:
            if f.cancelled():
                transfer.cancel()

        transfer.add_done_callback(on_transfer_done)
        handle.add_done_callback(on_handle_done)
        return handle

    def __repr__(self) -> str:
        return f"HTTPRequest(method={self._request.method!r}, url={self._request.url!r})"


def _deliver(completion: Callable[[Any], None], outcome: Any, target: Optional[CompletionTarget]) -> Future:
    if target is None:
        done: Future = Future()
        _run_completion(done, completion, outcome)
        return done
    if hasattr(target, "call_soon_threadsafe"):
        done = Future()
        target.call_soon_threadsafe(_run_completion, done, completion, outcome)
        return done
    return target.submit(completion, outcome)


def _run_completion(done: Future, completion: Callable[[Any], None], outcome: Any) -> None:
    if not done.set_running_or_notify_cancel():
        return
    try:
        completion(outcome)
    except Exception as e:
        done.set_exception(e)
    else:
        done.set_result(None)


def _settle(handle: Future, source: Future) -> None:
    """Copy the result of `source` onto `handle` unless it is already done."""

    if source.cancelled():
        handle.cancel()
        return
    exc = source.exception()
    if exc is not None:
        log.error("fetch_failed", exc_info=exc, extra={"error_type": type(exc).__name__})
    try:
        if exc is not None:
            handle.set_exception(exc)
        else:
            handle.set_result(None)
    except InvalidStateError:
        # Cancelled by the caller, or already settled by the other path.
        pass
