"""Response metadata and the immutable envelopes handed to completions.

Security notes:
- Treat `data` as untrusted. Nothing here logs or prints body bytes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Generic, Iterator, Mapping, Optional, TypeVar, Union

from networker.decoding import DecoderConfig, JSONReadingOptions, decode_json, decode_model
from networker.imaging import HAS_IMAGE_CODEC
from networker.result import Result

if HAS_IMAGE_CODEC:
    from networker.imaging import decode_image

T = TypeVar("T")

_STATUS_CLASS_PHRASES = {
    1: "informational",
    2: "success",
    3: "redirected",
    4: "client error",
    5: "server error",
}


def reason_phrase(status_code: int) -> str:
    """Standard reason phrase for a status code.

    Unregistered codes fall back to the phrase of their class (e.g. 599 ->
    "server error"); codes outside 100-599 are "unknown".
    """

    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return _STATUS_CLASS_PHRASES.get(status_code // 100, "unknown")


class Headers(Mapping[str, str]):
    """Read-only, case-insensitive view of response header fields."""

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping[str, str]] = None):
        # lower(name) -> (original name, value)
        self._items: Dict[str, tuple] = {}
        for k, v in (items or {}).items():
            self._items[str(k).lower()] = (str(k), str(v))

    def __getitem__(self, name: str) -> str:
        return self._items[name.lower()][1]

    def __iter__(self) -> Iterator[str]:
        return (orig for orig, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return {k: v for k, (_, v) in self._items.items()} == {
            str(k).lower(): v for k, v in other.items()
        }

    def __hash__(self) -> int:
        return hash(frozenset((k, v) for k, (_, v) in self._items.items()))

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"


@dataclass(frozen=True, slots=True)
class HTTPResponse:
    """Metadata of a response to an HTTP(S) request."""

    url: str
    status_code: int
    headers: Headers = field(default_factory=Headers, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))
        object.__setattr__(self, "status_code", int(self.status_code))

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code <= 299

    @property
    def mime_type(self) -> Optional[str]:
        ct = self.headers.get("Content-Type")
        if not ct:
            return None
        return ct.split(";", 1)[0].strip().lower() or None

    @property
    def localized_status_code(self) -> str:
        """Status code with its reason phrase, e.g. "404 - Not Found"."""
        return f"{self.status_code} - {reason_phrase(self.status_code)}"


@dataclass(frozen=True, slots=True)
class URLResponse:
    """Metadata of a non-HTTP result (e.g. a `file:` or `data:` URL load)."""

    url: str
    mime_type: Optional[str] = None


# Closed set of metadata a transport may report.
ResponseMetadata = Union[HTTPResponse, URLResponse]


@dataclass(frozen=True, slots=True)
class DataResponse:
    """Raw body bytes paired with the HTTP metadata they arrived with.

    Equality is structural over the bytes, status code and url.
    """

    data: bytes
    response: HTTPResponse

    def __post_init__(self) -> None:
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def text(self) -> str:
        """Body decoded as UTF-8; invalid sequences are replaced."""
        return self.data.decode("utf-8", errors="replace")

    def json(self, options: JSONReadingOptions = JSONReadingOptions()) -> "Result[JSONResponse, Exception]":
        return decode_json(self.data, options).map(
            lambda tree: JSONResponse(json=tree, response=self.response)
        )

    def decoding(
        self, schema: Any, config: DecoderConfig = DecoderConfig()
    ) -> "Result[DecodableResponse[Any], Exception]":
        return decode_model(self.data, schema, config).map(
            lambda decoded: DecodableResponse(decoded=decoded, response=self.response)
        )

    if HAS_IMAGE_CODEC:

        def image(self) -> "Result[ImageResponse, Exception]":
            return decode_image(self.data).map(
                lambda image: ImageResponse(image=image, response=self.response)
            )


@dataclass(frozen=True, slots=True)
class JSONResponse:
    """Parsed JSON tree paired with the HTTP metadata."""

    json: Any
    response: HTTPResponse


@dataclass(frozen=True, slots=True)
class DecodableResponse(Generic[T]):
    """Decoded value paired with the HTTP metadata."""

    decoded: T
    response: HTTPResponse


if HAS_IMAGE_CODEC:

    @dataclass(frozen=True, slots=True)
    class ImageResponse:
        """Decoded image paired with the HTTP metadata."""

        image: Any
        response: HTTPResponse
