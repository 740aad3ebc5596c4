"""networker: HTTP requests with classified, typed results.

Security notes:
- Treat every response body as untrusted input.
- Avoid printing or logging raw body bytes.
"""

from .config import TransportConfig, __version__
from .decoding import DecoderConfig, JSONReadingOptions, decode_json, decode_model
from .errors import (
    EmptyDataError,
    EmptyPathError,
    ErrorKind,
    InvalidImageDataError,
    InvalidPathError,
    NetworkerError,
    UnknownResponseError,
    UnsuccessfulHTTPStatusCodeError,
    as_networker_error,
)
from .handler import DataTaskHandler, classify
from .headers import HTTPHeader
from .imaging import HAS_IMAGE_CODEC
from .request import HTTPRequest, PreparedRequest, parse_url
from .responses import (
    DataResponse,
    DecodableResponse,
    Headers,
    HTTPResponse,
    JSONResponse,
    ResponseMetadata,
    URLResponse,
)
from .result import Failure, Result, Success, capture
from .transport import HTTPXTransport, Transport, URLLibTransport, default_transport

__all__ = [
    "__version__",
    "TransportConfig",
    "DecoderConfig",
    "JSONReadingOptions",
    "decode_json",
    "decode_model",
    "ErrorKind",
    "NetworkerError",
    "EmptyPathError",
    "InvalidPathError",
    "EmptyDataError",
    "UnknownResponseError",
    "UnsuccessfulHTTPStatusCodeError",
    "InvalidImageDataError",
    "as_networker_error",
    "DataTaskHandler",
    "classify",
    "HTTPHeader",
    "HAS_IMAGE_CODEC",
    "HTTPRequest",
    "PreparedRequest",
    "parse_url",
    "DataResponse",
    "DecodableResponse",
    "Headers",
    "HTTPResponse",
    "JSONResponse",
    "ResponseMetadata",
    "URLResponse",
    "Success",
    "Failure",
    "Result",
    "capture",
    "Transport",
    "URLLibTransport",
    "HTTPXTransport",
    "default_transport",
]

if HAS_IMAGE_CODEC:
    from .imaging import decode_image
    from .responses import ImageResponse

    __all__ += ["ImageResponse", "decode_image"]
