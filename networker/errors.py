from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from networker.responses import DataResponse


class ErrorKind(str, Enum):
    EMPTY_PATH = "emptyPath"
    INVALID_PATH = "invalidPath"
    EMPTY_DATA = "emptyData"
    UNKNOWN_RESPONSE = "unknownResponse"
    UNSUCCESSFUL_HTTP_STATUS_CODE = "unsuccessfulHTTPStatusCode"
    INVALID_IMAGE_DATA = "invalidImageData"


class NetworkerError(Exception):
    """
    Base exception for failures raised by networker itself.

    Transport errors (DNS, TLS, timeouts, cancellation) and decoder errors are
    never wrapped in this type; they reach callers unmodified.

    Two errors are equal when they have the same class and payload.
    """

    kind: ErrorKind

    @property
    def description(self) -> str:
        return str(self)

    @property
    def unsuccessful_status_code_data(self) -> Optional["DataResponse"]:
        """The envelope behind an unsuccessful status code, else None."""
        return None

    def __eq__(self, other: object) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.args == other.args  # type: ignore[union-attr]

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class EmptyPathError(NetworkerError):
    """
    Raised when a request is built from an empty or all-whitespace path.
    """

    kind = ErrorKind.EMPTY_PATH

    def __str__(self) -> str:
        return "String path is empty."


class InvalidPathError(NetworkerError):
    """
    Raised when a path string does not parse into an absolute URL.
    """

    kind = ErrorKind.INVALID_PATH

    def __init__(self, path: str):
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"Invalid path for URL: {self.path}."


class EmptyDataError(NetworkerError):
    """
    The transport finished without an error but delivered no body.
    """

    kind = ErrorKind.EMPTY_DATA

    def __str__(self) -> str:
        return "There is no data in the server response."


class UnknownResponseError(NetworkerError):
    """
    The transport result is not an HTTP response.
    """

    kind = ErrorKind.UNKNOWN_RESPONSE

    def __str__(self) -> str:
        return "Server response was not recognized."


class UnsuccessfulHTTPStatusCodeError(NetworkerError):
    """
    The server answered with a status code outside 200-299.

    The full envelope is kept so callers can read the error body.
    """

    kind = ErrorKind.UNSUCCESSFUL_HTTP_STATUS_CODE

    def __init__(self, data_response: "DataResponse"):
        super().__init__(data_response)
        self.data_response = data_response

    @property
    def unsuccessful_status_code_data(self) -> "DataResponse":
        return self.data_response

    @property
    def status_code(self) -> int:
        return self.data_response.response.status_code

    def __str__(self) -> str:
        return f"Unsuccessful HTTP status code: {self.data_response.response.localized_status_code}."


class InvalidImageDataError(NetworkerError):
    """
    The body could not be decoded as an image.
    """

    kind = ErrorKind.INVALID_IMAGE_DATA

    def __str__(self) -> str:
        return "Unsupported data for image to initialize."


def as_networker_error(error: Any) -> Optional[NetworkerError]:
    """Return `error` if it is one of networker's own errors, else None."""
    return error if isinstance(error, NetworkerError) else None
