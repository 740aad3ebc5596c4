from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class HTTPHeader:
    """A single name/value pair of an HTTP header field.

    Header names are case insensitive (RFC 9110). A `None` value removes the
    field when the header is applied to a request.

    Example:
        request.set_header(HTTPHeader.content_type("application/json"))
    """

    name: str
    value: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError("header name must be a string")
        name = self.name.strip()
        if not name:
            raise ValueError("header name must be non-empty")
        object.__setattr__(self, "name", name)
        if self.value is not None and not isinstance(self.value, str):
            object.__setattr__(self, "value", str(self.value))

    @property
    def key(self) -> str:
        """Case-folded name used for comparisons."""
        return self.name.lower()

    @classmethod
    def content_type(cls, value: str) -> "HTTPHeader":
        return cls("Content-Type", value)

    @classmethod
    def accept(cls, value: str) -> "HTTPHeader":
        return cls("Accept", value)

    @classmethod
    def authorization(cls, value: str) -> "HTTPHeader":
        return cls("Authorization", value)

    @classmethod
    def bearer(cls, token: str) -> "HTTPHeader":
        return cls("Authorization", f"Bearer {token}")

    @classmethod
    def user_agent(cls, value: str) -> "HTTPHeader":
        return cls("User-Agent", value)
