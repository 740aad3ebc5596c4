"""Body decoding adapters.

Each adapter turns raw body bytes into a Result. Decoder errors are returned
as-is so callers see the native `json.JSONDecodeError` or
`pydantic.ValidationError` with their positions and messages intact.

Security notes:
- Bodies are untrusted. Decoding never evaluates code; pydantic validation is
  the only place a schema is applied.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

from pydantic import TypeAdapter

from networker.result import Failure, Result, Success, capture

T = TypeVar("T")

# Schemas built per process are usually few; the bound keeps callers that
# generate types on the fly from growing the cache without limit.
ADAPTER_CACHE_SIZE = 256


@dataclass(frozen=True, slots=True)
class JSONReadingOptions:
    """Options used when building Python objects from a JSON body.

    allow_fragments: accept a top-level value that is not an object or array
    (e.g. `"text"` or `42`). Off by default.
    """

    allow_fragments: bool = False
    parse_float: Optional[Callable[[str], Any]] = None
    parse_int: Optional[Callable[[str], Any]] = None
    parse_constant: Optional[Callable[[str], Any]] = None
    object_pairs_hook: Optional[Callable[[list], Any]] = None

    def loads_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        for name in ("parse_float", "parse_int", "parse_constant", "object_pairs_hook"):
            value = getattr(self, name)
            if value is not None:
                kwargs[name] = value
        return kwargs


@dataclass(frozen=True, slots=True)
class DecoderConfig:
    """Settings handed to pydantic when validating a decoded body.

    strict: None keeps the schema's own strictness.
    context: passed to validators as `info.context`.
    """

    strict: Optional[bool] = None
    context: Optional[Mapping[str, Any]] = None


def _text(data: bytes) -> str:
    # Same encoding detection json.loads applies to bytes (BOMs, UTF-16/32).
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode(json.detect_encoding(data), "surrogatepass")
    return str(data)


def decode_json(data: bytes, options: JSONReadingOptions = JSONReadingOptions()) -> "Result[Any, Exception]":
    """Parse `data` as a JSON document."""

    try:
        tree = json.loads(data, **options.loads_kwargs())
        if options.allow_fragments:
            return Success(tree)
        doc = _text(data)
    except (ValueError, TypeError) as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueError.
        return Failure(e)

    # Judged on the document, not on `tree`: hooks may return any type.
    body = doc.lstrip("\ufeff \t\n\r")
    if body[:1] not in ("{", "["):
        return Failure(
            json.JSONDecodeError(
                "JSON text did not start with array or object and fragments are not allowed",
                doc,
                len(doc) - len(body),
            )
        )
    return Success(tree)


@lru_cache(maxsize=ADAPTER_CACHE_SIZE)
def _cached_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def _adapter(schema: Any) -> TypeAdapter:
    # TypeAdapter construction builds a core schema; reuse it per type.
    try:
        return _cached_adapter(schema)
    except TypeError:
        # Unhashable schema (e.g. some Annotated metadata): build uncached.
        return TypeAdapter(schema)


def decode_model(
    data: bytes, schema: Type[T], config: DecoderConfig = DecoderConfig()
) -> "Result[T, Exception]":
    """Decode `data` into an instance of `schema`.

    `schema` is anything pydantic can validate: BaseModel subclasses,
    dataclasses, TypedDicts, or plain/parametrized builtins like `list[int]`.
    """

    adapter = capture(_adapter, schema)
    if adapter.is_failure:
        return adapter

    return capture(
        adapter.value.validate_json,
        data,
        strict=config.strict,
        context=dict(config.context) if config.context is not None else None,
    )
