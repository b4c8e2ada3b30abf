"""JSON text decoding and encoding for the handler."""
import json
from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict


class ParsedSingle(BaseModel):
    """The payload decoded to one request value."""

    model_config = ConfigDict(frozen=True)

    message: Any


class ParsedBatch(BaseModel):
    """The payload decoded to a non-empty list of request values."""

    model_config = ConfigDict(frozen=True)

    messages: List[Any]


class Malformed(BaseModel):
    """The payload could not be turned into a request or a batch."""

    model_config = ConfigDict(frozen=True)

    reason: str


DecodeResult = Union[ParsedSingle, ParsedBatch, Malformed]


def decode(raw: Union[str, bytes, bytearray, None]) -> DecodeResult:
    """Decode raw request text.

    Empty input, invalid JSON, nesting too deep to decode and values with no
    content (``null``, ``false``, ``0``, ``""``, ``[]``) are all reported as
    Malformed.
    """
    if raw is None:
        return Malformed(reason="empty request")
    if not isinstance(raw, (str, bytes, bytearray)):
        return Malformed(reason=f"unsupported payload type: {type(raw).__name__}")
    if not raw.strip():
        return Malformed(reason="empty request")

    try:
        value = json.loads(raw)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        return Malformed(reason=str(e))
    except RecursionError:
        return Malformed(reason="request nested too deeply")

    if isinstance(value, list):
        if not value:
            return Malformed(reason="empty batch")
        return ParsedBatch(messages=value)
    if not isinstance(value, dict) and not value:
        return Malformed(reason="empty request")
    return ParsedSingle(message=value)


def encode(value: Any) -> str:
    # NaN and Infinity are not JSON; they raise ValueError instead
    return json.dumps(value, ensure_ascii=False, allow_nan=False)
