"""
Value codec: arbitrary runtime values -> JSON-safe tagged representation.

A SerializedValue is one of:

    None | bool | int | float | str
    | List[SerializedValue]
    | Dict[str, SerializedValue]        (insertion order preserved)
    | AsyncResult                       (three-state computation wrapper)
    | Opaque                            (one-way textual description)

The primitive and collection cases survive a trip through text unchanged.
AsyncResult is written as a tagged JSON object and read back as an
AsyncResult. Opaque is written as its description string and comes back
as a plain str, so it cannot be restored.

encode() is total: it never raises, whatever the host hands it.
"""

import asyncio
from collections.abc import Mapping
import concurrent.futures
from dataclasses import dataclass
from enum import Enum
import json
import logging
import math
from typing import Any, Dict, List, Optional, Union

from statelens.config import DEFAULT_MAX_ENCODE_DEPTH
from statelens.exceptions import DecodeFailure

logger = logging.getLogger(__name__)

ASYNC_TYPE_TAG = "AsyncValue"


@dataclass(frozen=True)
class AsyncResult:
    """Encoded state of a value/error/pending computation wrapper."""
    has_value: bool
    has_error: bool
    is_loading: bool
    value: Any = None  # SerializedValue when has_value
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Export to JSON-serializable dict."""
        return {
            'type': ASYNC_TYPE_TAG,
            'hasValue': self.has_value,
            'hasError': self.has_error,
            'isLoading': self.is_loading,
            'value': decode(self.value) if self.has_value else None,
            'error': self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AsyncResult':
        """Import from dict produced by to_dict()."""
        return cls(
            has_value=bool(data['hasValue']),
            has_error=bool(data['hasError']),
            is_loading=bool(data['isLoading']),
            value=from_jsonable(data.get('value')),
            error=data.get('error'),
        )


@dataclass(frozen=True)
class Opaque:
    """Lossy stand-in for a value the codec has no structural case for."""
    description: str

    def __str__(self) -> str:
        return self.description


SerializedValue = Union[None, bool, int, float, str, List[Any], Dict[str, Any], AsyncResult, Opaque]

# Kind tags in the order summaries list them
KIND_TAGS = ('null', 'bool', 'int', 'float', 'str', 'list', 'dict', 'async', 'opaque')


def describe(value: Any) -> str:
    """str(value), or a placeholder if the object's __str__ raises."""
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def encode(value: Any, max_depth: int = DEFAULT_MAX_ENCODE_DEPTH) -> SerializedValue:
    """Convert an arbitrary runtime value into a SerializedValue.

    Never raises. Collections nested deeper than max_depth are cut off with
    an Opaque marker, which also stops self-referencing structures.

    Args:
        value: Any object the host graph produced
        max_depth: Max container nesting to recurse into

    Returns:
        The encoded value
    """
    try:
        return _encode(value, 0, max_depth)
    except Exception as e:
        logger.debug(f"Encoding {type(value).__name__} failed, falling back to opaque: {e}")
        return Opaque(describe(value))


def _encode(value: Any, depth: int, max_depth: int) -> SerializedValue:
    if depth > max_depth:
        return Opaque(f"<max depth {max_depth} exceeded>")

    if value is None or type(value) in (bool, int, float, str):
        return value

    # Enum members print as Class.NAME rather than collapsing to their raw value
    if isinstance(value, Enum):
        return Opaque(describe(value))

    # int/float/str subclasses
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, str):
        return str(value)

    async_result = _encode_async(value, depth, max_depth)
    if async_result is not None:
        return async_result

    if isinstance(value, (list, tuple)):
        return [_encode(item, depth + 1, max_depth) for item in value]

    if isinstance(value, Mapping):
        return {str(k): _encode(v, depth + 1, max_depth) for k, v in value.items()}

    return Opaque(describe(value))


def _encode_async(value: Any, depth: int, max_depth: int) -> Optional[AsyncResult]:
    """Encode a recognized three-state wrapper, or return None if value isn't one."""
    if isinstance(value, (asyncio.Future, concurrent.futures.Future)):
        if not value.done():
            return AsyncResult(has_value=False, has_error=False, is_loading=True)
        if value.cancelled():
            return AsyncResult(has_value=False, has_error=True, is_loading=False, error="cancelled")
        exc = value.exception()
        if exc is not None:
            return AsyncResult(has_value=False, has_error=True, is_loading=False, error=describe(exc))
        return AsyncResult(
            has_value=True, has_error=False, is_loading=False,
            value=_encode(value.result(), depth + 1, max_depth),
        )

    if not all(hasattr(value, attr) for attr in ('has_value', 'has_error', 'is_loading')):
        return None

    has_value = bool(value.has_value)
    has_error = bool(value.has_error)
    return AsyncResult(
        has_value=has_value,
        has_error=has_error,
        is_loading=bool(value.is_loading),
        value=_encode(value.value, depth + 1, max_depth) if has_value else None,
        error=describe(value.error) if has_error else None,
    )


def value_kind(serialized: SerializedValue) -> str:
    """Kind tag of an encoded value (one of KIND_TAGS)."""
    if serialized is None:
        return 'null'
    if isinstance(serialized, bool):
        return 'bool'
    if isinstance(serialized, int):
        return 'int'
    if isinstance(serialized, float):
        return 'float'
    if isinstance(serialized, str):
        return 'str'
    if isinstance(serialized, list):
        return 'list'
    if isinstance(serialized, dict):
        return 'dict'
    if isinstance(serialized, AsyncResult):
        return 'async'
    return 'opaque'


def decode(serialized: SerializedValue) -> Any:
    """Convert a SerializedValue back into plain JSON-compatible Python data.

    Inverse of encode() on the lossless subset: decode(encode(v)) == v for
    primitives and nested lists / string-keyed dicts. AsyncResult comes back
    as its tagged dict and Opaque as its description.
    """
    if isinstance(serialized, list):
        return [decode(item) for item in serialized]
    if isinstance(serialized, dict):
        return {k: decode(v) for k, v in serialized.items()}
    if isinstance(serialized, AsyncResult):
        return serialized.to_dict()
    if isinstance(serialized, Opaque):
        return serialized.description
    return serialized


def from_jsonable(data: Any) -> SerializedValue:
    """Rebuild a SerializedValue from decoded JSON data.

    Tagged AsyncValue objects become AsyncResult again; everything else is
    already a SerializedValue.
    """
    if isinstance(data, list):
        return [from_jsonable(item) for item in data]
    if isinstance(data, dict):
        if data.get('type') == ASYNC_TYPE_TAG and {'hasValue', 'hasError', 'isLoading'} <= data.keys():
            return AsyncResult.from_dict(data)
        return {str(k): from_jsonable(v) for k, v in data.items()}
    return data


def dumps(serialized: SerializedValue, indent: Optional[int] = None) -> str:
    """Encode a SerializedValue as JSON text."""
    return json.dumps(decode(serialized), indent=indent)


def loads(text: str) -> SerializedValue:
    """Parse JSON text back into a SerializedValue.

    Raises:
        DecodeFailure: If text is not valid JSON
    """
    try:
        return from_jsonable(json.loads(text))
    except (TypeError, ValueError, RecursionError) as e:
        raise DecodeFailure(f"Malformed JSON: {e}") from e


def is_lossless(serialized: SerializedValue) -> bool:
    """Whether a value can be written back through the editor unchanged.

    False if it contains an AsyncResult, an Opaque, or a non-finite float
    (NaN and infinities are not valid JSON).
    """
    if isinstance(serialized, (AsyncResult, Opaque)):
        return False
    if isinstance(serialized, float):
        return math.isfinite(serialized)
    if isinstance(serialized, list):
        return all(is_lossless(item) for item in serialized)
    if isinstance(serialized, dict):
        return all(is_lossless(v) for v in serialized.values())
    return True
