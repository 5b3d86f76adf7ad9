"""
JSON encoding of fetched row collections.

Output mirrors the classic `json_encode` conventions: compact separators,
escaped slashes and non-ASCII characters, and integral floats written
without a fractional part unless flags say otherwise.
"""
import datetime
import json
import math
import re
from collections.abc import Iterable, Mapping
from decimal import Decimal
from enum import IntFlag
from functools import reduce
from operator import or_
from typing import Any

from querysession.exceptions import EncodingError

__all__ = ['JsonFlag', 'DEFAULT_DEPTH', 'encode_rows', 'nesting_depth']

DEFAULT_DEPTH = 512

_NUMERIC = re.compile(r'^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$')
_INTEGER = re.compile(r'^\s*[+-]?\d+\s*$')
_INT64_MIN = -2 ** 63
_INT64_MAX = 2 ** 63 - 1


class JsonFlag(IntFlag):
    NONE = 0
    PRETTY_PRINT = 1
    UNESCAPED_SLASHES = 2
    UNESCAPED_UNICODE = 4
    PRESERVE_ZERO_FRACTION = 8
    NUMERIC_CHECK = 16
    FORCE_OBJECT = 32


def _coerce_flags(flags: JsonFlag | int | Iterable[JsonFlag]) -> JsonFlag:
    if isinstance(flags, int):
        return JsonFlag(flags)
    return reduce(or_, flags, JsonFlag.NONE)


def _format_timedelta(value: datetime.timedelta) -> str:
    """Render a duration as SQL TIME text, e.g. '-01:30:00'."""
    seconds = int(value.total_seconds())
    sign = '-' if seconds < 0 else ''
    hours, rest = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(rest, 60)
    return f'{sign}{hours:02d}:{minutes:02d}:{seconds:02d}'


def _normalize(value: Any, flags: JsonFlag) -> Any:
    """Convert a fetched value into plain JSON types."""
    match value:
        case None | bool():
            return value
        case int():
            return value
        case float():
            if not math.isfinite(value):
                raise EncodingError('Inf and NaN cannot be JSON encoded')
            if (value.is_integer() and _INT64_MIN <= value <= _INT64_MAX
                    and not flags & JsonFlag.PRESERVE_ZERO_FRACTION):
                return int(value)
            return value
        case str():
            if flags & JsonFlag.NUMERIC_CHECK and _NUMERIC.match(value):
                number = int(value) if _INTEGER.match(value) else float(value)
                # integers beyond 64 bits are written as floats
                if isinstance(number, int) and not _INT64_MIN <= number <= _INT64_MAX:
                    number = float(number)
                return _normalize(number, flags)
            return value
        case Decimal():
            return _normalize(str(value), flags)
        case datetime.date() | datetime.time():
            return str(value)
        case datetime.timedelta():
            return _format_timedelta(value)
        case bytes() | bytearray() | memoryview():
            try:
                return bytes(value).decode('utf-8')
            except UnicodeDecodeError as e:
                raise EncodingError('Malformed UTF-8 characters, possibly incorrectly encoded') from e
        case Mapping():
            return {str(k): _normalize(v, flags) for k, v in value.items()}
        case list() | tuple():
            items = [_normalize(v, flags) for v in value]
            if flags & JsonFlag.FORCE_OBJECT:
                return {str(i): v for i, v in enumerate(items)}
            return items
    raise EncodingError(f'Type is not supported: {type(value).__name__}')


def nesting_depth(value: Any) -> int:
    """Depth of nested containers; scalars are 0, an empty list is 1."""
    if isinstance(value, dict):
        return 1 + max((nesting_depth(v) for v in value.values()), default=0)
    if isinstance(value, list):
        return 1 + max((nesting_depth(v) for v in value), default=0)
    return 0


def encode_rows(rows: list[dict[str, Any]], flags: JsonFlag | int | Iterable[JsonFlag] = JsonFlag.NONE,
                depth: int = DEFAULT_DEPTH) -> str:
    """Encode a row collection as one JSON document.

    Args:
        rows: Ordered row mappings (column name -> value)
        flags: JsonFlag values, combined or as an iterable
        depth: Maximum nesting depth, must be greater than 0

    Returns
        JSON text

    Raises
        ValueError: If depth is not greater than 0
        EncodingError: If the depth limit is exceeded or a value cannot be encoded
    """
    if depth <= 0:
        raise ValueError('depth must be greater than 0')
    flags = _coerce_flags(flags)

    data = _normalize(list(rows), flags)

    actual = nesting_depth(data)
    if actual > depth:
        raise EncodingError(f'Maximum stack depth exceeded: {actual} > {depth}')

    pretty = bool(flags & JsonFlag.PRETTY_PRINT)
    text = json.dumps(
        data,
        ensure_ascii=not flags & JsonFlag.UNESCAPED_UNICODE,
        indent=4 if pretty else None,
        separators=(',', ': ') if pretty else (',', ':'),
        allow_nan=False,
    )
    if not flags & JsonFlag.UNESCAPED_SLASHES:
        text = text.replace('/', '\\/')
    return text
