"""
Bind parameter type inference.

Every value bound to a statement becomes a `BoundParameter`: the value as it
is sent to the driver plus its inferred type tag. Booleans are sent as the
integers 1 and 0.
"""
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

__all__ = [
    'ParamType',
    'BoundParameter',
    'ParameterBuffer',
    'infer_parameter',
]


class ParamType(str, Enum):
    """Type tag of a bound parameter."""

    STRING = 'string'
    INTEGER = 'integer'
    FLOAT = 'float'

    @property
    def code(self) -> str:
        """One-letter type code (`s`, `i`, `d`)."""
        return _TYPE_CODES[self]


_TYPE_CODES = {
    ParamType.STRING: 's',
    ParamType.INTEGER: 'i',
    ParamType.FLOAT: 'd',
}


@dataclass(frozen=True)
class BoundParameter:
    value: str | int | float
    type: ParamType


def infer_parameter(value: str | int | float | bool) -> BoundParameter:
    """Tag a scalar value with its parameter type.

    Raises
        TypeError: If the value is not a str, int, float or bool
    """
    match value:
        case bool():
            return BoundParameter(1 if value else 0, ParamType.INTEGER)
        case str():
            return BoundParameter(value, ParamType.STRING)
        case int():
            return BoundParameter(value, ParamType.INTEGER)
        case float():
            return BoundParameter(value, ParamType.FLOAT)
    raise TypeError(
        f'Unsupported parameter type {type(value).__name__}: expected str, int, float or bool')


@dataclass(frozen=True)
class ParameterBuffer:
    """Ordered, immutable set of parameters bound to one statement.
    """
    parameters: tuple[BoundParameter, ...] = ()

    @classmethod
    def from_values(cls, *values: str | int | float | bool) -> 'ParameterBuffer':
        return cls(tuple(infer_parameter(v) for v in values))

    @property
    def values(self) -> tuple[str | int | float, ...]:
        """Values in positional order, as sent to the driver."""
        return tuple(p.value for p in self.parameters)

    @property
    def types(self) -> tuple[ParamType, ...]:
        return tuple(p.type for p in self.parameters)

    @property
    def type_codes(self) -> str:
        """Type codes joined in positional order, e.g. 'sid'."""
        return ''.join(p.type.code for p in self.parameters)

    def __len__(self) -> int:
        return len(self.parameters)

    def __iter__(self) -> Iterator[BoundParameter]:
        return iter(self.parameters)

    def __bool__(self) -> bool:
        return bool(self.parameters)
