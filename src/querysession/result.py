"""
Raw result-set handle over an executed cursor.
"""
from collections.abc import Iterator
from typing import Any

from querysession.exceptions import ExecutionError

__all__ = ['ResultSet']


def _iter_chunks(cursor: Any, size: int) -> Iterator[Any]:
    """Iterate through cursor results in chunks."""
    while True:
        chunked = cursor.fetchmany(size)
        if not chunked:
            break
        yield from chunked


class ResultSet:
    """Iterable cursor over result rows, each row a column-name-to-value dict.

    A result set is exhausted after one full traversal; it cannot be rewound.
    The cursor stays owned by the statement session that produced it. Driver
    errors raised while fetching surface as ExecutionError.
    """

    def __init__(self, cursor: Any, query: str = '', chunk_size: int = 5000) -> None:
        self.cursor = cursor
        self.query = query
        self.chunk_size = chunk_size
        self.columns = [d[0] for d in (cursor.description or [])]

    def _to_dict(self, row: Any) -> dict[str, Any]:
        if isinstance(row, dict):
            return dict(row)
        return dict(zip(self.columns, row))

    def __iter__(self) -> Iterator[dict[str, Any]]:
        if not self.columns:
            return
        rows = _iter_chunks(self.cursor, self.chunk_size)
        while True:
            try:
                row = next(rows)
            except StopIteration:
                return
            except Exception as e:
                raise ExecutionError(self.query, str(e)) from e
            yield self._to_dict(row)

    def fetchone(self) -> dict[str, Any] | None:
        """Fetch the next row, or None once exhausted."""
        if not self.columns:
            return None
        try:
            row = self.cursor.fetchone()
        except Exception as e:
            raise ExecutionError(self.query, str(e)) from e
        return None if row is None else self._to_dict(row)

    def fetchall(self) -> list[dict[str, Any]]:
        """Fetch all remaining rows."""
        return list(self)

    @property
    def rowcount(self) -> int:
        """Rows produced or affected, as reported by the driver."""
        return self.cursor.rowcount
