"""
Statement session: one parameterized query run against one connection.

A session moves through a fixed lifecycle:

    CREATED -> BOUND -> EXECUTED -> CONSUMED

```python
provider = ConnectionProvider(DatabaseConfig.load())
cn = provider.resolve('users')
with StatementSession('SELECT username FROM users WHERE username LIKE %s', cn) as stmt:
    for row in stmt.execute('user%').get_result():
        print(row['username'])
```

Every operation checks the current stage against an explicit transition
table before doing any work. A session is not safe for concurrent use; it
represents one in-flight query owned by one thread.
"""
import logging
import time
from enum import IntEnum
from functools import wraps
from typing import Any, Self

from querysession import encoding
from querysession.encoding import DEFAULT_DEPTH, JsonFlag
from querysession.exceptions import ConfigurationError, DatabaseError
from querysession.exceptions import ExecutionError, LifecycleError
from querysession.params import ParameterBuffer
from querysession.result import ResultSet

__all__ = ['Stage', 'StatementSession']

logger = logging.getLogger(__name__)


class Stage(IntEnum):
    CREATED = 1
    BOUND = 2
    EXECUTED = 3
    CONSUMED = 4


# operation -> stages it may start from
_ALLOWED_STAGES: dict[str, frozenset[Stage]] = {
    'bind_param': frozenset({Stage.CREATED, Stage.BOUND}),
    'execute': frozenset({Stage.CREATED, Stage.BOUND, Stage.EXECUTED}),
    'get_result': frozenset({Stage.EXECUTED}),
    'encode_rows': frozenset({Stage.EXECUTED}),
}

# stages from which a fetch runs execute() first
_AUTO_EXECUTE_STAGES = frozenset({Stage.CREATED, Stage.BOUND})


def dumpsql(func):
    """Decorator for logging the statement, its parameters and timing."""
    @wraps(func)
    def wrapper(self, *args: Any, **kwargs: Any):
        start = time.time()
        logger.debug(f'SQL:\n{self.query}\nargs: {self.parameters.values}')
        try:
            return func(self, *args, **kwargs)
        except Exception:
            logger.error(f'Error with query:\nSQL:\n{self.query}\nargs: {self.parameters.values}')
            raise
        finally:
            elapsed = time.time() - start
            addcall = getattr(self.connection, 'addcall', None)
            if addcall is not None:
                addcall(elapsed)
            logger.debug(f'Query time: {elapsed:.4f}s')
    return wrapper


class StatementSession:
    """Wraps a connection and a single parameterized statement.

    The connection is borrowed, never closed by the session. The cursor
    opened by `execute()` is owned by the session and released when it is
    replaced, when the session is closed, or when a `with` block exits.
    """

    def __init__(self, query: str, connection: Any, *parameters: str | int | float | bool) -> None:
        if not query or not query.strip():
            raise ConfigurationError('query cannot be empty')
        if connection is None:
            raise ConfigurationError('connection is required')

        self._query = query
        self._connection = connection
        self._handle: Any = None
        self._buffer = ParameterBuffer()
        self._stage = Stage.CREATED

        if parameters:
            self.bind_param(*parameters)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        self.close()

    def __repr__(self) -> str:
        return f'<StatementSession {self._stage.name} {self._query!r}>'

    @property
    def query(self) -> str:
        return self._query

    @property
    def connection(self) -> Any:
        return self._connection

    @property
    def stage(self) -> Stage:
        return self._stage

    @property
    def parameters(self) -> ParameterBuffer:
        return self._buffer

    def _require(self, operation: str) -> None:
        if self._stage not in _ALLOWED_STAGES[operation]:
            raise LifecycleError(operation, self._stage)

    def bind_param(self, *parameters: str | int | float | bool) -> Self:
        """Save parameters before execution, replacing any bound earlier.

        **NOTE: Booleans are converted to `1` if true or `0` if false**
        """
        self._require('bind_param')
        self._buffer = ParameterBuffer.from_values(*parameters)
        self._stage = Stage.BOUND
        logger.debug(f'Bound {len(self._buffer)} parameter(s): {self._buffer.type_codes!r}')
        return self

    def _release_handle(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()

    def _prepare(self) -> Any:
        try:
            return self._connection.cursor()
        except DatabaseError:
            raise
        except Exception as e:
            raise ExecutionError(self._query, str(e)) from e

    @dumpsql
    def _run(self, cursor: Any) -> None:
        if self._buffer:
            cursor.execute(self._query, self._buffer.values)
        else:
            cursor.execute(self._query)

    def execute(self, *parameters: str | int | float | bool) -> Self:
        """Execute the statement, binding `parameters` first if given.

        Running again from EXECUTED re-executes with the parameters already
        bound; passing new parameters at that point is a lifecycle error.
        """
        self._require('execute')
        if parameters:
            self.bind_param(*parameters)

        # the previous cursor is released first, so a failed re-execute is pending again
        if self._stage == Stage.EXECUTED:
            self._stage = Stage.BOUND
        self._release_handle()
        cursor = self._prepare()
        try:
            self._run(cursor)
        except Exception as e:
            try:
                cursor.close()
            except Exception as close_error:
                logger.debug(f'Error closing cursor after failed execute: {close_error}')
            raise ExecutionError(self._query, str(e)) from e

        self._handle = cursor
        self._stage = Stage.EXECUTED
        return self

    def _execute_if_pending(self) -> None:
        if self._stage in _AUTO_EXECUTE_STAGES:
            self.execute()

    def get_result(self) -> ResultSet:
        """Fetch the result set, executing first if still pending.
        """
        self._execute_if_pending()
        self._require('get_result')
        self._stage = Stage.CONSUMED
        return ResultSet(self._handle, self._query)

    def encode_rows(self, flags: JsonFlag | int = JsonFlag.NONE, depth: int = DEFAULT_DEPTH) -> str:
        """Fetch every row and encode the collection as JSON.

        Args:
            flags: JsonFlag formatting flags
            depth: Maximum nesting depth of the document

        Returns
            JSON text, e.g. `[{"username":"alice"}]`

        Raises
            EncodingError: If the depth limit is exceeded or a value cannot be encoded
        """
        self._execute_if_pending()
        self._require('encode_rows')
        try:
            rows = ResultSet(self._handle, self._query).fetchall()
        except DatabaseError:
            self.close()
            raise
        except Exception as e:
            self.close()
            raise ExecutionError(self._query, str(e)) from e
        self._stage = Stage.CONSUMED
        return encoding.encode_rows(rows, flags, depth)

    def close(self) -> None:
        """Release the owned cursor and retire the session.
        """
        self._release_handle()
        self._stage = Stage.CONSUMED
