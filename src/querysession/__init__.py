"""
Minimal query-execution helper.

A StatementSession wraps a connection and a single parameterized statement,
enforcing the lifecycle bind -> execute -> fetch and inferring parameter
types. Sessions can be used directly or through the module facades:

- db = querysession.prepare(cn, sql, *args); db.execute().get_result()
- querysession.select_json(cn, sql, *args)
"""
__version__ = '0.1.0'

from typing import Any

from querysession.config import DatabaseConfig
from querysession.connection import ConnectionProvider, ConnectionWrapper
from querysession.connection import connect, dispose_all_engines
from querysession.encoding import DEFAULT_DEPTH, JsonFlag
from querysession.exceptions import ConfigurationError, ConnectionError
from querysession.exceptions import DatabaseError, EncodingError
from querysession.exceptions import ExecutionError, LifecycleError
from querysession.options import DatabaseOptions
from querysession.params import BoundParameter, ParameterBuffer, ParamType
from querysession.params import infer_parameter
from querysession.result import ResultSet
from querysession.session import Stage, StatementSession


def prepare(cn: Any, sql: str, *args: str | int | float | bool) -> StatementSession:
    """Create a statement session, binding `args` if any are given.
    """
    return StatementSession(sql, cn, *args)


def select_json(cn: Any, sql: str, *args: str | int | float | bool,
                flags: JsonFlag | int = JsonFlag.NONE, depth: int = DEFAULT_DEPTH) -> str:
    """Execute a query and return its rows encoded as JSON.
    """
    with StatementSession(sql, cn, *args) as stmt:
        return stmt.encode_rows(flags, depth)


__all__ = [
    'prepare',
    'select_json',
    'connect',
    'dispose_all_engines',
    'ConnectionProvider',
    'ConnectionWrapper',
    'DatabaseConfig',
    'DatabaseOptions',
    'StatementSession',
    'Stage',
    'ResultSet',
    'JsonFlag',
    'DEFAULT_DEPTH',
    'ParamType',
    'BoundParameter',
    'ParameterBuffer',
    'infer_parameter',
    'DatabaseError',
    'ConfigurationError',
    'ConnectionError',
    'LifecycleError',
    'ExecutionError',
    'EncodingError',
]
