"""
Database connection handling with SQLAlchemy.

This module provides:
1. The `ConnectionProvider` class resolving logical database names to connections
2. The `connect()` function for creating a connection from options
3. The `ConnectionWrapper` class that owns a SQLAlchemy connection
4. Engine creation and management through a thread-safe registry

Engines never pool connections and run every statement in autocommit mode;
connection reuse and transactions are left to the caller.
"""
import atexit
import logging
import threading
from collections.abc import Callable
from typing import Any, Self

import sqlalchemy as sa
from querysession.config import DatabaseConfig
from querysession.exceptions import ConfigurationError, ConnectionError
from querysession.options import DatabaseOptions
from querysession.strategy import get_strategy
from sqlalchemy.engine import Engine
from sqlalchemy.pool import NullPool

__all__ = [
    'ConnectionProvider',
    'ConnectionWrapper',
    'connect',
    'get_engine_for_options',
    'dispose_all_engines',
]

logger = logging.getLogger(__name__)

_engine_registry: dict[tuple, Engine] = {}
_engine_registry_lock = threading.RLock()


def _engine_key(options: DatabaseOptions) -> tuple:
    return (options.drivername, options.hostname, options.username, options.password,
            options.database, options.port, options.timeout)


def get_engine_for_options(options: DatabaseOptions,
                           engine_factory: Callable[..., Engine] = sa.create_engine) -> Engine:
    """Get or create a SQLAlchemy engine for the given options.
    """
    key = _engine_key(options)

    with _engine_registry_lock:
        if key in _engine_registry:
            logger.debug(f'Using existing engine for {options.drivername}')
            return _engine_registry[key]

        strategy = get_strategy(options.drivername)
        url = strategy.build_connection_url(options)

        engine_kwargs: dict[str, Any] = {
            'echo': False,
            'poolclass': NullPool,
            'isolation_level': 'AUTOCOMMIT',
        }
        engine_kwargs.update(strategy.get_engine_kwargs(options))

        try:
            engine = engine_factory(url, **engine_kwargs)
        except ImportError as e:
            raise ConfigurationError(
                f'Driver for {options.drivername} is not installed '
                f"(try 'pip install querysession[{options.drivername}]'): {e}") from e

        _engine_registry[key] = engine
        logger.debug(f'Created new engine for {options.drivername}')

        return engine


def dispose_all_engines() -> None:
    """Dispose all engines in the registry.
    """
    with _engine_registry_lock:
        for engine in _engine_registry.values():
            engine.dispose()
        _engine_registry.clear()
        logger.debug('All database engines disposed')


atexit.register(dispose_all_engines)


class ConnectionWrapper:
    """Wraps a SQLAlchemy connection object to track calls and execution time

    The wrapper is a reusable handle: any number of statement sessions may
    run against it one after another. Closing it is the caller's job.
    """

    def __init__(self, sa_connection: sa.engine.Connection,
                 options: DatabaseOptions | None = None) -> None:
        """Initialize a connection wrapper
        """
        self.sa_connection = sa_connection
        self.options = options
        self.dbapi_connection = sa_connection.connection
        self._dialect = sa_connection.dialect.name
        self.calls = 0
        self.time = 0

    def __enter__(self) -> Self:
        """Support for context manager protocol
        """
        return self

    def __exit__(self, exc_type: type | None, exc_val: Exception | None,
                 exc_tb: Any | None) -> None:
        """Close the connection when exiting the context manager
        """
        try:
            self.close()
            logger.debug('Closed connection via context manager')
        except Exception as e:
            logger.debug(f'Error closing connection in __exit__: {e}')

    def __repr__(self) -> str:
        state = 'closed' if self.closed else 'open'
        return f'<ConnectionWrapper {self._dialect} {state}>'

    @property
    def dialect(self) -> str:
        """Return the dialect name ('mysql', 'postgresql' or 'sqlite')."""
        return self._dialect

    @property
    def closed(self) -> bool:
        return self.sa_connection.closed

    def cursor(self) -> Any:
        """Open a new DB-API cursor on this connection
        """
        if self.closed:
            raise ConnectionError('Connection is closed')
        return self.dbapi_connection.cursor()

    def addcall(self, elapsed: float) -> None:
        """Track execution statistics
        """
        self.time += elapsed
        self.calls += 1

    def close(self) -> None:
        """Close the SQLAlchemy connection
        """
        if self.closed:
            return
        self.sa_connection.close()
        logger.debug(f'Connection closed: {self.calls} queries in {self.time:.2f}s (avg: {self.time/max(1,self.calls):.3f}s per query)')


def connect(options: DatabaseOptions | dict[str, Any],
            engine_factory: Callable[..., Engine] = sa.create_engine) -> ConnectionWrapper:
    """Connect to a database using SQLAlchemy for connection management

    Args:
        options: DatabaseOptions object or dictionary of option fields
        engine_factory: Callable used to build the engine (default: sqlalchemy.create_engine)

    Returns
        ConnectionWrapper object for the database

    Raises
        ConfigurationError: If the options are invalid
        ConnectionError: If the underlying connect call fails
    """
    if not isinstance(options, DatabaseOptions):
        options = DatabaseOptions.from_dict(options)

    engine = get_engine_for_options(options, engine_factory=engine_factory)

    try:
        sa_connection = engine.connect()
    except sa.exc.SQLAlchemyError as e:
        logger.error(f'Failed to connect to {options.drivername} database {options.database}: {e}')
        raise ConnectionError(f'Failed to connect to database {options.database}: {e}') from e

    logger.debug(f'Connected to {options.drivername} database {options.database}')
    return ConnectionWrapper(sa_connection, options)


class ConnectionProvider:
    """Resolves a logical database name, or explicit credentials, to a connection.

    Example usage:

        provider = ConnectionProvider(DatabaseConfig.load())

        # predefined credentials from the configuration table
        cn = provider.resolve('some_cool_database')

        # or explicit credentials, with the name used as the database
        cn = provider.resolve('database', 'username', 'password', 'host')
    """

    def __init__(self, config: DatabaseConfig | None = None, drivername: str = 'mysql',
                 engine_factory: Callable[..., Engine] = sa.create_engine) -> None:
        self.config = config if config is not None else DatabaseConfig(drivername=drivername)
        self.drivername = drivername
        self.engine_factory = engine_factory

    def resolve(self, logical_name: str, username: str = '', password: str = '',
                host: str = '') -> ConnectionWrapper:
        """Open a connection for `logical_name`.

        Explicit credentials are used only when username, password and host
        are all given; otherwise the name is looked up in the configuration.
        """
        if username and password and host:
            options = DatabaseOptions(
                drivername=self.drivername,
                hostname=host,
                username=username,
                password=password,
                database=logical_name,
            )
        else:
            options = self.config[logical_name]
        return connect(options, engine_factory=self.engine_factory)
