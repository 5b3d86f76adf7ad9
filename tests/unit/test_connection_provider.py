from unittest.mock import MagicMock

import pytest
import sqlalchemy as sa
from querysession.config import DatabaseConfig
from querysession.connection import ConnectionProvider, ConnectionWrapper
from querysession.connection import connect, get_engine_for_options
from querysession.exceptions import ConfigurationError, ConnectionError
from querysession.options import DatabaseOptions
from sqlalchemy.pool import NullPool

CONFIG = DatabaseConfig({
    'db': {
        'host': 'localhost',
        'database': 'db',
        'username': 'root',
        'password': 'password',
    },
})


@pytest.fixture
def engine_factory():
    factory = MagicMock(name='create_engine')
    factory.return_value.connect.return_value.dialect.name = 'mysql'
    factory.return_value.connect.return_value.closed = False
    return factory


def test_unknown_name_never_connects(engine_factory):
    provider = ConnectionProvider(CONFIG, engine_factory=engine_factory)
    with pytest.raises(ConfigurationError):
        provider.resolve('missing')
    engine_factory.assert_not_called()


@pytest.mark.parametrize('credentials', [
    ('root', 'password', ''),
    ('root', '', 'localhost'),
    ('', 'password', 'localhost'),
])
def test_partial_credentials_fall_back_to_config(engine_factory, credentials):
    provider = ConnectionProvider(CONFIG, engine_factory=engine_factory)
    with pytest.raises(ConfigurationError):
        provider.resolve('missing', *credentials)
    engine_factory.assert_not_called()


def test_resolve_from_config(engine_factory):
    provider = ConnectionProvider(CONFIG, engine_factory=engine_factory)
    cn = provider.resolve('db')

    assert isinstance(cn, ConnectionWrapper)
    assert cn.options is CONFIG['db']
    assert cn.dialect == 'mysql'
    url = engine_factory.call_args.args[0]
    assert url.drivername == 'mysql+pymysql'
    assert url.host == 'localhost'
    assert url.database == 'db'


def test_resolve_with_explicit_credentials(engine_factory):
    """Explicit credentials use the logical name as the database name."""
    provider = ConnectionProvider(DatabaseConfig(), engine_factory=engine_factory)
    cn = provider.resolve('users', 'admin', 'secret', 'dbhost')

    url = engine_factory.call_args.args[0]
    assert url.database == 'users'
    assert url.username == 'admin'
    assert url.password == 'secret'
    assert url.host == 'dbhost'
    assert cn.options.database == 'users'


def test_engine_never_pools_and_autocommits(engine_factory):
    ConnectionProvider(CONFIG, engine_factory=engine_factory).resolve('db')
    kwargs = engine_factory.call_args.kwargs
    assert kwargs['poolclass'] is NullPool
    assert kwargs['isolation_level'] == 'AUTOCOMMIT'


def test_connect_failure_raises_connection_error(engine_factory):
    engine_factory.return_value.connect.side_effect = sa.exc.OperationalError(
        'connect', {}, Exception('Connection refused'))
    provider = ConnectionProvider(CONFIG, engine_factory=engine_factory)
    with pytest.raises(ConnectionError) as exc_info:
        provider.resolve('db')
    assert isinstance(exc_info.value.__cause__, sa.exc.OperationalError)


def test_missing_driver_is_configuration_error():
    factory = MagicMock(side_effect=ModuleNotFoundError("No module named 'pymysql'"))
    with pytest.raises(ConfigurationError, match='querysession\\[mysql\\]'):
        connect(CONFIG['db'], engine_factory=factory)


def test_engines_are_cached_per_options(engine_factory):
    options = DatabaseOptions(drivername='sqlite', database='a.db')
    first = get_engine_for_options(options, engine_factory=engine_factory)
    second = get_engine_for_options(DatabaseOptions(drivername='sqlite', database='a.db'),
                                    engine_factory=engine_factory)
    assert first is second
    assert engine_factory.call_count == 1


def test_connect_accepts_dict(engine_factory):
    cn = connect({'drivername': 'sqlite', 'database': ':memory:'}, engine_factory=engine_factory)
    assert cn.options.drivername == 'sqlite'


def test_closed_wrapper_refuses_cursor(engine_factory):
    cn = ConnectionProvider(CONFIG, engine_factory=engine_factory).resolve('db')
    engine_factory.return_value.connect.return_value.closed = True
    with pytest.raises(ConnectionError):
        cn.cursor()


def test_provider_reuses_config_drivername():
    provider = ConnectionProvider(drivername='sqlite')
    assert provider.config.get('anything') is None
    assert provider.drivername == 'sqlite'
