import pytest
from querysession.exceptions import ConfigurationError
from querysession.options import DatabaseOptions


def test_init_defaults():
    """Test default initialization"""
    options = DatabaseOptions(
        hostname='testhost',
        username='testuser',
        password='testpass',
        database='testdb',
    )

    assert options.drivername == 'mysql'
    assert options.appname is not None
    assert options.port == 0
    assert options.timeout == 0


def test_validation():
    """Test validation rules"""
    with pytest.raises(ConfigurationError):
        DatabaseOptions(
            drivername='invalid',
            hostname='testhost',
            username='testuser',
            password='testpass',
            database='testdb',
        )

    with pytest.raises(ConfigurationError):
        DatabaseOptions(drivername='postgresql', hostname='testhost')

    # configuration errors are still value errors
    with pytest.raises(ValueError):
        DatabaseOptions(drivername='mysql', hostname='testhost')


def test_sqlite_options():
    """Test SQLite options validation"""
    options = DatabaseOptions(drivername='sqlite', database='test.db')
    assert options.drivername == 'sqlite'
    assert options.database == 'test.db'

    with pytest.raises(ConfigurationError):
        DatabaseOptions(drivername='sqlite')


def test_from_dict_accepts_host_alias():
    options = DatabaseOptions.from_dict({
        'host': 'localhost',
        'database': 'db',
        'username': 'root',
        'password': 'password',
    })
    assert options.hostname == 'localhost'
    assert options.drivername == 'mysql'


def test_from_dict_rejects_unknown_fields():
    with pytest.raises(ConfigurationError):
        DatabaseOptions.from_dict({'drivername': 'sqlite', 'database': 'x', 'hots': 'typo'})


def test_repr_hides_password():
    options = DatabaseOptions(hostname='h', username='u', password='secret', database='d')
    assert 'secret' not in repr(options)
