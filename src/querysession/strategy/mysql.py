"""
MySQL-specific connection rules, using the PyMySQL driver.

Queries run against this dialect use the driver's native '%s' placeholder.
"""
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from querysession.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from querysession.options import DatabaseOptions


@register_strategy('mysql')
class MySQLStrategy(DatabaseStrategy):
    """MySQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for MySQL."""
        return 'mysql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for MySQL."""
        return sa.URL.create(
            drivername='mysql+pymysql',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query={'charset': 'utf8mb4'}
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for MySQL."""
        if options.timeout:
            return {'connect_args': {'connect_timeout': options.timeout}}
        return {}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required option fields for MySQL."""
        return ['hostname', 'username', 'password', 'database']
