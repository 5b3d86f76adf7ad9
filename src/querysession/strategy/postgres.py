"""
PostgreSQL-specific connection rules, using the psycopg driver.
"""
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from querysession.strategy.base import DatabaseStrategy, register_strategy

if TYPE_CHECKING:
    from querysession.options import DatabaseOptions


@register_strategy('postgresql')
class PostgresStrategy(DatabaseStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        """Return the dialect identifier for PostgreSQL."""
        return 'postgresql'

    def build_connection_url(self, options: 'DatabaseOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query
        )

    def get_engine_kwargs(self, options: 'DatabaseOptions') -> dict[str, Any]:
        """Return SQLAlchemy create_engine kwargs for PostgreSQL."""
        return {'connect_args': {'application_name': options.appname}}

    @classmethod
    def get_required_options(cls) -> list[str]:
        """Return required option fields for PostgreSQL."""
        return ['hostname', 'username', 'password', 'database']
