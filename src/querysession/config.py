"""
Static table of logical database names to connection credentials.

The table is built once at process start, either from a mapping or from a
JSON file, and is read-only afterwards:

```json
{
    "db": {
        "host": "localhost",
        "database": "db",
        "username": "root",
        "password": "password"
    }
}
```
"""
import json
import logging
import pathlib
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Any

from querysession.exceptions import ConfigurationError
from querysession.options import DatabaseOptions

__all__ = ['DatabaseConfig', 'DEFAULT_LOCATIONS']

logger = logging.getLogger(__name__)

DEFAULT_LOCATIONS = (
    pathlib.Path('~/.config/querysession/databases.json').expanduser(),
    pathlib.Path('/etc/querysession/databases.json'),
    pathlib.Path('databases.json'),
)


class DatabaseConfig(Mapping):
    """Read-only mapping of logical database name to DatabaseOptions.
    """

    def __init__(self, entries: Mapping[str, DatabaseOptions | Mapping[str, Any]] | None = None,
                 drivername: str = 'mysql') -> None:
        table = {}
        for name, entry in (entries or {}).items():
            if isinstance(entry, DatabaseOptions):
                table[name] = entry
                continue
            if not isinstance(entry, Mapping):
                raise ConfigurationError(f'Configuration for {name} must be a mapping')
            values = dict(entry)
            values.setdefault('drivername', drivername)
            table[name] = DatabaseOptions.from_dict(values)
        self._table = MappingProxyType(table)

    @classmethod
    def from_file(cls, config_file: str | pathlib.Path, drivername: str = 'mysql') -> 'DatabaseConfig':
        """Load configuration from a JSON file."""
        path = pathlib.Path(config_file)
        try:
            with path.open() as f:
                entries = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f'Failed to load database configuration from {path}: {e}') from e
        if not isinstance(entries, dict):
            raise ConfigurationError(f'Database configuration in {path} must be a JSON object')
        config = cls(entries, drivername=drivername)
        logger.info(f'Loaded {len(config)} database configuration(s) from {path}')
        return config

    @classmethod
    def load(cls, config_file: str | pathlib.Path | None = None,
             drivername: str = 'mysql') -> 'DatabaseConfig':
        """Load from `config_file`, or from the first default location that exists.

        Returns an empty configuration when no file is found.
        """
        if config_file is not None:
            return cls.from_file(config_file, drivername=drivername)
        for location in DEFAULT_LOCATIONS:
            if location.exists():
                return cls.from_file(location, drivername=drivername)
        logger.debug('No database configuration file found')
        return cls(drivername=drivername)

    def __getitem__(self, name: str) -> DatabaseOptions:
        try:
            return self._table[name]
        except KeyError:
            raise ConfigurationError(f"Database {name} doesn't exist in configuration") from None

    def __contains__(self, name: object) -> bool:
        return name in self._table

    def get(self, name: str, default: Any = None) -> DatabaseOptions | Any:
        return self._table.get(name, default)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f'DatabaseConfig({sorted(self._table)})'
