import pathlib
import sys
from dataclasses import dataclass, fields
from typing import Any

from querysession.exceptions import ConfigurationError
from querysession.strategy import get_available_dialects, get_strategy_class
from querysession.strategy import is_supported_dialect

__all__ = ['DatabaseOptions']


def _scriptname() -> str | None:
    """Name of the running script, without extension."""
    if sys.argv and sys.argv[0]:
        return pathlib.Path(sys.argv[0]).stem or None
    return None


@dataclass
class DatabaseOptions:
    """Options

    supported driver names: `mysql`, `postgresql`, `sqlite`
    """
    drivername: str = 'mysql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None

    def __post_init__(self):
        if not is_supported_dialect(self.drivername):
            available = get_available_dialects()
            raise ConfigurationError(f'drivername must be one of: {available}')
        self.appname = self.appname or _scriptname() or 'python_console'
        strategy_cls = get_strategy_class(self.drivername)
        strategy_cls.validate_options(self)

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> 'DatabaseOptions':
        """Build options from a dict, accepting `host` as an alias of `hostname`.

        Unknown keys are rejected so typos in configuration files surface early.
        """
        values = dict(values)
        if 'host' in values:
            values.setdefault('hostname', values.pop('host'))
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ConfigurationError(f'Unknown option field(s): {unknown}')
        return cls(**values)

    def __repr__(self) -> str:
        return (f'DatabaseOptions(drivername={self.drivername!r}, hostname={self.hostname!r}, '
                f'username={self.username!r}, database={self.database!r}, port={self.port!r})')
