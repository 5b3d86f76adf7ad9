"""
Query session exception classes.
"""
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from querysession.session import Stage


class DatabaseError(Exception):
    """Base class for all querysession errors.
    """


class ConfigurationError(DatabaseError, ValueError):
    """Unknown logical database name or missing required input.
    """


class ConnectionError(DatabaseError):
    """Error establishing or using a database connection.
    """


class LifecycleError(DatabaseError):
    """Operation invoked in a stage that does not permit it.
    """

    def __init__(self, operation: str, stage: 'Stage') -> None:
        self.operation = operation
        self.stage = stage
        super().__init__(f'{operation} method used out of order (stage: {stage.name})')


class ExecutionError(DatabaseError):
    """Statement preparation or execution rejected by the driver.
    """

    def __init__(self, query: str, driver_message: str) -> None:
        self.query = query
        self.driver_message = driver_message
        super().__init__(f'Failed to execute query: {query}\n{driver_message}')


class EncodingError(DatabaseError):
    """Row collection could not be serialized.
    """
