"""
Mock DB-API objects for statement session tests.

The mock connection records every cursor it hands out and every statement
those cursors execute, so tests can count executions and check what was
sent to the driver without a real database.

Usage:
    def test_execute(mock_connection):
        cn = mock_connection(rows=[('alice',)], columns=('username',))
        StatementSession('select 1', cn).execute()
        assert len(cn.executed) == 1
"""
import pytest


class MockCursor:

    def __init__(self, connection):
        self.connection = connection
        self.description = None
        self.rowcount = -1
        self.closed = False
        self.close_calls = 0
        self._rows = []

    def execute(self, sql, params=None):
        if self.closed:
            raise RuntimeError('cursor is closed')
        self.connection.executed.append((sql, params))
        if self.connection.fail_on_execute is not None:
            raise self.connection.fail_on_execute
        if self.connection.columns:
            self.description = [(name, None, None, None, None, None, None)
                                for name in self.connection.columns]
            self._rows = list(self.connection.rows)
            self.rowcount = len(self._rows)
        else:
            self.rowcount = 1

    def _check_fetch(self):
        if self.connection.fail_on_fetch is not None:
            raise self.connection.fail_on_fetch

    def fetchone(self):
        self._check_fetch()
        return self._rows.pop(0) if self._rows else None

    def fetchmany(self, size=1):
        self._check_fetch()
        chunk, self._rows = self._rows[:size], self._rows[size:]
        return chunk

    def fetchall(self):
        self._check_fetch()
        rows, self._rows = self._rows, []
        return rows

    def close(self):
        self.closed = True
        self.close_calls += 1


class MockConnection:

    def __init__(self, rows=(), columns=(), fail_on_execute=None, fail_on_cursor=None,
                 fail_on_fetch=None):
        self.rows = list(rows)
        self.columns = tuple(columns)
        self.fail_on_execute = fail_on_execute
        self.fail_on_cursor = fail_on_cursor
        self.fail_on_fetch = fail_on_fetch
        self.cursors = []
        self.executed = []
        self.calls = 0
        self.closed = False

    def cursor(self):
        if self.fail_on_cursor is not None:
            raise self.fail_on_cursor
        cursor = MockCursor(self)
        self.cursors.append(cursor)
        return cursor

    def addcall(self, elapsed):
        self.calls += 1

    def close(self):
        self.closed = True


@pytest.fixture
def mock_connection():
    """Factory fixture creating mock DB-API connections.

    Example usage:
        def test_rows(mock_connection):
            cn = mock_connection(rows=[('alice',)], columns=('username',))
    """
    def factory(**kwargs):
        return MockConnection(**kwargs)

    return factory


@pytest.fixture
def users_connection(mock_connection):
    """Mock connection returning two usernames."""
    return mock_connection(rows=[('alice',), ('admin1',)], columns=('username',))
