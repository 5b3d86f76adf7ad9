import pytest
from querysession.connection import dispose_all_engines


@pytest.fixture(autouse=True)
def clear_engines():
    """Dispose cached engines before and after each test to ensure test isolation."""
    dispose_all_engines()
    yield
    dispose_all_engines()


pytest_plugins = [
    'tests.fixtures.mocks',
    'tests.fixtures.sqlite',
]
