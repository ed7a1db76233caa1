"""
Test configuration and fixtures for the URL shortener.
Every test gets its own SQLite file, so tests never see each other's data.
"""

import pytest
from fastapi.testclient import TestClient

from shortlink_app.app_factory import create_app
from shortlink_app.config import Settings
from shortlink_app.storage.strategies import InMemoryURLStore, SQLURLStore

TEST_DOMAIN = "http://short.test/"


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway database, ignoring any local .env"""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'test.db'}",
        domain=TEST_DOMAIN,
    )


@pytest.fixture
def sql_store(settings):
    store = SQLURLStore(settings.database_url, timeout=settings.database_timeout)
    store.init_schema()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture
def memory_store():
    store = InMemoryURLStore()
    store.init_schema()
    try:
        yield store
    finally:
        store.close()


@pytest.fixture(params=["sql", "memory"])
def store(request):
    """Run a store test against every backend"""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def client(settings, sql_store):
    """
    Create a test client around an app that owns the SQL store.
    This is the main fixture that API tests will use.
    """
    app = create_app(settings=settings, store=sql_store)

    with TestClient(app) as test_client:
        yield test_client
