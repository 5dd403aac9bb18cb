"""
Pytest configuration and shared fixtures
"""

import pytest

from sqldoc.core.store import DocumentStore
from sqldoc.stores import SQLiteStore
from sqldoc.stores.duckdb_store import DuckDBStore, is_duckdb_available

BACKENDS = [
    "sqlite",
    pytest.param(
        "duckdb",
        marks=pytest.mark.skipif(not is_duckdb_available(), reason="DuckDB not installed"),
    ),
]


def make_store(backend: str, database: str = ":memory:"):
    if backend == "duckdb":
        return DuckDBStore(database)
    return SQLiteStore(database)


@pytest.fixture(params=BACKENDS)
def backend(request):
    """Name of the relational backend under test"""
    return request.param


@pytest.fixture
def raw_store(backend):
    """Bare relational store, closed after the test"""
    store = make_store(backend)
    yield store
    store.close()


@pytest.fixture
def doc_store(raw_store):
    """DocumentStore on top of the bare store"""
    return DocumentStore(raw_store)


@pytest.fixture
def sample_users():
    """Sample user records"""
    return [
        {"name": "John", "age": 30, "address": {"city": "New York", "state": "NY"}},
        {"name": "Jane", "age": 25, "address": {"city": "San Francisco", "state": "CA"}},
    ]


@pytest.fixture
def store_factory(backend):
    """Open additional stores of the backend under test"""

    def factory(database: str = ":memory:"):
        return make_store(backend, database)

    return factory
