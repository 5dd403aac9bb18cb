"""
Relational stores backing SQLDoc collections

Available stores:
- DuckDBStore: DuckDB database (default when duckdb is installed)
- SQLiteStore: standard library sqlite3 fallback
"""

from sqldoc.stores.base import BaseStore, Row
from sqldoc.stores.duckdb_store import DuckDBStore, is_duckdb_available
from sqldoc.stores.sqlite_store import SQLiteStore

__all__ = ["BaseStore", "Row", "DuckDBStore", "SQLiteStore", "create_store"]


def create_store(database: str = ":memory:", backend: str = "auto") -> BaseStore:
    """
    Open a store for the given backend

    Args:
        database: Database file path, or ":memory:"
        backend: "auto", "duckdb" or "sqlite". "auto" uses DuckDB when it
            is installed and falls back to SQLite otherwise

    Returns:
        Store instance

    Raises:
        ValueError: If backend is unknown
        ImportError: If backend="duckdb" and duckdb is not installed
    """
    backend = backend.lower()
    if backend == "auto":
        backend = "duckdb" if is_duckdb_available() else "sqlite"

    if backend == "duckdb":
        return DuckDBStore(database)
    if backend == "sqlite":
        return SQLiteStore(database)

    raise ValueError(f"Unknown backend: {backend}. Available backends: auto, duckdb, sqlite")
