"""
Document Store - set/get JSON values by address

This is the primary entry point. Each call runs one pipeline:

    set: compile address -> build write batch -> execute in one transaction
    get: compile address -> build read query -> execute -> assemble

Example:
    >>> from sqldoc import connect
    >>> store = connect()
    >>> store.set("users[0]", {"name": "John", "age": 30})
    >>> store.set("users[1]", {"name": "Jane", "age": 25})
    >>> store.get("users[*].name")
    ['John', 'Jane']
"""

import logging
from typing import Any, List, Optional

from sqldoc.core.assembler import ResultAssembler
from sqldoc.core.builder import QueryBuilder, quote_identifier
from sqldoc.path.ast_nodes import Address
from sqldoc.path.parser import compile_address
from sqldoc.stores import BaseStore, Row, create_store

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    JSON document store over a relational backend

    Holds no state besides the store and its query builder; every set()
    and get() is independent.
    """

    def __init__(self, store: BaseStore):
        self.store = store
        self.builder = QueryBuilder(store.regex_match_template)

    def set(self, address: str, value: Any) -> None:
        """
        Write a JSON value at an address

        Args:
            address: Addressing expression, e.g. "users[0]" or "users[0].address.city"
            value: Any JSON value. Without a row key, each top-level key or
                index of a container becomes its own row; a scalar is stored
                under a reserved row key

        Raises:
            InvalidAddress: If the address is malformed or contains a wildcard
            NotJSON: If the value is cyclic or not JSON serializable
            StoreUnavailable, StoreConflict: If the transaction fails (nothing is applied)
        """
        compiled = compile_address(address)
        statements = self.builder.build_write(compiled, value)
        logger.debug("set %r: %d statements", address, len(statements))
        self.store.execute_batch(statements)

    def get(self, address: str) -> Any:
        """
        Read the JSON value at an address

        Returns:
            The reassembled value, or None if nothing matches (including a
            collection that does not exist)

        Raises:
            InvalidAddress: If the address is malformed
            MalformedPath: If a stored path cannot be decoded
            StoreError: If the query fails
        """
        compiled = compile_address(address)
        rows = self._select(compiled)
        logger.debug("get %r: %d rows", address, len(rows))
        return ResultAssembler(compiled).assemble(rows)

    def _select(self, address: Address) -> List[Row]:
        table = self._resolve_table(address.collection)
        if table is None:
            return []
        statement = self.builder.build_read(address)
        records = self.store.execute_query(statement.sql, statement.params)
        return [Row.from_record(record) for record in records]

    def _resolve_table(self, collection: str) -> Optional[str]:
        # Both backends fold quoted table names case-insensitively
        for table in self.store.list_tables():
            if table.lower() == collection.lower():
                return table
        return None

    def collections(self) -> List[str]:
        """List the names of all collections"""
        return self.store.list_tables()

    def rows(self, collection: str) -> List[Row]:
        """
        Return the raw rows of a collection ordered by name and path

        Returns an empty list if the collection does not exist.
        """
        table = self._resolve_table(collection)
        if table is None:
            return []
        records = self.store.execute_query(
            f"SELECT name, path, data FROM {quote_identifier(table)} ORDER BY name, path"
        )
        return [Row.from_record(record) for record in records]

    def to_dataframe(self, collection: str):
        """
        Return the raw rows of a collection as a pandas DataFrame

        Returns:
            pandas.DataFrame with columns name, path, data
        """
        try:
            import pandas as pd
        except ImportError:
            raise ImportError(
                "Pandas is required for to_dataframe(). Install with: pip install sqldoc[pandas]"
            )

        return pd.DataFrame(
            [row.to_dict() for row in self.rows(collection)],
            columns=["name", "path", "data"],
        )

    def close(self) -> None:
        self.store.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def connect(database: str = ":memory:", backend: str = "auto") -> DocumentStore:
    """
    Open a document store

    Args:
        database: Database file path, or ":memory:" (default)
        backend: "auto" (DuckDB if installed, else SQLite), "duckdb" or "sqlite"

    Returns:
        DocumentStore instance

    Example:
        >>> store = connect("docs.duckdb")
        >>> store.set("test", "hello world")
        >>> store.get("test")
        'hello world'
    """
    return DocumentStore(create_store(database, backend))
