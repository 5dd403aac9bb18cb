"""
DuckDB Store - collections as DuckDB tables

Uses DuckDB's native ``regexp_full_match`` for path pattern matching and
``INSERT ... ON CONFLICT DO UPDATE`` for leaf upserts.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

from sqldoc.core.errors import StoreConflict, StoreError, StoreUnavailable
from sqldoc.stores.base import BaseStore

try:
    import duckdb
    DUCKDB_AVAILABLE = True
except ImportError:
    DUCKDB_AVAILABLE = False
    duckdb = None

logger = logging.getLogger(__name__)


class DuckDBStore(BaseStore):
    """
    DuckDB-backed store

    Example:
        >>> store = DuckDBStore()              # in-memory
        >>> store = DuckDBStore("docs.duckdb")  # persistent file
    """

    regex_match_template = "regexp_full_match({column}, ?)"

    def __init__(self, database: str = ":memory:"):
        if not DUCKDB_AVAILABLE:
            raise ImportError(
                "DuckDB backend requires duckdb library. "
                "Install with: pip install sqldoc"
            )

        self.database = database
        try:
            self.conn = duckdb.connect(database)
        except duckdb.Error as e:
            raise StoreUnavailable(f"Cannot open DuckDB database {database!r}: {e}") from e
        logger.info("Opened DuckDB store %s", database)

    def _execute(self, sql: str, params: Sequence[Any]):
        if self.conn is None:
            raise StoreUnavailable("DuckDB store is closed")

        logger.debug("SQL: %s %s", " ".join(sql.split()), list(params))
        try:
            if params:
                return self.conn.execute(sql, list(params))
            return self.conn.execute(sql)
        except (duckdb.ConnectionException, duckdb.IOException) as e:
            raise StoreUnavailable(f"DuckDB connection error: {e}") from e
        except (duckdb.ConstraintException, duckdb.TransactionException) as e:
            raise StoreConflict(f"DuckDB conflict: {e}") from e
        except duckdb.Error as e:
            raise StoreError(f"DuckDB execution error: {e}") from e

    def execute_statement(self, sql: str, params: Sequence[Any] = ()) -> None:
        self._execute(sql, params)

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        result = self._execute(sql, params)
        columns = [desc[0] for desc in result.description]
        return [dict(zip(columns, row)) for row in result.fetchall()]

    def list_tables(self) -> List[str]:
        rows = self.execute_query(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_type = 'BASE TABLE' "
            "ORDER BY table_name"
        )
        return [row["table_name"] for row in rows]

    def close(self) -> None:
        """Close DuckDB connection"""
        if getattr(self, "conn", None) is not None:
            self.conn.close()
            self.conn = None
            logger.info("Closed DuckDB store %s", self.database)

    def __del__(self):
        """Cleanup on deletion"""
        self.close()


def is_duckdb_available() -> bool:
    """Check if DuckDB is available"""
    return DUCKDB_AVAILABLE
