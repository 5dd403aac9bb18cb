"""
SQLite Store - collections as sqlite3 tables

Fallback backend with no third-party dependency. SQLite has no built-in
regex operator, so a Python ``re.fullmatch`` function is registered as
REGEXP on every connection.
"""

import logging
import re
import sqlite3
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence

from sqldoc.core.errors import StoreConflict, StoreError, StoreUnavailable
from sqldoc.stores.base import BaseStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=256)
def _compile(pattern: str) -> "re.Pattern[str]":
    return re.compile(pattern)


def _regexp(pattern: Optional[str], value: Optional[str]) -> bool:
    # SQLite calls regexp(Y, X) for "X REGEXP Y"
    if pattern is None or value is None:
        return False
    return _compile(pattern).fullmatch(value) is not None


class SQLiteStore(BaseStore):
    """
    sqlite3-backed store

    The connection runs in autocommit mode; execute_batch() issues explicit
    BEGIN/COMMIT/ROLLBACK around each write.
    """

    regex_match_template = "{column} REGEXP ?"

    def __init__(self, database: str = ":memory:"):
        self.database = database
        try:
            self.conn = sqlite3.connect(database, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open SQLite database {database!r}: {e}") from e
        self.conn.create_function("REGEXP", 2, _regexp, deterministic=True)
        logger.info("Opened SQLite store %s", database)

    def _execute(self, sql: str, params: Sequence[Any]) -> sqlite3.Cursor:
        if self.conn is None:
            raise StoreUnavailable("SQLite store is closed")

        logger.debug("SQL: %s %s", " ".join(sql.split()), list(params))
        try:
            return self.conn.execute(sql, tuple(params))
        except sqlite3.IntegrityError as e:
            raise StoreConflict(f"SQLite conflict: {e}") from e
        except sqlite3.OperationalError as e:
            if "unable to open" in str(e) or "locked" in str(e):
                raise StoreUnavailable(f"SQLite database unavailable: {e}") from e
            raise StoreError(f"SQLite execution error: {e}") from e
        except sqlite3.Error as e:
            raise StoreError(f"SQLite execution error: {e}") from e

    def execute_statement(self, sql: str, params: Sequence[Any] = ()) -> None:
        self._execute(sql, params)

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        cursor = self._execute(sql, params)
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def list_tables(self) -> List[str]:
        rows = self.execute_query(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        )
        return [row["name"] for row in rows]

    def close(self) -> None:
        """Close SQLite connection"""
        if self.conn is not None:
            self.conn.close()
            self.conn = None
            logger.info("Closed SQLite store %s", self.database)
