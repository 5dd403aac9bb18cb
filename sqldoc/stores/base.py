"""
Base store interface for the relational collaborator

A store is a passive relational database offering three primitives:
execute a statement, run a query returning rows, and list base tables.
Stores also run statement batches as one all-or-nothing transaction.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence

from sqldoc.core.errors import StoreConflict, StoreError, StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Row:
    """One stored leaf: row key, canonical path and decoded JSON data"""

    name: str
    path: str
    data: Any

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Row":
        """Build a Row from a query record, decoding the data column"""
        raw = record["data"]
        try:
            data = json.loads(raw) if raw is not None else None
        except (TypeError, ValueError) as e:
            raise StoreError(
                f"Corrupt data cell at name={record['name']!r}, path={record['path']!r}: {e}"
            ) from e
        return cls(name=str(record["name"]), path=record["path"], data=data)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "path": self.path, "data": self.data}


class BaseStore:
    """
    Base class for all relational stores

    Subclasses implement execute_statement(), execute_query(),
    list_tables() and the transaction hooks. Errors from the driver are
    raised as StoreUnavailable (connection/IO) or StoreConflict
    (constraint/transaction), chained to the original exception.
    """

    # Full-match regex predicate; {column} is the column, ? the pattern
    regex_match_template = "regexp_full_match({column}, ?)"

    def execute_statement(self, sql: str, params: Sequence[Any] = ()) -> None:
        """Execute a statement that returns no rows"""
        raise NotImplementedError("Subclasses must implement execute_statement()")

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Execute a query and return its rows

        Returns:
            List of dictionaries keyed by column name, in result order
        """
        raise NotImplementedError("Subclasses must implement execute_query()")

    def list_tables(self) -> List[str]:
        """Return the names of all base tables"""
        raise NotImplementedError("Subclasses must implement list_tables()")

    def begin(self) -> None:
        self.execute_statement("BEGIN TRANSACTION")

    def commit(self) -> None:
        self.execute_statement("COMMIT")

    def rollback(self) -> None:
        self.execute_statement("ROLLBACK")

    def execute_batch(self, statements: Iterable[Any]) -> None:
        """
        Run statements in one transaction

        Each item must expose ``sql`` and ``params``. If any statement
        fails the transaction is rolled back and nothing is applied.

        Raises:
            StoreUnavailable: If the connection failed
            StoreConflict: For any other failure inside the transaction
        """
        statements = list(statements)
        self.begin()
        try:
            for statement in statements:
                self.execute_statement(statement.sql, statement.params)
            self.commit()
        except Exception as e:
            logger.warning("Transaction failed, rolling back %d statements: %s", len(statements), e)
            try:
                self.rollback()
            except StoreError as rollback_error:
                logger.error("Rollback failed: %s", rollback_error)
            if isinstance(e, StoreUnavailable):
                raise
            raise StoreConflict(f"Transaction failed and was rolled back: {e}") from e

    def close(self) -> None:
        """Release the underlying connection"""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
