"""
Tests for the relational store backends
"""

import pytest

from sqldoc.core.builder import Statement
from sqldoc.core.errors import StoreConflict, StoreError, StoreUnavailable
from sqldoc.stores import SQLiteStore, create_store
from sqldoc.stores.base import BaseStore, Row
from sqldoc.stores.duckdb_store import is_duckdb_available

CREATE = 'CREATE TABLE IF NOT EXISTS "t" (name TEXT NOT NULL, path TEXT NOT NULL, data TEXT, PRIMARY KEY (name, path))'
INSERT = 'INSERT INTO "t" (name, path, data) VALUES (?, ?, ?)'


class TestStorePrimitives:
    """Test execute_statement, execute_query and list_tables"""

    def test_statement_and_query(self, raw_store):
        """Test rows come back as dictionaries keyed by column"""
        raw_store.execute_statement(CREATE)
        raw_store.execute_statement(INSERT, ("a", "x", "1"))
        rows = raw_store.execute_query('SELECT name, path, data FROM "t"')
        assert rows == [{"name": "a", "path": "x", "data": "1"}]

    def test_list_tables(self, raw_store):
        """Test only created tables are listed"""
        assert raw_store.list_tables() == []
        raw_store.execute_statement(CREATE)
        raw_store.execute_statement(CREATE.replace('"t"', '"b"'))
        assert raw_store.list_tables() == ["b", "t"]

    def test_regex_full_match(self, raw_store):
        """Test the backend regex predicate is a full match"""
        raw_store.execute_statement(CREATE)
        for path in ("name", "first_name", "name.x"):
            raw_store.execute_statement(INSERT, ("0", path, "1"))

        predicate = raw_store.regex_match_template.format(column="path")
        rows = raw_store.execute_query(
            f'SELECT path FROM "t" WHERE {predicate} ORDER BY path', ("(?s)name(?:[.\\[].*)?",)
        )
        assert [row["path"] for row in rows] == ["name", "name.x"]

    def test_unique_constraint(self, raw_store):
        """Test duplicate (name, path) raises a store error"""
        raw_store.execute_statement(CREATE)
        raw_store.execute_statement(INSERT, ("a", "x", "1"))
        with pytest.raises(StoreError):
            raw_store.execute_statement(INSERT, ("a", "x", "2"))

    def test_bad_sql(self, raw_store):
        """Test driver errors are wrapped"""
        with pytest.raises(StoreError):
            raw_store.execute_query("SELECT * FROM no_such_table")

    def test_closed_store(self, raw_store):
        """Test using a closed store raises StoreUnavailable"""
        raw_store.close()
        with pytest.raises(StoreUnavailable):
            raw_store.list_tables()


class TestExecuteBatch:
    """Test transactional batches"""

    def test_commit(self, raw_store):
        """Test all statements are applied"""
        raw_store.execute_batch(
            [Statement(CREATE), Statement(INSERT, ("a", "x", "1")), Statement(INSERT, ("b", "y", "2"))]
        )
        assert len(raw_store.execute_query('SELECT * FROM "t"')) == 2

    def test_rollback(self, raw_store):
        """Test a failing statement rolls back the whole batch"""
        raw_store.execute_statement(CREATE)
        with pytest.raises(StoreConflict, match="rolled back"):
            raw_store.execute_batch(
                [
                    Statement(INSERT, ("a", "x", "1")),
                    Statement(INSERT, ("a", "x", "2")),
                ]
            )
        assert raw_store.execute_query('SELECT * FROM "t"') == []

    def test_unavailable_passes_through(self):
        """Test connection errors are not rewrapped as conflicts"""

        class DroppingStore(BaseStore):
            def __init__(self):
                self.executed = []

            def execute_statement(self, sql, params=()):
                self.executed.append(sql)
                if sql.startswith("INSERT"):
                    raise StoreUnavailable("connection lost")

        store = DroppingStore()
        with pytest.raises(StoreUnavailable, match="connection lost"):
            store.execute_batch([Statement(INSERT, ("a", "x", "1"))])
        assert store.executed == ["BEGIN TRANSACTION", INSERT, "ROLLBACK"]


class TestRow:
    """Test Row decoding"""

    def test_from_record(self):
        """Test the data column is decoded from JSON text"""
        row = Row.from_record({"name": "0", "path": "a", "data": '{"k": [1]}'})
        assert row == Row("0", "a", {"k": [1]})
        assert row.to_dict() == {"name": "0", "path": "a", "data": {"k": [1]}}

    def test_null_data(self):
        """Test SQL NULL decodes to None"""
        assert Row.from_record({"name": "0", "path": "", "data": None}).data is None

    def test_corrupt(self):
        """Test invalid JSON raises StoreError"""
        with pytest.raises(StoreError, match="Corrupt data"):
            Row.from_record({"name": "0", "path": "", "data": "{oops"})


class TestCreateStore:
    """Test backend selection"""

    def test_sqlite(self):
        """Test the sqlite backend"""
        store = create_store(backend="sqlite")
        assert isinstance(store, SQLiteStore)
        store.close()

    @pytest.mark.skipif(not is_duckdb_available(), reason="DuckDB not installed")
    def test_auto_prefers_duckdb(self):
        """Test auto picks DuckDB when installed"""
        from sqldoc.stores import DuckDBStore

        store = create_store(backend="AUTO")
        assert isinstance(store, DuckDBStore)
        store.close()

    def test_unknown(self):
        """Test an unknown backend"""
        with pytest.raises(ValueError, match="Unknown backend"):
            create_store(backend="mysql")

    def test_sqlite_unavailable(self, tmp_path):
        """Test an unopenable database path raises StoreUnavailable"""
        with pytest.raises(StoreUnavailable):
            SQLiteStore(str(tmp_path / "missing" / "dir" / "db.sqlite"))

    def test_duckdb_missing_hint(self, monkeypatch):
        """Test the missing-duckdb hint names an installable package"""
        from sqldoc.stores import duckdb_store

        monkeypatch.setattr(duckdb_store, "DUCKDB_AVAILABLE", False)
        with pytest.raises(ImportError, match=r"pip install sqldoc$"):
            duckdb_store.DuckDBStore()
