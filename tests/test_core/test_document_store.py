"""
End-to-end tests for DocumentStore set/get on every backend
"""

import pytest

from sqldoc import connect
from sqldoc.core.errors import InvalidAddress, NotJSON, StoreConflict, StoreError
from sqldoc.core.store import DocumentStore
from sqldoc.stores.base import Row

try:
    import pandas as pd  # noqa: F401

    PANDAS_AVAILABLE = True
except ImportError:
    PANDAS_AVAILABLE = False



class TestScenarios:
    """Test the documented usage scenarios"""

    def test_wildcard_names(self, doc_store):
        """Test users[*].name collects one value per row"""
        doc_store.set("users[0]", {"name": "John", "age": 30})
        doc_store.set("users[1]", {"name": "Jane", "age": 25})
        assert doc_store.get("users[*].name") == ["John", "Jane"]

    def test_scalar_without_row_key(self, doc_store):
        """Test a bare scalar round-trips through the sentinel row"""
        doc_store.set("test", "hello world")
        assert doc_store.get("test") == "hello world"

    def test_missing_collection_is_none(self, doc_store):
        """Test reading an untouched collection returns None"""
        assert doc_store.get("missingCollection.anything") is None
        assert doc_store.get("missingCollection") is None

    def test_collection_names_ignore_case(self, doc_store):
        """Test collections differing only in case share one table"""
        doc_store.set("Users[0]", {"name": "John"})
        doc_store.set("users[1]", {"name": "Jane"})
        assert doc_store.get("users[1].name") == "Jane"
        assert doc_store.get("Users[0].name") == "John"
        assert doc_store.get("USERS[*].name") == ["John", "Jane"]
        assert len(doc_store.rows("users")) == 2

    def test_leading_zero_row_key_is_distinct(self, doc_store):
        """Test c.01 and c.1 address different rows"""
        doc_store.set("c.01", "a")
        doc_store.set("c.1", "b")
        assert doc_store.get("c.01") == "a"
        assert doc_store.get("c.1") == "b"
        assert doc_store.get("c[*]") == {"01": "a", "1": "b"}

    def test_far_index_read_as_object(self, doc_store):
        """Test a far-off index reads back without padding a huge list"""
        doc_store.set("c[0]", "a")
        doc_store.set("c[300000000]", "b")
        assert doc_store.get("c") == {"0": "a", "300000000": "b"}
        assert doc_store.get("c[300000000]") == "b"

    def test_missing_row_is_none(self, doc_store):
        """Test reading a missing row of an existing collection returns None"""
        doc_store.set("users[0]", {"name": "John"})
        assert doc_store.get("users[5]") is None
        assert doc_store.get("users[0].nope") is None

    def test_wildcard_objects(self, doc_store, sample_users):
        """Test users[*].address returns one object per row"""
        doc_store.set("users[0]", sample_users[0])
        doc_store.set("users[1]", sample_users[1])
        assert doc_store.get("users[*].address") == [
            {"city": "New York", "state": "NY"},
            {"city": "San Francisco", "state": "CA"},
        ]

    def test_seed_collection_from_array(self, doc_store, sample_users):
        """Test writing an array to a collection creates one row per element"""
        doc_store.set("usersAllInOnce", sample_users)
        assert [row.name for row in doc_store.rows("usersAllInOnce") if row.path == "name"] == ["0", "1"]
        assert doc_store.get("usersAllInOnce") == sample_users
        assert doc_store.get("usersAllInOnce[1].address.city") == "San Francisco"

    def test_seed_collection_from_object(self, doc_store):
        """Test writing an object to a collection creates one row per key"""
        doc_store.set("settings", {"theme": "dark", "limits": {"max": 10}})
        assert doc_store.get("settings") == {"theme": "dark", "limits": {"max": 10}}
        assert doc_store.get("settings.limits") == {"max": 10}

    def test_array_inside_row(self, doc_store):
        """Test wildcard over an array inside one row"""
        doc_store.set("posts.p1", {"tags": ["a", "b", "c"]})
        assert doc_store.get("posts.p1.tags[*]") == ["a", "b", "c"]
        assert doc_store.get("posts.p1.tags[1]") == "b"


class TestRoundTrip:
    """Test get(address) returns what set(address) wrote"""

    @pytest.mark.parametrize(
        "value",
        [
            {"name": "John", "age": 30, "address": {"city": "New York", "state": "NY"}},
            [1, [2, 3], {"four": 4}],
            ["only"],
            {"nested": {"deep": {"deeper": [True, False, None]}}},
            {"a": {}, "b": [], "c": ""},
            {},
            [],
            {"first name": "x", "say \"hi\"": "y", "back\\slash": 1, "0": "zero", "dot.ted": 2.5},
            {"ünïcode": "välue", "multi\nline": "ok"},
            "plain string",
            42,
            -1.25,
            True,
        ],
    )
    def test_round_trip(self, doc_store, value):
        """Test a value written under a row key reads back unchanged"""
        doc_store.set("docs[0]", value)
        assert doc_store.get("docs[0]") == value

    def test_round_trip_sub_path(self, doc_store):
        """Test a container written at a sub-path reads back from it"""
        doc_store.set("users[0].address", {"city": "Boston", "zip": "02101"})
        assert doc_store.get("users[0].address") == {"city": "Boston", "zip": "02101"}
        assert doc_store.get("users[0]") == {"address": {"city": "Boston", "zip": "02101"}}

    def test_quoted_row_key(self, doc_store):
        """Test row keys that need quoting"""
        doc_store.set('users["jane doe"]', {"age": 25})
        assert doc_store.get('users["jane doe"].age') == 25
        assert doc_store.rows("users")[0].name == "jane doe"


class TestUpsert:
    """Test overwrite semantics"""

    def test_idempotent(self, doc_store):
        """Test writing the same value twice stores the same rows"""
        value = {"name": "John", "tags": ["a", "b"]}
        doc_store.set("users[0]", value)
        first = doc_store.rows("users")
        doc_store.set("users[0]", value)
        assert doc_store.rows("users") == first
        assert len(first) == 3

    def test_latest_write_wins(self, doc_store):
        """Test a leaf overwrite replaces the stored data"""
        doc_store.set("users[0]", {"name": "John", "age": 30})
        doc_store.set("users[0].age", 31)
        assert doc_store.get("users[0]") == {"name": "John", "age": 31}
        assert len(doc_store.rows("users")) == 2

    def test_set_merges_leaves(self, doc_store):
        """Test leaves not mentioned by a later write are kept"""
        doc_store.set("users[0]", {"a": 1})
        doc_store.set("users[0]", {"b": 2})
        assert doc_store.get("users[0]") == {"a": 1, "b": 2}


class TestAtomicity:
    """Test that a failed set leaves no trace"""

    def fail_on_insert(self, monkeypatch, store, k):
        original = store.execute_statement
        calls = {"inserts": 0}

        def execute_statement(sql, params=()):
            if sql.startswith("INSERT"):
                calls["inserts"] += 1
                if calls["inserts"] == k:
                    raise RuntimeError("simulated failure")
            return original(sql, params)

        monkeypatch.setattr(store, "execute_statement", execute_statement)
        return calls

    def test_failure_rolls_back(self, monkeypatch, raw_store):
        """Test no leaf of a failed transaction is visible"""
        doc_store = DocumentStore(raw_store)
        doc_store.set("users[0]", {"name": "John", "age": 30})
        before = doc_store.rows("users")

        self.fail_on_insert(monkeypatch, raw_store, k=3)
        with pytest.raises(StoreConflict, match="rolled back"):
            doc_store.set("users[0]", {"name": "Johnny", "age": 31, "city": "NYC", "zip": "1"})

        monkeypatch.undo()
        assert doc_store.rows("users") == before
        assert doc_store.get("users[0]") == {"name": "John", "age": 30}

    def test_failure_on_new_collection(self, monkeypatch, raw_store):
        """Test a failed first write does not create the collection"""
        doc_store = DocumentStore(raw_store)
        self.fail_on_insert(monkeypatch, raw_store, k=2)
        with pytest.raises(StoreConflict):
            doc_store.set("fresh[0]", {"a": 1, "b": 2})

        monkeypatch.undo()
        assert doc_store.collections() == []
        assert doc_store.get("fresh[0]") is None

    def test_store_usable_after_failure(self, monkeypatch, raw_store):
        """Test the store accepts writes after a rollback"""
        doc_store = DocumentStore(raw_store)
        self.fail_on_insert(monkeypatch, raw_store, k=1)
        with pytest.raises(StoreConflict):
            doc_store.set("c[0]", "x")

        monkeypatch.undo()
        doc_store.set("c[0]", "y")
        assert doc_store.get("c[0]") == "y"


class TestErrors:
    """Test error propagation"""

    def test_invalid_address(self, doc_store):
        """Test compile errors surface before touching the store"""
        with pytest.raises(InvalidAddress):
            doc_store.get("[0].x")
        with pytest.raises(InvalidAddress):
            doc_store.set("", 1)

    def test_wildcard_write(self, doc_store):
        """Test writing through a wildcard is rejected"""
        with pytest.raises(InvalidAddress):
            doc_store.set("users[*].name", "x")
        assert doc_store.collections() == []

    def test_cyclic_value(self, doc_store):
        """Test cyclic values are rejected and nothing is written"""
        value = {"a": 1}
        value["me"] = value
        with pytest.raises(NotJSON):
            doc_store.set("users[0]", value)
        assert doc_store.collections() == []

    def test_corrupt_data_cell(self, doc_store):
        """Test undecodable data cells raise StoreError"""
        doc_store.set("users[0]", {"a": 1})
        doc_store.store.execute_statement(
            "UPDATE \"users\" SET data = ? WHERE name = ?", ("not json", "0")
        )
        with pytest.raises(StoreError, match="Corrupt data"):
            doc_store.get("users[0].a")


class TestInspection:
    """Test collections(), rows() and to_dataframe()"""

    def test_collections(self, doc_store):
        """Test collection listing"""
        assert doc_store.collections() == []
        doc_store.set("zeta[0]", 1)
        doc_store.set("alpha[0]", 1)
        assert doc_store.collections() == ["alpha", "zeta"]

    def test_rows(self, doc_store):
        """Test raw rows are ordered by name and path"""
        doc_store.set("users[1]", {"b": 2, "a": [True]})
        doc_store.set("users[0]", "x")
        assert doc_store.rows("users") == [
            Row("0", "", "x"),
            Row("1", "a[0]", True),
            Row("1", "b", 2),
        ]
        assert doc_store.rows("missing") == []

    @pytest.mark.skipif(not PANDAS_AVAILABLE, reason="pandas not installed")
    def test_to_dataframe(self, doc_store):
        """Test rows as a DataFrame"""
        doc_store.set("users[0]", {"name": "John", "age": 30})
        df = doc_store.to_dataframe("users")
        assert list(df.columns) == ["name", "path", "data"]
        assert len(df) == 2
        assert set(df["path"]) == {"name", "age"}


class TestConnect:
    """Test the connect() entry point"""

    def test_sqlite_backend(self):
        """Test connecting with the sqlite backend"""
        with connect(backend="sqlite") as store:
            store.set("test", "hello")
            assert store.get("test") == "hello"

    def test_auto_backend(self):
        """Test the auto backend opens a working store"""
        with connect() as store:
            store.set("users[0].name", "John")
            assert store.get("users[0]") == {"name": "John"}

    def test_unknown_backend(self):
        """Test an unknown backend name"""
        with pytest.raises(ValueError, match="Unknown backend"):
            connect(backend="oracle")

    def test_persistence(self, tmp_path, backend, store_factory):
        """Test data survives closing and reopening a database file"""
        database = str(tmp_path / f"docs.{backend}")
        with DocumentStore(store_factory(database)) as store:
            store.set("users[0]", {"name": "John", "tags": ["a"]})

        with DocumentStore(store_factory(database)) as store:
            assert store.get("users[0]") == {"name": "John", "tags": ["a"]}
            assert store.collections() == ["users"]
