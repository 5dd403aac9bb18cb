"""
Query Builder - translate compiled addresses into SQL

Write path: one CREATE TABLE IF NOT EXISTS followed by one upsert per
flattened leaf; the caller runs them as a single transaction.

Read path: one SELECT filtered by row key and, when the address has a
sub-path, by a regular expression over the canonical ``path`` column.
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from sqldoc.core.errors import InvalidAddress, NotJSON
from sqldoc.core.flatten import flatten, is_container
from sqldoc.path.ast_nodes import Address, PathKey, Wildcard
from sqldoc.path.codec import PathCodec
from sqldoc.path.parser import SCALAR_ROW_KEY

# Regex fragments for one canonical path segment
_MEMBER = r"[A-Za-z_][A-Za-z0-9_]*"
_INDEX = r"\[[0-9]+\]"
_QUOTED = r'\["(?:[^"\\]|\\.)*"\]'

SEGMENT_PATTERN = rf"(?:\.{_MEMBER}|{_INDEX}|{_QUOTED})"
ROOT_SEGMENT_PATTERN = rf"(?:{_MEMBER}|{_INDEX}|{_QUOTED})"
DESCENDANT_PATTERN = r"(?:[.\[].*)?"

# Characters escaped in literal fragments; valid for both RE2 and Python re
_REGEX_SPECIAL = frozenset("\\.^$|?*+()[]{}")


@dataclass(frozen=True)
class Statement:
    """A SQL string with its bound parameters"""

    sql: str
    params: Tuple[Any, ...] = field(default_factory=tuple)

    def __repr__(self) -> str:
        return f"{' '.join(self.sql.split())} {list(self.params)}"


def quote_identifier(name: str) -> str:
    """Double-quote an SQL identifier, doubling embedded quotes"""
    return '"' + name.replace('"', '""') + '"'


def escape_regex(text: str) -> str:
    """Escape regex metacharacters in a literal path fragment"""
    return "".join("\\" + char if char in _REGEX_SPECIAL else char for char in text)


def dump_leaf(value: Any) -> str:
    """Serialize a leaf value for the data column"""
    try:
        return json.dumps(value, allow_nan=False, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise NotJSON(f"Value {value!r} is not JSON serializable: {e}") from e


class QueryBuilder:
    """
    Builds write batches and read queries for a store dialect

    Args:
        regex_match_template: Backend predicate for a full regex match with
            ``{column}`` placeholder and one ``?`` for the pattern
    """

    def __init__(self, regex_match_template: str = "regexp_full_match({column}, ?)"):
        self.regex_match_template = regex_match_template
        self.codec = PathCodec()

    def create_table(self, collection: str) -> Statement:
        table = quote_identifier(collection)
        return Statement(
            f"CREATE TABLE IF NOT EXISTS {table} ("
            "name TEXT NOT NULL, "
            "path TEXT NOT NULL, "
            "data TEXT, "
            "PRIMARY KEY (name, path))"
        )

    def upsert(self, collection: str, row_key: str, path: Sequence[PathKey], value: Any) -> Statement:
        table = quote_identifier(collection)
        return Statement(
            f"INSERT INTO {table} (name, path, data) VALUES (?, ?, ?) "
            "ON CONFLICT (name, path) DO UPDATE SET data = excluded.data",
            (row_key, self.codec.encode(path), dump_leaf(value)),
        )

    def build_write(self, address: Address, value: Any) -> List[Statement]:
        """
        Build the statements for one set() call

        Raises:
            InvalidAddress: If the address contains a wildcard
            NotJSON: If the value cannot be stored as JSON
        """
        if address.has_wildcard:
            raise InvalidAddress(f"Cannot write through a wildcard address: {address!r}")

        statements = [self.create_table(address.collection)]

        if address.row_key is not None:
            base = [segment.key for segment in address.sub_path]
            rows = [(address.row_key, flatten(value, base))]
        elif is_container(value):
            # Seed the collection: one row per top-level key or index
            items = value.items() if isinstance(value, dict) else enumerate(value)
            rows = []
            for key, child in items:
                if not isinstance(key, (str, int)) or isinstance(key, bool):
                    raise NotJSON(f"Object keys must be strings, got {key!r}")
                rows.append((str(key), flatten(child)))
        else:
            rows = [(SCALAR_ROW_KEY, flatten(value))]

        for row_key, entries in rows:
            for path, leaf in entries:
                statements.append(self.upsert(address.collection, row_key, path, leaf))

        return statements

    def build_pattern(self, address: Address) -> Optional[str]:
        """
        Compile the sub-path into a full-match regex over the path column

        Literal segments are encoded canonically and escaped; each wildcard
        becomes a one-segment token. With a wildcard row key the pattern
        floats (``.*`` on both sides), otherwise it is anchored at the path
        root and also matches descendants.

        Returns:
            Regex string, or None when no path filter is needed
        """
        parts: List[str] = []
        literal = ""
        position = 0

        for segment in address.sub_path:
            if isinstance(segment, Wildcard):
                if literal:
                    parts.append(escape_regex(literal))
                    literal = ""
                parts.append(ROOT_SEGMENT_PATTERN if position == 0 else SEGMENT_PATTERN)
            else:
                encoded = self.codec.encode_key(segment)
                if position == 0:
                    encoded = encoded.lstrip(".")
                literal += encoded
            position += 1

        if literal:
            parts.append(escape_regex(literal))

        if not parts:
            return None

        pattern = "".join(parts)
        if address.wildcard_row:
            pattern = f".*{pattern}.*"
        else:
            pattern = pattern + DESCENDANT_PATTERN

        return "(?s)" + pattern

    def build_read(self, address: Address) -> Statement:
        """Build the SELECT for one get() call"""
        table = quote_identifier(address.collection)
        conditions: List[str] = []
        params: List[Any] = []

        if address.row_key is not None and not address.wildcard_row:
            conditions.append("name = ?")
            params.append(address.row_key)

        pattern = self.build_pattern(address)
        if pattern is not None:
            conditions.append(self.regex_match_template.format(column="path"))
            params.append(pattern)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return Statement(
            f"SELECT name, path, data FROM {table}{where} ORDER BY name, path",
            tuple(params),
        )
