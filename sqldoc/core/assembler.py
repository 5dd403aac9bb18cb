"""
Result Assembler - rebuild a JSON value from (name, path, data) rows

Rows are grouped by row key. The outer container is an array when every
row key is a decimal integer without leading zeros, otherwise an object.
Each row's path, relative to the queried prefix, is decoded and the leaf
is written into the container, creating intermediate arrays (for index
keys) and objects (for member keys) on the way. When only one row key
matched, that row's value is returned instead of the one-entry outer
container.

Arrays are padded with null up to the highest index, but never past
MAX_INDEX_GAP slots beyond the number of rows being assembled. A level
whose index would exceed that bound is built as an object keyed by the
decimal index instead, so a single far-off index cannot blow up memory.
"""

import re
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from sqldoc.path.ast_nodes import Address, PathKey
from sqldoc.path.codec import PathCodec
from sqldoc.stores.base import Row

_DIGITS = re.compile(r"0|[1-9][0-9]*")

MAX_INDEX_GAP = 1024


class Shape(Enum):
    """Container shape of a reconstructed level"""

    ARRAY = "array"
    OBJECT = "object"

    @classmethod
    def of_row_keys(cls, names: Iterable[str]) -> "Shape":
        """ARRAY if every row key is a canonical decimal integer"""
        return cls.ARRAY if all(_DIGITS.fullmatch(name) for name in names) else cls.OBJECT

    @classmethod
    def of_key(cls, key: PathKey, limit: Optional[int] = None) -> "Shape":
        if not isinstance(key, int):
            return cls.OBJECT
        return cls.ARRAY if limit is None or key < limit else cls.OBJECT

    def empty(self):
        return [] if self is Shape.ARRAY else {}


class ResultAssembler:
    """
    Reassembles query rows into a single JSON value

    Example:
        >>> rows = [Row("0", "name", "John"), Row("1", "name", "Jane")]
        >>> ResultAssembler(compile_address("users[*].name")).assemble(rows)
        ['John', 'Jane']
    """

    def __init__(self, address: Address):
        self.address = address
        self.codec = PathCodec()
        self.prefix = self.codec.encode(address.literal_prefix())

    def relative_path(self, path: str) -> str:
        """
        Strip the queried prefix from a stored path

        The prefix is only removed on a segment boundary; otherwise (as can
        happen with floating wildcard matches) the stored path is used as is.
        """
        if not self.prefix or not path.startswith(self.prefix):
            return path
        remainder = path[len(self.prefix):]
        if remainder and remainder[0] not in ".[":
            return path
        return remainder

    def assemble(self, rows: Sequence[Row]) -> Any:
        """
        Build the result value

        Returns:
            None for no rows, the stored leaf for a single row at the queried
            address, otherwise the reconstructed container
        """
        if not rows:
            return None

        if len(rows) == 1 and self.relative_path(rows[0].path) == "":
            return rows[0].data

        names = {row.name for row in rows}
        limit = len(rows) + MAX_INDEX_GAP
        shape = Shape.of_row_keys(names)
        if shape is Shape.ARRAY and max(int(name) for name in names) >= limit:
            shape = Shape.OBJECT
        result = shape.empty()

        for row in rows:
            name: PathKey = int(row.name) if shape is Shape.ARRAY else row.name
            keys = [name] + self.codec.decode(self.relative_path(row.path))
            result = assign(result, keys, row.data, limit)

        if len(names) == 1:
            only = next(iter(names))
            return result[int(only)] if shape is Shape.ARRAY else result[only]

        return result


def assign(container: Any, keys: List[PathKey], value: Any, limit: Optional[int] = None) -> Any:
    """
    Deep-assign value at keys, creating intermediate containers

    An integer key at or above limit turns its level into an object keyed
    by the decimal index rather than padding a list that far.

    Returns the (possibly replaced) container so the caller can rebind it.
    """
    if not keys:
        return value

    container = _coerce(container, keys[0], limit)
    key = keys[0]
    child = _get(container, key)
    _put(container, key, assign(child, keys[1:], value, limit))
    return container


def _coerce(container: Any, key: PathKey, limit: Optional[int] = None) -> Any:
    """Make container able to hold key, converting stale shapes"""
    if isinstance(container, dict):
        return container
    if isinstance(container, list):
        if Shape.of_key(key, limit) is Shape.ARRAY:
            return container
        return {str(index): item for index, item in enumerate(container)}
    return Shape.of_key(key, limit).empty()


def _get(container: Any, key: PathKey) -> Optional[Any]:
    if isinstance(container, list):
        return container[key] if key < len(container) else None
    return container.get(str(key) if isinstance(key, int) else key)


def _put(container: Any, key: PathKey, value: Any) -> None:
    if isinstance(container, list):
        if key >= len(container):
            container.extend([None] * (key + 1 - len(container)))
        container[key] = value
    else:
        container[str(key) if isinstance(key, int) else key] = value
