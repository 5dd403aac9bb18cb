"""
AST node definitions for addressing expressions

An expression such as ``users[0].address.city`` parses into a sequence of
segments. The first segment names the collection (table), the second the
row key, and the rest form the sub-path stored in the ``path`` column.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union


@dataclass(frozen=True)
class Member:
    """Child member access: ``.name`` or ``["name"]``"""

    name: str

    @property
    def key(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"Member({self.name!r})"


@dataclass(frozen=True)
class Index:
    """Numeric index access: ``[n]``"""

    n: int

    @property
    def key(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return f"Index({self.n})"


@dataclass(frozen=True)
class Wildcard:
    """Single-level wildcard: ``.*`` or ``[*]``"""

    def __repr__(self) -> str:
        return "Wildcard()"


Segment = Union[Member, Index, Wildcard]

# Raw path keys as produced by the flattener and the decoder
PathKey = Union[str, int]


@dataclass(frozen=True)
class Address:
    """
    Compiled addressing expression

    Examples:
        users              -> Address("users", None, ())
        users[0].name      -> Address("users", "0", (Member("name"),))
        users[*].address   -> Address("users", None, (Member("address"),), wildcard_row=True)
    """

    collection: str
    row_key: Optional[str] = None
    sub_path: Tuple[Segment, ...] = field(default_factory=tuple)
    wildcard_row: bool = False

    @property
    def has_wildcard(self) -> bool:
        """True if the row key or any sub-path segment is a wildcard"""
        return self.wildcard_row or any(isinstance(s, Wildcard) for s in self.sub_path)

    def literal_prefix(self) -> List[PathKey]:
        """Keys of the sub-path up to (not including) the first wildcard"""
        keys: List[PathKey] = []
        for segment in self.sub_path:
            if isinstance(segment, Wildcard):
                break
            keys.append(segment.key)
        return keys

    def __repr__(self) -> str:
        row = "*" if self.wildcard_row else self.row_key
        return f"Address({self.collection!r}, row={row!r}, sub_path={list(self.sub_path)})"
