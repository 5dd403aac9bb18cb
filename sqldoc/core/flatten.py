"""
Tree Flattener - decompose JSON values into (path, leaf) entries

Objects contribute one entry per key, arrays one entry per index, and any
other value is a leaf at the current prefix. Empty objects and arrays have
no children, so they are leaves too and are stored as-is.
"""

import math
from typing import Any, List, Sequence, Set, Tuple

from sqldoc.core.errors import NotJSON
from sqldoc.path.ast_nodes import PathKey

LeafEntry = Tuple[List[PathKey], Any]

_SCALAR_TYPES = (str, int, float, bool, type(None))


def is_container(value: Any) -> bool:
    """True for JSON objects and arrays (dict, list, tuple)"""
    return isinstance(value, (dict, list, tuple))


def flatten(value: Any, prefix: Sequence[PathKey] = ()) -> List[LeafEntry]:
    """
    Flatten a JSON value into leaf entries

    Args:
        value: JSON value (dict, list/tuple, str, int, float, bool, None)
        prefix: Keys prepended to every produced path

    Returns:
        List of (path keys, leaf value) in depth-first order

    Raises:
        NotJSON: If the value is cyclic, has a non-string object key, a
            non-finite float, or a non-JSON type

    Example:
        >>> flatten({"name": "John", "tags": ["a", "b"]})
        [(['name'], 'John'), (['tags', 0], 'a'), (['tags', 1], 'b')]
    """
    entries: List[LeafEntry] = []
    _walk(value, list(prefix), entries, set())
    return entries


def _walk(value: Any, prefix: List[PathKey], entries: List[LeafEntry], active: Set[int]) -> None:
    if is_container(value):
        if not value:
            entries.append((prefix, {} if isinstance(value, dict) else []))
            return

        marker = id(value)
        if marker in active:
            raise NotJSON(f"Cyclic structure at path {prefix!r}")
        active.add(marker)

        if isinstance(value, dict):
            for key, child in value.items():
                if not isinstance(key, str):
                    raise NotJSON(f"Object keys must be strings, got {key!r} at path {prefix!r}")
                _walk(child, prefix + [key], entries, active)
        else:
            for index, child in enumerate(value):
                _walk(child, prefix + [index], entries, active)

        active.discard(marker)
        return

    if not isinstance(value, _SCALAR_TYPES):
        raise NotJSON(f"Value of type {type(value).__name__} is not JSON serializable (path {prefix!r})")
    if isinstance(value, float) and not math.isfinite(value):
        raise NotJSON(f"Non-finite float {value!r} is not valid JSON (path {prefix!r})")

    entries.append((prefix, value))
