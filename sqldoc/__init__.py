"""
SQLDoc - JSON documents on a flat relational table

Stores arbitrary JSON values as (name, path, data) leaf rows and reads them
back through JSONPath-like addresses such as "users[*].address.city".
"""

__version__ = "0.1.0"

# Main API
from sqldoc.core.errors import (
    InvalidAddress,
    MalformedPath,
    NotJSON,
    SqlDocError,
    StoreConflict,
    StoreError,
    StoreUnavailable,
)
from sqldoc.core.store import DocumentStore, connect

__all__ = [
    "__version__",
    "connect",
    "DocumentStore",
    "SqlDocError",
    "InvalidAddress",
    "MalformedPath",
    "NotJSON",
    "StoreError",
    "StoreUnavailable",
    "StoreConflict",
]
