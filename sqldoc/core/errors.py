"""
Error taxonomy for SQLDoc

All exceptions raised by the package derive from SqlDocError so callers
can catch the whole family with one clause.
"""


class SqlDocError(Exception):
    """Base class for all SQLDoc errors"""

    pass


class InvalidAddress(SqlDocError):
    """Raised when an addressing expression cannot be compiled"""

    pass


class MalformedPath(SqlDocError):
    """Raised when a canonical path cannot be encoded or decoded"""

    pass


class NotJSON(SqlDocError):
    """Raised when a value is cyclic or contains non-JSON data"""

    pass


class StoreError(SqlDocError):
    """Raised when the relational store fails"""

    pass


class StoreUnavailable(StoreError):
    """Raised when the store cannot be reached (connection or IO failure)"""

    pass


class StoreConflict(StoreError):
    """Raised when a statement or transaction fails and is rolled back"""

    pass
