"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can
catch every storage failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails."""

    pass


class DataIntegrityError(PersistenceError):
    """Raised on constraint violations (duplicate ids, missing foreign keys)."""

    pass
