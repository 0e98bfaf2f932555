"""Persistence layer backed by SQLAlchemy.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository classes
    - ItemRepository: item lookup, insert and candidate queries (ItemStore)
    - NotificationRepository: notification writes (NotificationStore)
    - UserRepository: user email lookup (UserDirectory)

Example usage:
    >>> from lostfound.persistence import init_database, get_session, ItemRepository
    >>> init_database("sqlite:///./data/lostfound.db")
    >>> with get_session() as session:
    ...     item = ItemRepository(session).get_by_id("item-1")
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import DatabaseConnectionError, DataIntegrityError, PersistenceError
from .repositories import ItemRepository, NotificationRepository, UserRepository

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repositories
    "ItemRepository",
    "NotificationRepository",
    "UserRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "DataIntegrityError",
]
