"""Background execution of matching runs."""

from .service import BackgroundMatchingService, database_runner

__all__ = [
    "BackgroundMatchingService",
    "database_runner",
]
