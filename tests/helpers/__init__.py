"""Test helpers for the lost & found matching tests."""

from .fakes import (
    BASE_TIME,
    DictUserDirectory,
    InMemoryItemStore,
    RecordingEmailSender,
    RecordingNotificationStore,
    make_item,
)

__all__ = [
    "BASE_TIME",
    "DictUserDirectory",
    "InMemoryItemStore",
    "RecordingEmailSender",
    "RecordingNotificationStore",
    "make_item",
]
