"""Domain models for the lost & found matching service."""

from .models import (
    Category,
    Coordinates,
    Item,
    ItemStatus,
    ItemType,
    NotificationCreate,
    NotificationType,
)

__all__ = [
    "Item",
    "ItemType",
    "ItemStatus",
    "Category",
    "Coordinates",
    "NotificationCreate",
    "NotificationType",
]
