"""Core domain models for items and notifications.

This module defines the data structures shared by the matching engine and
its collaborators:
- Item: a lost or found report posted on a campus
- ItemType / ItemStatus / Category: enumerations used on items
- Coordinates: optional geographic point attached to an item
- NotificationCreate: payload for creating an in-app notification
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_validator

from lostfound.utils.timestamps import ensure_utc


class ItemType(str, Enum):
    """Which side of the marketplace an item belongs to."""

    LOST = "lost"
    FOUND = "found"

    @property
    def opposite(self) -> "ItemType":
        """The item type that can match this one."""
        return ItemType.FOUND if self is ItemType.LOST else ItemType.LOST

    @property
    def label(self) -> str:
        """Human-readable label ("Lost item" / "Found item")."""
        return f"{self.value.capitalize()} item"


class ItemStatus(str, Enum):
    """Lifecycle status of an item. Only active items are matchable."""

    ACTIVE = "active"
    RESOLVED = "resolved"
    ARCHIVED = "archived"
    LOCKED = "locked"


class Category(str, Enum):
    """Fixed item categories."""

    ELECTRONICS = "Electronics"
    DOCUMENTS = "Documents"
    ACCESSORIES = "Accessories"
    CLOTHING = "Clothing"
    KEYS = "Keys"
    BAGS = "Bags"
    OTHERS = "Others"


class NotificationType(str, Enum):
    """Notification kinds created by the matching engine."""

    MATCH = "match"


class Coordinates(BaseModel):
    """Geographic point. Either component may be missing on legacy records."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def is_complete(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Item(BaseModel):
    """A lost or found report.

    Construction is lenient about descriptive fields: records
    coming out of storage may lack a title, description, location or a
    recognised category, and the scorer handles those as zero-credit factors
    instead of the whole item being rejected.
    """

    id: str = Field(..., description="Item identifier")
    title: Optional[str] = Field(None, description="Short title")
    description: Optional[str] = Field(None, description="Free-text description")
    category: Optional[Category] = Field(None, description="Item category")
    location: Optional[str] = Field(None, description="Free-text location")
    coordinates: Optional[Coordinates] = Field(None, description="Optional lat/long")
    campus_id: Optional[str] = Field(None, description="Owning campus")
    posted_by: Optional[str] = Field(None, description="User id of the poster")
    status: ItemStatus = Field(ItemStatus.ACTIVE, description="Lifecycle status")
    created_at: Optional[datetime] = Field(None, description="Creation time (UTC)")
    tags: Set[str] = Field(default_factory=set, description="Free-form tags")
    embedding: List[float] = Field(
        default_factory=list, description="Reserved vector, not used by scoring"
    )

    @field_validator("id", "campus_id", "posted_by", mode="before")
    @classmethod
    def coerce_identifier(cls, v: Any) -> Any:
        """Accept integer or ObjectId-like identifiers and store them as strings."""
        if v is None:
            return None
        return str(v)

    @field_validator("title", "description", "location")
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped if stripped else None

    @field_validator("category", mode="before")
    @classmethod
    def normalize_category(cls, v: Any) -> Any:
        """Match category names case-insensitively; unknown names become None."""
        if v is None or isinstance(v, Category):
            return v
        if isinstance(v, str):
            for category in Category:
                if category.value.lower() == v.strip().lower():
                    return category
        return None

    @field_validator("created_at")
    @classmethod
    def ensure_created_at_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> Any:
        if v is None:
            return set()
        if isinstance(v, (list, tuple, set, frozenset)):
            return {str(tag).strip().lower() for tag in v if str(tag).strip()}
        return v

    @property
    def is_active(self) -> bool:
        return self.status == ItemStatus.ACTIVE

    @property
    def display_title(self) -> str:
        """Title for user-facing text, with a placeholder when missing."""
        return self.title or "Untitled item"

    @property
    def display_location(self) -> str:
        """Location for user-facing text, with a placeholder when missing."""
        return self.location or "an unknown location"

    model_config = {"json_schema_extra": {"example": {
        "id": "item-123",
        "title": "Black Backpack",
        "description": "Black backpack with a laptop sleeve",
        "category": "Bags",
        "location": "Central Library",
        "coordinates": {"latitude": 12.9716, "longitude": 77.5946},
        "campus_id": "campus-1",
        "posted_by": "user-1",
        "status": "active",
        "created_at": "2025-11-01T12:00:00Z",
        "tags": ["backpack"],
        "embedding": [],
    }}}


class NotificationCreate(BaseModel):
    """Payload for creating one in-app notification."""

    user_id: str = Field(..., min_length=1, description="Recipient user id")
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1, max_length=1000)
    type: NotificationType = Field(NotificationType.MATCH)
    data: Dict[str, Any] = Field(default_factory=dict, description="Structured payload")

    @field_validator("title", "message", mode="before")
    @classmethod
    def truncate(cls, v: Any, info) -> Any:
        """Clip overlong text to the column limits instead of failing the write."""
        limit = 200 if info.field_name == "title" else 1000
        if isinstance(v, str) and len(v) > limit:
            return v[: limit - 3] + "..."
        return v
