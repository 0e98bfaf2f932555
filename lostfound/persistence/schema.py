"""ORM models and conversion to and from domain models.

Timestamps are stored as ISO 8601 strings with microseconds and a Z
suffix, which sort lexicographically in chronological order.
"""

import uuid

from sqlalchemy import JSON, Boolean, Column, Float, ForeignKey, Index, String, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from lostfound.domain.models import Coordinates, Item, ItemType, NotificationCreate
from lostfound.logging import get_logger
from lostfound.utils.timestamps import format_timestamp, parse_timestamp, utc_now

logger = get_logger(__name__, component="database")

Base = declarative_base()


def _format_datetime(dt):
    return format_timestamp(dt, include_microseconds=True) or None


class UserModel(Base):
    """ORM model for users table. Only contact details needed for match emails."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True, nullable=False)
    email = Column(String(320), nullable=True)
    full_name = Column(String(255), nullable=True)


class ItemModel(Base):
    """ORM model for items table (lost and found reports)."""

    __tablename__ = "items"

    id = Column(String(64), primary_key=True, nullable=False)
    item_type = Column(String(10), nullable=False)

    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    location = Column(String(255), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    campus_id = Column(String(64), nullable=True)
    posted_by = Column(String(64), nullable=True)
    status = Column(String(20), nullable=False, default="active")
    created_at = Column(String(50), nullable=True)

    tags = Column(JSON, nullable=False, default=list)
    embedding = Column(JSON, nullable=False, default=list)

    # Candidate lookup filters on campus, type and status, newest first
    __table_args__ = (
        Index("idx_items_candidates", "campus_id", "item_type", "status", "created_at"),
        Index("idx_items_posted_by", "posted_by"),
    )

    def to_domain(self) -> Item:
        coordinates = None
        if self.latitude is not None or self.longitude is not None:
            coordinates = Coordinates(latitude=self.latitude, longitude=self.longitude)

        return Item(
            id=self.id,
            title=self.title,
            description=self.description,
            category=self.category,
            location=self.location,
            coordinates=coordinates,
            campus_id=self.campus_id,
            posted_by=self.posted_by,
            status=self.status,
            created_at=parse_timestamp(self.created_at),
            tags=self.tags or [],
            embedding=self.embedding or [],
        )

    @classmethod
    def from_domain(cls, item: Item, item_type: ItemType) -> "ItemModel":
        return cls(
            id=item.id,
            item_type=ItemType(item_type).value,
            title=item.title,
            description=item.description,
            category=item.category.value if item.category else None,
            location=item.location,
            latitude=item.coordinates.latitude if item.coordinates else None,
            longitude=item.coordinates.longitude if item.coordinates else None,
            campus_id=item.campus_id,
            posted_by=item.posted_by,
            status=item.status.value,
            created_at=_format_datetime(item.created_at or utc_now()),
            tags=sorted(item.tags),
            embedding=list(item.embedding),
        )


class NotificationModel(Base):
    """ORM model for notifications table."""

    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False)
    title = Column(String(200), nullable=False)
    message = Column(String(1000), nullable=False)
    type = Column(String(20), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(String(50), nullable=False)

    __table_args__ = (Index("idx_notifications_user", "user_id", "created_at"),)

    @classmethod
    def from_domain(cls, notification: NotificationCreate) -> "NotificationModel":
        return cls(
            id=str(uuid.uuid4()),
            user_id=notification.user_id,
            title=notification.title,
            message=notification.message,
            type=notification.type.value,
            data=notification.data,
            read=False,
            created_at=_format_datetime(utc_now()),
        )


def create_schema(engine: Engine) -> None:
    """Create all tables and indexes that do not exist yet (idempotent)."""
    try:
        Base.metadata.create_all(engine, checkfirst=True)
    except Exception as e:
        logger.error(f"Failed to create database schema: {e}", exc_info=True)
        raise

    tables = inspect(engine).get_table_names()
    logger.info(f"Database schema ready. Tables: {', '.join(tables)}")
