"""Repositories backing the matching engine's storage collaborators.

Repositories work inside the caller's session and never commit; the
session owner (usually get_session()) decides the transaction boundary.
Each notification write runs in its own SAVEPOINT so a failed write rolls
back alone and the remaining writes of the same dispatch still land.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lostfound.domain.models import Item, ItemStatus, ItemType, NotificationCreate
from lostfound.logging import get_logger
from lostfound.matching.retriever import DEFAULT_CANDIDATE_LIMIT, ItemStore
from lostfound.notifications.base import NotificationStore, UserDirectory
from lostfound.notifications.models import NotificationWriteError

from .exceptions import DataIntegrityError, PersistenceError
from .schema import ItemModel, NotificationModel, UserModel

logger = get_logger(__name__, component="database")


class ItemRepository(ItemStore):
    """Item queries and inserts."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, item_id: str) -> Optional[Item]:
        """Retrieve an item by id, or None if it does not exist.

        Raises:
            PersistenceError: If a database error occurs
        """
        try:
            model = self.session.get(ItemModel, str(item_id))
            return model.to_domain() if model else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to retrieve item {item_id}: {e}") from e

    def get_item_type(self, item_id: str) -> Optional[ItemType]:
        """Return whether a stored item is lost or found, or None if unknown."""
        try:
            model = self.session.get(ItemModel, str(item_id))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to retrieve item {item_id}: {e}") from e
        return ItemType(model.item_type) if model else None

    def add(self, item: Item, item_type: ItemType) -> Item:
        """Insert a new item.

        Raises:
            DataIntegrityError: If an item with the same id exists
            PersistenceError: If any other database error occurs
        """
        try:
            model = ItemModel.from_domain(item, item_type)
            self.session.add(model)
            self.session.flush()
            return model.to_domain()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to add item {item.id}: {e}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to add item {item.id}: {e}") from e

    def find_items(
        self,
        item_type: ItemType,
        campus_id: str,
        status: ItemStatus = ItemStatus.ACTIVE,
        exclude_posted_by: Optional[str] = None,
        limit: int = DEFAULT_CANDIDATE_LIMIT,
    ) -> List[Item]:
        """Items of item_type on campus_id with status, newest first.

        Raises:
            PersistenceError: If a database error occurs
        """
        try:
            stmt = select(ItemModel).where(
                ItemModel.item_type == ItemType(item_type).value,
                ItemModel.campus_id == campus_id,
                ItemModel.status == ItemStatus(status).value,
            )
            if exclude_posted_by is not None:
                # NULL posters are kept; "!=" alone would drop them
                stmt = stmt.where(
                    (ItemModel.posted_by != exclude_posted_by) | ItemModel.posted_by.is_(None)
                )
            stmt = stmt.order_by(ItemModel.created_at.desc()).limit(limit)

            return [model.to_domain() for model in self.session.execute(stmt).scalars().all()]

        except SQLAlchemyError as e:
            logger.error(
                f"Error querying {item_type} items on campus {campus_id}: {e}",
                extra={"event": "database.query.failed"},
            )
            raise PersistenceError(f"Failed to query items: {e}") from e


class NotificationRepository(NotificationStore):
    """Creates notification rows, one savepoint per write."""

    def __init__(self, session: Session):
        self.session = session

    def create_notification(self, notification: NotificationCreate) -> str:
        """Insert one notification and return its id.

        Raises:
            NotificationWriteError: If the row cannot be written
        """
        model = NotificationModel.from_domain(notification)
        try:
            with self.session.begin_nested():
                self.session.add(model)
                self.session.flush()
        except SQLAlchemyError as e:
            raise NotificationWriteError(
                f"Failed to create notification for user {notification.user_id}: {e}"
            ) from e
        return model.id

    def list_for_user(self, user_id: str) -> List[NotificationModel]:
        """Notifications for a user, oldest first."""
        stmt = (
            select(NotificationModel)
            .where(NotificationModel.user_id == user_id)
            .order_by(NotificationModel.created_at)
        )
        return list(self.session.execute(stmt).scalars().all())


class UserRepository(UserDirectory):
    """User contact lookup."""

    def __init__(self, session: Session):
        self.session = session

    def get_email(self, user_id: str) -> Optional[str]:
        try:
            user = self.session.get(UserModel, str(user_id))
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to look up user {user_id}: {e}") from e
        return user.email if user else None

    def add(self, user_id: str, email: Optional[str] = None, full_name: Optional[str] = None) -> None:
        """Insert a user.

        Raises:
            DataIntegrityError: If the user id already exists
        """
        try:
            self.session.add(UserModel(id=str(user_id), email=email, full_name=full_name))
            self.session.flush()
        except IntegrityError as e:
            raise DataIntegrityError(f"Failed to add user {user_id}: {e}") from e
