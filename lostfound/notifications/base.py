"""Collaborator interfaces used by the notification dispatcher."""

from abc import ABC, abstractmethod
from typing import Optional

from lostfound.domain.models import ItemType, NotificationCreate


class NotificationStore(ABC):
    """Creates in-app notifications."""

    @abstractmethod
    def create_notification(self, notification: NotificationCreate) -> str:
        """Persist one notification and return its id.

        Raises:
            Exception: Any failure; the dispatcher isolates it per call
        """


class MatchEmailSender(ABC):
    """Sends match emails to item posters."""

    @abstractmethod
    def send_match_email(
        self,
        email: str,
        item_type: ItemType,
        item_title: str,
        match_percentage: int,
    ) -> bool:
        """Send a match email.

        Args:
            email: Recipient address
            item_type: Type of the recipient's own item
            item_title: Title of the matched (other) item
            match_percentage: Match score, 0-100

        Returns:
            True if the email was handed to the transport, False otherwise
        """


class UserDirectory(ABC):
    """Resolves user contact details."""

    @abstractmethod
    def get_email(self, user_id: str) -> Optional[str]:
        """Return the user's email address, or None if unknown."""
