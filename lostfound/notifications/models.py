"""Result types and exceptions for notification dispatch."""

from dataclasses import dataclass, field
from typing import List


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotificationWriteError(NotificationError):
    """Raised by a notification store when a single notification cannot be created."""

    pass


class NotificationTemplateError(NotificationError):
    """Raised when email template rendering fails."""

    pass


class SMTPDeliveryError(NotificationError):
    """Raised when SMTP delivery of a match email fails."""

    pass


@dataclass
class DispatchResult:
    """Outcome counts for one dispatch of matches.

    Attributes:
        notifications_created: In-app notifications written successfully
        notifications_failed: Notification writes that failed (isolated)
        emails_sent: Match emails accepted by the email collaborator
        emails_failed: Match emails that raised or reported failure
        emails_skipped: Emails not attempted (no address on file, email disabled)
        failed_recipients: User ids whose notification write failed
    """

    notifications_created: int = 0
    notifications_failed: int = 0
    emails_sent: int = 0
    emails_failed: int = 0
    emails_skipped: int = 0
    failed_recipients: List[str] = field(default_factory=list)

    @property
    def had_errors(self) -> bool:
        return self.notifications_failed > 0 or self.emails_failed > 0
