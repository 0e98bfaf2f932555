"""Notification fan-out for ranked matches.

For every match two in-app notifications are created, one per party, and
for high-confidence matches both parties are also emailed. Every write and
every send is attempted independently: a failure is logged and counted,
never propagated, and never stops the remaining writes.
"""

import logging
from typing import Optional, Sequence

from lostfound.domain.models import Item, ItemType
from lostfound.logging import get_logger
from lostfound.logging.context import log_context
from lostfound.matching.models import MatchCandidate

from .base import MatchEmailSender, NotificationStore, UserDirectory
from .models import DispatchResult
from .payloads import build_match_notification

logger = get_logger(__name__, component="notification")

DEFAULT_EMAIL_THRESHOLD = 50


class NotificationDispatcher:
    """Creates match notifications and sends match emails for both parties."""

    def __init__(
        self,
        notification_store: NotificationStore,
        email_sender: Optional[MatchEmailSender] = None,
        user_directory: Optional[UserDirectory] = None,
        email_threshold: int = DEFAULT_EMAIL_THRESHOLD,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize NotificationDispatcher.

        Args:
            notification_store: Collaborator that persists notifications
            email_sender: Collaborator that sends match emails (None disables email)
            user_directory: Resolves user ids to email addresses (required for email)
            email_threshold: Minimum score that triggers emails
            logger_instance: Optional logger (defaults to module logger)
        """
        self.notification_store = notification_store
        self.email_sender = email_sender
        self.user_directory = user_directory
        self.email_threshold = email_threshold
        self.logger = logger_instance or logger

    def dispatch(
        self, source: Item, source_type: ItemType, matches: Sequence[MatchCandidate]
    ) -> DispatchResult:
        """Notify both parties of every match.

        Args:
            source: The newly posted item
            source_type: Type of the newly posted item
            matches: Ranked matches (already thresholded)

        Returns:
            DispatchResult with per-outcome counts
        """
        source_type = ItemType(source_type)
        candidate_type = source_type.opposite
        result = DispatchResult()

        # Notifications for every match go out before any email
        for match in matches:
            with log_context(candidate_id=match.item.id, match_score=match.score):
                self._create_notification(
                    result, source.posted_by, match.item, candidate_type, match, True
                )
                self._create_notification(
                    result, match.item.posted_by, source, source_type, match, False
                )

        high_confidence = [match for match in matches if match.score >= self.email_threshold]
        if high_confidence:
            if self.email_sender is None or self.user_directory is None:
                result.emails_skipped += 2 * len(high_confidence)
                self.logger.debug(
                    "Email collaborator not configured; skipping match emails",
                    extra={"event": "email.skipped", "reason": "email_disabled"},
                )
            else:
                for match in high_confidence:
                    with log_context(candidate_id=match.item.id, match_score=match.score):
                        self._send_email(result, source.posted_by, source_type, match.item, match)
                        self._send_email(result, match.item.posted_by, candidate_type, source, match)

        self.logger.info(
            f"Dispatch complete: {result.notifications_created} notifications created, "
            f"{result.notifications_failed} failed, {result.emails_sent} emails sent",
            extra={
                "event": "notification.dispatch.completed",
                "match_count": len(matches),
                "notifications_created": result.notifications_created,
                "notifications_failed": result.notifications_failed,
                "emails_sent": result.emails_sent,
                "emails_failed": result.emails_failed,
                "emails_skipped": result.emails_skipped,
            },
        )
        return result

    def _create_notification(
        self,
        result: DispatchResult,
        recipient_id: Optional[str],
        other_item: Item,
        other_type: ItemType,
        match: MatchCandidate,
        is_new_item_owner: bool,
    ) -> None:
        if not recipient_id:
            result.notifications_failed += 1
            self.logger.warning(
                f"Cannot notify about item {other_item.id}: recipient has no user id",
                extra={"event": "notification.create.failed", "reason": "missing_recipient"},
            )
            return

        try:
            notification = build_match_notification(
                recipient_id, other_item, other_type, match, is_new_item_owner
            )
            notification_id = self.notification_store.create_notification(notification)
        except Exception as e:
            result.notifications_failed += 1
            result.failed_recipients.append(recipient_id)
            self.logger.error(
                f"Failed to create match notification for user {recipient_id}: {e}",
                extra={
                    "event": "notification.create.failed",
                    "recipient_id": recipient_id,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return

        result.notifications_created += 1
        self.logger.debug(
            f"Created match notification {notification_id} for user {recipient_id}",
            extra={"event": "notification.create.success", "recipient_id": recipient_id},
        )

    def _send_email(
        self,
        result: DispatchResult,
        recipient_id: Optional[str],
        recipient_item_type: ItemType,
        other_item: Item,
        match: MatchCandidate,
    ) -> None:
        try:
            email = self.user_directory.get_email(recipient_id) if recipient_id else None
        except Exception as e:
            result.emails_failed += 1
            self.logger.error(
                f"Failed to look up email for user {recipient_id}: {e}",
                extra={"event": "email.lookup.failed", "recipient_id": recipient_id},
                exc_info=True,
            )
            return

        if not email:
            result.emails_skipped += 1
            self.logger.info(
                f"No email address for user {recipient_id}; match email skipped",
                extra={"event": "email.skipped", "reason": "no_address", "recipient_id": recipient_id},
            )
            return

        try:
            sent = self.email_sender.send_match_email(
                email, recipient_item_type, other_item.display_title, match.score
            )
        except Exception as e:
            result.emails_failed += 1
            self.logger.error(
                f"Match email to user {recipient_id} raised: {e}",
                extra={
                    "event": "email.send.failed",
                    "recipient_id": recipient_id,
                    "error_type": type(e).__name__,
                },
                exc_info=True,
            )
            return

        if sent:
            result.emails_sent += 1
        else:
            result.emails_failed += 1
            self.logger.warning(
                f"Match email to user {recipient_id} was not delivered",
                extra={"event": "email.send.failed", "recipient_id": recipient_id},
            )

