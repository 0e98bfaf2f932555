"""Notification dispatch for ranked matches.

This package provides:
- NotificationDispatcher: two in-app notifications per match plus emails
  for high-confidence matches, each write isolated from the others
- MatchEmailService: Jinja2-rendered match emails over SMTP with retry/backoff
- NotificationStore / MatchEmailSender / UserDirectory: collaborator interfaces
- Payload builders for notification messages and email context
"""

from .base import MatchEmailSender, NotificationStore, UserDirectory
from .dispatcher import DEFAULT_EMAIL_THRESHOLD, NotificationDispatcher
from .email_service import MatchEmailService
from .models import (
    DispatchResult,
    NotificationError,
    NotificationTemplateError,
    NotificationWriteError,
    SMTPDeliveryError,
)
from .payloads import build_email_context, build_match_notification, build_notification_data
from .smtp_client import SMTPClient, build_sender_address, normalize_recipient
from .templates import TemplateRenderer

__all__ = [
    # Dispatch
    "NotificationDispatcher",
    "DEFAULT_EMAIL_THRESHOLD",
    "DispatchResult",
    # Collaborators
    "NotificationStore",
    "MatchEmailSender",
    "UserDirectory",
    # Email
    "MatchEmailService",
    "TemplateRenderer",
    "SMTPClient",
    # Exceptions
    "NotificationError",
    "NotificationWriteError",
    "NotificationTemplateError",
    "SMTPDeliveryError",
    # Utilities
    "build_email_context",
    "build_match_notification",
    "build_notification_data",
    "build_sender_address",
    "normalize_recipient",
]
