"""Match email delivery.

MatchEmailService renders the match email templates and hands the message
to SMTP with retry/backoff. It reports the outcome as a boolean and never
raises, so a mail outage can only cost emails, never in-app notifications.
"""

import logging
import time
from email.message import EmailMessage
from typing import Optional

from lostfound.config.environment import EnvironmentConfig
from lostfound.config.models import EmailConfig
from lostfound.domain.models import ItemType
from lostfound.logging import get_logger

from .base import MatchEmailSender
from .models import NotificationTemplateError, SMTPDeliveryError
from .payloads import build_email_context
from .smtp_client import SMTPClient, build_sender_address, normalize_recipient
from .templates import TemplateRenderer

logger = get_logger(__name__, component="notification")

MAX_RETRY_DELAY_SECONDS = 60.0


class MatchEmailService(MatchEmailSender):
    """Sends match emails through SMTP."""

    def __init__(
        self,
        env_config: EnvironmentConfig,
        email_config: Optional[EmailConfig] = None,
        template_renderer: Optional[TemplateRenderer] = None,
        smtp_client: Optional[SMTPClient] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize MatchEmailService.

        Args:
            env_config: SMTP host, port, credentials and sender identity
            email_config: Retry and TLS settings (defaults to EmailConfig())
            template_renderer: Template renderer (creates default if None)
            smtp_client: SMTP client (creates default if None)
            logger_instance: Optional logger (defaults to module logger)
        """
        self.env_config = env_config
        self.email_config = email_config or EmailConfig()
        self.template_renderer = template_renderer or TemplateRenderer()
        self.smtp_client = smtp_client or SMTPClient()
        self.logger = logger_instance or logger

    @property
    def is_available(self) -> bool:
        """Whether email is enabled in config and an SMTP host is set."""
        return self.email_config.enabled and self.env_config.smtp_configured

    def send_match_email(
        self,
        email: str,
        item_type: ItemType,
        item_title: str,
        match_percentage: int,
    ) -> bool:
        """Render and send a match email.

        Args:
            email: Recipient address
            item_type: Type of the recipient's own item
            item_title: Title of the matched item
            match_percentage: Match score, 0-100

        Returns:
            True once the relay accepted the message, False otherwise
        """
        if not self.is_available:
            self.logger.debug(
                "Match email skipped: email delivery is not configured",
                extra={"event": "email.skipped", "reason": "email_disabled"},
            )
            return False

        try:
            message = self._build_message(email, item_type, item_title, match_percentage)
        except (ValueError, NotificationTemplateError) as e:
            self.logger.error(
                f"Failed to build match email: {e}",
                extra={"event": "email.build.failed", "error_type": type(e).__name__},
            )
            return False

        return self._deliver(message)

    def _build_message(
        self, email: str, item_type: ItemType, item_title: str, match_percentage: int
    ) -> EmailMessage:
        recipient = normalize_recipient(email)
        context = build_email_context(
            item_type, item_title, match_percentage, self.email_config.app_name
        )
        rendered = self.template_renderer.render(context)

        message = EmailMessage()
        message["Subject"] = rendered["subject"]
        message["From"] = build_sender_address(self.env_config)
        message["To"] = recipient
        message.set_content(rendered["text_body"])
        message.add_alternative(rendered["html_body"], subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> bool:
        max_attempts = self.email_config.max_retries + 1

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.email_config.retry_initial_delay * (
                    self.email_config.retry_backoff_multiplier ** (attempt - 2)
                )
                delay = min(delay, MAX_RETRY_DELAY_SECONDS)
                self.logger.warning(
                    f"Retrying match email (attempt {attempt}/{max_attempts}) after {delay:.1f}s",
                    extra={"event": "email.send.attempt", "attempt": attempt},
                )
                time.sleep(delay)

            try:
                self.smtp_client.send(message, self.env_config, self.email_config.use_tls)
            except SMTPDeliveryError as e:
                if attempt < max_attempts:
                    self.logger.warning(
                        f"Match email delivery failed (attempt {attempt}/{max_attempts}): {e}",
                        extra={
                            "event": "email.send.failure",
                            "attempt": attempt,
                            "retry_remaining": True,
                        },
                    )
                else:
                    self.logger.error(
                        f"Match email delivery failed after {max_attempts} attempts: {e}",
                        extra={
                            "event": "email.send.failure",
                            "attempt": attempt,
                            "retry_remaining": False,
                        },
                    )
                continue
            except Exception as e:
                self.logger.error(
                    f"Unexpected error sending match email: {e}",
                    extra={"event": "email.send.failure", "error_type": type(e).__name__},
                    exc_info=True,
                )
                return False

            self.logger.info(
                f"Match email sent to {message['To']} (attempts: {attempt})",
                extra={"event": "email.send.success", "attempt": attempt},
            )
            return True

        return False
