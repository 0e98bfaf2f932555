"""SMTP transport for match emails.

A thin wrapper around smtplib that handles implicit TLS on port 465,
STARTTLS elsewhere, optional authentication and connection cleanup.
"""

import smtplib
import ssl
from email.message import EmailMessage
from typing import Callable, Optional

from email_validator import EmailNotValidError, validate_email

from lostfound.config.environment import EnvironmentConfig
from lostfound.logging import get_logger

from .models import SMTPDeliveryError

logger = get_logger(__name__, component="smtp")

IMPLICIT_TLS_PORT = 465


class SMTPClient:
    """Sends fully built EmailMessages over SMTP.

    Connection classes are injectable so tests never open sockets.
    """

    def __init__(
        self,
        smtp_factory: Optional[Callable] = None,
        smtp_ssl_factory: Optional[Callable] = None,
    ):
        self.smtp_factory = smtp_factory or smtplib.SMTP
        self.smtp_ssl_factory = smtp_ssl_factory or smtplib.SMTP_SSL

    def send(
        self,
        message: EmailMessage,
        env_config: EnvironmentConfig,
        use_tls: bool = True,
    ) -> None:
        """Deliver a message.

        Args:
            message: Message with From/To/Subject already set
            env_config: SMTP host, port and credentials
            use_tls: Upgrade with STARTTLS when not on the implicit TLS port

        Raises:
            SMTPDeliveryError: If the connection, login or send fails
        """
        smtp = None
        try:
            if env_config.smtp_port == IMPLICIT_TLS_PORT:
                logger.debug(f"Connecting to {env_config.smtp_host}:{env_config.smtp_port} with implicit TLS")
                smtp = self.smtp_ssl_factory(
                    env_config.smtp_host,
                    env_config.smtp_port,
                    context=ssl.create_default_context(),
                )
            else:
                logger.debug(f"Connecting to {env_config.smtp_host}:{env_config.smtp_port}")
                smtp = self.smtp_factory(env_config.smtp_host, env_config.smtp_port)
                if use_tls:
                    smtp.starttls(context=ssl.create_default_context())

            if env_config.smtp_user and env_config.smtp_pass:
                smtp.login(env_config.smtp_user, env_config.smtp_pass)

            smtp.send_message(message)
            logger.debug(f"Message accepted by relay for {message['To']}")

        except smtplib.SMTPException as e:
            raise SMTPDeliveryError(f"SMTP error during message delivery: {e}") from e
        except OSError as e:
            raise SMTPDeliveryError(f"Network error during SMTP connection: {e}") from e
        finally:
            if smtp is not None:
                try:
                    smtp.quit()
                except Exception as e:
                    logger.warning(f"Error closing SMTP connection: {e}")


def normalize_recipient(address: str) -> str:
    """Validate a single recipient address and return its normalized form.

    Raises:
        ValueError: If the address is not a valid email address
    """
    try:
        return validate_email(address.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValueError(f"Invalid recipient address '{address}': {e}") from e


def build_sender_address(env_config: EnvironmentConfig) -> str:
    """Build the From header, e.g. ``Lost & Found Campus <noreply@campus.edu>``.

    Prefers SMTP_SENDER_EMAIL, then SMTP_USER, then noreply@<smtp host>.
    """
    sender_email = (
        env_config.smtp_sender_email
        or env_config.smtp_user
        or f"noreply@{env_config.smtp_host}"
    )
    return f"{env_config.smtp_sender_name} <{sender_email}>"
