"""Environment variable loading and validation."""

import os
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/lostfound.db"


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        smtp_host: Optional[str] = None,
        smtp_port: int = 587,
        smtp_user: Optional[str] = None,
        smtp_pass: Optional[str] = None,
        smtp_sender_name: Optional[str] = None,
        smtp_sender_email: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_pass = smtp_pass
        self.smtp_sender_name = smtp_sender_name or "Lost & Found Campus"
        self.smtp_sender_email = smtp_sender_email
        self.log_level = log_level
        self.environment = environment or "local"

    @property
    def smtp_configured(self) -> bool:
        """Whether enough SMTP settings are present to send email."""
        return bool(self.smtp_host)


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional. Without SMTP_HOST, match emails are disabled
    and only in-app notifications are created.

    - DATABASE_URL: SQLAlchemy URL (default: sqlite:///./data/lostfound.db)
    - SMTP_HOST / SMTP_PORT: mail relay (port defaults to 587)
    - SMTP_USER / SMTP_PASS: credentials, must be set together
    - SMTP_SENDER_NAME / SMTP_SENDER_EMAIL: From header
    - LOG_LEVEL: DEBUG, INFO, WARNING, ERROR, CRITICAL
    - ENVIRONMENT: label added to every log record

    Raises:
        ConfigurationError: If any variable is present but invalid
    """
    errors = []

    smtp_host = os.getenv("SMTP_HOST")
    smtp_port_str = os.getenv("SMTP_PORT")
    smtp_user = os.getenv("SMTP_USER")
    smtp_pass = os.getenv("SMTP_PASS")
    smtp_sender_email = os.getenv("SMTP_SENDER_EMAIL")
    log_level = os.getenv("LOG_LEVEL")

    smtp_port = 587
    if smtp_port_str:
        try:
            smtp_port = int(smtp_port_str)
            if smtp_port < 1 or smtp_port > 65535:
                errors.append(f"Invalid SMTP_PORT: {smtp_port}. Must be between 1 and 65535.")
        except ValueError:
            errors.append(f"Invalid SMTP_PORT: '{smtp_port_str}'. Must be a valid integer.")

    if smtp_sender_email:
        try:
            validate_email(smtp_sender_email, check_deliverability=False)
        except EmailNotValidError as e:
            errors.append(f"Invalid SMTP_SENDER_EMAIL: '{smtp_sender_email}' - {e}")

    if log_level:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if log_level.upper() not in valid_levels:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(valid_levels)}"
            )

    if smtp_user and not smtp_pass:
        errors.append("SMTP_USER is set but SMTP_PASS is not. Both must be set for authentication.")
    elif smtp_pass and not smtp_user:
        errors.append("SMTP_PASS is set but SMTP_USER is not. Both must be set for authentication.")

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and adjust the values",
                "Verify SMTP_PORT is a number between 1 and 65535",
                "Leave SMTP_HOST unset to disable match emails",
            ],
        )

    return EnvironmentConfig(
        database_url=os.getenv("DATABASE_URL"),
        smtp_host=smtp_host,
        smtp_port=smtp_port,
        smtp_user=smtp_user,
        smtp_pass=smtp_pass,
        smtp_sender_name=os.getenv("SMTP_SENDER_NAME"),
        smtp_sender_email=smtp_sender_email,
        log_level=log_level,
        environment=os.getenv("ENVIRONMENT"),
    )
