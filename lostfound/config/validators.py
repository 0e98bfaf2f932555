"""Non-fatal configuration checks."""

import warnings
from typing import List

from .models import AppConfig


def check_for_warnings(app_config: AppConfig) -> List[str]:
    """
    Check a validated configuration for settings that are legal but suspicious.

    Args:
        app_config: Validated application configuration

    Returns:
        List of warning messages
    """
    warning_messages = []
    matching = app_config.matching

    if matching.email_threshold < matching.notify_threshold:
        warning_messages.append(
            f"email_threshold ({matching.email_threshold}) is below notify_threshold "
            f"({matching.notify_threshold}); emails will only go out for notified matches"
        )

    if matching.top_n > matching.candidate_limit:
        warning_messages.append(
            f"top_n ({matching.top_n}) exceeds candidate_limit ({matching.candidate_limit}) "
            "and can never be reached"
        )

    if matching.notify_threshold == 0:
        warning_messages.append(
            "notify_threshold is 0; every retrieved candidate will generate notifications"
        )

    for campus_id, override in matching.campuses.items():
        if not override.auto_match_enabled:
            warning_messages.append(f"Automatic matching is disabled for campus '{campus_id}'")

    if not app_config.email.enabled:
        warning_messages.append("Match emails are disabled (email.enabled=false)")

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """Emit warning messages using Python's warnings module."""
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
