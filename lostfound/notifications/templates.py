"""Jinja2 rendering for match emails."""

from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError, select_autoescape

from lostfound.logging import get_logger

from .models import NotificationTemplateError

logger = get_logger(__name__, component="notification")


class TemplateRenderer:
    """Renders the subject, HTML body and text body of a match email.

    Templates live in the lostfound.notifications.email_templates package
    directory. StrictUndefined makes a missing context key a render error
    instead of an empty string.
    """

    def __init__(
        self,
        template_dir: str = "email_templates",
        subject_template: str = "match_email_subject.j2",
        html_template: str = "match_email_body.html.j2",
        text_template: str = "match_email_body.txt.j2",
    ):
        self.subject_template_name = subject_template
        self.html_template_name = html_template
        self.text_template_name = text_template

        self.env = Environment(
            loader=PackageLoader("lostfound.notifications", template_dir),
            # Only HTML is escaped; "Lost & Found" must stay literal in text parts
            autoescape=select_autoescape(enabled_extensions=("html.j2",), default=False),
            undefined=StrictUndefined,
        )

    def render(self, context: Dict[str, Any]) -> Dict[str, str]:
        """Render all three templates.

        Returns:
            Dict with ``subject`` (single line), ``html_body`` and ``text_body``

        Raises:
            NotificationTemplateError: If any template fails to load or render
        """
        try:
            subject = self.env.get_template(self.subject_template_name).render(context)
            html_body = self.env.get_template(self.html_template_name).render(context)
            text_body = self.env.get_template(self.text_template_name).render(context)
        except TemplateError as e:
            raise NotificationTemplateError(f"Template rendering failed: {e}") from e

        logger.debug(f"Rendered match email for '{context.get('item_title')}'")

        return {
            "subject": " ".join(subject.split()),
            "html_body": html_body,
            "text_body": text_body,
        }
