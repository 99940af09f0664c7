"""
Console email sender - logs outgoing mail instead of delivering it.

Selected with MAIL_BACKEND=console. Activation and reset links show up
in the application log, which is enough for local development.
"""

import logging

logger = logging.getLogger(__name__)


class ConsoleEmailSender:
    """EmailSender that writes each message to the log (structural subtyping)."""

    def send_email(self, to: str, subject: str, content: str, is_html: bool = True) -> None:
        logger.info("[EMAIL] To: %s Subject: %s", to, subject)
        logger.info("%s", content)
