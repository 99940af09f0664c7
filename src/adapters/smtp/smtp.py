"""
SMTP email sender adapter - Implements EmailSender protocol.

Delivers messages through a standard SMTP relay. Transport errors are
raised to the caller; BackgroundNotifier catches and logs them.
"""

import logging
import smtplib
from email.message import EmailMessage

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Implements EmailSender protocol via smtplib."""

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.from_address = from_address
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    def send_email(self, to: str, subject: str, content: str, is_html: bool = True) -> None:
        message = EmailMessage()
        message["From"] = self.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content(content, subtype="html" if is_html else "plain")

        logger.debug("Sending email to '%s' with subject '%s'", to, subject)
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(message)
        logger.debug("Sent email to '%s'", to)
