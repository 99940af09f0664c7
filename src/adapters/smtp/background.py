"""
Background notifier adapter - Implements Notifier protocol.

Renders account emails and hands them to a worker pool. Callers return
immediately; a failed delivery is logged and dropped and never reaches
the request that triggered it.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from src.domain.ports import EmailSender, User

from .templates import (
    render_activation_email,
    render_password_reset_email,
)

logger = logging.getLogger(__name__)


class BackgroundNotifier:
    """
    Implements Notifier protocol on top of an EmailSender and a thread pool.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, sender: EmailSender, base_url: str, max_workers: int = 2) -> None:
        self.sender = sender
        self.base_url = base_url
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="mail")

    def send_activation_email(self, user: User) -> Future:
        logger.debug("Sending activation email to '%s'", user.email)
        subject, content = render_activation_email(user, self.base_url)
        return self._submit(user.email, subject, content)

    def send_password_reset_email(self, user: User) -> Future:
        logger.debug("Sending password reset email to '%s'", user.email)
        subject, content = render_password_reset_email(user, self.base_url)
        return self._submit(user.email, subject, content)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _submit(self, to: str, subject: str, content: str) -> Future:
        return self._executor.submit(self._deliver, to, subject, content)

    def _deliver(self, to: str, subject: str, content: str) -> None:
        try:
            self.sender.send_email(to, subject, content, is_html=True)
        except Exception as e:
            logger.warning("Email could not be sent to user '%s': %s", to, e)
