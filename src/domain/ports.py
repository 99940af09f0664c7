"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the User record and the interfaces (ports) that the
domain requires from infrastructure. Adapters implement these protocols.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Protocol

DEFAULT_AUTHORITY = "ROLE_USER"
DEFAULT_LANGUAGE_KEY = "en"


@dataclass
class User:
    """
    Account record held by the credential store.

    Key lifecycles:
    - activation_key is set at creation and cleared by activation; it is
      present if and only if activated is False.
    - reset_key/reset_date are set by a reset request and cleared when the
      reset completes.
    """

    login: str
    email: str
    password_hash: str
    created_date: datetime
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None
    lang_key: str = DEFAULT_LANGUAGE_KEY
    activated: bool = False
    activation_key: str | None = None
    reset_key: str | None = None
    reset_date: datetime | None = None
    ip_address: str | None = None
    authorities: list[str] = field(default_factory=lambda: [DEFAULT_AUTHORITY])


class RegistrationDecision(str, Enum):
    """Outcome of the per-IP registration gate."""

    ALLOWED = "allowed"
    DENIED = "denied"


class UserRepository(Protocol):
    """Port interface for user persistence."""

    def find_by_login(self, login: str) -> User | None:
        """Return the user with this (lowercase) login, if any."""
        ...

    def find_by_email(self, email: str) -> User | None:
        """Return the user with this (normalized) email, if any."""
        ...

    def find_by_activation_key(self, key: str) -> User | None:
        """Return the user whose activation key equals key exactly."""
        ...

    def find_by_reset_key(self, key: str) -> User | None:
        """Return the user whose reset key equals key exactly."""
        ...

    def count_by_ip_address_created_between(
        self, ip_address: str, start: datetime, end: datetime
    ) -> int:
        """
        Count users registered from ip_address with created_date in [start, end].

        Both bounds are inclusive.
        """
        ...

    def create(self, user: User) -> User:
        """
        Insert a new user.

        Raises:
            DuplicateLogin: If the login is already stored
            DuplicateEmail: If the email is already stored
            StoreUnavailable: If the store cannot be reached
        """
        ...

    def save(self, user: User) -> User:
        """
        Update an existing user, matched by login.

        Raises:
            DuplicateEmail: If the new email belongs to another user
            StoreUnavailable: If the store cannot be reached
        """
        ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_email(self, to: str, subject: str, content: str, is_html: bool = True) -> None:
        """
        Deliver a single email.

        Args:
            to: Recipient email address
            subject: Subject line
            content: Message body
            is_html: Whether content is HTML
        """
        ...


class Notifier(Protocol):
    """
    Port interface for account notifications.

    Implementations enqueue the message and return immediately; callers
    never wait for delivery and delivery failures never reach them.
    """

    def send_activation_email(self, user: User) -> None: ...

    def send_password_reset_email(self, user: User) -> None: ...
