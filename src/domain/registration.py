"""
Registration domain service - Per-IP gate and account creation flow.

Registration Flow
=================

1. Registration gate: count accounts created from the caller's IP address
   within the rolling window [now - registration_window, now]. Deny once
   the count reaches max_registrations_per_ip.
2. Duplicate checks: lowercased login, then normalized email.
3. Account creation (AccountService.create_account).
4. Activation email handed to the notifier (enqueued, never awaited).

Steps 1-3 are read-then-decide without a lock. Two concurrent requests can
both pass the checks; the store's UNIQUE constraints on login and email
reject the loser with DuplicateLogin/DuplicateEmail. The per-IP count has
no such backstop and may be exceeded under concurrency.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime

from .accounts import AccountPolicy, AccountService, normalize_email, normalize_login, utcnow
from .exceptions import DuplicateEmail, DuplicateLogin, RegistrationThrottled
from .ports import Notifier, RegistrationDecision, User, UserRepository

logger = logging.getLogger(__name__)


@dataclass
class RegistrationGate:
    """Limits how many accounts one IP address may create per window."""

    repository: UserRepository
    policy: AccountPolicy = field(default_factory=AccountPolicy)

    def check_registration_allowed(self, ip_address: str, now: datetime) -> RegistrationDecision:
        """
        Decide whether ip_address may register another account.

        Args:
            ip_address: Originating IP of the registration request
            now: Reference time closing the window

        Returns:
            DENIED when the count in the window has reached the threshold
        """
        count = self.repository.count_by_ip_address_created_between(
            ip_address, now - self.policy.registration_window, now
        )
        if count >= self.policy.max_registrations_per_ip:
            logger.info("Registration denied for %s (%d in window)", ip_address, count)
            return RegistrationDecision.DENIED
        return RegistrationDecision.ALLOWED


@dataclass
class RegistrationService:
    """
    Orchestrates registration: gate, duplicate checks, creation, activation email.
    """

    accounts: AccountService
    gate: RegistrationGate
    notifier: Notifier

    def register(
        self,
        login: str,
        password: str,
        first_name: str | None,
        last_name: str | None,
        email: str,
        image_url: str | None,
        lang_key: str | None,
        ip_address: str,
        now: datetime | None = None,
    ) -> User:
        """
        Register a new, unactivated account.

        Raises:
            RegistrationThrottled: If the IP address has used up its quota
            DuplicateLogin: If the login is already in use
            DuplicateEmail: If the email is already in use
            WeakPassword: If the password violates the length policy
        """
        now = now or utcnow()

        if self.gate.check_registration_allowed(ip_address, now) is RegistrationDecision.DENIED:
            raise RegistrationThrottled(ip_address)

        repository = self.accounts.repository
        if repository.find_by_login(normalize_login(login)) is not None:
            raise DuplicateLogin(normalize_login(login))
        if repository.find_by_email(normalize_email(email)) is not None:
            raise DuplicateEmail(normalize_email(email))

        user = self.accounts.create_account(
            login,
            password,
            first_name,
            last_name,
            email,
            image_url,
            lang_key,
            now,
            ip_address,
        )
        logger.info("Registered account %s from %s", user.login, ip_address)

        self.notifier.send_activation_email(user)
        return user
