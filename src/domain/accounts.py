"""
Account lifecycle domain service.

This module owns the state machine of a user account and the time-windowed
checks that guard its transitions.

Account Lifecycle
=================

    (registration) -> UNCONFIRMED   activation_key set, activated = False
    UNCONFIRMED    -> ACTIVE        valid activation key redeemed
    ACTIVE         -> RESET_PENDING reset key issued, reset_date = now
    RESET_PENDING  -> ACTIVE        reset key redeemed within the TTL

Activation and reset are independent axes, each driven by its own key.
Activation keys never expire; reset keys are valid while
reset_date > now - reset_key_ttl.

Password changes for an authenticated identity bypass the key checks:
authentication itself is the gate.
"""

import secrets
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import bcrypt

from .exceptions import (
    AccountNotFound,
    ActivationFailed,
    AuthenticationFailed,
    DuplicateEmail,
    ResetFailed,
    UnknownEmail,
    WeakPassword,
)
from .ports import DEFAULT_AUTHORITY, DEFAULT_LANGUAGE_KEY, User, UserRepository

# Used when the login is unknown so that bcrypt always runs during authentication.
_DUMMY_BCRYPT_HASH = bcrypt.hashpw(b"dummy_password_for_timing_safety", bcrypt.gensalt(10)).decode()

# bcrypt only looks at the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class AccountPolicy:
    """Tunable limits for the account lifecycle and the registration gate."""

    bcrypt_cost: int = 10
    password_min_length: int = 4
    password_max_length: int = 100
    reset_key_ttl: timedelta = timedelta(hours=24)
    registration_window: timedelta = timedelta(hours=24)
    max_registrations_per_ip: int = 3
    key_length: int = 20


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def normalize_login(login: str) -> str:
    return login.lower()


def normalize_email(email: str) -> str:
    """Applies: strip whitespace + lowercase."""
    return email.strip().lower()


def check_password_length(password: str | None, policy: AccountPolicy) -> None:
    """
    Enforce the password length policy.

    Raises:
        WeakPassword: If password is empty or outside
            [password_min_length, password_max_length]
    """
    if not password:
        raise WeakPassword("password is empty")
    if not policy.password_min_length <= len(password) <= policy.password_max_length:
        raise WeakPassword(
            f"password length must be between {policy.password_min_length} "
            f"and {policy.password_max_length}"
        )


def _encode_password(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


@dataclass
class AccountService:
    """
    Domain service for the account lifecycle.

    Every failure is reported with a typed AccountError; no operation
    returns None to mean "not found".
    """

    repository: UserRepository
    policy: AccountPolicy = field(default_factory=AccountPolicy)

    def create_account(
        self,
        login: str,
        raw_password: str,
        first_name: str | None,
        last_name: str | None,
        email: str,
        image_url: str | None,
        lang_key: str | None,
        now: datetime,
        ip_address: str | None,
    ) -> User:
        """
        Create an unactivated account with a fresh activation key.

        Duplicate checks belong to the caller; the store still rejects
        duplicates with DuplicateLogin/DuplicateEmail as the final guard.

        Raises:
            WeakPassword: If raw_password violates the length policy
            DuplicateLogin: If the store already holds the login
            DuplicateEmail: If the store already holds the email
        """
        check_password_length(raw_password, self.policy)
        user = User(
            login=normalize_login(login),
            email=normalize_email(email),
            password_hash=self._hash_password(raw_password),
            created_date=now,
            first_name=first_name,
            last_name=last_name,
            image_url=image_url,
            lang_key=lang_key or DEFAULT_LANGUAGE_KEY,
            activated=False,
            activation_key=self._generate_key(),
            ip_address=ip_address,
            authorities=[DEFAULT_AUTHORITY],
        )
        return self.repository.create(user)

    def activate_registration(self, key: str) -> User:
        """
        Redeem an activation key.

        A second redemption of the same key fails because the key is
        cleared by the first one.

        Raises:
            ActivationFailed: If no account holds the key
        """
        user = self.repository.find_by_activation_key(key) if key else None
        if user is None:
            raise ActivationFailed("invalid activation key")

        user.activated = True
        user.activation_key = None
        return self.repository.save(user)

    def request_password_reset(self, email: str, now: datetime | None = None) -> User:
        """
        Open a password reset flow for the account registered under email.

        Any earlier unredeemed reset key is replaced.

        Raises:
            UnknownEmail: If no activated account uses the email
        """
        user = self.repository.find_by_email(normalize_email(email))
        if user is None or not user.activated:
            raise UnknownEmail("email address not registered")

        user.reset_key = self._generate_key()
        user.reset_date = now or utcnow()
        return self.repository.save(user)

    def complete_password_reset(
        self, new_password: str, key: str, now: datetime | None = None
    ) -> User:
        """
        Redeem a reset key and set a new password.

        Raises:
            WeakPassword: If new_password violates the length policy
            ResetFailed: If the key is unknown or older than reset_key_ttl
        """
        check_password_length(new_password, self.policy)
        now = now or utcnow()

        user = self.repository.find_by_reset_key(key) if key else None
        if user is None or user.reset_date is None:
            raise ResetFailed("invalid or expired reset key")
        if user.reset_date <= now - self.policy.reset_key_ttl:
            raise ResetFailed("invalid or expired reset key")

        user.password_hash = self._hash_password(new_password)
        user.reset_key = None
        user.reset_date = None
        return self.repository.save(user)

    def change_password(self, login: str, new_password: str) -> User:
        """
        Replace the password of the authenticated identity.

        Raises:
            WeakPassword: If new_password violates the length policy
            AccountNotFound: If login has no account
        """
        check_password_length(new_password, self.policy)
        user = self.get_account(login)
        user.password_hash = self._hash_password(new_password)
        return self.repository.save(user)

    def update_user(
        self,
        login: str,
        first_name: str | None,
        last_name: str | None,
        email: str,
        lang_key: str | None,
        image_url: str | None,
    ) -> User:
        """
        Update the profile fields of the authenticated identity.

        Login, activation state and password are never touched here.

        Raises:
            DuplicateEmail: If another account already uses email
            AccountNotFound: If login has no account
        """
        user = self.get_account(login)
        normalized_email = normalize_email(email)

        owner = self.repository.find_by_email(normalized_email)
        if owner is not None and owner.login != user.login:
            raise DuplicateEmail(normalized_email)

        user.first_name = first_name
        user.last_name = last_name
        user.email = normalized_email
        user.lang_key = lang_key or user.lang_key
        user.image_url = image_url
        return self.repository.save(user)

    def authenticate(self, login: str, password: str) -> User:
        """
        Check credentials of an activated account.

        bcrypt runs even for unknown logins so response time does not
        reveal whether an account exists.

        Raises:
            AuthenticationFailed: On unknown login, wrong password or
                unactivated account (indistinguishable)
        """
        user = self.repository.find_by_login(normalize_login(login))
        stored_hash = user.password_hash if user is not None else _DUMMY_BCRYPT_HASH
        password_valid = bcrypt.checkpw(_encode_password(password), stored_hash.encode())

        if user is None or not password_valid or not user.activated:
            raise AuthenticationFailed("bad credentials")
        return user

    def get_account(self, login: str) -> User:
        """
        Raises:
            AccountNotFound: If login has no account
        """
        user = self.repository.find_by_login(normalize_login(login))
        if user is None:
            raise AccountNotFound(login)
        return user

    def _generate_key(self) -> str:
        """
        Generate a cryptographically secure numeric key.

        Returns string to preserve leading zeros.
        """
        return "".join(secrets.choice("0123456789") for _ in range(self.policy.key_length))

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(
            _encode_password(password), bcrypt.gensalt(rounds=self.policy.bcrypt_cost)
        ).decode()
