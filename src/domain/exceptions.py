"""
Domain exceptions - Semantic error types for the account lifecycle.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each one to a transport status and message.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class DuplicateLogin(AccountError):
    """Login is already used by another account."""

    pass


class DuplicateEmail(AccountError):
    """Email address is already used by another account."""

    pass


class RegistrationThrottled(AccountError):
    """Too many registrations from the same IP address in the window."""

    pass


class ActivationFailed(AccountError):
    """No account holds the given activation key."""

    pass


class WeakPassword(AccountError):
    """Password length is outside the configured bounds."""

    pass


class UnknownEmail(AccountError):
    """No activated account is registered under the given email."""

    pass


class ResetFailed(AccountError):
    """Reset key is wrong or expired (deliberately indistinguishable)."""

    pass


class AuthenticationFailed(AccountError):
    """Credentials do not match an activated account."""

    pass


class AccountNotFound(AccountError):
    """The authenticated identity has no account record."""

    pass


class StoreUnavailable(AccountError):
    """The credential store could not be reached."""

    pass
