"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account lifecycle state machine, the per-IP
registration gate and the port interfaces the domain needs from
infrastructure (credential store, email delivery, notifications).
"""

from .accounts import AccountPolicy, AccountService, check_password_length
from .exceptions import (
    AccountError,
    AccountNotFound,
    ActivationFailed,
    AuthenticationFailed,
    DuplicateEmail,
    DuplicateLogin,
    RegistrationThrottled,
    ResetFailed,
    StoreUnavailable,
    UnknownEmail,
    WeakPassword,
)
from .ports import EmailSender, Notifier, RegistrationDecision, User, UserRepository
from .registration import RegistrationGate, RegistrationService

__all__ = [
    "AccountError",
    "AccountNotFound",
    "AccountPolicy",
    "AccountService",
    "ActivationFailed",
    "AuthenticationFailed",
    "DuplicateEmail",
    "DuplicateLogin",
    "EmailSender",
    "Notifier",
    "RegistrationDecision",
    "RegistrationGate",
    "RegistrationService",
    "RegistrationThrottled",
    "ResetFailed",
    "StoreUnavailable",
    "UnknownEmail",
    "User",
    "UserRepository",
    "WeakPassword",
    "check_password_length",
]
