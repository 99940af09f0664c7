"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- An in-memory credential store
- Domain services with a fast bcrypt policy
- A mock notifier
"""

from unittest.mock import Mock

import pytest

from src.adapters.repository.memory import InMemoryUserRepository
from src.domain.accounts import AccountPolicy, AccountService
from src.domain.registration import RegistrationGate, RegistrationService


@pytest.fixture
def policy() -> AccountPolicy:
    """Default policy with the cheapest bcrypt cost to keep tests fast."""
    return AccountPolicy(bcrypt_cost=4)


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def account_service(repository: InMemoryUserRepository, policy: AccountPolicy) -> AccountService:
    return AccountService(repository=repository, policy=policy)


@pytest.fixture
def notifier() -> Mock:
    return Mock()


@pytest.fixture
def registration_service(
    account_service: AccountService, notifier: Mock, policy: AccountPolicy
) -> RegistrationService:
    gate = RegistrationGate(repository=account_service.repository, policy=policy)
    return RegistrationService(accounts=account_service, gate=gate, notifier=notifier)
