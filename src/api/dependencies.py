"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from src.config.settings import get_settings
from src.domain.accounts import AccountPolicy, AccountService
from src.domain.exceptions import AuthenticationFailed
from src.domain.ports import Notifier, User, UserRepository
from src.domain.registration import RegistrationGate, RegistrationService


def get_repository(request: Request) -> UserRepository:
    """
    Get the credential store from app state.

    The repository is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.repository


def get_notifier(request: Request) -> Notifier:
    """Get the notifier from app state."""
    return request.app.state.notifier


def get_policy() -> AccountPolicy:
    return get_settings().account_policy()


def get_account_service(
    repository: UserRepository = Depends(get_repository),
    policy: AccountPolicy = Depends(get_policy),
) -> AccountService:
    return AccountService(repository=repository, policy=policy)


def get_registration_service(
    accounts: AccountService = Depends(get_account_service),
    notifier: Notifier = Depends(get_notifier),
) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the account service, the per-IP gate and the notifier.
    """
    gate = RegistrationGate(repository=accounts.repository, policy=accounts.policy)
    return RegistrationService(accounts=accounts, gate=gate, notifier=notifier)


def get_client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# HTTP BASIC AUTH security schemes for OpenAPI documentation
http_basic = HTTPBasic()
optional_http_basic = HTTPBasic(auto_error=False)


def _authenticate(service: AccountService, credentials: HTTPBasicCredentials) -> User:
    try:
        return service.authenticate(credentials.username, credentials.password)
    except AuthenticationFailed:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        ) from None


def get_current_user(
    credentials: HTTPBasicCredentials = Depends(http_basic),
    service: AccountService = Depends(get_account_service),
) -> User:
    """
    Resolve the calling identity from the HTTP BASIC AUTH header.

    FastAPI's HTTPBasic returns 401 for a missing or malformed header;
    wrong credentials and unactivated accounts also yield 401.
    """
    return _authenticate(service, credentials)


def get_optional_user(
    credentials: HTTPBasicCredentials | None = Depends(optional_http_basic),
    service: AccountService = Depends(get_account_service),
) -> User | None:
    """Like get_current_user, but anonymous callers resolve to None."""
    if credentials is None:
        return None
    return _authenticate(service, credentials)
