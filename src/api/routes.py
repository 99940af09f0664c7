"""
API routes - Account registration, activation, profile and password endpoints.

Domain errors are translated here into status codes and plain-text reasons.
Endpoints are plain functions so the blocking bcrypt and store calls run
in FastAPI's worker threadpool.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.responses import PlainTextResponse

from src.api.dependencies import (
    get_account_service,
    get_client_ip,
    get_current_user,
    get_notifier,
    get_optional_user,
    get_registration_service,
)
from src.api.models import (
    ErrorResponse,
    KeyAndPasswordRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserProfile,
)
from src.domain.accounts import AccountService
from src.domain.exceptions import (
    AccountNotFound,
    ActivationFailed,
    DuplicateEmail,
    DuplicateLogin,
    RegistrationThrottled,
    ResetFailed,
    UnknownEmail,
    WeakPassword,
)
from src.domain.ports import Notifier, User
from src.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["account"])

INCORRECT_PASSWORD = "Incorrect password"
EMAIL_IN_USE = "email address already in use"


def _bad_request(reason: str) -> PlainTextResponse:
    return PlainTextResponse(reason, status_code=status.HTTP_400_BAD_REQUEST)


def _server_error() -> Response:
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


async def read_text_body(request: Request) -> str:
    """Read a raw text/plain request body; non UTF-8 bytes are a 400."""
    try:
        return (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be UTF-8 text",
        ) from None


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={
        400: {"description": "Throttled, login or email in use, or bad password"},
        422: {"description": "Validation error"},
    },
    summary="Register a new account",
)
def register(
    request_data: RegisterRequest,
    ip_address: str = Depends(get_client_ip),
    service: RegistrationService = Depends(get_registration_service),
) -> Response:
    """
    Register an unactivated account and send its activation email.
    """
    logger.info("Registration request from %s", ip_address)
    try:
        service.register(
            login=request_data.login,
            password=request_data.password,
            first_name=request_data.first_name,
            last_name=request_data.last_name,
            email=request_data.email,
            image_url=request_data.image_url,
            lang_key=request_data.lang_key,
            ip_address=ip_address,
        )
    except RegistrationThrottled:
        return _bad_request("You cannot register")
    except DuplicateLogin:
        return _bad_request("login already in use")
    except DuplicateEmail:
        return _bad_request(EMAIL_IN_USE)
    except WeakPassword:
        return _bad_request(INCORRECT_PASSWORD)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/activate",
    response_class=Response,
    responses={500: {"description": "Invalid activation key"}},
    summary="Activate a registered account",
)
def activate(
    key: str = Query(...),
    service: AccountService = Depends(get_account_service),
) -> Response:
    try:
        service.activate_registration(key)
    except ActivationFailed:
        return _server_error()
    return Response(status_code=status.HTTP_200_OK)


@router.get(
    "/authenticate",
    response_class=PlainTextResponse,
    summary="Return the login of the authenticated caller",
)
def is_authenticated(user: User | None = Depends(get_optional_user)) -> PlainTextResponse:
    """Empty body for anonymous callers."""
    logger.debug("REST request to check if the current user is authenticated")
    return PlainTextResponse(user.login if user is not None else "")


@router.get(
    "/account",
    response_model=UserProfile,
    responses={401: {"model": ErrorResponse, "description": "Not authenticated"}},
    summary="Get the current account",
)
def get_account(user: User = Depends(get_current_user)) -> UserProfile:
    return UserProfile.from_user(user)


@router.post(
    "/account",
    response_class=Response,
    responses={
        400: {"description": "Email already in use"},
        401: {"model": ErrorResponse, "description": "Not authenticated"},
        500: {"description": "Account could not be updated"},
    },
    summary="Update the current account",
)
def save_account(
    request_data: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> Response:
    try:
        service.update_user(
            login=user.login,
            first_name=request_data.first_name,
            last_name=request_data.last_name,
            email=request_data.email,
            lang_key=request_data.lang_key,
            image_url=request_data.image_url,
        )
    except DuplicateEmail:
        return _bad_request(EMAIL_IN_USE)
    except AccountNotFound:
        return _server_error()
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/account/change_password",
    response_class=Response,
    responses={400: {"description": INCORRECT_PASSWORD}},
    summary="Change the current account's password",
)
def change_password(
    password: str = Depends(read_text_body),
    user: User = Depends(get_current_user),
    service: AccountService = Depends(get_account_service),
) -> Response:
    try:
        service.change_password(user.login, password)
    except WeakPassword:
        return _bad_request(INCORRECT_PASSWORD)
    except AccountNotFound:
        return _server_error()
    return Response(status_code=status.HTTP_200_OK)


@router.post(
    "/account/reset_password/init",
    response_class=PlainTextResponse,
    responses={400: {"description": "email address not registered"}},
    summary="Send a password reset email",
)
def request_password_reset(
    mail: str = Depends(read_text_body),
    service: AccountService = Depends(get_account_service),
    notifier: Notifier = Depends(get_notifier),
) -> PlainTextResponse:
    try:
        user = service.request_password_reset(mail)
    except UnknownEmail:
        return _bad_request("email address not registered")
    notifier.send_password_reset_email(user)
    return PlainTextResponse("email was sent")


@router.post(
    "/account/reset_password/finish",
    response_class=Response,
    responses={
        400: {"description": INCORRECT_PASSWORD},
        500: {"description": "Invalid or expired reset key"},
    },
    summary="Finish a password reset",
)
def finish_password_reset(
    request_data: KeyAndPasswordRequest,
    service: AccountService = Depends(get_account_service),
) -> Response:
    try:
        service.complete_password_reset(request_data.new_password, request_data.key)
    except WeakPassword:
        return _bad_request(INCORRECT_PASSWORD)
    except ResetFailed:
        return _server_error()
    return Response(status_code=status.HTTP_200_OK)
