"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON field names are camelCase; Python attributes are snake_case.
"""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

from src.domain.ports import User

LOGIN_PATTERN = r"^[_'.@A-Za-z0-9-]*$"
EMAIL_MAX_LENGTH = 100


def _check_email_length(email: str) -> str:
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValueError(f"email must be at most {EMAIL_MAX_LENGTH} characters")
    return email


BoundedEmail = Annotated[EmailStr, AfterValidator(_check_email_length)]


class CamelModel(BaseModel):
    """Base model accepting and emitting camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProfileFields(CamelModel):
    """Profile fields shared by registration and profile update."""

    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)
    email: BoundedEmail
    image_url: str | None = Field(None, max_length=256)
    lang_key: str | None = Field(None, min_length=2, max_length=5)


class RegisterRequest(ProfileFields):
    """Request model for account registration."""

    login: str = Field(..., min_length=1, max_length=50, pattern=LOGIN_PATTERN)
    # Length policy is enforced by the domain so violations map to 400.
    password: str


class ProfileUpdateRequest(ProfileFields):
    """
    Request model for updating the current account.

    Only profile fields are applied; login, activated and authorities are
    accepted for symmetry with the profile document and ignored.
    """

    login: str | None = None
    activated: bool | None = None
    authorities: list[str] | None = None


class KeyAndPasswordRequest(CamelModel):
    """Request model for finishing a password reset."""

    key: str
    new_password: str


class UserProfile(CamelModel):
    """Profile document of an account. Never carries password data."""

    login: str
    first_name: str | None = None
    last_name: str | None = None
    email: str
    image_url: str | None = None
    activated: bool
    lang_key: str | None = None
    authorities: list[str] = []

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(
            login=user.login,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            image_url=user.image_url,
            activated=user.activated,
            lang_key=user.lang_key,
            authorities=list(user.authorities),
        )


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
