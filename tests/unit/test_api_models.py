"""
Unit tests for API request/response models.
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from src.api.models import KeyAndPasswordRequest, ProfileUpdateRequest, RegisterRequest, UserProfile
from src.domain.ports import User


class TestRegisterRequest:
    def test_accepts_camel_case(self) -> None:
        request = RegisterRequest.model_validate(
            {
                "login": "roger.o'rabbit@toon-town_1",
                "password": "secret",
                "firstName": "Roger",
                "lastName": "Rabbit",
                "email": "roger@x.com",
                "imageUrl": "http://img/r.png",
                "langKey": "en",
            }
        )
        assert request.first_name == "Roger"
        assert request.image_url == "http://img/r.png"
        assert request.lang_key == "en"

    def test_optional_profile_fields(self) -> None:
        request = RegisterRequest.model_validate(
            {"login": "roger", "password": "secret", "email": "roger@x.com"}
        )
        assert request.first_name is None
        assert request.lang_key is None

    def test_password_length_not_validated_here(self) -> None:
        """Length policy belongs to the domain so violations map to 400."""
        request = RegisterRequest.model_validate(
            {"login": "roger", "password": "a", "email": "roger@x.com"}
        )
        assert request.password == "a"

    @pytest.mark.parametrize("lang_key", ["e", "toolong"])
    def test_lang_key_length(self, lang_key: str) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(
                {"login": "roger", "password": "secret", "email": "roger@x.com", "langKey": lang_key}
            )

    def test_email_longer_than_column_rejected(self) -> None:
        email = "a" * 64 + "@" + "b" * 32 + ".com"
        assert len(email) == 101

        with pytest.raises(ValidationError, match="at most 100 characters"):
            RegisterRequest.model_validate({"login": "roger", "password": "secret", "email": email})

    def test_email_at_column_limit_accepted(self) -> None:
        email = "a" * 64 + "@" + "b" * 31 + ".com"

        request = RegisterRequest.model_validate(
            {"login": "roger", "password": "secret", "email": email}
        )

        assert len(request.email) == 100


class TestProfileUpdateRequest:
    def test_ignores_read_only_fields(self) -> None:
        request = ProfileUpdateRequest.model_validate(
            {"email": "roger@x.com", "activated": False, "authorities": ["ROLE_ADMIN"]}
        )
        assert request.email == "roger@x.com"

    def test_requires_valid_email(self) -> None:
        with pytest.raises(ValidationError):
            ProfileUpdateRequest.model_validate({"email": "nope"})

    def test_rejects_email_longer_than_column(self) -> None:
        with pytest.raises(ValidationError):
            ProfileUpdateRequest.model_validate({"email": "a" * 64 + "@" + "b" * 40 + ".com"})


class TestKeyAndPasswordRequest:
    def test_camel_case_new_password(self) -> None:
        request = KeyAndPasswordRequest.model_validate({"key": "123", "newPassword": "pw"})
        assert request.new_password == "pw"


class TestUserProfile:
    def test_from_user_dumps_camel_case_without_password(self) -> None:
        user = User(
            login="roger",
            email="roger@x.com",
            password_hash="$2b$04$hash",
            created_date=datetime(2024, 3, 1, tzinfo=timezone.utc),
            activated=True,
        )

        document = UserProfile.from_user(user).model_dump(by_alias=True)

        assert document == {
            "login": "roger",
            "firstName": None,
            "lastName": None,
            "email": "roger@x.com",
            "imageUrl": None,
            "activated": True,
            "langKey": "en",
            "authorities": ["ROLE_USER"],
        }
