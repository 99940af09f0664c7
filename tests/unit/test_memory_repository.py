"""
Unit tests for InMemoryUserRepository.

Tests verify the adapter honours the UserRepository contract:
- Point lookups
- Inclusive time-ranged count by IP address
- Login/email uniqueness on create and save
- Copy semantics (changes need save())
"""

from datetime import datetime, timedelta, timezone

import pytest

from src.adapters.repository.memory import InMemoryUserRepository
from src.domain.exceptions import DuplicateEmail, DuplicateLogin
from src.domain.ports import User, UserRepository

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_user(login: str = "roger", email: str = "roger@x.com", **kwargs) -> User:
    defaults = {
        "password_hash": "$2b$04$hash",
        "created_date": NOW,
        "ip_address": "1.2.3.4",
        "activation_key": "12345678901234567890",
    }
    defaults.update(kwargs)
    return User(login=login, email=email, **defaults)


class TestProtocol:
    def test_implements_user_repository_protocol(self) -> None:
        def accepts_repository(r: UserRepository) -> None:
            pass

        accepts_repository(InMemoryUserRepository())

    def test_no_explicit_inheritance(self) -> None:
        assert InMemoryUserRepository.__bases__ == (object,)


class TestLookups:
    def test_find_by_login(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())
        assert repository.find_by_login("roger").email == "roger@x.com"
        assert repository.find_by_login("nobody") is None

    def test_find_by_email(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())
        assert repository.find_by_email("roger@x.com").login == "roger"
        assert repository.find_by_email("nobody@x.com") is None

    def test_find_by_activation_key(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())
        assert repository.find_by_activation_key("12345678901234567890").login == "roger"
        assert repository.find_by_activation_key("1234567890123456789") is None

    def test_find_by_reset_key(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user(reset_key="99", reset_date=NOW))
        assert repository.find_by_reset_key("99").login == "roger"
        assert repository.find_by_reset_key("98") is None

    def test_cleared_keys_never_match(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user(activation_key=None, activated=True))
        assert repository.find_by_activation_key(None) is None
        assert repository.find_by_reset_key(None) is None


class TestCountByIpAddress:
    def test_counts_only_matching_ip_inside_range(
        self, repository: InMemoryUserRepository
    ) -> None:
        repository.create(make_user("a", "a@x.com", created_date=NOW - timedelta(hours=1)))
        repository.create(make_user("b", "b@x.com", created_date=NOW - timedelta(hours=30)))
        repository.create(make_user("c", "c@x.com", ip_address="5.6.7.8"))

        count = repository.count_by_ip_address_created_between(
            "1.2.3.4", NOW - timedelta(hours=24), NOW
        )
        assert count == 1

    def test_bounds_are_inclusive(self, repository: InMemoryUserRepository) -> None:
        start = NOW - timedelta(hours=24)
        repository.create(make_user("a", "a@x.com", created_date=start))
        repository.create(make_user("b", "b@x.com", created_date=NOW))

        assert repository.count_by_ip_address_created_between("1.2.3.4", start, NOW) == 2


class TestUniqueness:
    def test_create_duplicate_login(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())
        with pytest.raises(DuplicateLogin):
            repository.create(make_user(email="other@x.com"))
        assert len(repository) == 1

    def test_create_duplicate_email(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())
        with pytest.raises(DuplicateEmail):
            repository.create(make_user(login="other"))
        assert len(repository) == 1

    def test_save_with_email_of_other_user(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())
        other = repository.create(make_user("other", "other@x.com"))

        other.email = "roger@x.com"
        with pytest.raises(DuplicateEmail):
            repository.save(other)
        assert repository.find_by_login("other").email == "other@x.com"


class TestCopySemantics:
    def test_mutating_returned_user_needs_save(self, repository: InMemoryUserRepository) -> None:
        repository.create(make_user())

        user = repository.find_by_login("roger")
        user.activated = True
        assert repository.find_by_login("roger").activated is False

        repository.save(user)
        assert repository.find_by_login("roger").activated is True
