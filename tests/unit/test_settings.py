"""
Unit tests for application settings.
"""

from datetime import timedelta

import pytest

from src.config.settings import Settings
from src.domain.accounts import AccountPolicy


class TestSettings:
    def test_defaults_build_default_policy(self) -> None:
        policy = Settings(_env_file=None).account_policy()

        assert policy == AccountPolicy()
        assert policy.password_min_length == 4
        assert policy.password_max_length == 100
        assert policy.reset_key_ttl == timedelta(hours=24)
        assert policy.registration_window == timedelta(hours=24)
        assert policy.max_registrations_per_ip == 3

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MAX_REGISTRATIONS_PER_IP", "5")
        monkeypatch.setenv("RESET_KEY_TTL_HOURS", "2")
        monkeypatch.setenv("PASSWORD_MIN_LENGTH", "8")

        policy = Settings(_env_file=None).account_policy()

        assert policy.max_registrations_per_ip == 5
        assert policy.reset_key_ttl == timedelta(hours=2)
        assert policy.password_min_length == 8

    def test_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SERVER_PROTOCOL", "https")
        monkeypatch.setenv("SERVER_HOST", "accounts.example.org")
        monkeypatch.setenv("SERVER_PORT", "8443")

        assert Settings(_env_file=None).base_url == "https://accounts.example.org:8443"

    def test_rejects_unknown_store_backend(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STORE_BACKEND", "mongo")
        with pytest.raises(ValueError):
            Settings(_env_file=None)
